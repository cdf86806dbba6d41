# -*- coding: utf-8 -*-
"""
Database Models Module

This module contains the Post model, the only table managed by the application.
"""
import uuid
from datetime import datetime, timezone

import pytz
import uuid6

from post_manager import db


def utc_now() -> datetime:
    """Current time as an aware UTC datetime"""
    return datetime.now(timezone.utc)


def new_post_id() -> uuid.UUID:
    """Time-sortable UUID (version 7): millisecond timestamp followed by random bits"""
    return uuid6.uuid7()


def as_utc(value: datetime) -> datetime:
    """Make a stored timestamp timezone-aware in UTC"""
    # SQLite hands back naive datetimes; they were written as UTC
    if value.tzinfo is None:
        return pytz.UTC.localize(value)
    return value.astimezone(pytz.UTC)


def format_timestamp(value: datetime):
    """Render a stored timestamp as ISO-8601 UTC with millisecond precision"""
    if value is None:
        return None
    return as_utc(value).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


# ========================================
# Post Model
# ========================================

class Post(db.Model):
    """Blog post"""
    __tablename__ = 'posts'

    id = db.Column(db.Uuid, primary_key=True, default=new_post_id)
    title = db.Column(db.String(255), nullable=False)
    content = db.Column(db.Text, nullable=False)
    author = db.Column(db.String(100), nullable=True)
    published = db.Column(db.Boolean, default=False, nullable=False, index=True)
    created_at = db.Column(db.DateTime(timezone=True), default=utc_now, nullable=False, index=True)
    updated_at = db.Column(db.DateTime(timezone=True), default=utc_now, nullable=False)

    def __repr__(self):
        return f'<Post {self.title}>'

    def __str__(self):
        return self.title

    def to_dict(self) -> dict:
        """Convert to the JSON shape returned by the API"""
        return {
            'id': str(self.id),
            'title': self.title,
            'content': self.content,
            'author': self.author,
            'published': bool(self.published),
            'createdAt': format_timestamp(self.created_at),
            'updatedAt': format_timestamp(self.updated_at)
        }

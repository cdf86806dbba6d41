# -*- coding: utf-8 -*-
"""
Post service

Data access for the posts table: lookup, listing, creation, partial update
and deletion. Each write commits immediately.
"""
import uuid
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, List, Mapping, Optional

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from post_manager.errors import NotFoundError, UnexpectedError, ValidationError
from post_manager.models import Post, as_utc, new_post_id, utc_now

PATCHABLE_FIELDS = ('title', 'content', 'author', 'published')


@dataclass(frozen=True)
class PostPatch:
    """Partial update: only the fields named in ``fields_set`` are applied"""

    title: Optional[str] = None
    content: Optional[str] = None
    author: Optional[str] = None
    published: Optional[bool] = None
    fields_set: FrozenSet[str] = frozenset()

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> 'PostPatch':
        known = {name: values[name] for name in PATCHABLE_FIELDS if name in values}
        return cls(fields_set=frozenset(known), **known)

    def changes(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in PATCHABLE_FIELDS if name in self.fields_set}


def parse_post_id(post_id) -> Optional[uuid.UUID]:
    """Return the id as a UUID, or None when it cannot name a post"""
    if isinstance(post_id, uuid.UUID):
        return post_id
    try:
        return uuid.UUID(str(post_id))
    except ValueError:
        return None


class PostService:
    """Service class for post operations, bound to one database session"""

    def __init__(self, session: Session):
        self.session = session

    def find_by_id(self, post_id) -> Optional[Post]:
        """Get a post by id

        Args:
            post_id: UUID or its string form

        Returns:
            The Post, or None if no post has this id
        """
        return self._get(post_id, 'Failed to fetch post')

    def find_all(self, published: Optional[bool] = None) -> List[Post]:
        """List posts, newest first

        Args:
            published: when given, only posts with this published flag

        Returns:
            Posts ordered by creation time, descending
        """
        try:
            query = self.session.query(Post)
            if published is not None:
                query = query.filter(Post.published == published)
            return query.order_by(Post.created_at.desc(), Post.id.desc()).all()
        except SQLAlchemyError as e:
            self._fail('Failed to fetch posts', e)

    def create(self, fields: Mapping[str, Any]) -> Post:
        """Create a new post

        Args:
            fields: title and content (required), author and published (optional)

        Returns:
            The persisted Post

        Raises:
            ValidationError: title or content is missing or empty
        """
        title = fields.get('title')
        content = fields.get('content')
        if not title or not content:
            raise ValidationError('Title and content are required')

        now = utc_now()
        post = Post(
            id=new_post_id(),
            title=title,
            content=content,
            author=fields.get('author') or None,
            published=bool(fields.get('published') or False),
            created_at=now,
            updated_at=now
        )
        self.session.add(post)
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self._fail('Failed to create post', e)

        current_app.logger.info(f"Created post {post.id}: title={title!r}, published={post.published}")
        return post

    def update(self, post_id, patch: PostPatch) -> Post:
        """Apply a partial update to an existing post

        Args:
            post_id: id of the post to update
            patch: fields to replace; fields absent from the patch are unchanged

        Returns:
            The updated Post

        Raises:
            NotFoundError: no post has this id
            ValidationError: the patch blanks out title or content
        """
        post = self._get(post_id, 'Failed to update post')
        if post is None:
            raise NotFoundError()

        changes = patch.changes()
        for name in ('title', 'content'):
            if name in changes and not changes[name]:
                raise ValidationError(f'{name.capitalize()} cannot be empty')

        for name, value in changes.items():
            setattr(post, name, value)

        # Never move updated_at backwards, even if the clock does
        previous = as_utc(post.updated_at)
        post.updated_at = max(utc_now(), previous)

        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self._fail('Failed to update post', e)

        current_app.logger.info(f"Updated post {post.id}: fields={sorted(changes)}")
        return post

    def delete(self, post_id) -> None:
        """Permanently delete a post

        Raises:
            NotFoundError: no post has this id
        """
        post = self._get(post_id, 'Failed to delete post')
        if post is None:
            raise NotFoundError()

        deleted_id = post.id
        self.session.delete(post)
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self._fail('Failed to delete post', e)

        current_app.logger.info(f"Deleted post {deleted_id}")

    def _get(self, post_id, failure_message: str) -> Optional[Post]:
        parsed = parse_post_id(post_id)
        if parsed is None:
            return None
        try:
            return self.session.get(Post, parsed)
        except SQLAlchemyError as e:
            self._fail(failure_message, e)

    def _fail(self, message: str, error: Exception):
        """Roll back, log the detail, and raise a generic error"""
        self.session.rollback()
        current_app.logger.error(f"{message}: {error}")
        raise UnexpectedError(message) from error

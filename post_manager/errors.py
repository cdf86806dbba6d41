# -*- coding: utf-8 -*-
"""
Post error taxonomy

Raised by the data access layer and turned into JSON responses by the
handlers registered in the application factory.
"""
from typing import Dict, List, Optional


class PostError(Exception):
    """Base class for failures surfaced to API callers"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {'error': self.message}


class ValidationError(PostError):
    """Missing or malformed input (400)"""

    status_code = 400

    def __init__(self, message: str, errors: Optional[Dict[str, List[str]]] = None):
        super().__init__(message)
        self.errors = errors or {}

    def to_dict(self) -> dict:
        body = super().to_dict()
        if self.errors:
            body['errors'] = self.errors
        return body


class NotFoundError(PostError):
    """No post exists for the requested id (404)"""

    status_code = 404

    def __init__(self, message: str = 'Post not found'):
        super().__init__(message)


class UnexpectedError(PostError):
    """Any other failure, reported with a generic message (500)"""

    status_code = 500

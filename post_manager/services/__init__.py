from post_manager import db
from post_manager.services.post_service import PostPatch, PostService


def get_post_service() -> PostService:
    """Build a PostService on the request-scoped session"""
    return PostService(db.session)


__all__ = ['PostPatch', 'PostService', 'get_post_service']

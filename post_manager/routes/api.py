# -*- coding: utf-8 -*-
"""
Posts API Blueprint

JSON endpoints for listing, reading, creating, updating and deleting posts.
Each handler validates its input, makes one data-access call, and returns
the post JSON; errors are rendered by the application's error handlers.
"""
from flask import Blueprint, jsonify, request

from post_manager.errors import ValidationError
from post_manager.forms import PostForm, PostUpdateForm
from post_manager.services import PostPatch, get_post_service


bp = Blueprint('api', __name__)


def _json_body() -> dict:
    """Decoded request body; anything but a JSON object is rejected"""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationError('Request body must be a JSON object')
    return payload


def _published_filter():
    """`?published=true` selects published posts, any other value unpublished ones"""
    published = request.args.get('published')
    if published is None:
        return None
    return published == 'true'


@bp.route('/posts', methods=['GET'])
def list_posts():
    """List posts, newest first, optionally filtered by the published flag"""
    posts = get_post_service().find_all(published=_published_filter())
    return jsonify([post.to_dict() for post in posts])


@bp.route('/posts/<post_id>', methods=['GET'])
def get_post(post_id):
    """Fetch one post"""
    post = get_post_service().find_by_id(post_id)
    if post is None:
        return jsonify({'error': 'Post not found'}), 404
    return jsonify(post.to_dict())


@bp.route('/posts', methods=['POST'])
def create_post():
    """Create a post from `{title, content, author?, published?}`"""
    form = PostForm.from_json(_json_body())
    if not form.validate():
        if form.missing_required():
            raise ValidationError('Title and content are required', errors=form.errors)
        raise ValidationError('Invalid post data', errors=form.errors)

    post = get_post_service().create(form.to_fields())
    return jsonify(post.to_dict()), 201


@bp.route('/posts/<post_id>', methods=['PUT'])
def update_post(post_id):
    """Replace the fields present in the body; omitted fields are unchanged"""
    service = get_post_service()
    if service.find_by_id(post_id) is None:
        return jsonify({'error': 'Post not found'}), 404

    form = PostUpdateForm.from_json(_json_body())
    if not form.validate():
        raise ValidationError('Invalid post data', errors=form.errors)

    post = service.update(post_id, PostPatch.from_mapping(form.changes()))
    return jsonify(post.to_dict())


@bp.route('/posts/<post_id>', methods=['DELETE'])
def delete_post(post_id):
    """Delete a post permanently"""
    get_post_service().delete(post_id)
    return jsonify({'message': 'Post deleted successfully'})

"""
Blog post routes. Every endpoint requires a bearer token.
"""
from flask import Blueprint, jsonify, request

from wordnest.auth import current_identity, login_required
from wordnest.services import get_services
from wordnest.utils.validators import (
    optional_text,
    parse_pagination,
    parse_post_id,
    request_fields,
)

posts_bp = Blueprint('posts', __name__, url_prefix='/api/posts')

IMAGE_FIELD = 'image'


@posts_bp.route('', methods=['GET'])
@login_required
def list_posts():
    page, limit = parse_pagination(request.args)
    return jsonify(get_services().posts.list(page, limit).to_dict()), 200


@posts_bp.route('/<post_id>', methods=['GET'])
@login_required
def get_post(post_id):
    return jsonify(get_services().posts.get(parse_post_id(post_id))), 200


@posts_bp.route('', methods=['POST'])
@login_required
def create_post():
    payload = request_fields()
    title = optional_text(payload, 'title')
    content = optional_text(payload, 'content')
    post = get_services().posts.create(
        current_identity(),
        title or None,
        content or None,
        image=request.files.get(IMAGE_FIELD),
    )
    return jsonify({
        'message': 'Post created successfully',
        'post': post
    }), 201


@posts_bp.route('/<post_id>', methods=['PUT'])
@login_required
def update_post(post_id):
    post_id = parse_post_id(post_id)
    payload = request_fields()
    post = get_services().posts.update(
        current_identity(),
        post_id,
        title=optional_text(payload, 'title'),
        content=optional_text(payload, 'content'),
        image=request.files.get(IMAGE_FIELD),
    )
    return jsonify({
        'message': 'Post updated successfully',
        'post': post
    }), 200


@posts_bp.route('/<post_id>', methods=['DELETE'])
@login_required
def delete_post(post_id):
    get_services().posts.delete(current_identity(), parse_post_id(post_id))
    return jsonify({'message': 'Post deleted successfully'}), 200

"""
Routes for the authenticated user's own profile, picture, posts and stats.
"""
from flask import Blueprint, jsonify, request

from wordnest.auth import current_identity, login_required
from wordnest.services import get_services
from wordnest.utils.validators import optional_text, parse_pagination, request_fields

user_bp = Blueprint('user', __name__, url_prefix='/api/user')

PICTURE_FIELD = 'profile_picture'


@user_bp.route('/profile', methods=['GET'])
@login_required
def get_profile():
    return jsonify(get_services().profile.get_profile(current_identity())), 200


@user_bp.route('/profile', methods=['PUT'])
@login_required
def update_profile():
    payload = request_fields()
    user = get_services().profile.update_profile(
        current_identity(),
        username=optional_text(payload, 'username') or None,
        email=optional_text(payload, 'email') or None,
        bio=optional_text(payload, 'bio'),
        current_password=optional_text(payload, 'currentPassword') or None,
        new_password=optional_text(payload, 'newPassword') or None,
    )
    return jsonify({
        'message': 'Profile updated successfully',
        'user': user
    }), 200


@user_bp.route('/profile-picture', methods=['POST'])
@login_required
def upload_profile_picture():
    user = get_services().profile.set_profile_picture(
        current_identity(), request.files.get(PICTURE_FIELD)
    )
    return jsonify({
        'message': 'Profile picture updated successfully',
        'user': user
    }), 200


@user_bp.route('/profile-picture', methods=['DELETE'])
@login_required
def remove_profile_picture():
    user = get_services().profile.clear_profile_picture(current_identity())
    return jsonify({
        'message': 'Profile picture removed successfully',
        'user': user
    }), 200


@user_bp.route('/posts', methods=['GET'])
@login_required
def list_own_posts():
    page, limit = parse_pagination(request.args)
    result = get_services().profile.list_own_posts(current_identity(), page, limit)
    return jsonify(result.to_dict()), 200


@user_bp.route('/stats', methods=['GET'])
@login_required
def stats():
    return jsonify(get_services().profile.stats(current_identity())), 200

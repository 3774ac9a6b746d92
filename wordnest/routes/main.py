"""
Service routes: health check and uploaded asset serving.
"""
from flask import Blueprint, jsonify, send_from_directory

from wordnest.errors import NotFound
from wordnest.services import get_services

main_bp = Blueprint('main', __name__)


@main_bp.route('/health')
def health():
    """Health check endpoint for uptime monitoring."""
    return jsonify({
        'status': 'OK',
        'message': 'WordNest API is running'
    }), 200


@main_bp.route('/uploads/<path:filename>')
def uploaded_file(filename):
    assets = get_services().assets
    if assets.resolve(f"{assets.url_prefix}/{filename}") is None:
        raise NotFound('File not found')
    return send_from_directory(str(assets.root), filename)

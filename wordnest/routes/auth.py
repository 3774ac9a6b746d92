"""
Account routes: signup and login.
"""
from flask import Blueprint, jsonify

from wordnest.services import get_services
from wordnest.utils.validators import optional_text, request_fields

auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')


def _text(payload, field):
    value = optional_text(payload, field)
    return value or None


@auth_bp.route('/signup', methods=['POST'])
def signup():
    payload = request_fields()
    token, user = get_services().auth.signup(
        _text(payload, 'username'),
        _text(payload, 'email'),
        _text(payload, 'password'),
    )
    return jsonify({
        'message': 'User created successfully',
        'token': token,
        'user': user
    }), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    payload = request_fields()
    token, user = get_services().auth.login(
        _text(payload, 'email'),
        _text(payload, 'password'),
    )
    return jsonify({
        'message': 'Login successful',
        'token': token,
        'user': user
    }), 200

"""
Validation helpers for incoming request data.
"""
import re

from flask import request

from wordnest.errors import InvalidInput, NotFound


class _Unset:
    """Marker for a field that was not present in the request at all."""

    def __repr__(self):
        return 'UNSET'

    def __bool__(self):
        return False


UNSET = _Unset()

MAX_TITLE_LENGTH = 255
MAX_USERNAME_LENGTH = 50
MAX_EMAIL_LENGTH = 100
MIN_PASSWORD_LENGTH = 6
DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100
# Largest id the store can hold (signed 64-bit)
MAX_ROW_ID = 2 ** 63 - 1

EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


def request_fields():
    """
    Return the request's fields as a dict, whether it was sent as JSON or
    as a form (multipart uploads arrive as forms).
    """
    if request.is_json:
        payload = request.get_json(silent=True)
        if payload is None:
            raise InvalidInput('Request body must be valid JSON')
        if not isinstance(payload, dict):
            raise InvalidInput('Request body must be a JSON object')
        return payload
    return request.form.to_dict()


def optional_text(payload, field):
    """
    Read ``field`` from ``payload``. Absent keys come back as UNSET; present
    values must be strings or null.
    """
    if field not in payload:
        return UNSET
    value = payload[field]
    if value is not None and not isinstance(value, str):
        raise InvalidInput(f"{field} must be a string")
    return value


def parse_positive_int(raw, field, default):
    if raw is None or raw == '':
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise InvalidInput(f"{field} must be an integer")


def parse_pagination(args):
    """Parse and range-check ``page``/``limit`` query parameters."""
    page = parse_positive_int(args.get('page'), 'page', DEFAULT_PAGE)
    limit = parse_positive_int(args.get('limit'), 'limit', DEFAULT_LIMIT)
    check_pagination(page, limit)
    return page, limit


def check_pagination(page, limit):
    if page < 1 or limit < 1 or limit > MAX_LIMIT:
        raise InvalidInput(
            'Invalid pagination parameters. Page must be >= 1, '
            f'limit must be between 1 and {MAX_LIMIT}'
        )


def parse_post_id(raw):
    try:
        post_id = int(raw)
    except (TypeError, ValueError):
        raise InvalidInput('Invalid post id')
    if post_id < 1:
        raise InvalidInput('Invalid post id')
    if post_id > MAX_ROW_ID:
        raise NotFound("Post not found")
    return post_id


def validate_title(title):
    if not title or not title.strip():
        raise InvalidInput('Title cannot be empty')
    if len(title) > MAX_TITLE_LENGTH:
        raise InvalidInput(f'Title cannot exceed {MAX_TITLE_LENGTH} characters')
    return title


def validate_content(content):
    if not content or not content.strip():
        raise InvalidInput('Content cannot be empty')
    return content


def validate_username(username):
    username = username.strip()
    if not username:
        raise InvalidInput('Username cannot be empty')
    if len(username) > MAX_USERNAME_LENGTH:
        raise InvalidInput(f'Username cannot exceed {MAX_USERNAME_LENGTH} characters')
    return username


def validate_email(email):
    email = email.strip()
    if len(email) > MAX_EMAIL_LENGTH:
        raise InvalidInput(f'Email cannot exceed {MAX_EMAIL_LENGTH} characters')
    if not EMAIL_PATTERN.match(email):
        raise InvalidInput('Email address is not valid')
    return email


def validate_new_password(password, label='Password'):
    if len(password) < MIN_PASSWORD_LENGTH:
        raise InvalidInput(f'{label} must be at least {MIN_PASSWORD_LENGTH} characters long')
    return password

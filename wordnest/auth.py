"""
Request authentication gate for protected routes.
"""
import logging
from functools import wraps

from flask import g, request

from wordnest.errors import InvalidToken, MissingToken
from wordnest.security import Identity
from wordnest.services import get_services

logger = logging.getLogger(__name__)


def extract_bearer_token(header_value):
    """
    Pull the token out of an ``Authorization: Bearer <token>`` header.
    Returns None when the header is absent or empty.
    """
    if not header_value:
        return None
    scheme, _, token = header_value.strip().partition(' ')
    if scheme.lower() != 'bearer':
        raise InvalidToken('Authorization header must use the Bearer scheme')
    token = token.strip()
    return token or None


def authenticate_request(token_codec) -> Identity:
    """Resolve the caller of the current request or raise Unauthenticated."""
    token = extract_bearer_token(request.headers.get('Authorization'))
    if token is None:
        raise MissingToken()
    try:
        identity = token_codec.verify(token)
    except InvalidToken as e:
        logger.info(f"Auth: rejected token on {request.method} {request.path}: {e.message}")
        raise
    g.current_user = identity
    return identity


def login_required(view):
    """
    Reject the request with 401 before ``view`` runs unless it carries a
    valid bearer token. The resolved identity is available as
    ``g.current_user``.
    """
    @wraps(view)
    def wrapped(*args, **kwargs):
        authenticate_request(get_services().tokens)
        return view(*args, **kwargs)
    return wrapped


def current_identity() -> Identity:
    return g.current_user

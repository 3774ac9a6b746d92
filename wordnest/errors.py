"""
Domain error taxonomy and the Flask handlers that render it.
"""
import logging

from flask import has_request_context, jsonify, request
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class WordNestError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code = 500
    default_message = 'Internal server error'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(WordNestError):
    status_code = 400
    default_message = 'Invalid request'


class NoChanges(InvalidInput):
    """A mutation request that carried nothing to change."""
    default_message = 'No fields to update'


class Unauthenticated(WordNestError):
    status_code = 401
    default_message = 'Authentication required'


class MissingToken(Unauthenticated):
    default_message = 'Access token required'


class InvalidToken(Unauthenticated):
    default_message = 'Invalid token'


class TokenExpired(InvalidToken):
    default_message = 'Token has expired'


class Forbidden(WordNestError):
    status_code = 403
    default_message = 'Forbidden'


class NotFound(WordNestError):
    status_code = 404
    default_message = 'Not found'


class Conflict(WordNestError):
    status_code = 409
    default_message = 'Resource already exists'


class Internal(WordNestError):
    pass


class ConfigurationError(RuntimeError):
    """Raised at startup when required settings are absent."""


class MissingSecret(ConfigurationError):
    pass


def register_error_handlers(app):
    """Render every failure as ``{"error": message}`` with its status code."""

    @app.errorhandler(WordNestError)
    def handle_domain_error(error):
        if error.status_code >= 500:
            logger.error(f"{request_label()}: {error.message}")
        return jsonify({'error': error.message}), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        if error.code == 413:
            message = 'Uploaded file is too large'
        else:
            message = error.description or error.name
        return jsonify({'error': message}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        # Details stay in the server log only
        logger.error(f"{request_label()}: unhandled error: {error}", exc_info=error)
        return jsonify({'error': 'Internal server error'}), 500


def request_label():
    if not has_request_context():
        return 'outside request'
    return f"{request.method} {request.path}"

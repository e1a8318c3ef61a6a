"""
API error types and the app-wide JSON error translator.
Business-rule failures are raised where they are detected and rendered here.
"""
import traceback

from flask import jsonify, request, current_app
from werkzeug.exceptions import HTTPException

GENERIC_ERROR = "Something went wrong. Please try again later."


class APIError(Exception):
    """Base class for failures that map to an HTTP status."""
    status_code = 400
    kind = 'error'
    default_message = 'Request failed.'

    def __init__(self, message=None, **extra):
        self.message = message or self.default_message
        self.extra = extra
        super().__init__(self.message)

    def to_dict(self):
        payload = {'success': False, 'error': self.kind, 'message': self.message}
        payload.update(self.extra)
        return payload


class InvalidInput(APIError):
    status_code = 400
    kind = 'invalid_input'
    default_message = 'Invalid input.'


class AlreadyExists(APIError):
    status_code = 400
    kind = 'already_exists'
    default_message = 'Resource already exists.'


class Mismatch(APIError):
    status_code = 400
    kind = 'mismatch'
    default_message = 'Values do not match.'


class InvalidCode(APIError):
    status_code = 400
    kind = 'invalid_code'
    default_message = 'Invalid verification code.'


class Expired(APIError):
    status_code = 400
    kind = 'expired'
    default_message = 'Verification code has expired. Please request a new one.'


class InvalidCredentials(APIError):
    status_code = 401
    kind = 'invalid_credentials'
    default_message = 'Invalid credentials'


class Unauthorized(APIError):
    status_code = 401
    kind = 'unauthorized'
    default_message = 'Not authorized'


class Forbidden(APIError):
    status_code = 403
    kind = 'forbidden'
    default_message = 'Forbidden'


class NotVerified(APIError):
    status_code = 403
    kind = 'not_verified'
    default_message = ('Email not verified. A verification code has been sent to your email; '
                       'verify it to continue.')


class NotFound(APIError):
    status_code = 404
    kind = 'not_found'
    default_message = 'Not found.'


class RateLimited(APIError):
    status_code = 429
    kind = 'rate_limited'
    default_message = 'Too many requests. Please try again later.'


class AttemptsExhausted(RateLimited):
    kind = 'attempts_exhausted'
    default_message = 'Too many attempts. Please request a new code.'


def _error_response(status, message, kind, exc=None):
    body = {'success': False, 'error': kind, 'message': message}
    if exc is not None and not current_app.config.get('PRODUCTION'):
        body['details'] = str(exc)
        body['stack'] = traceback.format_exception(type(exc), exc, exc.__traceback__)
        body['url'] = request.path
        body['method'] = request.method
    return jsonify(body), status


def register_error_handlers(app):
    """Attach the single error translator to the app."""

    @app.errorhandler(APIError)
    def handle_api_error(e):
        if e.status_code >= 500:
            current_app.logger.error("%s %s failed: %s", request.method, request.path, e.message)
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        if e.code == 400:
            # Malformed JSON bodies end up here via request.get_json()
            return _error_response(400, 'Invalid JSON format in request body', 'invalid_input')
        if e.code == 404:
            return _error_response(404, f'Not Found - {request.path}', 'not_found')
        if e.code == 405:
            return _error_response(405, 'Method not allowed', 'method_not_allowed')
        return _error_response(e.code or 500, e.description or GENERIC_ERROR, 'http_error')

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        current_app.logger.error("Unhandled error on %s %s: %s", request.method, request.path, e,
                                 exc_info=True)
        try:
            from models import db
            db.session.rollback()
        except Exception:
            current_app.logger.warning("Session rollback failed after unhandled error", exc_info=True)
        return _error_response(500, GENERIC_ERROR, 'server_error', exc=e)

"""
Authentication utilities: bearer tokens, the Flask-Login request loader and
role-gated route decorators.
"""
from datetime import datetime, timedelta
from functools import wraps

from flask import current_app, request
from flask_login import LoginManager, current_user
from jose import JWTError, jwt

from utils.errors import Forbidden, Unauthorized

TOKEN_MISSING_MSG = "Not authorized, token missing"
TOKEN_INVALID_MSG = "Not authorized, token invalid"

login_manager = LoginManager()


def create_access_token(user_id, expires_delta=None):
    """
    Create a signed bearer token carrying the user id.
    Lifetime defaults to JWT_EXPIRES_DAYS.
    """
    if expires_delta is None:
        expires_delta = timedelta(days=current_app.config.get('JWT_EXPIRES_DAYS', 30))
    payload = {
        'id': user_id,
        'iat': datetime.utcnow(),
        'exp': datetime.utcnow() + expires_delta,
    }
    return jwt.encode(payload, current_app.config['JWT_SECRET'],
                      algorithm=current_app.config.get('JWT_ALGORITHM', 'HS256'))


def decode_access_token(token):
    """Return the token payload, or None if the token is invalid or expired."""
    if not token or not isinstance(token, str):
        return None
    try:
        payload = jwt.decode(token, current_app.config['JWT_SECRET'],
                             algorithms=[current_app.config.get('JWT_ALGORITHM', 'HS256')])
    except JWTError:
        return None
    if payload.get('id') is None:
        return None
    return payload


def _bearer_token():
    header = request.headers.get('Authorization', '')
    if header.startswith('Bearer '):
        return header.split(' ', 1)[1].strip()
    return None


@login_manager.user_loader
def load_user(user_id):
    """Session loader; the API itself authenticates with bearer tokens."""
    from models import db
    from models.user import User
    return db.session.get(User, int(user_id))


@login_manager.request_loader
def load_user_from_request(req):
    """Resolve the user from the Authorization: Bearer header."""
    from models import db
    from models.user import User
    payload = decode_access_token(_bearer_token())
    if payload is None:
        return None
    try:
        user = db.session.get(User, int(payload['id']))
    except (TypeError, ValueError):
        return None
    if user is None or user.deleted_at is not None:
        return None
    return user


@login_manager.unauthorized_handler
def unauthorized():
    if _bearer_token() is None:
        raise Unauthorized(TOKEN_MISSING_MSG)
    raise Unauthorized(TOKEN_INVALID_MSG)


def token_required(f):
    """Decorator to require any authenticated user"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            return login_manager.unauthorized()
        return f(*args, **kwargs)
    return decorated_function


def role_required(role):
    """Decorator factory to require a bearer token for a user with the given role"""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not current_user.is_authenticated:
                return login_manager.unauthorized()
            if current_user.role != role:
                raise Forbidden(f"Not authorized as {role}")
            return f(*args, **kwargs)
        return decorated_function
    return decorator


user_required = role_required('user')
staff_required = role_required('staff')
admin_required = role_required('admin')

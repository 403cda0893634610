from functools import wraps

from flask import request, jsonify, g

from auth.jwt_handler import verify_token


def _bearer_token():
    auth_header = request.headers.get('Authorization', '')
    if not auth_header.startswith('Bearer '):
        return None
    return auth_header[len('Bearer '):].strip() or None


def resolve_current_user():
    """Resolve the request's bearer token to a User, or None"""
    from dating_backend import db
    from models.user import User

    token = _bearer_token()
    if not token:
        return None

    payload = verify_token(token)
    if not payload or 'user_id' not in payload:
        return None

    user = db.session.get(User, payload['user_id'])
    if user:
        g.user_id = user.id
    return user


def require_auth(roles=None):
    """Authentication decorator for plain REST routes"""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not _bearer_token():
                return jsonify({'error': 'Invalid authorization header'}), 401

            user = resolve_current_user()
            if not user:
                return jsonify({'error': 'Invalid or expired token'}), 401

            # Check roles if given
            if roles and (user.role or '').lower() not in roles:
                return jsonify({'error': 'Insufficient permissions'}), 403

            request.current_user = user

            return f(*args, **kwargs)
        return decorated_function
    return decorator

import os
from datetime import datetime, timedelta, timezone

import jwt
from flask import current_app

JWT_ALGORITHM = 'HS256'
JWT_EXPIRATION_HOURS = 24


def _secret():
    return current_app.config.get('SECRET_KEY') or os.environ.get('SECRET_KEY', 'dev-secret-key')


def generate_token(user_id, expires_in=JWT_EXPIRATION_HOURS):
    """Generate JWT token for user"""
    now = datetime.now(timezone.utc)
    payload = {
        'user_id': user_id,
        'exp': now + timedelta(hours=expires_in),
        'iat': now
    }
    return jwt.encode(payload, _secret(), algorithm=JWT_ALGORITHM)


def verify_token(token):
    """Verify and decode JWT token"""
    try:
        return jwt.decode(token, _secret(), algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None

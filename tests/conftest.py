"""Pytest configuration and fixtures."""
import os
from datetime import date
from unittest.mock import MagicMock

# Must be set before dating_backend is imported
os.environ['DATABASE_URL'] = 'sqlite://'
os.environ['RATELIMIT_ENABLED'] = 'false'
os.environ['BCRYPT_LOG_ROUNDS'] = '4'
os.environ.setdefault('SECRET_KEY', 'test-secret-key')
os.environ.setdefault('LOG_LEVEL', 'WARNING')

import pytest  # noqa: E402

import dating_backend  # noqa: E402
from auth.jwt_handler import generate_token  # noqa: E402
from dating_backend import app as flask_app, bcrypt, db  # noqa: E402
from models.user import User  # noqa: E402
from services.operation_service import OperationService  # noqa: E402
from utils.cache_manager import CacheManager  # noqa: E402

DEFAULT_PASSWORD = 'Password123!'


@pytest.fixture
def mock_redis():
    """Redis stand-in that always misses."""
    redis_client = MagicMock()
    redis_client.get.return_value = None
    return redis_client


@pytest.fixture
def app(mock_redis, monkeypatch):
    """Flask app bound to a fresh in-memory database."""
    flask_app.config['TESTING'] = True
    monkeypatch.setattr(dating_backend.cache, 'redis', mock_redis)

    with flask_app.app_context():
        db.create_all()
        yield flask_app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Create a test client for the Flask app."""
    return app.test_client()


@pytest.fixture
def ops(app, mock_redis):
    """The operation boundary with every service wired."""
    return OperationService(db, bcrypt, CacheManager(mock_redis), dating_backend.logger)


@pytest.fixture
def make_user(app):
    """Factory persisting users with sensible defaults."""
    counter = {'n': 0}

    def _make_user(password=DEFAULT_PASSWORD, **overrides):
        counter['n'] += 1
        n = counter['n']
        fields = {
            'first_name': f'User{n}',
            'last_name': 'Test',
            'email': f'user{n}@example.com',
            'mobile_number': f'555000{n:04d}',
            'password_hash': bcrypt.generate_password_hash(password).decode('utf-8'),
            'birthdate': date(1995, 6, 15),
            'gender': 'female',
            'sexual_orientation': 'straight',
            'gender_interest': 'male',
            'bio': '',
            'role': 'user',
        }
        fields.update(overrides)
        user = User(**fields)
        db.session.add(user)
        db.session.commit()
        return user

    return _make_user


@pytest.fixture
def auth_header():
    """Bearer header for a user."""
    def _auth_header(user):
        return {'Authorization': f'Bearer {generate_token(user.id)}'}
    return _auth_header


@pytest.fixture
def registration_data():
    return {
        'first_name': 'Dana',
        'last_name': 'Scully',
        'email': 'Dana@Example.com',
        'mobile_number': '+1 (555) 123-4567',
        'password': 'Truth1sOutThere',
        'birthdate': '1990-02-23',
        'gender': 'female',
        'sexual_orientation': 'straight',
        'gender_interest': 'male',
        'bio': 'Skeptic.',
    }

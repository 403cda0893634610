"""
Kindred - Dating App Backend
Swipe, match, talk.
"""
import os
import secrets
import uuid

import redis

# Flask imports
from flask import Flask, request, jsonify, g
from flask_cors import CORS
from flask_bcrypt import Bcrypt
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from werkzeug.middleware.proxy_fix import ProxyFix

# === LOGGING CONFIGURATION ===
from utils.helpers import utcnow
from utils.logging_config import setup_logger
logger = setup_logger('kindred')

# === CONSTANTS ===
DEFAULT_DATABASE_URL = 'postgresql://localhost/kindred'

ALLOWED_ORIGINS = [
    origin.strip() for origin in os.environ.get(
        'CORS_ORIGINS', 'http://localhost:3000,http://127.0.0.1:3000'
    ).split(',') if origin.strip()
]

# Error kind -> HTTP status for the operation endpoint
ERROR_STATUS_CODES = {
    'Unauthorized': 401,
    'Forbidden': 403,
    'NotFound': 404,
    'InvalidOperation': 400,
    'Internal': 500,
}

# === REDIS SETUP ===
redis_client = redis.from_url(os.environ.get('REDIS_URL', 'redis://localhost:6379'))

# === CREATE FLASK APP ===
app = Flask(__name__)
app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)

# === FLASK CONFIGURATION ===
app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY', secrets.token_hex(32))
app.config['JSON_SORT_KEYS'] = False

# Database configuration
app.config['SQLALCHEMY_DATABASE_URI'] = os.environ.get(
    'DATABASE_URL',
    DEFAULT_DATABASE_URL
).replace('postgres://', 'postgresql://')
app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
if not app.config['SQLALCHEMY_DATABASE_URI'].startswith('sqlite'):
    app.config['SQLALCHEMY_ENGINE_OPTIONS'] = {
        'pool_size': 20,
        'pool_recycle': 3600,
        'pool_pre_ping': True,
        'max_overflow': 40,
        'pool_timeout': 30
    }

# Rate limiting configuration
app.config['RATELIMIT_ENABLED'] = os.environ.get('RATELIMIT_ENABLED', 'true').lower() == 'true'
app.config['RATELIMIT_STORAGE_URI'] = os.environ.get('RATELIMIT_STORAGE_URI', 'memory://')

# Password hashing cost
app.config['BCRYPT_LOG_ROUNDS'] = int(os.environ.get('BCRYPT_LOG_ROUNDS', 12))

# === INITIALIZE EXTENSIONS ===
db = SQLAlchemy(app)
migrate = Migrate(app, db)
bcrypt = Bcrypt(app)
CORS(app, origins=ALLOWED_ORIGINS, supports_credentials=True)

limiter = Limiter(
    get_remote_address,
    app=app,
    default_limits=["5000 per day", "500 per hour"],
)

# === IMPORT UTILITIES ===
from utils.cache_manager import CacheManager
from utils.errors import KindredError
from auth.decorators import require_auth, resolve_current_user

cache = CacheManager(redis_client)


def build_operation_service():
    """Wire the service graph for one request"""
    from services.operation_service import OperationService
    return OperationService(db, bcrypt, cache, logger)


# === REQUEST HANDLERS ===
@app.before_request
def before_request():
    g.request_id = str(uuid.uuid4())
    g.request_start_time = utcnow()

    logger.debug(f"request_started {g.request_id} {request.method} {request.path}")


@app.after_request
def after_request(response):
    if hasattr(g, 'request_start_time'):
        duration = (utcnow() - g.request_start_time).total_seconds()
        logger.info(
            f"request_completed {getattr(g, 'request_id', 'unknown')} "
            f"{request.method} {request.path} {response.status_code} "
            f"{round(duration * 1000, 2)}ms"
        )

    response.headers['X-Request-ID'] = getattr(g, 'request_id', 'unknown')
    return response


# === API ENDPOINTS ===

# Health check
@app.route('/api/health', methods=['GET'])
def health_check():
    return jsonify({
        'status': 'healthy',
        'timestamp': utcnow().isoformat()
    })


@app.route('/api/operations', methods=['POST'])
def execute_operation():
    """Single query/mutation endpoint"""
    body = request.get_json(silent=True) or {}
    name = body.get('operation')
    arguments = body.get('arguments') or {}

    if not name or not isinstance(arguments, dict):
        return jsonify({'error': {'kind': 'InvalidOperation',
                                  'message': 'operation name and arguments object required'}}), 400

    actor = resolve_current_user()
    result = build_operation_service().execute(name, arguments, actor)

    if 'error' in result:
        kind = result['error']['kind']
        status = ERROR_STATUS_CODES.get(kind, 400)
        # An authenticated actor acting outside their rights is forbidden, not anonymous
        if kind == 'Unauthorized' and actor is not None:
            status = ERROR_STATUS_CODES['Forbidden']
        return jsonify(result), status

    return jsonify(result)


# Authentication endpoints
@app.route('/api/auth/register', methods=['POST'])
@limiter.limit("10 per hour")
def register():
    """Register new user"""
    from services.auth_service import AuthService
    auth_service = AuthService(db, bcrypt, logger)
    try:
        return jsonify(auth_service.register(request.get_json(silent=True) or {})), 201
    except KindredError as e:
        return jsonify({'error': e.to_dict()}), ERROR_STATUS_CODES.get(e.kind, 400)


@app.route('/api/auth/login', methods=['POST'])
@limiter.limit("20 per minute")
def login():
    """User login"""
    from services.auth_service import AuthService
    auth_service = AuthService(db, bcrypt, logger)
    try:
        return jsonify(auth_service.login(request.get_json(silent=True) or {}))
    except KindredError as e:
        return jsonify({'error': e.to_dict()}), ERROR_STATUS_CODES.get(e.kind, 400)


# Admin endpoints
@app.route('/api/admin/dashboard', methods=['GET'])
@require_auth(roles=['admin', 'superadmin'])
def admin_dashboard():
    """Admin statistics dashboard"""
    from services.stats_service import StatsService
    stats_service = StatsService(db, cache, logger)
    return jsonify(stats_service.get_admin_dashboard().to_dict())


# === ERROR HANDLERS ===
@app.errorhandler(404)
def not_found(error):
    return jsonify({
        'error': 'Resource not found',
        'request_id': getattr(g, 'request_id', 'unknown')
    }), 404


@app.errorhandler(429)
def rate_limit_exceeded(error):
    return jsonify({
        'error': 'Rate limit exceeded',
        'message': str(error.description),
        'request_id': getattr(g, 'request_id', 'unknown')
    }), 429


@app.errorhandler(500)
def internal_error(error):
    db.session.rollback()
    logger.error(f"internal_server_error {getattr(g, 'request_id', 'unknown')}: {error}",
                 exc_info=True)
    return jsonify({
        'error': 'Internal server error',
        'request_id': getattr(g, 'request_id', 'unknown')
    }), 500


# === INITIALIZATION ===
def initialize_database(seed_demo=False):
    """Create tables and the admin account"""
    with app.app_context():
        db.create_all()
        logger.info("Database tables created")

        from utils.db_init import create_admin_user, create_demo_users
        create_admin_user(db, bcrypt)
        if seed_demo:
            create_demo_users(db, bcrypt)

        logger.info("Database initialized successfully")


# Register models with the metadata (Flask-Migrate autogenerate)
import models  # noqa: E402,F401


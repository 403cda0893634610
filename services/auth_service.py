from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from auth.jwt_handler import generate_token
from models.user import User
from utils.errors import InternalError, InvalidInput, Unauthorized
from utils.logging_config import log_audit
from utils.security import RICH_TEXT_FIELDS, sanitize_input, validate_email, validate_password
from utils.validators import parse_birthdate, require_fields, require_strings, validate_phone

REGISTRATION_FIELDS = [
    'first_name', 'last_name', 'email', 'mobile_number', 'password',
    'birthdate', 'gender', 'sexual_orientation', 'gender_interest', 'bio'
]
CREDENTIAL_FIELDS = ['email', 'password']
TEXT_FIELDS = [
    'first_name', 'last_name', 'gender', 'sexual_orientation', 'gender_interest',
    'bio', 'country', 'state', 'city', 'school', 'location'
]


class AuthService:
    def __init__(self, db, bcrypt, logger):
        self.db = db
        self.bcrypt = bcrypt
        self.logger = logger

    def register(self, data):
        """Register new user and issue a token"""
        user = self.create_user(data)
        return {
            'user': user.to_dict(include_private=True),
            'token': generate_token(user.id)
        }

    def login(self, data):
        """User login"""
        require_strings(data, CREDENTIAL_FIELDS)
        email = (data.get('email') or '').lower().strip()
        password = data.get('password') or ''

        if not email or not password:
            raise InvalidInput('Email and password required')

        user = User.query.filter_by(email=email).first()

        if not user or not self.bcrypt.check_password_hash(user.password_hash, password):
            self.logger.warning(f"Failed login attempt for {email}")
            raise Unauthorized('Invalid credentials')

        log_audit(self.logger, user.id, 'login')
        return {
            'user': user.to_dict(include_private=True),
            'token': generate_token(user.id)
        }

    def create_user(self, data, role=None):
        """Validate registration data and persist a new user"""
        require_fields(data, REGISTRATION_FIELDS)
        require_strings(data, CREDENTIAL_FIELDS + ['mobile_number'])

        email = data['email'].lower().strip()
        if not validate_email(email):
            raise InvalidInput('Invalid email address')

        valid, message = validate_password(data['password'])
        if not valid:
            raise InvalidInput(message)

        if not validate_phone(data['mobile_number']):
            raise InvalidInput('Invalid mobile number')

        if User.query.filter_by(email=email).first():
            raise InvalidInput('Email already registered')

        user = User(
            email=email,
            mobile_number=data['mobile_number'].strip(),
            birthdate=parse_birthdate(data['birthdate']),
            password_hash=self.hash_password(data['password']),
            role=role or 'user'
        )
        for field in TEXT_FIELDS:
            if data.get(field) is not None:
                value = sanitize_input(str(data[field]), allow_html=field in RICH_TEXT_FIELDS)
                setattr(user, field, value)

        try:
            self.db.session.add(user)
            self.db.session.commit()
        except IntegrityError as e:
            self.db.session.rollback()
            self.logger.warning(f"Registration race for {email}: {str(e)}")
            raise InvalidInput('Email already registered') from e
        except SQLAlchemyError as e:
            self.db.session.rollback()
            self.logger.error(f"Registration error: {str(e)}")
            raise InternalError('Registration failed') from e

        self.logger.info(f"User {user.id} registered")
        return user

    def hash_password(self, password):
        return self.bcrypt.generate_password_hash(password).decode('utf-8')

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from auth.permissions import require_admin
from models.user import User
from utils.errors import InternalError, InvalidInput
from utils.logging_config import log_audit
from utils.security import RICH_TEXT_FIELDS, sanitize_input, validate_email
from utils.validators import parse_birthdate, validate_phone

ADMIN_EDITABLE_FIELDS = [
    'first_name', 'last_name', 'email', 'mobile_number', 'birthdate', 'gender',
    'sexual_orientation', 'gender_interest', 'bio', 'country', 'state', 'city',
    'school', 'location', 'role'
]
REQUIRED_FIELDS = ('first_name', 'last_name', 'mobile_number', 'gender', 'gender_interest')
ASSIGNABLE_ROLES = ('user', 'admin', 'superadmin')


class AdminService:
    """Administrative writes over users and matches. Every call needs an admin actor."""

    def __init__(self, db, auth_service, profile_service, matching_service, logger):
        self.db = db
        self.auth_service = auth_service
        self.profile_service = profile_service
        self.matching_service = matching_service
        self.logger = logger

    def create_user(self, actor, data):
        require_admin(actor)

        role = self._role(data.get('role') or 'user')
        user = self.auth_service.create_user(data, role=role)
        log_audit(self.logger, actor.id, 'admin_create_user', f"user={user.id} role={role}")
        return user

    def update_user(self, actor, user_id, data):
        require_admin(actor)

        user = self.profile_service.get_user(user_id)
        # Absent and null arguments leave the column alone
        updates = {k: v for k, v in data.items() if k in ADMIN_EDITABLE_FIELDS and v is not None}

        if 'email' in updates:
            email = str(updates['email']).lower().strip()
            if not validate_email(email):
                raise InvalidInput('Invalid email address')
            taken = User.query.filter(User.email == email, User.id != user.id).first()
            if taken:
                raise InvalidInput('Email already registered')
            updates['email'] = email
        if 'mobile_number' in updates and not validate_phone(str(updates['mobile_number'])):
            raise InvalidInput('Invalid mobile number')
        if 'birthdate' in updates:
            updates['birthdate'] = parse_birthdate(updates['birthdate'])
        if 'role' in updates:
            updates['role'] = self._role(updates['role'])

        for field, value in list(updates.items()):
            if isinstance(value, str) and field not in ('email', 'role'):
                value = sanitize_input(value, allow_html=field in RICH_TEXT_FIELDS)
                if not value and field in REQUIRED_FIELDS:
                    raise InvalidInput(f"{field} cannot be blank")
                updates[field] = value

        for field, value in updates.items():
            setattr(user, field, value)

        try:
            self.db.session.commit()
        except IntegrityError as e:
            self.db.session.rollback()
            raise InvalidInput('Email already registered') from e
        except SQLAlchemyError as e:
            self.db.session.rollback()
            self.logger.error(f"Admin update user error: {str(e)}")
            raise InternalError('Failed to update user') from e

        log_audit(self.logger, actor.id, 'admin_update_user', f"user={user.id} fields={sorted(updates)}")
        return user

    def delete_user(self, actor, user_id):
        require_admin(actor)

        user = self.profile_service.get_user(user_id)
        self.profile_service.delete_account(user)
        log_audit(self.logger, actor.id, 'admin_delete_user', f"user={user_id}")
        return user_id

    def delete_match(self, actor, match_id):
        require_admin(actor)

        self.matching_service.delete_match(match_id)
        log_audit(self.logger, actor.id, 'admin_delete_match', f"match={match_id}")
        return match_id

    @staticmethod
    def _role(value):
        role = str(value).strip().lower()
        if role not in ASSIGNABLE_ROLES:
            raise InvalidInput(f"role must be one of: {', '.join(ASSIGNABLE_ROLES)}")
        return role

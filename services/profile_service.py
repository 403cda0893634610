from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from auth.permissions import require_actor
from models.conversation import Conversation, Message
from models.match import Match
from models.photo import Photo
from models.user import User
from utils.errors import InternalError, InvalidInput, InvalidOperation, NotFound
from utils.logging_config import log_audit
from utils.security import RICH_TEXT_FIELDS, sanitize_input, validate_url

MAX_PHOTOS = 5

PROFILE_FIELDS = [
    'first_name', 'last_name', 'gender_interest', 'bio', 'school',
    'country', 'state', 'city', 'location'
]
REQUIRED_PROFILE_FIELDS = ['first_name', 'last_name', 'gender_interest']


class ProfileService:
    def __init__(self, db, like_service, logger):
        self.db = db
        self.like_service = like_service
        self.logger = logger

    def get_user(self, user_id):
        user = self.db.session.get(User, user_id)
        if not user:
            raise NotFound('User not found')
        return user

    def update_profile(self, actor, data):
        """Update the actor's own profile fields"""
        require_actor(actor)

        updates = {
            field: sanitize_input(str(data[field]), allow_html=field in RICH_TEXT_FIELDS)
            for field in PROFILE_FIELDS if data.get(field) is not None
        }
        for field in REQUIRED_PROFILE_FIELDS:
            if field in updates and not updates[field]:
                raise InvalidInput(f"{field} cannot be blank")

        for field, value in updates.items():
            setattr(actor, field, value)

        self._commit('Update profile')
        log_audit(self.logger, actor.id, 'update_profile', ', '.join(sorted(updates)))
        return actor

    def upload_photo(self, actor, url):
        """Append a photo URL at the end of the actor's photo order"""
        require_actor(actor)

        if not validate_url(url):
            raise InvalidInput('Photo url must be an http(s) URL')

        count = Photo.query.filter_by(user_id=actor.id).count()
        if count >= MAX_PHOTOS:
            raise InvalidOperation(f"Max {MAX_PHOTOS} photos allowed")

        photo = Photo(user_id=actor.id, url=url, position=count, is_primary=False)
        self.db.session.add(photo)
        self._commit('Upload photo')
        return photo

    def delete_photo(self, actor, photo_id):
        """Remove one of the actor's photos and close the gap in positions"""
        require_actor(actor)

        photo = self._own_photo(actor, photo_id)
        self.db.session.delete(photo)
        self.db.session.flush()

        remaining = Photo.query.filter_by(user_id=actor.id).order_by(
            Photo.position.asc(), Photo.id.asc()
        ).all()
        for index, remaining_photo in enumerate(remaining):
            remaining_photo.position = index

        self._commit('Delete photo')
        return photo_id

    def set_primary_photo(self, actor, photo_id):
        """Flag one photo as primary and clear the flag on the rest"""
        require_actor(actor)

        photo = self._own_photo(actor, photo_id)
        Photo.query.filter(
            Photo.user_id == actor.id,
            Photo.id != photo.id
        ).update({'is_primary': False}, synchronize_session='fetch')
        photo.is_primary = True

        self._commit('Set primary photo')
        return photo

    def delete_account(self, user):
        """Delete a user with their swipes, matches, conversations and photos"""
        user_id = user.id
        try:
            removed_likes = self.like_service.remove_likes_for_user(user_id)

            # Hidden (unmatched) pairs have no row; anything left has no backing likes
            Match.query.filter(
                or_(Match.user_one_id == user_id, Match.user_two_id == user_id)
            ).delete(synchronize_session='fetch')

            conversation_ids = [c.id for c in Conversation.query.filter(
                or_(Conversation.user_a_id == user_id, Conversation.user_b_id == user_id)
            ).all()]
            if conversation_ids:
                Message.query.filter(Message.conversation_id.in_(conversation_ids)).delete(
                    synchronize_session='fetch'
                )
                Conversation.query.filter(Conversation.id.in_(conversation_ids)).delete(
                    synchronize_session='fetch'
                )

            self.db.session.delete(user)
            self.db.session.commit()
        except SQLAlchemyError as e:
            self.db.session.rollback()
            self.logger.error(f"Delete account error: {str(e)}")
            raise InternalError('Failed to delete account') from e

        log_audit(self.logger, user_id, 'delete_account', f"likes_removed={removed_likes}")
        return user_id

    def _own_photo(self, actor, photo_id):
        photo = Photo.query.filter_by(id=photo_id, user_id=actor.id).first()
        if not photo:
            raise NotFound('Photo not found')
        return photo

    def _commit(self, action):
        try:
            self.db.session.commit()
        except SQLAlchemyError as e:
            self.db.session.rollback()
            self.logger.error(f"{action} error: {str(e)}")
            raise InternalError(f"{action} failed") from e

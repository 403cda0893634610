from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from models.conversation import Conversation, Message
from models.match import Match
from utils.errors import InternalError, InvalidInput, NotFound, Unauthorized
from utils.helpers import canonical_pair, utcnow
from utils.logging_config import log_audit
from utils.security import sanitize_input
from utils.upsert import insert_if_absent


class ConversationService:
    """Messaging between matched users.

    A conversation is created lazily on the first message of a match and is
    keyed on the same canonical pair as the match, so it outlives an unmatch
    and reappears if the pair matches again.
    """

    def __init__(self, db, logger):
        self.db = db
        self.logger = logger

    def get_or_create_conversation(self, match_id):
        match = self._get_match(match_id)
        try:
            conversation = self._conversation_for(match)
            self.db.session.commit()
        except SQLAlchemyError as e:
            self.db.session.rollback()
            self.logger.error(f"Get conversation error: {str(e)}")
            raise InternalError('Failed to open conversation') from e
        return conversation

    def post_message(self, conversation_id, sender_id, content):
        conversation = self.db.session.get(Conversation, conversation_id)
        if not conversation:
            raise NotFound('Conversation not found')

        try:
            message = self._append(conversation, sender_id, content)
            self.db.session.commit()
        except SQLAlchemyError as e:
            self.db.session.rollback()
            self.logger.error(f"Post message error: {str(e)}")
            raise InternalError('Failed to send message') from e
        return message

    def send_message(self, actor, match_id, content):
        """Message the other side of a match, opening the conversation if needed"""
        if actor is None:
            raise Unauthorized()

        match = self._get_match(match_id)
        if not match.includes_user(actor.id):
            raise Unauthorized('Not a participant in the match')
        self._check_content(content)

        try:
            conversation = self._conversation_for(match)
            message = self._append(conversation, actor.id, content)
            self.db.session.commit()
        except SQLAlchemyError as e:
            self.db.session.rollback()
            self.logger.error(f"Send message error: {str(e)}")
            raise InternalError('Failed to send message') from e

        log_audit(self.logger, actor.id, 'send_message', f"conversation={conversation.id}")
        return message

    def list_messages(self, conversation_id, viewer=None):
        """Messages oldest first"""
        conversation = self.db.session.get(Conversation, conversation_id)
        if not conversation:
            raise NotFound('Conversation not found')

        if viewer is not None and not (conversation.includes_user(viewer.id) or viewer.is_admin):
            raise Unauthorized('Not a participant in this conversation')

        return Message.query.filter_by(conversation_id=conversation.id).order_by(
            Message.created_at.asc(), Message.id.asc()
        ).all()

    def list_conversations(self, user_id):
        """Most recently active first"""
        return Conversation.query.filter(
            or_(Conversation.user_a_id == user_id, Conversation.user_b_id == user_id)
        ).order_by(Conversation.updated_at.desc(), Conversation.id.desc()).all()

    def _get_match(self, match_id):
        match = self.db.session.get(Match, match_id)
        if not match:
            raise NotFound('Match not found')
        return match

    def _conversation_for(self, match):
        a, b = canonical_pair(match.user_one_id, match.user_two_id)
        conversation, created = insert_if_absent(
            self.db.session, Conversation,
            index_elements=['user_a_id', 'user_b_id'],
            values={'user_a_id': a, 'user_b_id': b}
        )
        if created:
            self.logger.info(f"Conversation {conversation.id} opened for match {match.id}")
        return conversation

    def _append(self, conversation, sender_id, content):
        if not conversation.includes_user(sender_id):
            raise Unauthorized('Not a participant in this conversation')

        self._check_content(content)

        message = Message(
            conversation_id=conversation.id,
            sender_id=sender_id,
            content=sanitize_input(content),
            read=False,
            created_at=utcnow()
        )
        self.db.session.add(message)
        conversation.updated_at = message.created_at
        self.db.session.flush()
        return message

    @staticmethod
    def _check_content(content):
        if not isinstance(content, str) or not content.strip():
            raise InvalidInput('Message content cannot be empty')

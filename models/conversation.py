from dating_backend import db
from utils.helpers import format_datetime, utcnow


class Conversation(db.Model):
    """One per matched pair, canonical like Match (user_a_id < user_b_id)"""
    __tablename__ = 'conversations'

    id = db.Column(db.Integer, primary_key=True)
    user_a_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    user_b_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    # Last activity; bumped on every message
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    user_a = db.relationship('User', foreign_keys=[user_a_id])
    user_b = db.relationship('User', foreign_keys=[user_b_id])
    messages = db.relationship(
        'Message', backref='conversation', lazy='dynamic',
        order_by='Message.created_at', cascade='all, delete-orphan'
    )

    __table_args__ = (
        db.UniqueConstraint('user_a_id', 'user_b_id', name='uq_conversation_pair'),
        db.CheckConstraint('user_a_id < user_b_id', name='ck_conversation_canonical_order'),
    )

    def includes_user(self, user_id):
        return user_id in (self.user_a_id, self.user_b_id)

    @property
    def last_message(self):
        return self.messages.order_by(None).order_by(
            Message.created_at.desc(), Message.id.desc()
        ).first()

    def to_dict(self):
        last = self.last_message
        data = {
            'id': self.id,
            'user_a': self.user_a.to_dict() if self.user_a else None,
            'user_b': self.user_b.to_dict() if self.user_b else None,
            'last_message': last.to_dict() if last else None,
            'created_at': format_datetime(self.created_at),
            'updated_at': format_datetime(self.updated_at)
        }
        return data


class Message(db.Model):
    __tablename__ = 'messages'

    id = db.Column(db.Integer, primary_key=True)
    conversation_id = db.Column(db.Integer, db.ForeignKey('conversations.id'),
                                nullable=False, index=True)
    sender_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    content = db.Column(db.Text, nullable=False)
    read = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    sender = db.relationship('User', foreign_keys=[sender_id])

    def to_dict(self):
        return {
            'id': self.id,
            'conversation_id': self.conversation_id,
            'sender_id': self.sender_id,
            'content': self.content,
            'read': self.read,
            'created_at': format_datetime(self.created_at)
        }

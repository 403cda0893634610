from dating_backend import db
from utils.helpers import format_datetime, utcnow


class Like(db.Model):
    """Directed swipe: ``is_like`` True is interest, False is a pass"""
    __tablename__ = 'likes'

    id = db.Column(db.Integer, primary_key=True)
    liker_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    liked_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    is_like = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        db.UniqueConstraint('liker_id', 'liked_id', name='uq_like_pair'),
        db.CheckConstraint('liker_id <> liked_id', name='ck_like_not_self'),
    )

    def __repr__(self):
        return f'<Like {self.liker_id}->{self.liked_id} {self.is_like}>'

    def to_dict(self):
        return {
            'id': self.id,
            'liker_id': self.liker_id,
            'liked_id': self.liked_id,
            'is_like': self.is_like,
            'updated_at': format_datetime(self.updated_at)
        }

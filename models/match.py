from dating_backend import db
from utils.helpers import format_datetime, utcnow


class Match(db.Model):
    """Symmetric match, stored with user_one_id < user_two_id.

    Derived from the likes table; see MatchingService.reconcile.
    """
    __tablename__ = 'matches'

    id = db.Column(db.Integer, primary_key=True)
    user_one_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    user_two_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    user_one = db.relationship('User', foreign_keys=[user_one_id])
    user_two = db.relationship('User', foreign_keys=[user_two_id])

    __table_args__ = (
        db.UniqueConstraint('user_one_id', 'user_two_id', name='uq_match_pair'),
        db.CheckConstraint('user_one_id < user_two_id', name='ck_match_canonical_order'),
    )

    @property
    def user_ids(self):
        return (self.user_one_id, self.user_two_id)

    def includes_user(self, user_id):
        return user_id in self.user_ids

    def other_user(self, user_id):
        return self.user_two if self.user_one_id == user_id else self.user_one

    def __repr__(self):
        return f'<Match {self.user_one_id}<->{self.user_two_id}>'

    def to_dict(self, viewer_id=None):
        data = {
            'id': self.id,
            'user_one': self.user_one.to_dict() if self.user_one else None,
            'user_two': self.user_two.to_dict() if self.user_two else None,
            'created_at': format_datetime(self.created_at),
            'updated_at': format_datetime(self.updated_at)
        }
        if viewer_id is not None and self.includes_user(viewer_id):
            data['other_user'] = self.other_user(viewer_id).to_dict()
        return data

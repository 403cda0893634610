from dataclasses import dataclass
from typing import Optional

from sqlalchemy import and_, or_, select
from sqlalchemy.exc import SQLAlchemyError

from models.like import Like
from models.match import Match
from models.user import User
from utils.errors import InternalError, InvalidInput, InvalidOperation, NotFound, Unauthorized
from utils.helpers import canonical_pair
from utils.logging_config import log_audit
from utils.upsert import insert_if_absent


@dataclass
class ReconcileResult:
    match: Optional[Match]
    created: bool = False
    destroyed: bool = False


def pair_lock_statement(lo, hi):
    """Row locks on both users of a pair, lower id first.

    FOR NO KEY UPDATE so it does not wait on the KEY SHARE locks that the
    likes' foreign keys hold on the same rows.
    """
    return select(User.id).where(User.id.in_((lo, hi))).order_by(User.id).with_for_update(
        key_share=True
    )


class MatchingService:
    """Keeps the matches table in step with the likes table.

    A match row exists for a pair exactly when both directed likes are
    ``is_like=True``. ``unmatch`` is the one exception: it removes the row and
    leaves both likes alone, so the pair stays hidden until one of them swipes
    again and ``reconcile`` runs.
    """

    def __init__(self, db, logger):
        self.db = db
        self.logger = logger

    def reconcile(self, user_a_id, user_b_id):
        """Create or destroy the match for a pair from current like state.

        Idempotent. Runs inside the caller's transaction and does not commit.
        """
        lo, hi = canonical_pair(user_a_id, user_b_id)
        if lo == hi:
            raise InvalidOperation('A match needs two different users')

        # Reconciles of one pair run one at a time; the count below then sees
        # the other side's committed like
        self.db.session.execute(pair_lock_statement(lo, hi)).all()

        mutual = Like.query.filter(
            or_(
                and_(Like.liker_id == lo, Like.liked_id == hi),
                and_(Like.liker_id == hi, Like.liked_id == lo)
            ),
            Like.is_like.is_(True)
        ).count() == 2

        if mutual:
            match, created = insert_if_absent(
                self.db.session, Match,
                index_elements=['user_one_id', 'user_two_id'],
                values={'user_one_id': lo, 'user_two_id': hi}
            )
            if created:
                self.logger.info(f"Match {match.id} created for users {lo} and {hi}")
            return ReconcileResult(match=match, created=created)

        deleted = Match.query.filter_by(user_one_id=lo, user_two_id=hi).delete(
            synchronize_session='fetch'
        )
        if deleted:
            self.logger.info(f"Match for users {lo} and {hi} removed, interest no longer mutual")
        return ReconcileResult(match=None, destroyed=bool(deleted))

    def find_match(self, user_a_id, user_b_id):
        lo, hi = canonical_pair(user_a_id, user_b_id)
        return Match.query.filter_by(user_one_id=lo, user_two_id=hi).first()

    def list_matches(self, user_id, limit=50, offset=0):
        """User's matches, newest first"""
        return Match.query.filter(
            or_(Match.user_one_id == user_id, Match.user_two_id == user_id)
        ).order_by(Match.created_at.desc(), Match.id.desc()).limit(limit).offset(offset).all()

    def unmatch(self, actor, match_id=None, target_user_id=None):
        """Remove a match the actor belongs to. Likes stay untouched."""
        if actor is None:
            raise Unauthorized()

        if match_id is not None:
            match = self.db.session.get(Match, match_id)
        elif target_user_id is not None:
            match = self.find_match(actor.id, target_user_id)
        else:
            raise InvalidInput('match_id or target_user_id is required')

        if not match:
            raise NotFound('Match not found')

        if not match.includes_user(actor.id):
            raise Unauthorized('Not authorized to unmatch')

        match_id, user_ids = match.id, match.user_ids
        self._destroy(match, 'Unmatch')
        log_audit(self.logger, actor.id, 'unmatch', f"match={match_id} users={user_ids}")
        return match_id

    def delete_match(self, match_id):
        """Administrative removal"""
        match = self.db.session.get(Match, match_id)
        if not match:
            raise NotFound('Match not found')

        self._destroy(match, 'Delete match')
        return match_id

    def _destroy(self, match, action):
        match_id = match.id
        try:
            self.db.session.delete(match)
            self.db.session.commit()
        except SQLAlchemyError as e:
            self.db.session.rollback()
            self.logger.error(f"{action} error: {str(e)}")
            raise InternalError(f'Failed to remove match {match_id}') from e

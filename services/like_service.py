from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from models.like import Like
from models.user import User
from utils.errors import InternalError, InvalidOperation, NotFound, Unauthorized
from utils.helpers import canonical_pair
from utils.logging_config import log_audit
from utils.upsert import insert_if_absent


class LikeService:
    """Ledger of directed swipes. Every write re-runs match reconciliation."""

    def __init__(self, db, matching_service, logger):
        self.db = db
        self.matching = matching_service
        self.logger = logger

    def record_interest(self, actor_id, target_id, interested):
        """Create or update the actor's like/pass on target.

        Returns ``(like, reconcile_result)``. Repeating the same swipe leaves a
        single row and still re-checks reciprocity.
        """
        if actor_id == target_id:
            raise InvalidOperation('You cannot swipe on yourself')

        if not self.db.session.get(User, target_id):
            raise NotFound('Target user not found')

        try:
            like, created = insert_if_absent(
                self.db.session, Like,
                index_elements=['liker_id', 'liked_id'],
                values={'liker_id': actor_id, 'liked_id': target_id, 'is_like': interested}
            )
            if not created and like.is_like != interested:
                like.is_like = interested

            result = self.matching.reconcile(actor_id, target_id)
            self.db.session.commit()
        except SQLAlchemyError as e:
            self.db.session.rollback()
            self.logger.error(f"Record interest error: {str(e)}")
            raise InternalError('Failed to record swipe') from e

        return like, result

    def like_user(self, actor, target_user_id):
        if actor is None:
            raise Unauthorized()

        like, result = self.record_interest(actor.id, target_user_id, True)
        log_audit(self.logger, actor.id, 'like', f"target={target_user_id} matched={result.match is not None}")
        return like, result

    def dislike_user(self, actor, target_user_id):
        if actor is None:
            raise Unauthorized()

        like, result = self.record_interest(actor.id, target_user_id, False)
        log_audit(self.logger, actor.id, 'dislike', f"target={target_user_id}")
        return like, result

    def remove_likes_for_user(self, user_id):
        """Destroy every like given or received by a user.

        Each affected pair is reconciled. Caller commits.
        """
        likes = Like.query.filter(
            or_(Like.liker_id == user_id, Like.liked_id == user_id)
        ).all()
        pairs = {canonical_pair(like.liker_id, like.liked_id) for like in likes}

        for like in likes:
            self.db.session.delete(like)
        self.db.session.flush()

        for lo, hi in sorted(pairs):
            self.matching.reconcile(lo, hi)

        return len(likes)

from sqlalchemy import func, select

from models.like import Like
from models.match import Match
from models.user import User
from utils.errors import NotFound

DEFAULT_CANDIDATE_LIMIT = 25
MAX_CANDIDATE_LIMIT = 100

# gender_interest values that switch the gender filter off
OPEN_GENDER_INTERESTS = ('', 'both')


class CandidateService:
    def __init__(self, db, logger):
        self.db = db
        self.logger = logger

    def next_candidates(self, user_id, limit=DEFAULT_CANDIDATE_LIMIT):
        """Profiles the user can swipe on next.

        Leaves out the user, everyone they already liked and everyone they are
        matched with. Passed (disliked) profiles come back around. The result
        is recomputed on every call; there is no cursor.
        """
        user = self.db.session.get(User, user_id)
        if not user:
            raise NotFound('User not found')

        liked_ids = select(Like.liked_id).where(
            Like.liker_id == user_id,
            Like.is_like.is_(True)
        )
        matched_as_one = select(Match.user_two_id).where(Match.user_one_id == user_id)
        matched_as_two = select(Match.user_one_id).where(Match.user_two_id == user_id)

        query = User.query.filter(
            User.id != user_id,
            User.id.not_in(liked_ids),
            User.id.not_in(matched_as_one),
            User.id.not_in(matched_as_two)
        )

        interest = (user.gender_interest or '').strip().lower()
        if interest not in OPEN_GENDER_INTERESTS:
            query = query.filter(func.lower(func.trim(User.gender)) == interest)

        candidates = query.order_by(User.id.asc()).limit(limit).all()
        self.logger.debug(f"User {user_id} candidates: {[c.id for c in candidates]}")
        return candidates

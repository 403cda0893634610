from dataclasses import asdict, dataclass
from typing import Optional

from sqlalchemy import func, select, union_all

from models.conversation import Message
from models.match import Match
from models.user import User
from utils.helpers import format_datetime, start_of_day, start_of_week, utcnow

DASHBOARD_CACHE_KEY = 'admin_dashboard'
DASHBOARD_CACHE_TTL = 60


@dataclass
class AdminDashboard:
    total_users: int
    total_matches: int
    total_messages: int
    users_today: int
    matches_today: int
    messages_today: int
    users_this_week: int
    matches_this_week: int
    messages_this_week: int
    average_matches_per_user: float
    average_messages_per_match: float

    def to_dict(self):
        return asdict(self)


@dataclass
class UserStats:
    id: int
    first_name: str
    last_name: str
    email: str
    primary_photo_url: Optional[str]
    match_count: int
    created_at: Optional[str]
    gender: str
    age: Optional[int]
    city: Optional[str]
    state: Optional[str]
    country: Optional[str]

    def to_dict(self):
        return asdict(self)


class StatsService:
    """Read-only reporting for the admin surface"""

    def __init__(self, db, cache, logger):
        self.db = db
        self.cache = cache
        self.logger = logger

    def get_admin_dashboard(self, now=None, use_cache=True):
        if use_cache:
            cached = self.cache.get(DASHBOARD_CACHE_KEY)
            if cached:
                return AdminDashboard(**cached)

        now = now or utcnow()
        today = start_of_day(now)
        week = start_of_week(now)

        total_users = User.query.count()
        total_matches = Match.query.count()
        total_messages = Message.query.count()

        dashboard = AdminDashboard(
            total_users=total_users,
            total_matches=total_matches,
            total_messages=total_messages,
            users_today=User.query.filter(User.created_at >= today).count(),
            matches_today=Match.query.filter(Match.created_at >= today).count(),
            messages_today=Message.query.filter(Message.created_at >= today).count(),
            users_this_week=User.query.filter(User.created_at >= week).count(),
            matches_this_week=Match.query.filter(Match.created_at >= week).count(),
            messages_this_week=Message.query.filter(Message.created_at >= week).count(),
            average_matches_per_user=_ratio(total_matches, total_users),
            average_messages_per_match=_ratio(total_messages, total_matches),
        )

        if use_cache:
            self.cache.set(DASHBOARD_CACHE_KEY, dashboard.to_dict(), ttl=DASHBOARD_CACHE_TTL)
        return dashboard

    def invalidate_dashboard(self):
        """Drop the cached dashboard so the next read recounts"""
        self.cache.delete(DASHBOARD_CACHE_KEY)

    def get_user_stats(self, limit=50, offset=0):
        """Per-user rows with match counts, newest users first"""
        participants = union_all(
            select(Match.user_one_id.label('user_id')),
            select(Match.user_two_id.label('user_id'))
        ).subquery()
        counts = select(
            participants.c.user_id,
            func.count().label('match_count')
        ).group_by(participants.c.user_id).subquery()

        rows = self.db.session.query(
            User, func.coalesce(counts.c.match_count, 0)
        ).outerjoin(
            counts, counts.c.user_id == User.id
        ).order_by(User.created_at.desc(), User.id.desc()).limit(limit).offset(offset).all()

        return [
            UserStats(
                id=user.id,
                first_name=user.first_name,
                last_name=user.last_name,
                email=user.email,
                primary_photo_url=user.primary_photo_url,
                match_count=int(match_count),
                created_at=format_datetime(user.created_at),
                gender=user.gender,
                age=user.age(),
                city=user.city,
                state=user.state,
                country=user.country,
            )
            for user, match_count in rows
        ]


def _ratio(numerator, denominator):
    if not denominator:
        return 0.0
    return round(numerator / denominator, 2)

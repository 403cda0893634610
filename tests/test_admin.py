"""
Tests for the admin surface: reporting and user management
"""
import json
from datetime import date, datetime, timedelta

from dating_backend import db
from models.match import Match
from models.user import User
from services.stats_service import DASHBOARD_CACHE_KEY, StatsService
from utils.cache_manager import CacheManager
from utils.helpers import start_of_week


def mutual(ops, a, b):
    ops.execute('like_user', {'target_user_id': b.id}, a)
    ops.execute('like_user', {'target_user_id': a.id}, b)


class TestAdminDashboard:
    def test_requires_admin(self, ops, make_user):
        user = make_user()

        assert ops.execute('admin_dashboard', {}, user)['error']['kind'] == 'Unauthorized'
        assert ops.execute('admin_dashboard', {}, None)['error']['kind'] == 'Unauthorized'

    def test_counts_and_averages(self, ops, make_user):
        admin = make_user(role='admin')
        a, b, c = make_user(), make_user(), make_user()
        mutual(ops, a, b)
        mutual(ops, a, c)
        match = Match.query.first()
        ops.execute('send_message', {'match_id': match.id, 'content': 'one'}, a)
        ops.execute('send_message', {'match_id': match.id, 'content': 'two'}, a)
        ops.execute('send_message', {'match_id': match.id, 'content': 'three'}, a)

        data = ops.execute('admin_dashboard', {}, admin)['data']

        assert data['total_users'] == 4
        assert data['total_matches'] == 2
        assert data['total_messages'] == 3
        assert data['users_today'] == 4
        assert data['matches_this_week'] == 2
        assert data['average_matches_per_user'] == 0.5
        assert data['average_messages_per_match'] == 1.5

    def test_windows_exclude_older_rows(self, app, make_user, mock_redis):
        recent = make_user()
        old = make_user()
        recent.created_at = datetime(2024, 6, 12, 10, 0)
        old.created_at = datetime(2024, 1, 1, 9, 0)
        db.session.commit()
        service = StatsService(db, CacheManager(mock_redis), app.logger)

        # Wednesday; the week starts Monday 2024-06-10
        dashboard = service.get_admin_dashboard(now=datetime(2024, 6, 12, 15, 0), use_cache=False)

        assert dashboard.total_users == 2
        assert dashboard.users_today == 1
        assert dashboard.users_this_week == 1

    def test_empty_store_has_zero_averages(self, app, mock_redis):
        service = StatsService(db, CacheManager(mock_redis), app.logger)

        dashboard = service.get_admin_dashboard(use_cache=False)

        assert dashboard.average_matches_per_user == 0.0
        assert dashboard.average_messages_per_match == 0.0

    def test_dashboard_served_from_cache(self, app, mock_redis):
        cached = {
            'total_users': 7, 'total_matches': 1, 'total_messages': 0,
            'users_today': 0, 'matches_today': 0, 'messages_today': 0,
            'users_this_week': 0, 'matches_this_week': 0, 'messages_this_week': 0,
            'average_matches_per_user': 0.14, 'average_messages_per_match': 0.0,
        }
        mock_redis.get.return_value = json.dumps(cached)
        service = StatsService(db, CacheManager(mock_redis), app.logger)

        assert service.get_admin_dashboard().to_dict() == cached
        mock_redis.get.assert_called_with(f'kindred:{DASHBOARD_CACHE_KEY}')

    def test_fresh_dashboard_written_to_cache(self, app, mock_redis):
        service = StatsService(db, CacheManager(mock_redis), app.logger)

        service.get_admin_dashboard()

        key, ttl, _ = mock_redis.setex.call_args[0]
        assert key == f'kindred:{DASHBOARD_CACHE_KEY}'
        assert ttl == 60


class TestAdminUserStats:
    def test_match_counts_per_user(self, ops, make_user):
        admin = make_user(role='admin')
        a, b, c = make_user(), make_user(), make_user()
        mutual(ops, a, b)
        mutual(ops, a, c)

        rows = ops.execute('admin_user_stats', {'limit': 10}, admin)['data']

        counts = {row['id']: row['match_count'] for row in rows}
        assert counts == {admin.id: 0, a.id: 2, b.id: 1, c.id: 1}
        assert all('email' in row for row in rows)

    def test_requires_admin(self, ops, make_user):
        user = make_user()

        assert ops.execute('admin_user_stats', {}, user)['error']['kind'] == 'Unauthorized'


class TestAdminUsers:
    def test_create_user_with_role(self, ops, make_user, registration_data):
        admin = make_user(role='superadmin')
        registration_data['role'] = 'Admin'

        result = ops.execute('admin_create_user', registration_data, admin)

        assert result['data']['user']['role'] == 'admin'

    def test_create_user_rejects_unknown_role(self, ops, make_user, registration_data):
        admin = make_user(role='admin')
        registration_data['role'] = 'overlord'

        result = ops.execute('admin_create_user', registration_data, admin)

        assert result['error']['kind'] == 'InvalidOperation'

    def test_non_admin_cannot_create(self, ops, make_user, registration_data):
        user = make_user()

        result = ops.execute('admin_create_user', registration_data, user)

        assert result['error']['kind'] == 'Unauthorized'
        assert User.query.count() == 1

    def test_update_user_fields(self, ops, make_user):
        admin = make_user(role='admin')
        user = make_user()

        result = ops.execute('admin_update_user', {
            'id': user.id, 'city': 'Austin', 'birthdate': '2000-01-02', 'bio': None
        }, admin)

        assert result['data']['user']['city'] == 'Austin'
        assert User.query.filter_by(id=user.id).one().birthdate == date(2000, 1, 2)

    def test_update_user_email_clash(self, ops, make_user):
        admin = make_user(role='admin', email='admin@example.com')
        user = make_user()

        result = ops.execute('admin_update_user', {'id': user.id, 'email': 'ADMIN@example.com'}, admin)

        assert result['error']['kind'] == 'InvalidOperation'

    def test_update_unknown_user(self, ops, make_user):
        admin = make_user(role='admin')

        result = ops.execute('admin_update_user', {'id': 404, 'city': 'X'}, admin)

        assert result['error']['kind'] == 'NotFound'

    def test_delete_user_cascades(self, ops, make_user):
        admin = make_user(role='admin')
        a, b = make_user(), make_user()
        mutual(ops, a, b)
        a_id = a.id

        result = ops.execute('admin_delete_user', {'id': a_id}, admin)

        assert result['data'] == {'success': True}
        assert User.query.filter_by(id=a_id).first() is None
        assert Match.query.count() == 0

    def test_admin_writes_drop_cached_dashboard(self, ops, make_user, mock_redis, registration_data):
        admin = make_user(role='admin')
        a, b = make_user(), make_user()
        mutual(ops, a, b)
        match = Match.query.one()
        key = f'kindred:{DASHBOARD_CACHE_KEY}'

        ops.execute('admin_delete_match', {'id': match.id}, admin)
        mock_redis.delete.assert_called_once_with(key)

        ops.execute('admin_create_user', registration_data, admin)
        ops.execute('admin_delete_user', {'id': a.id}, admin)
        assert mock_redis.delete.call_count == 3

    def test_rejected_admin_write_keeps_cache(self, ops, make_user, mock_redis):
        user = make_user()

        ops.execute('admin_delete_match', {'id': 1}, user)

        mock_redis.delete.assert_not_called()

    def test_list_matches_of_another_user(self, ops, make_user):
        admin = make_user(role='admin')
        a, b, c = make_user(), make_user(), make_user()
        mutual(ops, a, b)

        assert len(ops.execute('matches', {'user_id': a.id}, admin)['data']) == 1
        assert ops.execute('matches', {'user_id': a.id}, c)['error']['kind'] == 'Unauthorized'
        assert len(ops.execute('matches', {}, b)['data']) == 1


def test_week_window_starts_monday():
    sunday = datetime(2024, 6, 16, 23, 59)

    assert start_of_week(sunday) == datetime(2024, 6, 10)
    assert start_of_week(sunday + timedelta(minutes=1)) == datetime(2024, 6, 17)

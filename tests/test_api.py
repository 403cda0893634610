"""
HTTP tests for the Flask routes
"""
from datetime import datetime

import dating_backend
from models.match import Match


def call(client, operation, arguments=None, headers=None):
    return client.post(
        '/api/operations',
        json={'operation': operation, 'arguments': arguments or {}},
        headers=headers or {}
    )


class TestHealth:
    def test_health(self, client):
        response = client.get('/api/health')

        assert response.status_code == 200
        assert response.get_json()['status'] == 'healthy'
        assert response.headers['X-Request-ID']

    def test_health_timestamp_from_utc_helper(self, client, monkeypatch):
        monkeypatch.setattr(dating_backend, 'utcnow', lambda: datetime(2024, 3, 1, 9, 30))

        response = client.get('/api/health')

        assert response.get_json()['timestamp'] == '2024-03-01T09:30:00'

    def test_unknown_route_is_json_404(self, client):
        response = client.get('/api/nowhere')

        assert response.status_code == 404
        assert response.get_json()['error'] == 'Resource not found'


class TestOperationEndpoint:
    def test_anonymous_is_401(self, client):
        response = call(client, 'current_user')

        assert response.status_code == 401
        assert response.get_json()['error']['kind'] == 'Unauthorized'

    def test_authenticated_query(self, client, make_user, auth_header):
        user = make_user(email='me@example.com')

        response = call(client, 'current_user', headers=auth_header(user))

        assert response.status_code == 200
        assert response.get_json()['data']['email'] == 'me@example.com'

    def test_bad_token_is_anonymous(self, client):
        response = call(client, 'current_user', headers={'Authorization': 'Bearer nonsense'})

        assert response.status_code == 401

    def test_non_admin_is_403(self, client, make_user, auth_header):
        user = make_user()

        response = call(client, 'admin_dashboard', headers=auth_header(user))

        assert response.status_code == 403
        assert response.get_json()['error']['kind'] == 'Unauthorized'

    def test_unknown_operation_is_400(self, client):
        response = call(client, 'launch_rockets')

        assert response.status_code == 400
        assert response.get_json()['error']['kind'] == 'InvalidOperation'

    def test_missing_operation_name_is_400(self, client):
        response = client.post('/api/operations', json={'arguments': {}})

        assert response.status_code == 400

    def test_not_found_is_404(self, client, make_user, auth_header):
        user = make_user()

        response = call(client, 'like_user', {'target_user_id': 9999}, auth_header(user))

        assert response.status_code == 404

    def test_like_flow_over_http(self, client, make_user, auth_header):
        a, b = make_user(), make_user()

        call(client, 'like_user', {'target_user_id': b.id}, auth_header(a))
        response = call(client, 'like_user', {'target_user_id': a.id}, auth_header(b))

        body = response.get_json()
        assert response.status_code == 200
        assert body['data']['matched'] is True
        assert Match.query.count() == 1


class TestAuthRoutes:
    def test_register_then_login(self, client, registration_data):
        registered = client.post('/api/auth/register', json=registration_data)
        assert registered.status_code == 201
        assert registered.get_json()['token']

        response = client.post('/api/auth/login', json={
            'email': registration_data['email'],
            'password': registration_data['password']
        })

        assert response.status_code == 200
        assert response.get_json()['user']['email'] == 'dana@example.com'

    def test_bad_login_is_401(self, client):
        response = client.post('/api/auth/login', json={'email': 'x@example.com', 'password': 'y' * 8})

        assert response.status_code == 401

    def test_invalid_registration_is_400(self, client):
        response = client.post('/api/auth/register', json={'email': 'x@example.com'})

        assert response.status_code == 400
        assert response.get_json()['error']['kind'] == 'InvalidOperation'


class TestAdminRoute:
    def test_dashboard_for_admin(self, client, make_user, auth_header):
        admin = make_user(role='admin')

        response = client.get('/api/admin/dashboard', headers=auth_header(admin))

        assert response.status_code == 200
        assert response.get_json()['total_users'] == 1

    def test_dashboard_forbidden_for_user(self, client, make_user, auth_header):
        user = make_user()

        response = client.get('/api/admin/dashboard', headers=auth_header(user))

        assert response.status_code == 403

    def test_dashboard_needs_token(self, client):
        assert client.get('/api/admin/dashboard').status_code == 401


class TestMalformedCredentials:
    def test_numeric_email_login_is_400(self, client):
        response = client.post('/api/auth/login', json={'email': 12345, 'password': 'whatever1'})

        assert response.status_code == 400
        assert response.get_json()['error']['kind'] == 'InvalidOperation'

    def test_numeric_email_register_is_400(self, client, registration_data):
        registration_data['email'] = 12345

        response = client.post('/api/auth/register', json=registration_data)

        assert response.status_code == 400

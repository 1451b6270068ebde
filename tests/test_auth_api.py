from bson import ObjectId

import database
from tests.helpers import DEFAULT_PASSWORD, auth_headers, insert_user


class TestRegisterAndLogin:
    def test_register_creates_user_role(self, client):
        response = client.post(
            '/api/auth/register',
            json={'name': 'New Buyer', 'email': 'New@Test.com', 'password': DEFAULT_PASSWORD},
        )

        assert response.status_code == 201
        user = response.json()['data']['user']
        assert user['email'] == 'new@test.com'
        assert user['role'] == 'user'
        assert 'password' not in user
        stored = database.users.find_one({'email': 'new@test.com'})
        assert stored['password'] != DEFAULT_PASSWORD

    def test_register_duplicate_email(self, client, user):
        response = client.post(
            '/api/auth/register',
            json={'name': 'Again', 'email': user['email'], 'password': DEFAULT_PASSWORD},
        )

        assert response.status_code == 400
        assert response.json() == {
            'status': 'error',
            'message': 'User already exists with this email address',
        }

    def test_register_validation_errors(self, client):
        response = client.post('/api/auth/register', json={'name': 'X', 'email': 'nope', 'password': '1'})

        body = response.json()
        assert response.status_code == 400
        assert body['message'] == 'Validation failed'
        assert {e['field'] for e in body['errors']} == {'name', 'email', 'password'}

    def test_register_admin_requires_admin(self, client, user, admin):
        payload = {'name': 'Second Admin', 'email': 'admin2@test.com', 'password': DEFAULT_PASSWORD}

        assert client.post('/api/auth/register-admin', json=payload, headers=auth_headers(user)).status_code == 403

        response = client.post('/api/auth/register-admin', json=payload, headers=auth_headers(admin))
        assert response.status_code == 201
        assert response.json()['data']['user']['role'] == 'admin'

    def test_login_returns_user_id(self, client, user):
        response = client.post('/api/auth/login', json={'email': user['email'], 'password': DEFAULT_PASSWORD})

        assert response.status_code == 200
        assert response.json()['data']['user']['id'] == str(user['_id'])
        assert database.users.find_one({'_id': user['_id']})['last_login'] is not None

    def test_login_wrong_password(self, client, user):
        response = client.post('/api/auth/login', json={'email': user['email'], 'password': 'wrong-one'})

        assert response.status_code == 401
        assert response.json()['message'] == 'Invalid email or password'

    def test_login_deactivated_account(self, client):
        inactive = insert_user('inactive@test.com', is_active=False)

        response = client.post('/api/auth/login', json={'email': inactive['email'], 'password': DEFAULT_PASSWORD})

        assert response.status_code == 401


class TestCurrentUser:
    def test_missing_header(self, client):
        response = client.get('/api/auth/me')

        assert response.status_code == 401
        assert response.json()['status'] == 'error'

    def test_malformed_header(self, client):
        assert client.get('/api/auth/me', headers={'X-User-ID': 'abc'}).status_code == 401

    def test_unknown_user(self, client):
        assert client.get('/api/auth/me', headers={'X-User-ID': str(ObjectId())}).status_code == 401

    def test_me(self, client, user):
        response = client.get('/api/auth/me', headers=auth_headers(user))

        assert response.status_code == 200
        profile = response.json()['data']['user']
        assert profile['email'] == user['email']
        assert profile['booking_count'] == 0

    def test_update_profile(self, client, user, other_user):
        taken = client.put('/api/auth/me', json={'email': other_user['email']}, headers=auth_headers(user))
        assert taken.status_code == 400

        response = client.put('/api/auth/me', json={'name': 'Renamed Buyer'}, headers=auth_headers(user))
        assert response.status_code == 200
        assert response.json()['data']['user']['name'] == 'Renamed Buyer'

    def test_change_password(self, client, user):
        wrong = client.put(
            '/api/auth/change-password',
            json={'current_password': 'bad', 'new_password': 'n3wpass', 'confirm_password': 'n3wpass'},
            headers=auth_headers(user),
        )
        assert wrong.status_code == 400

        mismatch = client.put(
            '/api/auth/change-password',
            json={'current_password': DEFAULT_PASSWORD, 'new_password': 'n3wpass', 'confirm_password': 'other'},
            headers=auth_headers(user),
        )
        assert mismatch.status_code == 400

        ok = client.put(
            '/api/auth/change-password',
            json={'current_password': DEFAULT_PASSWORD, 'new_password': 'n3wpass', 'confirm_password': 'n3wpass'},
            headers=auth_headers(user),
        )
        assert ok.status_code == 200
        login = client.post('/api/auth/login', json={'email': user['email'], 'password': 'n3wpass'})
        assert login.status_code == 200

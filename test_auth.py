"""
Authentication tests: token issuing, the bearer-token gate and startup checks

Run with: pytest test_auth.py -v
"""

import json
from datetime import datetime, timedelta, timezone

import jwt as pyjwt
import pytest

from app import create_app
from config.settings import TestingConfig
from conftest import ADMIN_PASSWORD, STAFF_PASSWORD, bearer
from extensions import db, shutdown_extensions
from models.user import Admin, Staff
from utils.errors import (
    ConfigurationError,
    ExpiredToken,
    ForbiddenRole,
    InvalidToken,
    MalformedPayload,
    MissingCredential,
)
from utils.rbac import ADMIN, STAFF, Principal, authorize


def _raw_token(app, claims, secret=None, expires_in=timedelta(hours=1)):
    now = datetime.now(timezone.utc)
    payload = {'iat': now, 'nbf': now, 'exp': now + expires_in, 'type': 'access'}
    payload.update(claims)
    return pyjwt.encode(payload, secret or app.config['JWT_SECRET_KEY'], algorithm='HS256')


class TestLogin:
    """POST /api/auth/login"""

    def test_login_success(self, client, staff):
        response = client.post('/api/auth/login', json={
            'email': 'staff1@example.com',
            'password': STAFF_PASSWORD
        })

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['user'] == {'id': 7, 'email': 'staff1@example.com', 'role': 'staff'}
        assert data['token']

    def test_login_token_claims(self, app, client, admin):
        response = client.post('/api/auth/login', json={
            'email': 'admin@example.com',
            'password': ADMIN_PASSWORD
        })

        token = json.loads(response.data)['token']
        claims = pyjwt.decode(token, app.config['JWT_SECRET_KEY'], algorithms=['HS256'])
        assert claims['sub'] == str(admin.id)
        assert claims['email'] == 'admin@example.com'
        assert claims['role'] == 'admin'
        assert claims['exp'] - claims['iat'] == 3600

    def test_login_email_is_case_insensitive(self, client, staff):
        response = client.post('/api/auth/login', json={
            'email': '  Staff1@Example.COM ',
            'password': STAFF_PASSWORD
        })

        assert response.status_code == 200
        assert json.loads(response.data)['user']['id'] == staff.id

    def test_login_prefers_admin_account(self, client, admin):
        db.session.add(Staff(email='admin@example.com', password=ADMIN_PASSWORD))
        db.session.commit()

        response = client.post('/api/auth/login', json={
            'email': 'admin@example.com',
            'password': ADMIN_PASSWORD
        })

        assert response.status_code == 200
        assert json.loads(response.data)['user']['role'] == 'admin'

    def test_login_wrong_password(self, client, staff):
        response = client.post('/api/auth/login', json={
            'email': 'staff1@example.com',
            'password': 'wrong'
        })

        assert response.status_code == 401
        assert json.loads(response.data) == {'message': 'Invalid credentials'}

    def test_login_unknown_email_looks_like_wrong_password(self, client, staff):
        response = client.post('/api/auth/login', json={
            'email': 'nobody@example.com',
            'password': 'whatever'
        })

        assert response.status_code == 401
        assert json.loads(response.data) == {'message': 'Invalid credentials'}

    def test_login_inactive_account(self, client):
        db.session.add(Staff(email='gone@example.com', password=STAFF_PASSWORD, is_active=False))
        db.session.commit()

        response = client.post('/api/auth/login', json={
            'email': 'gone@example.com',
            'password': STAFF_PASSWORD
        })

        assert response.status_code == 401

    def test_login_missing_fields(self, client):
        response = client.post('/api/auth/login', json={'email': 'staff1@example.com'})
        assert response.status_code == 400
        assert json.loads(response.data) == {'error': 'password is required'}

        response = client.post('/api/auth/login', json={'password': 'x'})
        assert response.status_code == 400

    def test_login_non_json_body(self, client):
        response = client.post('/api/auth/login', data='email=a', content_type='text/plain')
        assert response.status_code == 400

    def test_me_returns_token_principal(self, client, staff_headers):
        response = client.get('/api/auth/me', headers=staff_headers)

        assert response.status_code == 200
        assert json.loads(response.data)['user']['id'] == 7


class TestGate:
    """The single authorization procedure every protected route uses"""

    def _authorize(self, app, headers, roles=(ADMIN, STAFF)):
        with app.test_request_context('/api/sales', headers=headers):
            return authorize(roles)

    def test_valid_token(self, app, staff):
        principal = self._authorize(app, bearer(staff))
        assert principal == Principal(id=7, email='staff1@example.com', role=STAFF)

    def test_header_name_is_case_insensitive(self, app, staff):
        token = bearer(staff)['Authorization']
        principal = self._authorize(app, {'authorization': token})
        assert principal.id == 7

    def test_missing_header(self, app):
        with pytest.raises(MissingCredential):
            self._authorize(app, {})

    @pytest.mark.parametrize('value', ['Bearer', 'Bearer ', 'Token abc.def.ghi', 'abc.def.ghi'])
    def test_malformed_header(self, app, value):
        with pytest.raises(MissingCredential):
            self._authorize(app, {'Authorization': value})

    def test_garbage_token(self, app):
        with pytest.raises(InvalidToken):
            self._authorize(app, {'Authorization': 'Bearer not-a-jwt'})

    def test_bad_signature(self, app):
        token = _raw_token(app, {'sub': '1', 'email': 'a@b.c', 'role': 'admin'},
                           secret='some-other-secret-that-is-long-enough')
        with pytest.raises(InvalidToken):
            self._authorize(app, {'Authorization': f'Bearer {token}'})

    def test_expired_token(self, app, staff):
        headers = bearer(staff, expires_delta=timedelta(seconds=-10))
        with pytest.raises(ExpiredToken):
            self._authorize(app, headers)

    def test_missing_role_claim(self, app):
        token = _raw_token(app, {'sub': '7', 'email': 'staff1@example.com'})
        with pytest.raises(MalformedPayload):
            self._authorize(app, {'Authorization': f'Bearer {token}'})

    def test_non_numeric_subject(self, app):
        token = _raw_token(app, {'sub': 'abc', 'email': 'x@example.com', 'role': 'staff'})
        with pytest.raises(MalformedPayload):
            self._authorize(app, {'Authorization': f'Bearer {token}'})

    def test_role_outside_allowed_set(self, app, staff):
        with pytest.raises(ForbiddenRole) as excinfo:
            self._authorize(app, bearer(staff), roles=(ADMIN,))
        assert excinfo.value.message == 'Forbidden: Admins only'

    def test_role_claim_is_trusted_without_storage_lookup(self, app):
        # No account row exists for this principal
        token = _raw_token(app, {'sub': '999', 'email': 'ghost@example.com', 'role': 'ADMIN'})
        principal = self._authorize(app, {'Authorization': f'Bearer {token}'}, roles=(ADMIN,))
        assert principal.id == 999
        assert principal.role == ADMIN

    def test_tampered_role_fails_signature(self, app, staff):
        token = bearer(staff)['Authorization'].split()[1]
        signature = token.rsplit('.', 1)[1]
        claims = pyjwt.decode(token, options={'verify_signature': False})
        claims['role'] = 'admin'
        forged = pyjwt.encode(claims, 'guessed-secret-guessed-secret-guessed', algorithm='HS256')
        forged = '.'.join(forged.split('.')[:2] + [signature])

        with pytest.raises(InvalidToken):
            self._authorize(app, {'Authorization': f'Bearer {forged}'})

    def test_unauthenticated_response_body(self, client):
        response = client.get('/api/sales', headers={'Authorization': 'Bearer nope'})

        assert response.status_code == 401
        assert json.loads(response.data) == {'message': 'Unauthorized'}


class TestStartup:
    """Configuration checks in create_app"""

    def test_missing_signing_secret_is_fatal(self):
        class NoSecretConfig(TestingConfig):
            JWT_SECRET_KEY = None

        with pytest.raises(ConfigurationError):
            create_app(NoSecretConfig)

    def test_sqlite_gets_no_pool_options(self, app):
        assert app.config['SQLALCHEMY_ENGINE_OPTIONS'] == {}

    def test_health(self, client):
        response = client.get('/api/health')

        assert response.status_code == 200
        assert json.loads(response.data)['success'] is True

    def test_shutdown_can_run_twice(self, app):
        shutdown_extensions(app)
        shutdown_extensions(app)

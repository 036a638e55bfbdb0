"""
Pytest fixtures for the back office API.

Every test gets a fresh application bound to an in-memory SQLite database,
seeded with one admin and two staff accounts.
"""
import os

# Must be set before the app module (and its module-level create_app) loads.
os.environ['FLASK_ENV'] = 'testing'
os.environ.setdefault('JWT_SECRET_KEY', 'test-signing-secret-0123456789-abcdefghijklmnop')

import pytest
from flask_jwt_extended import create_access_token

from app import create_app
from config.settings import TestingConfig
from extensions import db
from models.user import Admin, Staff
from utils.rbac import Principal

ADMIN_PASSWORD = 'admin123'
STAFF_PASSWORD = 'staff123'


@pytest.fixture
def app():
    """Create application for testing."""
    app = create_app(TestingConfig)

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def admin(app):
    account = Admin(email='admin@example.com', password=ADMIN_PASSWORD, full_name='Admin User')
    db.session.add(account)
    db.session.commit()
    return Principal.from_account(account)


@pytest.fixture
def staff(app):
    """Staff member with id 7."""
    account = Staff(email='staff1@example.com', password=STAFF_PASSWORD, full_name='Maria Santos', id=7)
    db.session.add(account)
    db.session.commit()
    return Principal.from_account(account)


@pytest.fixture
def other_staff(app):
    account = Staff(email='staff2@example.com', password=STAFF_PASSWORD, full_name='Juan Cruz')
    db.session.add(account)
    db.session.commit()
    return Principal.from_account(account)


def bearer(principal, **kwargs):
    return {'Authorization': f'Bearer {create_access_token(identity=principal, **kwargs)}'}


@pytest.fixture
def admin_headers(admin):
    return bearer(admin)


@pytest.fixture
def staff_headers(staff):
    return bearer(staff)


@pytest.fixture
def other_staff_headers(other_staff):
    return bearer(other_staff)

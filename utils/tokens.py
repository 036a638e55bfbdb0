"""Session token issuing.

Login looks an email up case-insensitively, administrators first, and
exchanges a verified password for a signed access token carrying
{sub: id, email, role}. Nothing is persisted: the token expires on its own
after JWT_ACCESS_TOKEN_EXPIRES.
"""

from __future__ import annotations

from typing import Optional, Tuple

from flask_jwt_extended import create_access_token
from sqlalchemy import func
from werkzeug.security import check_password_hash, generate_password_hash

from models.user import Admin, Staff, User
from utils.errors import InvalidCredentials
from utils.rbac import Principal

# Lookup order is policy: an email registered as both admin and staff logs
# in as admin.
IDENTITY_CLASSES = (Admin, Staff)

# Compared against when no account matches so unknown emails cost the same
# as wrong passwords.
_DUMMY_PASSWORD_HASH = generate_password_hash('no-such-account')


def find_account(email: str) -> Optional[User]:
    normalized = (email or '').strip().lower()
    if not normalized:
        return None
    for model in IDENTITY_CLASSES:
        account = model.query.filter(func.lower(model.email) == normalized).first()
        if account is not None:
            return account
    return None


def issue_token(email: str, password: str) -> Tuple[Principal, str]:
    """Verify credentials and return the principal with its access token."""
    account = find_account(email)

    if account is None:
        check_password_hash(_DUMMY_PASSWORD_HASH, password)
        raise InvalidCredentials('unknown email')

    if not account.check_password(password):
        raise InvalidCredentials('password mismatch')

    if not account.is_active:
        raise InvalidCredentials('account deactivated')

    principal = Principal.from_account(account)
    return principal, create_access_token(identity=principal)

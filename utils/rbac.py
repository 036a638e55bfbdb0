"""Role-based access control.

Roles travel inside the signed session token (`role` claim) and the token is
the source of truth for the whole request: accounts are not re-read from
storage per request. `authorize` is the single gate every protected route
goes through; `require_roles` wraps it as a decorator.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import wraps
from typing import Iterable

from flask import current_app, g, request
from flask_jwt_extended import get_jwt, verify_jwt_in_request
from flask_jwt_extended.exceptions import (
    InvalidHeaderError,
    JWTExtendedException,
    NoAuthorizationError,
)
from jwt.exceptions import ExpiredSignatureError, PyJWTError

from utils.errors import (
    AuthenticationError,
    ExpiredToken,
    ForbiddenRole,
    InvalidToken,
    MalformedPayload,
    MissingCredential,
)

ADMIN = 'admin'
STAFF = 'staff'
ROLES = frozenset({ADMIN, STAFF})


@dataclass(frozen=True)
class Principal:
    """The authenticated caller, as decoded from a verified token."""

    id: int
    email: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN

    @classmethod
    def from_account(cls, account) -> 'Principal':
        return cls(id=account.id, email=account.email, role=account.role)

    def to_dict(self) -> dict:
        return {'id': self.id, 'email': self.email, 'role': self.role}


def _principal_from_claims(claims: dict) -> Principal:
    try:
        principal_id = int(claims.get('sub'))
    except (TypeError, ValueError):
        raise MalformedPayload('subject is not a principal id')

    email = claims.get('email')
    role = claims.get('role')
    if not isinstance(email, str) or not email:
        raise MalformedPayload('email claim missing')
    if not isinstance(role, str) or not role:
        raise MalformedPayload('role claim missing')

    return Principal(id=principal_id, email=email, role=role.lower())


def authorize(allowed_roles: Iterable[str]) -> Principal:
    """Verify the request's bearer token and check its role.

    Raises an AuthenticationError (401) when the credential is absent,
    malformed, badly signed or expired, and ForbiddenRole (403) when the
    role is not in `allowed_roles`.
    """
    allowed = {str(r).lower() for r in allowed_roles}

    try:
        try:
            verify_jwt_in_request()
        except (NoAuthorizationError, InvalidHeaderError) as exc:
            raise MissingCredential(str(exc))
        except ExpiredSignatureError:
            raise ExpiredToken()
        except (JWTExtendedException, PyJWTError) as exc:
            raise InvalidToken(str(exc))

        principal = _principal_from_claims(get_jwt())
    except AuthenticationError as exc:
        current_app.logger.warning(
            'Rejected %s %s: %s', request.method, request.path, exc.detail
        )
        raise

    if principal.role not in allowed:
        current_app.logger.info(
            'Role %s refused on %s %s (principal %s)',
            principal.role, request.method, request.path, principal.id,
        )
        if allowed == {ADMIN}:
            raise ForbiddenRole('Admins only')
        raise ForbiddenRole('Access denied')

    return principal


def current_principal() -> Principal:
    """Principal authorized for the current request."""
    return g.principal


def require_roles(*roles: str):
    """Decorator: run `authorize` and expose the result as `g.principal`."""

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            g.principal = authorize(roles)
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def require_authenticated(fn):
    return require_roles(ADMIN, STAFF)(fn)

"""API error taxonomy.

Every error raised at a request boundary carries its HTTP status and the
JSON body the client sees. Handlers in app.py turn them into responses;
internal details never reach the body.
"""

from __future__ import annotations

from typing import Optional


class ConfigurationError(RuntimeError):
    """Raised at startup when required configuration is missing."""


class ApiError(Exception):
    status_code = 500
    body_key = 'error'
    default_message = 'Internal server error'

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {self.body_key: self.message}


# ---------------------------------------------------------------------------
# 401
# ---------------------------------------------------------------------------

class AuthenticationError(ApiError):
    """Missing, invalid or expired credential.

    The client always sees the same body; `reason` is kept for server logs.
    """

    status_code = 401
    body_key = 'message'
    default_message = 'Unauthorized'
    reason = 'unauthenticated'

    def __init__(self, detail: Optional[str] = None):
        super().__init__()
        self.detail = detail or self.reason


class MissingCredential(AuthenticationError):
    reason = 'missing_credential'


class InvalidToken(AuthenticationError):
    reason = 'invalid_token'


class ExpiredToken(AuthenticationError):
    reason = 'expired_token'


class MalformedPayload(AuthenticationError):
    reason = 'malformed_payload'


class InvalidCredentials(AuthenticationError):
    reason = 'invalid_credentials'

    def to_dict(self) -> dict:
        return {'message': 'Invalid credentials'}


# ---------------------------------------------------------------------------
# 403
# ---------------------------------------------------------------------------

class AuthorizationError(ApiError):
    status_code = 403
    body_key = 'message'
    default_message = 'Forbidden'

    def __init__(self, message: Optional[str] = None):
        if message and not message.startswith('Forbidden'):
            message = f'Forbidden: {message}'
        super().__init__(message)


class ForbiddenRole(AuthorizationError):
    pass


class ForbiddenFieldMutation(AuthorizationError):
    pass


class ForbiddenFieldValue(AuthorizationError):
    pass


# ---------------------------------------------------------------------------
# 400 / 404 / 503
# ---------------------------------------------------------------------------

class ValidationError(ApiError):
    status_code = 400
    default_message = 'Invalid request'


class NotFoundError(ApiError):
    status_code = 404
    default_message = 'Resource not found'

    def __init__(self, resource: Optional[str] = None):
        super().__init__(f'{resource} not found' if resource else None)


class PoolExhausted(ApiError):
    """No database connection became available within the pool timeout."""

    status_code = 503
    default_message = 'Service temporarily unavailable, please retry'
    retry_after = 5

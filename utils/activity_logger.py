"""Activity logging helpers.

Best-effort audit trail written after the mutation commits; callers catch
and log failures so they never break the main request.
"""

from __future__ import annotations

from typing import Any, Optional

from flask import has_request_context, request

from extensions import db
from models.user import ActivityLog


def log_activity(
    *,
    user_id: Optional[int],
    action: str,
    entity_type: Optional[str] = None,
    entity_id: Optional[int] = None,
    details: Optional[dict[str, Any]] = None,
) -> ActivityLog:
    in_request = has_request_context()
    log = ActivityLog(
        user_id=user_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        details=details,
        ip_address=(request.remote_addr if in_request else None),
        user_agent=(request.user_agent.string[:255] if in_request and request.user_agent else None),
    )
    db.session.add(log)
    db.session.commit()
    return log

"""Shared record handling for resource blueprints.

Every helper takes the resource type, asks the scoping policy for the
caller's RowFilter and only then touches the session, so rejected requests
never reach storage.
"""

from __future__ import annotations

import math
from typing import Callable, Optional

from flask import current_app, jsonify, request

from extensions import db
from utils.activity_logger import log_activity
from utils.errors import NotFoundError, ValidationError
from utils.rbac import Principal
from utils.scoping import (
    CREATE,
    DELETE,
    READ,
    UPDATE,
    check_create_values,
    check_update_fields,
    get_policy,
    scope_filter,
)
from utils.validation import INT_MAX, get_json_payload, record_id


def parse_pagination():
    """Read `?page=&limit=`; page is 1-based, limit is clamped to MAX_PAGE_LIMIT."""
    default_limit = current_app.config.get('DEFAULT_PAGE_LIMIT', 50)
    max_limit = current_app.config.get('MAX_PAGE_LIMIT', 200)

    try:
        page = int(request.args.get('page', 1))
        limit = int(request.args.get('limit', default_limit))
    except (TypeError, ValueError):
        raise ValidationError('page and limit must be integers')

    if page < 1 or limit < 1:
        raise ValidationError('page and limit must be positive')
    limit = min(limit, max_limit)
    if (page - 1) * limit > INT_MAX:
        raise ValidationError('page is out of range')
    return page, limit


def list_records(model, resource_type: str, principal: Principal, *, query=None, order_by=None):
    """Return (items, pagination) for the rows the principal may see."""
    row_filter = scope_filter(principal, READ, resource_type)
    page, limit = parse_pagination()

    query = row_filter.apply(query if query is not None else model.query, model)
    total = query.count()
    if order_by is not None:
        query = query.order_by(order_by)
    items = query.offset((page - 1) * limit).limit(limit).all()

    return items, {
        'page': page,
        'limit': limit,
        'total': total,
        'pages': math.ceil(total / limit) if total else 0,
    }


def get_record(model, resource_type: str, principal: Principal, target_id: int):
    row_filter = scope_filter(principal, READ, resource_type)
    if target_id > INT_MAX:
        raise NotFoundError(get_policy(resource_type).label)
    record = row_filter.apply(model.query, model).filter(model.id == target_id).first()
    if record is None:
        raise NotFoundError(get_policy(resource_type).label)
    return record


def _audit(principal: Principal, resource_type: str, verb: str, entity_id: int,
           details: Optional[dict] = None) -> None:
    """Record a committed mutation in activity_logs.

    Best effort: the mutation is already committed, so a failure here is
    logged and rolled back, never raised.
    """
    try:
        log_activity(
            user_id=principal.id,
            action=f'{resource_type}.{verb}',
            entity_type=resource_type,
            entity_id=entity_id,
            details=details,
        )
    except Exception:
        db.session.rollback()
        current_app.logger.exception(
            'Activity log failed for %s.%s %s', resource_type, verb, entity_id
        )


def create_record(resource_type: str, principal: Principal, build: Callable[[dict], object]):
    """Authorize, validate the JSON body via `build`, attribute to the principal and insert."""
    scope_filter(principal, CREATE, resource_type)
    payload = get_json_payload()
    check_create_values(principal, resource_type, payload)

    record = build(payload)
    policy = get_policy(resource_type)
    setattr(record, policy.recorded_by_column, principal.id)

    db.session.add(record)
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    record_id_value = record.id
    _audit(principal, resource_type, 'create', record_id_value)

    current_app.logger.info('%s %s created by principal %s', resource_type, record_id_value, principal.id)
    return record


def update_target_id(payload: dict) -> int:
    """Target id from the body, falling back to `?id=` when absent or null."""
    value = payload.get('id')
    if value is None:
        value = request.args.get('id')
    return record_id(value)


def update_record(model, resource_type: str, principal: Principal,
                  apply_changes: Callable[[object, dict], None]):
    """Authorize the update, load the row through the caller's filter, apply, commit."""
    row_filter = scope_filter(principal, UPDATE, resource_type)
    payload = get_json_payload()
    check_update_fields(principal, resource_type, payload)
    target_id = update_target_id(payload)

    record = row_filter.apply(model.query, model).filter(model.id == target_id).first()
    if record is None:
        raise NotFoundError(get_policy(resource_type).label)

    try:
        apply_changes(record, payload)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    _audit(principal, resource_type, 'update', target_id,
           details={'fields': sorted(k for k in payload if k != 'id')})

    current_app.logger.info('%s %s updated by principal %s', resource_type, target_id, principal.id)
    return record


def delete_record(model, resource_type: str, principal: Principal, target: Optional[str] = None) -> int:
    """Delete the row named by `?id=`; a missing row is a 404."""
    row_filter = scope_filter(principal, DELETE, resource_type)
    target_id = record_id(target if target is not None else request.args.get('id'))

    record = row_filter.apply(model.query, model).filter(model.id == target_id).first()
    if record is None:
        raise NotFoundError(get_policy(resource_type).label)

    try:
        db.session.delete(record)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    _audit(principal, resource_type, 'delete', target_id)

    current_app.logger.info('%s %s deleted by principal %s', resource_type, target_id, principal.id)
    return target_id


def list_response(items, pagination, **extra):
    body = {'success': True, 'data': [item.to_dict() for item in items], 'pagination': pagination}
    body.update(extra)
    return jsonify(body), 200


def record_response(record):
    return jsonify({'success': True, 'data': record.to_dict()}), 200


def write_response(record_id_value, status=200, message=None):
    body = {'success': True, 'id': record_id_value}
    if message:
        body['message'] = message
    return jsonify(body), status

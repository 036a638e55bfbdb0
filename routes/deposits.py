"""
Bank deposit routes
"""
from flask import Blueprint
from sqlalchemy import func

from extensions import db
from models.deposit import Deposit
from utils import validation as v
from utils.rbac import current_principal, require_authenticated
from utils.records import (
    create_record,
    delete_record,
    get_record,
    list_records,
    list_response,
    record_response,
    write_response,
)
from utils.scoping import READ, scope_filter

deposits_bp = Blueprint('deposits', __name__)

RESOURCE = 'deposits'


def _build_deposit(data):
    return Deposit(
        amount=v.number(data, 'amount', positive=True),
        description=v.text(data, 'description', max_length=255),
    )


@deposits_bp.route('/', methods=['GET'])
@require_authenticated
def get_deposits():
    """List deposits the caller may see, with their overall total"""
    principal = current_principal()
    items, pagination = list_records(
        Deposit, RESOURCE, principal, order_by=Deposit.initiated_at.desc()
    )

    row_filter = scope_filter(principal, READ, RESOURCE)
    total = row_filter.apply(db.session.query(func.coalesce(func.sum(Deposit.amount), 0)), Deposit).scalar()

    return list_response(items, pagination, total=float(total or 0))


@deposits_bp.route('/<int:deposit_id>', methods=['GET'])
@require_authenticated
def get_deposit(deposit_id):
    return record_response(get_record(Deposit, RESOURCE, current_principal(), deposit_id))


@deposits_bp.route('/', methods=['POST'])
@require_authenticated
def create_deposit():
    deposit = create_record(RESOURCE, current_principal(), _build_deposit)
    return write_response(deposit.id, 201, 'Deposit recorded')


@deposits_bp.route('/', methods=['DELETE'])
@require_authenticated
def delete_deposit():
    deleted_id = delete_record(Deposit, RESOURCE, current_principal())
    return write_response(deleted_id, message=f'Record {deleted_id} deleted')

"""
Payroll routes

Admins manage payroll; staff can only read the lines paid to them.
"""
from flask import Blueprint

from models.payroll import PayrollRecord
from models.user import Staff
from utils import validation as v
from utils.errors import ValidationError
from utils.rbac import current_principal, require_authenticated
from utils.records import (
    create_record,
    delete_record,
    get_record,
    list_records,
    list_response,
    record_response,
    update_record,
    write_response,
)

payroll_bp = Blueprint('payroll', __name__)

RESOURCE = 'payroll'
PAYROLL_STATUSES = ('pending', 'paid')


def _staff_id(data, required=True):
    staff_id = v.integer(data, 'staff_id', required=required, positive=True)
    if staff_id is not None and Staff.query.filter_by(id=staff_id).first() is None:
        raise ValidationError('staff_id does not reference a staff member')
    return staff_id


def _build_payroll(data):
    return PayrollRecord(
        staff_id=_staff_id(data),
        month=v.month(data),
        salary_amount=v.number(data, 'salary_amount', positive=True),
        payment_date=v.iso_date(data, 'payment_date'),
        status=v.choice(data, 'status', PAYROLL_STATUSES, required=False, default='pending'),
    )


def _apply_payroll_changes(record, data):
    changes = {}
    if 'staff_id' in data:
        changes['staff_id'] = _staff_id(data)
    if 'month' in data:
        changes['month'] = v.month(data)
    if 'salary_amount' in data:
        changes['salary_amount'] = v.number(data, 'salary_amount', positive=True)
    if 'payment_date' in data:
        changes['payment_date'] = v.iso_date(data, 'payment_date')
    if 'status' in data:
        changes['status'] = v.choice(data, 'status', PAYROLL_STATUSES)
    if not changes:
        raise ValidationError('No updatable fields supplied')

    for name, value in changes.items():
        setattr(record, name, value)


@payroll_bp.route('/', methods=['GET'])
@require_authenticated
def get_payroll():
    items, pagination = list_records(
        PayrollRecord, RESOURCE, current_principal(),
        order_by=PayrollRecord.month.desc(),
    )
    return list_response(items, pagination)


@payroll_bp.route('/<int:record_id>', methods=['GET'])
@require_authenticated
def get_payroll_record(record_id):
    return record_response(get_record(PayrollRecord, RESOURCE, current_principal(), record_id))


@payroll_bp.route('/', methods=['POST'])
@require_authenticated
def create_payroll_record():
    record = create_record(RESOURCE, current_principal(), _build_payroll)
    return write_response(record.id, 201, 'Payroll record added')


@payroll_bp.route('/', methods=['PUT'])
@require_authenticated
def update_payroll_record():
    record = update_record(PayrollRecord, RESOURCE, current_principal(), _apply_payroll_changes)
    return write_response(record.id, message='Payroll record updated')


@payroll_bp.route('/', methods=['DELETE'])
@require_authenticated
def delete_payroll_record():
    deleted_id = delete_record(PayrollRecord, RESOURCE, current_principal())
    return write_response(deleted_id, message=f'Record {deleted_id} deleted')

"""
Sales routes - sales records
"""
from flask import Blueprint, request

from models.sale import Sale
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
    write_response,
)

sales_bp = Blueprint('sales', __name__)

RESOURCE = 'sales'
PAYMENT_STATUSES = ('outstanding', 'paid')


def _build_sale(data):
    total_amount = v.number(data, 'total_amount', minimum=0)
    paid_amount = v.number(data, 'paid_amount', required=False, minimum=0, default=0)
    if paid_amount > total_amount:
        raise ValidationError('paid_amount cannot exceed total_amount')

    return Sale(
        customer_name=v.text(data, 'customer_name', max_length=150),
        total_amount=total_amount,
        paid_amount=paid_amount,
        payment_status=v.choice(data, 'payment_status', PAYMENT_STATUSES, required=False,
                                default='outstanding'),
        payment_method=v.text(data, 'payment_method', max_length=30),
        profit=v.number(data, 'profit', required=False, default=0),
    )


@sales_bp.route('/', methods=['GET'])
@require_authenticated
def get_sales():
    """List sales. Staff see their own; admins see all, optionally one staff member's."""
    principal = current_principal()
    query = Sale.query

    staff_id = request.args.get('staff_id')
    if staff_id and principal.is_admin:
        query = query.filter(Sale.recorded_by_user_id == v.record_id(staff_id, 'staff_id'))

    items, pagination = list_records(
        Sale, RESOURCE, principal, query=query, order_by=Sale.created_at.desc()
    )
    return list_response(items, pagination)


@sales_bp.route('/<int:sale_id>', methods=['GET'])
@require_authenticated
def get_sale(sale_id):
    return record_response(get_record(Sale, RESOURCE, current_principal(), sale_id))


@sales_bp.route('/', methods=['POST'])
@require_authenticated
def create_sale():
    sale = create_record(RESOURCE, current_principal(), _build_sale)
    return write_response(sale.id, 201, 'Sale recorded')


@sales_bp.route('/', methods=['DELETE'])
@require_authenticated
def delete_sale():
    """Delete a sale (?id=123). Admins only."""
    deleted_id = delete_record(Sale, RESOURCE, current_principal())
    return write_response(deleted_id, message=f'Record {deleted_id} deleted')

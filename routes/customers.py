"""
Customers routes - customer records and the customer ledger

Customer records are shared reference data: every authenticated role
reads all of them. Ledger entries are owner-scoped like other transactions.
"""
from flask import Blueprint, request

from extensions import db
from models.customer import Customer, CustomerLedgerEntry
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

customers_bp = Blueprint('customers', __name__)
customer_ledger_bp = Blueprint('customer_ledger', __name__)

LEDGER_TYPES = ('debit', 'credit')


def _build_customer(data):
    return Customer(
        name=v.text(data, 'name', max_length=100),
        email=v.email(data, required=False),
        phone=v.text(data, 'phone', required=False, max_length=30),
    )


def _apply_customer_changes(customer, data):
    changes = {}
    if 'name' in data:
        changes['name'] = v.text(data, 'name', max_length=100)
    if 'email' in data:
        changes['email'] = v.email(data, required=False)
    if 'phone' in data:
        changes['phone'] = v.text(data, 'phone', required=False, max_length=30)
    if not changes:
        raise ValidationError('No updatable fields supplied')

    for name, value in changes.items():
        setattr(customer, name, value)


def _build_ledger_entry(data):
    customer_id = v.integer(data, 'customer_id', positive=True)
    if db.session.get(Customer, customer_id) is None:
        raise ValidationError('customer_id does not reference a customer')

    return CustomerLedgerEntry(
        customer_id=customer_id,
        description=v.text(data, 'description', max_length=255),
        amount=v.number(data, 'amount', positive=True),
        type=v.choice(data, 'type', LEDGER_TYPES),
    )


# ---------------------------------------------------------------------------
# /api/customers
# ---------------------------------------------------------------------------

@customers_bp.route('/', methods=['GET'])
@require_authenticated
def get_customers():
    """List customers with optional ?search= on name, phone or email"""
    query = Customer.query
    search = (request.args.get('search') or '').strip()
    if search:
        query = query.filter(
            (Customer.name.ilike(f'%{search}%')) |
            (Customer.phone.ilike(f'%{search}%')) |
            (Customer.email.ilike(f'%{search}%'))
        )

    items, pagination = list_records(
        Customer, 'customers', current_principal(), query=query, order_by=Customer.name.asc()
    )
    return list_response(items, pagination)


@customers_bp.route('/<int:customer_id>', methods=['GET'])
@require_authenticated
def get_customer(customer_id):
    return record_response(get_record(Customer, 'customers', current_principal(), customer_id))


@customers_bp.route('/', methods=['POST'])
@require_authenticated
def create_customer():
    customer = create_record('customers', current_principal(), _build_customer)
    return write_response(customer.id, 201, 'Customer created successfully')


@customers_bp.route('/', methods=['PUT'])
@require_authenticated
def update_customer():
    customer = update_record(Customer, 'customers', current_principal(), _apply_customer_changes)
    return write_response(customer.id, message='Customer record updated')


@customers_bp.route('/', methods=['DELETE'])
@require_authenticated
def delete_customer():
    deleted_id = delete_record(Customer, 'customers', current_principal())
    return write_response(deleted_id, message=f'Record {deleted_id} deleted')


# ---------------------------------------------------------------------------
# /api/customer-ledger
# ---------------------------------------------------------------------------

@customer_ledger_bp.route('/', methods=['GET'])
@require_authenticated
def get_customer_ledger():
    """List ledger entries, optionally for one ?customer_id="""
    query = CustomerLedgerEntry.query
    customer_id = request.args.get('customer_id')
    if customer_id:
        query = query.filter(
            CustomerLedgerEntry.customer_id == v.record_id(customer_id, 'customer_id')
        )

    items, pagination = list_records(
        CustomerLedgerEntry, 'customer_ledger', current_principal(),
        query=query, order_by=CustomerLedgerEntry.created_at.desc(),
    )
    return list_response(items, pagination)


@customer_ledger_bp.route('/<int:entry_id>', methods=['GET'])
@require_authenticated
def get_customer_ledger_entry(entry_id):
    return record_response(
        get_record(CustomerLedgerEntry, 'customer_ledger', current_principal(), entry_id)
    )


@customer_ledger_bp.route('/', methods=['POST'])
@require_authenticated
def create_customer_ledger_entry():
    entry = create_record('customer_ledger', current_principal(), _build_ledger_entry)
    return write_response(entry.id, 201, 'Ledger entry recorded')


@customer_ledger_bp.route('/', methods=['DELETE'])
@require_authenticated
def delete_customer_ledger_entry():
    deleted_id = delete_record(CustomerLedgerEntry, 'customer_ledger', current_principal())
    return write_response(deleted_id, message=f'Record {deleted_id} deleted')

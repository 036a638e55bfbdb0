"""
Suppliers routes - supplier records and the supplier ledger
"""
from flask import Blueprint, request

from extensions import db
from models.supplier import Supplier, SupplierLedgerEntry
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

suppliers_bp = Blueprint('suppliers', __name__)
supplier_ledger_bp = Blueprint('supplier_ledger', __name__)

TRANSACTION_TYPES = ('purchase', 'payment')

_SUPPLIER_FIELDS = {
    'name': lambda d: v.text(d, 'name', max_length=150),
    'contact_name': lambda d: v.text(d, 'contact_name', max_length=100),
    'phone': lambda d: v.text(d, 'phone', max_length=30),
    'email': lambda d: v.email(d),
    'address': lambda d: v.text(d, 'address', required=False),
}


def _build_supplier(data):
    return Supplier(**{name: parse(data) for name, parse in _SUPPLIER_FIELDS.items()})


def _apply_supplier_changes(supplier, data):
    changes = {name: parse(data) for name, parse in _SUPPLIER_FIELDS.items() if name in data}
    if not changes:
        raise ValidationError('No updatable fields supplied')

    for name, value in changes.items():
        setattr(supplier, name, value)


def _build_ledger_entry(data):
    supplier_id = v.integer(data, 'supplier_id', positive=True)
    if db.session.get(Supplier, supplier_id) is None:
        raise ValidationError('supplier_id does not reference a supplier')

    return SupplierLedgerEntry(
        supplier_id=supplier_id,
        transaction_type=v.choice(data, 'transaction_type', TRANSACTION_TYPES),
        amount=v.number(data, 'amount', positive=True),
        description=v.text(data, 'description', max_length=255),
    )


# ---------------------------------------------------------------------------
# /api/suppliers
# ---------------------------------------------------------------------------

@suppliers_bp.route('/', methods=['GET'])
@require_authenticated
def get_suppliers():
    items, pagination = list_records(
        Supplier, 'suppliers', current_principal(), order_by=Supplier.name.asc()
    )
    return list_response(items, pagination)


@suppliers_bp.route('/<int:supplier_id>', methods=['GET'])
@require_authenticated
def get_supplier(supplier_id):
    return record_response(get_record(Supplier, 'suppliers', current_principal(), supplier_id))


@suppliers_bp.route('/', methods=['POST'])
@require_authenticated
def create_supplier():
    supplier = create_record('suppliers', current_principal(), _build_supplier)
    return write_response(supplier.id, 201, 'Supplier created successfully')


@suppliers_bp.route('/', methods=['PUT'])
@require_authenticated
def update_supplier():
    supplier = update_record(Supplier, 'suppliers', current_principal(), _apply_supplier_changes)
    return write_response(supplier.id, message='Supplier updated')


@suppliers_bp.route('/', methods=['DELETE'])
@require_authenticated
def delete_supplier():
    deleted_id = delete_record(Supplier, 'suppliers', current_principal())
    return write_response(deleted_id, message=f'Record {deleted_id} deleted')


# ---------------------------------------------------------------------------
# /api/supplier-ledger
# ---------------------------------------------------------------------------

@supplier_ledger_bp.route('/', methods=['GET'])
@require_authenticated
def get_supplier_ledger():
    """List ledger entries, optionally for one ?supplier_id="""
    query = SupplierLedgerEntry.query
    supplier_id = request.args.get('supplier_id')
    if supplier_id:
        query = query.filter(
            SupplierLedgerEntry.supplier_id == v.record_id(supplier_id, 'supplier_id')
        )

    items, pagination = list_records(
        SupplierLedgerEntry, 'supplier_ledger', current_principal(),
        query=query, order_by=SupplierLedgerEntry.transaction_date.desc(),
    )
    return list_response(items, pagination)


@supplier_ledger_bp.route('/<int:entry_id>', methods=['GET'])
@require_authenticated
def get_supplier_ledger_entry(entry_id):
    return record_response(
        get_record(SupplierLedgerEntry, 'supplier_ledger', current_principal(), entry_id)
    )


@supplier_ledger_bp.route('/', methods=['POST'])
@require_authenticated
def create_supplier_ledger_entry():
    entry = create_record('supplier_ledger', current_principal(), _build_ledger_entry)
    return write_response(entry.id, 201, 'Ledger entry recorded successfully')


@supplier_ledger_bp.route('/', methods=['DELETE'])
@require_authenticated
def delete_supplier_ledger_entry():
    deleted_id = delete_record(SupplierLedgerEntry, 'supplier_ledger', current_principal())
    return write_response(deleted_id, message=f'Record {deleted_id} deleted')

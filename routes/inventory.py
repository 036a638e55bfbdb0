"""
Inventory routes - stock items, adjustments and movements

Staff may add items and change names/quantities of their own items, but
never prices or reorder levels, and may not record negative quantities.
"""
from flask import Blueprint

from models.inventory import InventoryItem, StockAdjustment, StockMovement
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

inventory_bp = Blueprint('inventory', __name__)
stock_adjustments_bp = Blueprint('stock_adjustments', __name__)
stock_movements_bp = Blueprint('stock_movements', __name__)


def _build_item(data):
    item = InventoryItem(
        item_name=v.text(data, 'item_name', max_length=200),
        quantity=v.integer(data, 'quantity'),
        unit_price=v.number(data, 'unit_price', minimum=0),
        reorder_level=v.integer(data, 'reorder_level', required=False, minimum=0, default=0),
    )
    item.recompute_total()
    return item


def _apply_item_changes(item, data):
    # Validate every supplied field before touching the row
    changes = {}
    if 'item_name' in data:
        changes['item_name'] = v.text(data, 'item_name', max_length=200)
    if 'quantity' in data:
        changes['quantity'] = v.integer(data, 'quantity')
    if 'unit_price' in data:
        changes['unit_price'] = v.number(data, 'unit_price', minimum=0)
    if 'reorder_level' in data:
        changes['reorder_level'] = v.integer(data, 'reorder_level', minimum=0)
    if not changes:
        raise ValidationError('No updatable fields supplied')

    for name, value in changes.items():
        setattr(item, name, value)
    item.recompute_total()


def _build_adjustment(data):
    return StockAdjustment(
        item_id=v.integer(data, 'item_id', positive=True),
        quantity_adjusted=v.integer(data, 'quantity_adjusted', nonzero=True),
        reason=v.text(data, 'reason', max_length=255),
    )


def _build_movement(data):
    from_location_id = v.integer(data, 'from_location_id', positive=True)
    to_location_id = v.integer(data, 'to_location_id', positive=True)
    if from_location_id == to_location_id:
        raise ValidationError('Cannot move stock to the same location')

    return StockMovement(
        item_id=v.integer(data, 'item_id', positive=True),
        quantity_moved=v.integer(data, 'quantity_moved', positive=True),
        from_location_id=from_location_id,
        to_location_id=to_location_id,
    )


# ---------------------------------------------------------------------------
# /api/inventory
# ---------------------------------------------------------------------------

@inventory_bp.route('/', methods=['GET'])
@require_authenticated
def get_inventory():
    items, pagination = list_records(
        InventoryItem, 'inventory', current_principal(), order_by=InventoryItem.item_name.asc()
    )
    return list_response(items, pagination)


@inventory_bp.route('/<int:item_id>', methods=['GET'])
@require_authenticated
def get_inventory_item(item_id):
    return record_response(get_record(InventoryItem, 'inventory', current_principal(), item_id))


@inventory_bp.route('/', methods=['POST'])
@require_authenticated
def create_inventory_item():
    item = create_record('inventory', current_principal(), _build_item)
    return write_response(item.id, 201, 'Inventory item added')


@inventory_bp.route('/', methods=['PUT'])
@require_authenticated
def update_inventory_item():
    item = update_record(InventoryItem, 'inventory', current_principal(), _apply_item_changes)
    return write_response(item.id, message='Inventory record updated')


@inventory_bp.route('/', methods=['DELETE'])
@require_authenticated
def delete_inventory_item():
    deleted_id = delete_record(InventoryItem, 'inventory', current_principal())
    return write_response(deleted_id, message=f'Record {deleted_id} deleted')


# ---------------------------------------------------------------------------
# /api/stock-adjustments
# ---------------------------------------------------------------------------

@stock_adjustments_bp.route('/', methods=['GET'])
@require_authenticated
def get_stock_adjustments():
    items, pagination = list_records(
        StockAdjustment, 'stock_adjustments', current_principal(),
        order_by=StockAdjustment.adjustment_date.desc(),
    )
    return list_response(items, pagination)


@stock_adjustments_bp.route('/<int:adjustment_id>', methods=['GET'])
@require_authenticated
def get_stock_adjustment(adjustment_id):
    return record_response(
        get_record(StockAdjustment, 'stock_adjustments', current_principal(), adjustment_id)
    )


@stock_adjustments_bp.route('/', methods=['POST'])
@require_authenticated
def create_stock_adjustment():
    adjustment = create_record('stock_adjustments', current_principal(), _build_adjustment)
    return write_response(adjustment.id, 201, 'Stock adjustment recorded successfully')


@stock_adjustments_bp.route('/', methods=['DELETE'])
@require_authenticated
def delete_stock_adjustment():
    deleted_id = delete_record(StockAdjustment, 'stock_adjustments', current_principal())
    return write_response(deleted_id, message=f'Record {deleted_id} deleted successfully')


# ---------------------------------------------------------------------------
# /api/stock-movements
# ---------------------------------------------------------------------------

@stock_movements_bp.route('/', methods=['GET'])
@require_authenticated
def get_stock_movements():
    items, pagination = list_records(
        StockMovement, 'stock_movements', current_principal(),
        order_by=StockMovement.movement_date.desc(),
    )
    return list_response(items, pagination)


@stock_movements_bp.route('/<int:movement_id>', methods=['GET'])
@require_authenticated
def get_stock_movement(movement_id):
    return record_response(
        get_record(StockMovement, 'stock_movements', current_principal(), movement_id)
    )


@stock_movements_bp.route('/', methods=['POST'])
@require_authenticated
def create_stock_movement():
    movement = create_record('stock_movements', current_principal(), _build_movement)
    return write_response(movement.id, 201, 'Stock movement recorded successfully')


@stock_movements_bp.route('/', methods=['DELETE'])
@require_authenticated
def delete_stock_movement():
    deleted_id = delete_record(StockMovement, 'stock_movements', current_principal())
    return write_response(deleted_id, message=f'Record {deleted_id} deleted')

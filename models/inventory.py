"""
Inventory, stock adjustment and stock movement models
"""
from datetime import datetime
from decimal import Decimal
from extensions import db


class InventoryItem(db.Model):
    """Inventory line with quantity on hand and pricing"""
    __tablename__ = 'inventory'

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    item_name = db.Column(db.String(200), nullable=False)
    # May be negative when an admin records a correction
    quantity = db.Column(db.Integer, nullable=False, default=0)
    unit_price = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    total_value = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    reorder_level = db.Column(db.Integer, nullable=False, default=0)

    recorded_by_user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)

    created_at = db.Column(db.DateTime, default=datetime.now)
    updated_at = db.Column(db.DateTime, default=datetime.now, onupdate=datetime.now)

    def recompute_total(self):
        self.total_value = Decimal(str(self.quantity or 0)) * Decimal(str(self.unit_price or 0))

    @property
    def needs_reorder(self):
        return (self.quantity or 0) <= (self.reorder_level or 0)

    def to_dict(self):
        return {
            'id': self.id,
            'item_name': self.item_name,
            'quantity': self.quantity,
            'unit_price': float(self.unit_price) if self.unit_price is not None else 0,
            'total_value': float(self.total_value) if self.total_value is not None else 0,
            'reorder_level': self.reorder_level,
            'needs_reorder': self.needs_reorder,
            'recorded_by_user_id': self.recorded_by_user_id,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f'<InventoryItem {self.item_name}>'


class StockAdjustment(db.Model):
    """Manual correction of an item's stock (damage, recount, ...)"""
    __tablename__ = 'stock_adjustments'

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    item_id = db.Column(db.Integer, nullable=False, index=True)
    quantity_adjusted = db.Column(db.Integer, nullable=False)
    reason = db.Column(db.String(255), nullable=False)
    adjustment_date = db.Column(db.DateTime, default=datetime.now, nullable=False)

    recorded_by_user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)

    def to_dict(self):
        return {
            'id': self.id,
            'item_id': self.item_id,
            'quantity_adjusted': self.quantity_adjusted,
            'reason': self.reason,
            'adjustment_date': self.adjustment_date.isoformat() if self.adjustment_date else None,
            'recorded_by_user_id': self.recorded_by_user_id,
        }


class StockMovement(db.Model):
    """Transfer of stock between two locations"""
    __tablename__ = 'stock_movements'

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    item_id = db.Column(db.Integer, nullable=False, index=True)
    quantity_moved = db.Column(db.Integer, nullable=False)
    from_location_id = db.Column(db.Integer, nullable=False)
    to_location_id = db.Column(db.Integer, nullable=False)
    movement_date = db.Column(db.DateTime, default=datetime.now, nullable=False)

    recorded_by_user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)

    def to_dict(self):
        return {
            'id': self.id,
            'item_id': self.item_id,
            'quantity_moved': self.quantity_moved,
            'from_location_id': self.from_location_id,
            'to_location_id': self.to_location_id,
            'movement_date': self.movement_date.isoformat() if self.movement_date else None,
            'recorded_by_user_id': self.recorded_by_user_id,
        }

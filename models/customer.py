"""
Customer and customer ledger models
"""
from datetime import datetime
from extensions import db


class Customer(db.Model):
    """Customer reference data, readable by every authenticated role"""
    __tablename__ = 'customers'

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(120), nullable=True, index=True)
    phone = db.Column(db.String(30), nullable=True)

    recorded_by_user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)

    # Timestamps
    created_at = db.Column(db.DateTime, default=datetime.now)
    updated_at = db.Column(db.DateTime, default=datetime.now, onupdate=datetime.now)

    ledger_entries = db.relationship(
        'CustomerLedgerEntry', backref='customer', cascade='all, delete-orphan'
    )

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'phone': self.phone,
            'recorded_by_user_id': self.recorded_by_user_id,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<Customer {self.name}>'


class CustomerLedgerEntry(db.Model):
    """Debit/credit line against a customer account"""
    __tablename__ = 'customer_ledger'

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    customer_id = db.Column(db.Integer, db.ForeignKey('customers.id', ondelete='CASCADE'), nullable=False)
    description = db.Column(db.String(255), nullable=False)
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    # debit, credit
    type = db.Column(db.String(10), nullable=False)

    recorded_by_user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.now)

    def to_dict(self):
        return {
            'id': self.id,
            'customer_id': self.customer_id,
            'description': self.description,
            'amount': float(self.amount) if self.amount is not None else 0,
            'type': self.type,
            'recorded_by_user_id': self.recorded_by_user_id,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

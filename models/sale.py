"""
Sales model
"""
from datetime import datetime
from extensions import db


class Sale(db.Model):
    """A recorded sale, owned by the principal who entered it"""
    __tablename__ = 'sales'

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    customer_name = db.Column(db.String(150), nullable=False)

    # Amounts
    total_amount = db.Column(db.Numeric(12, 2), nullable=False)
    paid_amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    profit = db.Column(db.Numeric(12, 2), nullable=False, default=0)

    # Payment: outstanding, paid
    payment_status = db.Column(db.String(20), nullable=False, default='outstanding')
    payment_method = db.Column(db.String(30), nullable=False)

    recorded_by_user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.now)

    def to_dict(self):
        return {
            'id': self.id,
            'customer_name': self.customer_name,
            'total_amount': float(self.total_amount) if self.total_amount is not None else 0,
            'paid_amount': float(self.paid_amount) if self.paid_amount is not None else 0,
            'profit': float(self.profit) if self.profit is not None else 0,
            'payment_status': self.payment_status,
            'payment_method': self.payment_method,
            'recorded_by_user_id': self.recorded_by_user_id,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<Sale {self.id} {self.customer_name}>'

"""
Payroll model
"""
from datetime import datetime
from extensions import db


class PayrollRecord(db.Model):
    """Monthly salary line for a staff member.

    Visibility follows `staff_id` (the person paid); `recorded_by_user_id`
    is the admin who entered it.
    """
    __tablename__ = 'payroll'

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    staff_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    # YYYY-MM
    month = db.Column(db.String(7), nullable=False)
    salary_amount = db.Column(db.Numeric(12, 2), nullable=False)
    payment_date = db.Column(db.Date, nullable=True)
    # pending, paid
    status = db.Column(db.String(20), nullable=False, default='pending')

    recorded_by_user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.now)
    updated_at = db.Column(db.DateTime, default=datetime.now, onupdate=datetime.now)

    def to_dict(self):
        return {
            'id': self.id,
            'staff_id': self.staff_id,
            'month': self.month,
            'salary_amount': float(self.salary_amount) if self.salary_amount is not None else 0,
            'payment_date': self.payment_date.isoformat() if self.payment_date else None,
            'status': self.status,
            'recorded_by_user_id': self.recorded_by_user_id,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

"""
Bank deposit model
"""
from datetime import datetime
from extensions import db


class Deposit(db.Model):
    """Cash banked by a staff member or admin"""
    __tablename__ = 'deposits'

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    description = db.Column(db.String(255), nullable=False)
    initiated_at = db.Column(db.DateTime, default=datetime.now, nullable=False)

    recorded_by_user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)

    def to_dict(self):
        return {
            'id': self.id,
            'amount': float(self.amount) if self.amount is not None else 0,
            'description': self.description,
            'initiated_at': self.initiated_at.isoformat() if self.initiated_at else None,
            'recorded_by_user_id': self.recorded_by_user_id,
        }

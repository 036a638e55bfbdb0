"""
Expense models: operating (vehicle/lorry) expenses and company expenses
"""
from datetime import date, datetime
from extensions import db


class Expense(db.Model):
    """Operating expense, e.g. fuel or repairs for a lorry"""
    __tablename__ = 'expenses'

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    lorry_id = db.Column(db.String(50), nullable=True)
    expense_type = db.Column(db.String(50), nullable=False)
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    description = db.Column(db.Text, nullable=True)
    expense_date = db.Column(db.Date, nullable=False, default=date.today)

    recorded_by_user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.now)

    def to_dict(self):
        return {
            'id': self.id,
            'lorry_id': self.lorry_id,
            'expense_type': self.expense_type,
            'amount': float(self.amount) if self.amount is not None else 0,
            'description': self.description,
            'expense_date': self.expense_date.isoformat() if self.expense_date else None,
            'recorded_by_user_id': self.recorded_by_user_id,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class CompanyExpense(db.Model):
    """Company-level expense; owner is the principal who initiated it"""
    __tablename__ = 'company_expenses'

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    description = db.Column(db.Text, nullable=False)
    amount = db.Column(db.Numeric(12, 2), nullable=False)

    initiated_by_user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.now)

    def to_dict(self):
        return {
            'id': self.id,
            'description': self.description,
            'amount': float(self.amount) if self.amount is not None else 0,
            'initiated_by_user_id': self.initiated_by_user_id,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

"""
Database models package
"""
from .user import User, Admin, Staff, ActivityLog
from .sale import Sale
from .expense import Expense, CompanyExpense
from .inventory import InventoryItem, StockAdjustment, StockMovement
from .payroll import PayrollRecord
from .customer import Customer, CustomerLedgerEntry
from .supplier import Supplier, SupplierLedgerEntry
from .deposit import Deposit

__all__ = [
    'User',
    'Admin',
    'Staff',
    'ActivityLog',
    'Sale',
    'Expense',
    'CompanyExpense',
    'InventoryItem',
    'StockAdjustment',
    'StockMovement',
    'PayrollRecord',
    'Customer',
    'CustomerLedgerEntry',
    'Supplier',
    'SupplierLedgerEntry',
    'Deposit'
]

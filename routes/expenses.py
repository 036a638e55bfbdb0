"""
Expenses routes - operating expenses and company expenses
"""
from datetime import date

from flask import Blueprint

from models.expense import CompanyExpense, Expense
from utils import validation as v
from utils.rbac import current_principal, require_authenticated
from utils.records import (
    create_record,
    delete_record,
    get_record,
    list_records,
    list_response,
    record_response,
    write_response,
)

expenses_bp = Blueprint('expenses', __name__)
company_expenses_bp = Blueprint('company_expenses', __name__)


def _build_expense(data):
    return Expense(
        lorry_id=v.text(data, 'lorry_id', required=False, max_length=50),
        expense_type=v.text(data, 'expense_type', max_length=50),
        amount=v.number(data, 'amount', positive=True),
        description=v.text(data, 'description', required=False),
        expense_date=v.iso_date(data, 'expense_date', default=date.today()),
    )


def _build_company_expense(data):
    return CompanyExpense(
        description=v.text(data, 'description'),
        amount=v.number(data, 'amount', positive=True),
    )


# ---------------------------------------------------------------------------
# /api/expenses
# ---------------------------------------------------------------------------

@expenses_bp.route('/', methods=['GET'])
@require_authenticated
def get_expenses():
    items, pagination = list_records(
        Expense, 'expenses', current_principal(), order_by=Expense.expense_date.desc()
    )
    return list_response(items, pagination)


@expenses_bp.route('/<int:expense_id>', methods=['GET'])
@require_authenticated
def get_expense(expense_id):
    return record_response(get_record(Expense, 'expenses', current_principal(), expense_id))


@expenses_bp.route('/', methods=['POST'])
@require_authenticated
def create_expense():
    expense = create_record('expenses', current_principal(), _build_expense)
    return write_response(expense.id, 201, 'Expense recorded')


@expenses_bp.route('/', methods=['DELETE'])
@require_authenticated
def delete_expense():
    deleted_id = delete_record(Expense, 'expenses', current_principal())
    return write_response(deleted_id, message=f'Record {deleted_id} deleted')


# ---------------------------------------------------------------------------
# /api/company-expenses
# ---------------------------------------------------------------------------

@company_expenses_bp.route('/', methods=['GET'])
@require_authenticated
def get_company_expenses():
    items, pagination = list_records(
        CompanyExpense, 'company_expenses', current_principal(),
        order_by=CompanyExpense.created_at.desc(),
    )
    return list_response(items, pagination)


@company_expenses_bp.route('/<int:expense_id>', methods=['GET'])
@require_authenticated
def get_company_expense(expense_id):
    return record_response(
        get_record(CompanyExpense, 'company_expenses', current_principal(), expense_id)
    )


@company_expenses_bp.route('/', methods=['POST'])
@require_authenticated
def create_company_expense():
    expense = create_record('company_expenses', current_principal(), _build_company_expense)
    return write_response(expense.id, 201, 'Company expense recorded')


@company_expenses_bp.route('/', methods=['DELETE'])
@require_authenticated
def delete_company_expense():
    deleted_id = delete_record(CompanyExpense, 'company_expenses', current_principal())
    return write_response(deleted_id, message=f'Record {deleted_id} deleted')

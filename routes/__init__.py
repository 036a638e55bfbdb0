"""
API Routes package
"""
from .auth import auth_bp
from .sales import sales_bp
from .expenses import expenses_bp, company_expenses_bp
from .inventory import inventory_bp, stock_adjustments_bp, stock_movements_bp
from .payroll import payroll_bp
from .customers import customers_bp, customer_ledger_bp
from .suppliers import suppliers_bp, supplier_ledger_bp
from .deposits import deposits_bp

__all__ = [
    'auth_bp',
    'sales_bp',
    'expenses_bp',
    'company_expenses_bp',
    'inventory_bp',
    'stock_adjustments_bp',
    'stock_movements_bp',
    'payroll_bp',
    'customers_bp',
    'customer_ledger_bp',
    'suppliers_bp',
    'supplier_ledger_bp',
    'deposits_bp'
]


def register_blueprints(app):
    """Register all API blueprints"""
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(sales_bp, url_prefix='/api/sales')
    app.register_blueprint(expenses_bp, url_prefix='/api/expenses')
    app.register_blueprint(company_expenses_bp, url_prefix='/api/company-expenses')
    app.register_blueprint(inventory_bp, url_prefix='/api/inventory')
    app.register_blueprint(stock_adjustments_bp, url_prefix='/api/stock-adjustments')
    app.register_blueprint(stock_movements_bp, url_prefix='/api/stock-movements')
    app.register_blueprint(payroll_bp, url_prefix='/api/payroll')
    app.register_blueprint(customers_bp, url_prefix='/api/customers')
    app.register_blueprint(customer_ledger_bp, url_prefix='/api/customer-ledger')
    app.register_blueprint(suppliers_bp, url_prefix='/api/suppliers')
    app.register_blueprint(supplier_ledger_bp, url_prefix='/api/supplier-ledger')
    app.register_blueprint(deposits_bp, url_prefix='/api/deposits')

    return app

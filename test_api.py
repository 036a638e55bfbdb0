"""
Backend API Tests using pytest

Run with: pytest test_api.py -v

Note: These tests run against an in-memory SQLite database created per test
(see conftest.py); no MySQL server is needed.
"""

import json

import pytest
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from extensions import db
from models.deposit import Deposit
from models.inventory import InventoryItem
from models.user import ActivityLog


def _data(response):
    return json.loads(response.data)


def _create(client, path, headers, payload):
    response = client.post(path, json=payload, headers=headers)
    assert response.status_code == 201, response.data
    return _data(response)['id']


SALE = {
    'customer_name': 'Walk-in',
    'total_amount': 1500,
    'paid_amount': 500,
    'payment_method': 'cash',
}

ITEM = {
    'item_name': 'Cement 40kg',
    'quantity': 10,
    'unit_price': 250,
    'reorder_level': 5,
}


class TestScenarios:
    """End-to-end authorization scenarios"""

    def test_staff_negative_quantity_is_forbidden(self, client, staff_headers):
        response = client.post('/api/inventory', json={**ITEM, 'quantity': -5}, headers=staff_headers)

        assert response.status_code == 403
        assert 'negative quantity' in _data(response)['message']
        assert InventoryItem.query.count() == 0

    def test_admin_may_record_negative_quantity(self, client, admin_headers):
        response = client.post('/api/inventory', json={**ITEM, 'quantity': -5}, headers=admin_headers)

        assert response.status_code == 201
        item = db.session.get(InventoryItem, _data(response)['id'])
        assert item.quantity == -5

    def test_staff_cannot_change_unit_price(self, client, staff_headers):
        item_id = _create(client, '/api/inventory', staff_headers, ITEM)

        response = client.put('/api/inventory', json={'id': item_id, 'unit_price': 1}, headers=staff_headers)

        assert response.status_code == 403
        assert _data(response)['message'] == 'Forbidden: Staff cannot modify unit_price'
        db.session.expire_all()
        assert float(db.session.get(InventoryItem, item_id).unit_price) == 250

    def test_unauthenticated_sales_list(self, client):
        response = client.get('/api/sales')

        assert response.status_code == 401
        assert _data(response) == {'message': 'Unauthorized'}

    def test_admin_deletes_missing_sale(self, client, admin_headers):
        response = client.delete('/api/sales?id=42', headers=admin_headers)

        assert response.status_code == 404
        assert _data(response) == {'error': 'Sale record not found'}


class TestSalesRoutes:
    """Test sales endpoints"""

    def test_create_and_read_back(self, client, staff, staff_headers):
        sale_id = _create(client, '/api/sales', staff_headers, SALE)

        response = client.get(f'/api/sales/{sale_id}', headers=staff_headers)
        assert response.status_code == 200
        sale = _data(response)['data']
        assert sale['recorded_by_user_id'] == staff.id
        assert sale['total_amount'] == 1500
        assert sale['payment_status'] == 'outstanding'

    def test_owner_is_taken_from_token_not_body(self, client, staff, other_staff, staff_headers):
        sale_id = _create(client, '/api/sales', staff_headers,
                          {**SALE, 'recorded_by_user_id': other_staff.id})

        response = client.get(f'/api/sales/{sale_id}', headers=staff_headers)
        assert _data(response)['data']['recorded_by_user_id'] == staff.id

    def test_staff_sees_only_own_sales(self, client, staff_headers, other_staff_headers, admin_headers):
        _create(client, '/api/sales', staff_headers, SALE)
        _create(client, '/api/sales', staff_headers, SALE)
        other_id = _create(client, '/api/sales', other_staff_headers, SALE)

        staff_view = _data(client.get('/api/sales', headers=staff_headers))
        admin_view = _data(client.get('/api/sales', headers=admin_headers))

        assert staff_view['pagination']['total'] == 2
        assert other_id not in [s['id'] for s in staff_view['data']]
        assert admin_view['pagination']['total'] == 3

    def test_other_staff_record_is_not_found(self, client, staff_headers, other_staff_headers):
        other_id = _create(client, '/api/sales', other_staff_headers, SALE)

        response = client.get(f'/api/sales/{other_id}', headers=staff_headers)

        assert response.status_code == 404

    def test_admin_filters_by_staff(self, client, staff, staff_headers, other_staff_headers, admin_headers):
        _create(client, '/api/sales', staff_headers, SALE)
        _create(client, '/api/sales', other_staff_headers, SALE)

        response = client.get(f'/api/sales?staff_id={staff.id}', headers=admin_headers)

        data = _data(response)
        assert data['pagination']['total'] == 1
        assert data['data'][0]['recorded_by_user_id'] == staff.id

    def test_staff_cannot_delete(self, client, staff_headers):
        sale_id = _create(client, '/api/sales', staff_headers, SALE)

        response = client.delete(f'/api/sales?id={sale_id}', headers=staff_headers)

        assert response.status_code == 403
        assert _data(response)['message'].startswith('Forbidden')

    def test_admin_delete(self, client, staff_headers, admin_headers):
        sale_id = _create(client, '/api/sales', staff_headers, SALE)

        response = client.delete(f'/api/sales?id={sale_id}', headers=admin_headers)

        assert response.status_code == 200
        assert _data(response)['id'] == sale_id
        assert client.get(f'/api/sales/{sale_id}', headers=admin_headers).status_code == 404

    def test_delete_requires_id(self, client, admin_headers):
        response = client.delete('/api/sales', headers=admin_headers)
        assert response.status_code == 400

    def test_paid_amount_cannot_exceed_total(self, client, staff_headers):
        response = client.post('/api/sales', json={**SALE, 'paid_amount': 2000}, headers=staff_headers)
        assert response.status_code == 400

    def test_create_is_audited(self, client, staff, staff_headers):
        sale_id = _create(client, '/api/sales', staff_headers, SALE)

        entry = ActivityLog.query.filter_by(entity_type='sales', entity_id=sale_id).one()
        assert entry.user_id == staff.id
        assert entry.action == 'sales.create'

    def test_sales_cannot_be_updated(self, client, admin_headers):
        response = client.put('/api/sales', json={'id': 1}, headers=admin_headers)
        assert response.status_code == 405


class TestInventoryRoutes:
    """Test inventory endpoints"""

    def test_staff_updates_own_quantity(self, client, staff_headers):
        item_id = _create(client, '/api/inventory', staff_headers, ITEM)

        response = client.put('/api/inventory', json={'id': item_id, 'quantity': 4}, headers=staff_headers)

        assert response.status_code == 200
        item = _data(client.get(f'/api/inventory/{item_id}', headers=staff_headers))['data']
        assert item['quantity'] == 4
        assert item['total_value'] == 1000
        assert item['needs_reorder'] is True

    def test_staff_cannot_update_other_staff_item(self, client, staff_headers, other_staff_headers):
        item_id = _create(client, '/api/inventory', other_staff_headers, ITEM)

        response = client.put('/api/inventory', json={'id': item_id, 'quantity': 1}, headers=staff_headers)

        assert response.status_code == 404

    def test_admin_updates_price_and_reorder_level(self, client, staff_headers, admin_headers):
        item_id = _create(client, '/api/inventory', staff_headers, ITEM)

        response = client.put(f'/api/inventory?id={item_id}',
                              json={'unit_price': 300, 'reorder_level': 2}, headers=admin_headers)

        assert response.status_code == 200
        item = db.session.get(InventoryItem, item_id)
        db.session.refresh(item)
        assert float(item.unit_price) == 300
        assert item.reorder_level == 2

    def test_update_without_fields(self, client, staff_headers):
        item_id = _create(client, '/api/inventory', staff_headers, ITEM)

        response = client.put('/api/inventory', json={'id': item_id}, headers=staff_headers)

        assert response.status_code == 400

    def test_stock_movement_same_location(self, client, staff_headers):
        response = client.post('/api/stock-movements', json={
            'item_id': 1, 'quantity_moved': 3, 'from_location_id': 2, 'to_location_id': 2
        }, headers=staff_headers)

        assert response.status_code == 400

    def test_stock_adjustment_visibility(self, client, staff_headers, other_staff_headers):
        _create(client, '/api/stock-adjustments', staff_headers,
                {'item_id': 1, 'quantity_adjusted': -2, 'reason': 'Damaged'})

        own = _data(client.get('/api/stock-adjustments', headers=staff_headers))
        other = _data(client.get('/api/stock-adjustments', headers=other_staff_headers))

        assert own['pagination']['total'] == 1
        assert other['pagination']['total'] == 0

    def test_query_id_used_when_body_id_is_null(self, client, staff_headers):
        item_id = _create(client, '/api/inventory', staff_headers, ITEM)

        response = client.put(f'/api/inventory?id={item_id}', json={'id': None, 'quantity': 8},
                              headers=staff_headers)

        assert response.status_code == 200
        assert _data(response)['id'] == item_id

    @pytest.mark.parametrize('field', ['quantity', 'reorder_level'])
    def test_oversized_integer_is_rejected(self, client, admin_headers, field):
        response = client.post('/api/inventory', json={**ITEM, field: 10 ** 20}, headers=admin_headers)

        assert response.status_code == 400
        assert _data(response) == {'error': f'{field} is out of range'}

    def test_oversized_price_is_rejected(self, client, admin_headers):
        response = client.post('/api/inventory', json={**ITEM, 'unit_price': 10 ** 15}, headers=admin_headers)
        assert response.status_code == 400


class TestPayrollRoutes:
    """Test payroll endpoints"""

    PAYROLL = {'month': '2026-09', 'salary_amount': 18000}

    def test_admin_creates_and_staff_reads_own(self, client, staff, staff_headers,
                                               other_staff_headers, admin_headers):
        record_id = _create(client, '/api/payroll', admin_headers, {**self.PAYROLL, 'staff_id': staff.id})

        own = _data(client.get('/api/payroll', headers=staff_headers))
        other = _data(client.get('/api/payroll', headers=other_staff_headers))

        assert [r['id'] for r in own['data']] == [record_id]
        assert other['data'] == []

    def test_staff_cannot_create(self, client, staff, staff_headers):
        response = client.post('/api/payroll', json={**self.PAYROLL, 'staff_id': staff.id},
                               headers=staff_headers)

        assert response.status_code == 403

    def test_staff_id_must_be_staff(self, client, admin, admin_headers):
        response = client.post('/api/payroll', json={**self.PAYROLL, 'staff_id': admin.id},
                               headers=admin_headers)

        assert response.status_code == 400

    def test_month_format(self, client, staff, admin_headers):
        response = client.post('/api/payroll', json={**self.PAYROLL, 'month': 'Sept', 'staff_id': staff.id},
                               headers=admin_headers)

        assert response.status_code == 400

    def test_payment_date_with_trailing_text(self, client, staff, admin_headers):
        response = client.post('/api/payroll', json={
            **self.PAYROLL, 'staff_id': staff.id, 'payment_date': '2026-09-30garbage'
        }, headers=admin_headers)

        assert response.status_code == 400

    @pytest.mark.parametrize('payment_date', ['2026-09-30', '2026-09-30T08:15:00'])
    def test_payment_date_forms(self, client, staff, admin_headers, payment_date):
        record_id = _create(client, '/api/payroll', admin_headers, {
            **self.PAYROLL, 'staff_id': staff.id, 'payment_date': payment_date
        })

        record = _data(client.get(f'/api/payroll/{record_id}', headers=admin_headers))['data']
        assert record['payment_date'] == '2026-09-30'


class TestReferenceDataRoutes:
    """Customers and suppliers are shared between staff"""

    SUPPLIER = {
        'name': 'Northern Aggregates',
        'contact_name': 'Ana Reyes',
        'phone': '0917 555 0101',
        'email': 'orders@northern.example',
    }

    def test_customers_are_visible_to_all_staff(self, client, staff_headers, other_staff_headers):
        _create(client, '/api/customers', staff_headers, {'name': 'Lito Garcia', 'phone': '0918 111 2222'})

        response = client.get('/api/customers?search=lito', headers=other_staff_headers)

        assert _data(response)['pagination']['total'] == 1

    def test_staff_cannot_update_customer(self, client, staff_headers):
        customer_id = _create(client, '/api/customers', staff_headers, {'name': 'Lito Garcia'})

        response = client.put('/api/customers', json={'id': customer_id, 'name': 'X'}, headers=staff_headers)

        assert response.status_code == 403

    def test_admin_updates_supplier(self, client, staff_headers, admin_headers):
        supplier_id = _create(client, '/api/suppliers', staff_headers, self.SUPPLIER)

        response = client.put('/api/suppliers', json={'id': supplier_id, 'phone': '0917 000 0000'},
                              headers=admin_headers)

        assert response.status_code == 200
        supplier = _data(client.get(f'/api/suppliers/{supplier_id}', headers=staff_headers))['data']
        assert supplier['phone'] == '0917 000 0000'

    def test_supplier_email_is_validated(self, client, staff_headers):
        response = client.post('/api/suppliers', json={**self.SUPPLIER, 'email': 'nope'},
                               headers=staff_headers)

        assert response.status_code == 400

    def test_ledger_requires_existing_customer(self, client, staff_headers):
        response = client.post('/api/customer-ledger', json={
            'customer_id': 999, 'description': 'Opening balance', 'amount': 100, 'type': 'debit'
        }, headers=staff_headers)

        assert response.status_code == 400

    def test_ledger_entries_are_owner_scoped(self, client, staff_headers, other_staff_headers):
        customer_id = _create(client, '/api/customers', staff_headers, {'name': 'Lito Garcia'})
        _create(client, '/api/customer-ledger', staff_headers, {
            'customer_id': customer_id, 'description': 'Opening balance', 'amount': 100, 'type': 'debit'
        })

        other = _data(client.get(f'/api/customer-ledger?customer_id={customer_id}',
                                 headers=other_staff_headers))

        assert other['pagination']['total'] == 0

    def test_admin_deletes_customer_with_ledger(self, client, staff_headers, admin_headers):
        customer_id = _create(client, '/api/customers', staff_headers, {'name': 'Lito Garcia'})
        entry_id = _create(client, '/api/customer-ledger', staff_headers, {
            'customer_id': customer_id, 'description': 'Opening balance', 'amount': 100, 'type': 'debit'
        })

        response = client.delete(f'/api/customers?id={customer_id}', headers=admin_headers)

        assert response.status_code == 200
        assert client.get(f'/api/customer-ledger/{entry_id}', headers=admin_headers).status_code == 404

    def test_admin_deletes_supplier_with_ledger(self, client, staff_headers, admin_headers):
        supplier_id = _create(client, '/api/suppliers', staff_headers, self.SUPPLIER)
        entry_id = _create(client, '/api/supplier-ledger', staff_headers, {
            'supplier_id': supplier_id, 'transaction_type': 'purchase', 'amount': 5400,
            'description': 'Gravel delivery'
        })

        response = client.delete(f'/api/suppliers?id={supplier_id}', headers=admin_headers)

        assert response.status_code == 200
        assert client.get(f'/api/supplier-ledger/{entry_id}', headers=admin_headers).status_code == 404


class TestExpenseAndDepositRoutes:
    """Test expenses, company expenses and deposits"""

    def test_company_expense_owner(self, client, staff, staff_headers, other_staff_headers):
        expense_id = _create(client, '/api/company-expenses', staff_headers,
                             {'description': 'Office rent', 'amount': 12000})

        own = _data(client.get(f'/api/company-expenses/{expense_id}', headers=staff_headers))
        assert own['data']['initiated_by_user_id'] == staff.id
        assert client.get(f'/api/company-expenses/{expense_id}',
                          headers=other_staff_headers).status_code == 404

    def test_expense_amount_must_be_positive(self, client, staff_headers):
        response = client.post('/api/expenses', json={'expense_type': 'fuel', 'amount': 0},
                               headers=staff_headers)
        assert response.status_code == 400

    def test_deposit_total_follows_scope(self, client, staff_headers, other_staff_headers, admin_headers):
        _create(client, '/api/deposits', staff_headers, {'amount': 100.5, 'description': 'Morning cash'})
        _create(client, '/api/deposits', staff_headers, {'amount': 200, 'description': 'Evening cash'})
        _create(client, '/api/deposits', other_staff_headers, {'amount': 50, 'description': 'Cheque'})

        assert _data(client.get('/api/deposits', headers=staff_headers))['total'] == pytest.approx(300.5)
        assert _data(client.get('/api/deposits', headers=admin_headers))['total'] == pytest.approx(350.5)


class TestErrorHandling:
    """Test error handling"""

    def test_404_error(self, client):
        response = client.get('/api/nonexistent')

        assert response.status_code == 404
        assert 'error' in _data(response)

    def test_405_error(self, client, admin_headers):
        response = client.patch('/api/deposits', headers=admin_headers)

        assert response.status_code == 405

    @pytest.mark.parametrize('method, path', [
        ('put', '/api/sales'),
        ('patch', '/api/sales'),
        ('put', '/api/deposits'),
        ('put', '/api/expenses'),
        ('put', '/api/sales/'),
    ])
    def test_unsupported_verb_is_405(self, client, admin_headers, method, path):
        response = getattr(client, method)(path, json={'id': 1}, headers=admin_headers)

        assert response.status_code == 405
        assert 'Method not allowed' in _data(response)['error']

    def test_unknown_path_stays_404(self, client, admin_headers):
        response = client.put('/api/invoices', json={}, headers=admin_headers)
        assert response.status_code == 404

    def test_oversized_path_id_is_not_found(self, client, admin_headers):
        response = client.get('/api/sales/100000000000000000000', headers=admin_headers)
        assert response.status_code == 404

    @pytest.mark.parametrize('query', ['page=abc', 'limit=ten', 'page=0', 'page=100000000000000000000'])
    def test_bad_pagination(self, client, staff_headers, query):
        response = client.get(f'/api/sales?{query}', headers=staff_headers)
        assert response.status_code == 400

    def test_limit_is_clamped(self, client, staff_headers):
        response = client.get('/api/sales?limit=5000', headers=staff_headers)
        assert _data(response)['pagination']['limit'] == 200

    def test_non_object_body(self, client, staff_headers):
        response = client.post('/api/sales', json=[1, 2], headers=staff_headers)
        assert response.status_code == 400

    def test_pool_exhaustion_is_503(self, app, client):
        @app.route('/api/_pool_wait')
        def pool_wait():
            raise PoolTimeoutError('QueuePool limit of size 10 overflow 0 reached')

        response = client.get('/api/_pool_wait')

        assert response.status_code == 503
        assert response.headers['Retry-After'] == '5'
        assert 'QueuePool' not in response.get_data(as_text=True)

    def test_audit_failure_does_not_fail_the_write(self, client, staff_headers, monkeypatch):
        def broken_log(**kwargs):
            raise RuntimeError('activity_logs unavailable')

        monkeypatch.setattr('utils.records.log_activity', broken_log)

        response = client.post('/api/deposits', json={'amount': 75, 'description': 'Till float'},
                               headers=staff_headers)

        assert response.status_code == 201
        assert db.session.get(Deposit, _data(response)['id']) is not None
        assert ActivityLog.query.count() == 0


PROTECTED_ENDPOINTS = [('get', '/api/auth/me')] + [
    (method, path)
    for path in (
        '/api/sales', '/api/expenses', '/api/company-expenses', '/api/inventory',
        '/api/stock-adjustments', '/api/stock-movements', '/api/payroll', '/api/customers',
        '/api/customer-ledger', '/api/suppliers', '/api/supplier-ledger', '/api/deposits',
    )
    for method in ('get', 'post', 'delete')
] + [
    ('put', path) for path in ('/api/inventory', '/api/payroll', '/api/customers', '/api/suppliers')
] + [
    ('get', '/api/sales/1'),
    ('get', '/api/customers/1'),
]


class TestUnauthenticatedAccess:
    """Every protected endpoint rejects requests without a bearer token"""

    @pytest.mark.parametrize('method, path', PROTECTED_ENDPOINTS)
    def test_missing_token_is_401(self, client, method, path):
        response = getattr(client, method)(path, json={'id': 1})

        assert response.status_code == 401
        assert _data(response) == {'message': 'Unauthorized'}

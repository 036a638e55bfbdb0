"""Per-resource scoping policy.

One declarative `ResourcePolicy` per resource type decides which roles may
run each operation, which rows a role may see or touch, and which fields a
role may not set. Route handlers never branch on the role themselves; they
ask `scope_filter` for a `RowFilter` and apply it to their query.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional

from utils.errors import ForbiddenFieldMutation, ForbiddenFieldValue, ForbiddenRole
from utils.rbac import ADMIN, STAFF, Principal

READ = 'read'
CREATE = 'create'
UPDATE = 'update'
DELETE = 'delete'
OPERATIONS = (READ, CREATE, UPDATE, DELETE)

# Read scopes
OWNER = 'owner'
GLOBAL = 'global'

ANY_ROLE = frozenset({ADMIN, STAFF})
ADMIN_ONLY = frozenset({ADMIN})
NOBODY = frozenset()


@dataclass(frozen=True)
class ResourcePolicy:
    label: str
    plural: str
    owner_column: str = 'recorded_by_user_id'
    recorded_by_column: str = 'recorded_by_user_id'
    read_scope: str = OWNER
    read_roles: frozenset = ANY_ROLE
    create_roles: frozenset = ANY_ROLE
    update_roles: frozenset = NOBODY
    delete_roles: frozenset = ADMIN_ONLY
    # role -> fields that role may not send on update
    restricted_update_fields: Mapping[str, frozenset] = field(default_factory=dict)
    # role -> fields that must not be negative on create for that role
    non_negative_create_fields: Mapping[str, frozenset] = field(default_factory=dict)

    def roles_for(self, operation: str) -> frozenset:
        return {
            READ: self.read_roles,
            CREATE: self.create_roles,
            UPDATE: self.update_roles,
            DELETE: self.delete_roles,
        }[operation]


POLICIES = {
    'sales': ResourcePolicy('Sale record', 'sales records'),
    'expenses': ResourcePolicy('Expense record', 'expense records'),
    'company_expenses': ResourcePolicy(
        'Company expense',
        'company expenses',
        owner_column='initiated_by_user_id',
        recorded_by_column='initiated_by_user_id',
    ),
    'inventory': ResourcePolicy(
        'Inventory record',
        'inventory records',
        update_roles=ANY_ROLE,
        restricted_update_fields={STAFF: frozenset({'unit_price', 'reorder_level'})},
        non_negative_create_fields={STAFF: frozenset({'quantity'})},
    ),
    'payroll': ResourcePolicy(
        'Payroll record',
        'payroll records',
        owner_column='staff_id',
        create_roles=ADMIN_ONLY,
        update_roles=ADMIN_ONLY,
    ),
    'customers': ResourcePolicy(
        'Customer record', 'customer records', read_scope=GLOBAL, update_roles=ADMIN_ONLY,
    ),
    'suppliers': ResourcePolicy(
        'Supplier', 'suppliers', read_scope=GLOBAL, update_roles=ADMIN_ONLY,
    ),
    'customer_ledger': ResourcePolicy('Ledger entry', 'ledger entries'),
    'supplier_ledger': ResourcePolicy('Ledger entry', 'ledger entries'),
    'deposits': ResourcePolicy('Deposit', 'deposits'),
    'stock_adjustments': ResourcePolicy('Adjustment record', 'adjustment records'),
    'stock_movements': ResourcePolicy('Movement record', 'movement records'),
}


def get_policy(resource_type: str) -> ResourcePolicy:
    try:
        return POLICIES[resource_type]
    except KeyError:
        raise ValueError(f'No scoping policy for resource type {resource_type!r}')


@dataclass(frozen=True)
class RowFilter:
    """Row restriction for one principal on one resource.

    An empty filter means every row. Otherwise only rows whose
    `owner_column` equals `owner_id` qualify; the id is always bound as a
    query parameter.
    """

    owner_column: Optional[str] = None
    owner_id: Optional[int] = None

    @property
    def unrestricted(self) -> bool:
        return self.owner_column is None

    def apply(self, query, model):
        if self.unrestricted:
            return query
        return query.filter(getattr(model, self.owner_column) == self.owner_id)


def scope_filter(principal: Principal, operation: str, resource_type: str) -> RowFilter:
    """Authorize `operation` for the principal's role and return its row filter."""
    if operation not in OPERATIONS:
        raise ValueError(f'Unknown operation {operation!r}')
    policy = get_policy(resource_type)

    allowed = policy.roles_for(operation)
    if principal.role not in allowed:
        if allowed == ADMIN_ONLY:
            raise ForbiddenRole(f'Admins only can {operation} {policy.plural}')
        raise ForbiddenRole(f'{principal.role} cannot {operation} {policy.plural}')

    if principal.role == ADMIN or operation == CREATE:
        return RowFilter()
    if operation == READ and policy.read_scope == GLOBAL:
        return RowFilter()
    return RowFilter(policy.owner_column, principal.id)


def check_update_fields(principal: Principal, resource_type: str, payload: dict) -> None:
    """Reject an update outright when it names a field the role may not set."""
    policy = get_policy(resource_type)
    restricted = policy.restricted_update_fields.get(principal.role, frozenset())
    present = sorted(restricted.intersection(payload))
    if present:
        raise ForbiddenFieldMutation(
            f'{principal.role.capitalize()} cannot modify {" or ".join(present)}'
        )


def check_create_values(principal: Principal, resource_type: str, payload: dict) -> None:
    """Reject a create whose payload carries a negative value the role may not record."""
    policy = get_policy(resource_type)
    for name in sorted(policy.non_negative_create_fields.get(principal.role, frozenset())):
        value = payload.get(name)
        if isinstance(value, bool) or value is None:
            continue
        try:
            negative = float(value) < 0
        except (TypeError, ValueError):
            # Left for field validation to report
            continue
        if negative:
            raise ForbiddenFieldValue(
                f'{principal.role.capitalize()} cannot record negative {name} adjustments'
            )

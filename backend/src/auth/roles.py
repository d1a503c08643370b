"""Requester roles and permission hierarchy for the storefront.

Role Hierarchy (descending permissions):
- ADMIN: Full dashboard access, may read any customer's orders
- SUPPLIER: Product and fulfillment dashboard
- CUSTOMER: Storefront; reads and converts their own orders only
"""

from enum import Enum


class UserRole(str, Enum):
    """Roles carried in the `role` claim of access tokens."""
    ADMIN = "ADMIN"
    SUPPLIER = "SUPPLIER"
    CUSTOMER = "CUSTOMER"


# Role hierarchy: Each role includes permissions of all roles below it
ROLE_HIERARCHY = {
    UserRole.ADMIN: {UserRole.ADMIN, UserRole.SUPPLIER, UserRole.CUSTOMER},
    UserRole.SUPPLIER: {UserRole.SUPPLIER, UserRole.CUSTOMER},
    UserRole.CUSTOMER: {UserRole.CUSTOMER},
}


def has_permission(user_role: UserRole, required_role: UserRole) -> bool:
    """Check if a role satisfies an action requiring `required_role`.

    Examples:
        >>> has_permission(UserRole.ADMIN, UserRole.SUPPLIER)
        True
        >>> has_permission(UserRole.CUSTOMER, UserRole.ADMIN)
        False
    """
    return required_role in ROLE_HIERARCHY.get(user_role, set())


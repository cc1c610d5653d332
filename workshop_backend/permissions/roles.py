# permissions/roles.py

from __future__ import annotations

from typing import Optional

from rest_framework.permissions import BasePermission


# =========================================================
# ROLE CONSTANTS (STAFF JOB ROLES)
# =========================================================
# Roles are resolved from Django auth Group names.
# Superusers are always treated as admin.
ROLE_ADMIN = "admin"
ROLE_MANAGER = "manager"
ROLE_ADVISOR = "advisor"  # service advisor / front desk
ROLE_MECHANIC = "mechanic"
ROLE_WAREHOUSE = "warehouse"

STAFF_ROLES = {
    ROLE_ADMIN,
    ROLE_MANAGER,
    ROLE_ADVISOR,
    ROLE_MECHANIC,
    ROLE_WAREHOUSE,
}

# Highest privilege first; a user in several groups gets the first match.
ROLE_PRECEDENCE = (
    ROLE_ADMIN,
    ROLE_MANAGER,
    ROLE_ADVISOR,
    ROLE_WAREHOUSE,
    ROLE_MECHANIC,
)


# =========================================================
# CAPABILITIES (THE REAL PERMISSION LANGUAGE)
# =========================================================
# Views should protect capabilities, not raw roles.
CAP_ORDERS_VIEW = "orders.view"
CAP_ORDERS_CREATE = "orders.create"
CAP_ORDERS_EDIT = "orders.edit"
CAP_ORDERS_CANCEL = "orders.cancel"
CAP_ORDERS_PAYMENTS = "orders.payments"

CAP_INVENTORY_VIEW = "inventory.view"
CAP_INVENTORY_RECEIVE = "inventory.receive"

CAP_AUDIT_VIEW = "audit.view"

ALL_CAPABILITIES = {
    CAP_ORDERS_VIEW,
    CAP_ORDERS_CREATE,
    CAP_ORDERS_EDIT,
    CAP_ORDERS_CANCEL,
    CAP_ORDERS_PAYMENTS,
    CAP_INVENTORY_VIEW,
    CAP_INVENTORY_RECEIVE,
    CAP_AUDIT_VIEW,
}


# =========================================================
# ROLE → CAPABILITY MAP (DEFAULT)
# =========================================================
ROLE_CAPABILITIES: dict[str, set[str]] = {
    ROLE_ADMIN: {
        *ALL_CAPABILITIES,
    },
    ROLE_MANAGER: {
        CAP_ORDERS_VIEW,
        CAP_ORDERS_CREATE,
        CAP_ORDERS_EDIT,
        CAP_ORDERS_CANCEL,
        CAP_ORDERS_PAYMENTS,
        CAP_INVENTORY_VIEW,
        CAP_INVENTORY_RECEIVE,
    },
    ROLE_ADVISOR: {
        CAP_ORDERS_VIEW,
        CAP_ORDERS_CREATE,
        CAP_ORDERS_EDIT,
        CAP_ORDERS_PAYMENTS,
        CAP_INVENTORY_VIEW,
    },
    ROLE_MECHANIC: {
        CAP_ORDERS_VIEW,
        # mechanics move orders through the workflow (en_proceso, pausado, ...)
        CAP_ORDERS_EDIT,
    },
    ROLE_WAREHOUSE: {
        CAP_ORDERS_VIEW,
        CAP_INVENTORY_VIEW,
        CAP_INVENTORY_RECEIVE,
    },
}


# =========================================================
# Helpers
# =========================================================
def get_user_role(user) -> Optional[str]:
    if not user or not getattr(user, "is_authenticated", False):
        return None

    if getattr(user, "is_superuser", False):
        return ROLE_ADMIN

    group_names = set(user.groups.values_list("name", flat=True))
    for role in ROLE_PRECEDENCE:
        if role in group_names:
            return role

    return None


def effective_capabilities_for(user) -> set[str]:
    role = get_user_role(user)
    return set(ROLE_CAPABILITIES.get(role, set()))


# =========================================================
# Capability Permissions
# =========================================================
class HasCapability(BasePermission):
    """
    Require a specific capability.

    Usage:
        permission_classes = [IsAuthenticated, HasCapability]
        view.required_capability = CAP_ORDERS_CANCEL
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        required = getattr(view, "required_capability", None)
        if not required:
            # If not set, deny-by-default to avoid accidental open endpoints
            return False

        return required in effective_capabilities_for(user)


class HasAnyCapability(BasePermission):
    """
    Require ANY capability from a set.

    Usage:
        view.required_any_capabilities = {CAP_ORDERS_VIEW, CAP_INVENTORY_VIEW}
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        required = getattr(view, "required_any_capabilities", None)
        if not required:
            return False

        caps = effective_capabilities_for(user)
        return any(cap in caps for cap in set(required))

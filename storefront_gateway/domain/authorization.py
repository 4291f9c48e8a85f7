"""Role-based authorization: a single allow-list membership check"""

from typing import Iterable, Optional

from storefront_gateway.domain.models import Principal

ADMIN = "admin"
SUPER_ADMIN = "super_admin"
TECHNICIAN = "technician"
CUSTOMER = "customer"

KNOWN_ROLES = frozenset({ADMIN, SUPER_ADMIN, TECHNICIAN, CUSTOMER})
ADMIN_ROLES = frozenset({ADMIN, SUPER_ADMIN})

# Role assumed for users that have no profile row yet
DEFAULT_ROLE = CUSTOMER


def is_authorized(principal: Optional[Principal], role: Optional[str], allowed_roles: Iterable[str]) -> bool:
    """
    Decide allow/deny for a caller.

    No principal is always denied, whatever the allow-list. A principal
    whose role is missing or outside `allowed_roles` is denied.
    """
    if principal is None or not principal.user_id:
        return False
    if role is None:
        return False
    return role in set(allowed_roles)

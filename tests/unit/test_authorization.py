"""Unit tests for the role allow-list check"""

import pytest
from storefront_gateway.domain.authorization import ADMIN_ROLES, KNOWN_ROLES, is_authorized
from storefront_gateway.domain.models import Principal


@pytest.mark.parametrize("role", sorted(ADMIN_ROLES))
def test_admin_roles_allowed(role):
    assert is_authorized(Principal(user_id="u1"), role, ADMIN_ROLES) is True


@pytest.mark.parametrize("role", ["technician", "customer", "", "ADMIN"])
def test_other_roles_denied(role):
    assert is_authorized(Principal(user_id="u1"), role, ADMIN_ROLES) is False


def test_missing_role_denied():
    assert is_authorized(Principal(user_id="u1"), None, ADMIN_ROLES) is False


@pytest.mark.parametrize("allowed", [ADMIN_ROLES, KNOWN_ROLES, {"customer"}, set()])
def test_absent_principal_never_allowed(allowed):
    """No role list admits a request without a session"""
    for role in KNOWN_ROLES:
        assert is_authorized(None, role, allowed) is False


def test_principal_without_user_id_denied():
    assert is_authorized(Principal(user_id=""), "admin", ADMIN_ROLES) is False

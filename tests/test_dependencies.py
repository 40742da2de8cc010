"""Unit tests for auth/dependencies.py -- ownership and role policy helpers."""

import pytest

from auth.dependencies import ensure_owner_or_admin, is_owner
from auth.models import ROLE_ADMIN, ROLE_CUSTOMER, Claims
from core.errors import AuthorizationError


def _claims(uid: int, role: str = ROLE_CUSTOMER) -> Claims:
    return Claims(id=uid, email=f"u{uid}@example.com", role=role, issued_at=0, expires_at=0)


class TestEnsureOwnerOrAdmin:
    def test_owner_allowed(self) -> None:
        ensure_owner_or_admin(_claims(3), 3)

    def test_other_customer_denied(self) -> None:
        with pytest.raises(AuthorizationError) as exc_info:
            ensure_owner_or_admin(_claims(3), 4)
        assert exc_info.value.status_code == 403

    def test_unowned_record_denied_to_customer(self) -> None:
        with pytest.raises(AuthorizationError):
            ensure_owner_or_admin(_claims(3), None)

    @pytest.mark.parametrize("owner_id", [1, 99, None])
    def test_admin_always_allowed(self, owner_id) -> None:
        ensure_owner_or_admin(_claims(1, ROLE_ADMIN), owner_id)


class TestIsOwner:
    def test_anonymous_is_never_owner(self) -> None:
        assert not is_owner(None, 1)

    def test_matching_id(self) -> None:
        assert is_owner(_claims(2), 2)

    def test_admin_is_not_owner_of_others(self) -> None:
        assert not is_owner(_claims(1, ROLE_ADMIN), 2)

    def test_unowned_record(self) -> None:
        assert not is_owner(_claims(2), None)

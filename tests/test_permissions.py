"""Permission bit-set helpers and the guard."""
from types import SimpleNamespace

import pytest

from storefront.exceptions import AuthError, PermissionDeniedError
from storefront.permissions import (
    NO_PERMISSIONS,
    Permission,
    PermissionSet,
    from_names,
    has_any_permission,
    require_any_permission,
    require_signed_in,
    to_names,
)


def test_names_round_trip_in_declaration_order():
    flags = from_names(["PERMISSIONUPDATE", "USER", "USER"])
    assert flags == Permission.USER | Permission.PERMISSIONUPDATE
    assert to_names(flags) == ["USER", "PERMISSIONUPDATE"]


def test_empty_set():
    assert from_names([]) == NO_PERMISSIONS
    assert to_names(NO_PERMISSIONS) == []


def test_unknown_name_raises():
    with pytest.raises(KeyError):
        from_names(["ROOT"])


def test_has_any_permission_is_intersection():
    held = Permission.USER | Permission.ITEMDELETE
    assert has_any_permission(held, Permission.ADMIN | Permission.ITEMDELETE)
    assert not has_any_permission(held, Permission.ADMIN | Permission.PERMISSIONUPDATE)
    assert not has_any_permission(NO_PERMISSIONS, Permission.USER)


def test_require_any_permission():
    admin = SimpleNamespace(permissions=Permission.ADMIN)
    plain = SimpleNamespace(permissions=Permission.USER)

    require_any_permission(admin, Permission.ADMIN | Permission.PERMISSIONUPDATE)
    with pytest.raises(PermissionDeniedError) as excinfo:
        require_any_permission(plain, Permission.ADMIN | Permission.PERMISSIONUPDATE)
    assert "ADMIN, PERMISSIONUPDATE" in str(excinfo.value)
    assert "You have: USER" in str(excinfo.value)


def test_require_signed_in():
    user = object()
    assert require_signed_in(user) is user
    with pytest.raises(AuthError):
        require_signed_in(None)


def test_permission_set_column_type():
    column_type = PermissionSet()
    stored = column_type.process_bind_param(Permission.USER | Permission.ADMIN, None)
    assert stored == 3
    assert column_type.process_result_value(stored, None) == Permission.USER | Permission.ADMIN
    assert column_type.process_result_value(None, None) is None

"""
Permission model and guard.

Permissions form a closed enumeration stored as a bit-set on the user row.
``Permission`` is an ``enum.IntFlag`` so that a whole permission set is a
single integer and "does the user hold any of these?" is one bitwise AND.
The API speaks in permission *names* (``["USER", "ADMIN"]``); the helpers
below convert between names and flags.
"""
from __future__ import annotations

import enum
from typing import Iterable

from sqlalchemy import Integer
from sqlalchemy.types import TypeDecorator

from storefront.exceptions import AuthError, PermissionDeniedError


class Permission(enum.IntFlag):
    USER = enum.auto()
    ADMIN = enum.auto()
    ITEMCREATE = enum.auto()
    ITEMUPDATE = enum.auto()
    ITEMDELETE = enum.auto()
    PERMISSIONUPDATE = enum.auto()


NO_PERMISSIONS = Permission(0)

# Every flag in declaration order, used for stable name listings.
ALL_PERMISSIONS: tuple[Permission, ...] = tuple(Permission.__members__.values())


def from_names(names: Iterable[str]) -> Permission:
    """Fold permission names into a single flag value.

    Raises KeyError for a name outside the enumeration; request schemas
    validate names before they get here.
    """
    flags = NO_PERMISSIONS
    for name in names:
        flags |= Permission[name]
    return flags


def to_names(flags: Permission | int) -> list[str]:
    """Return the names of every permission set in *flags*."""
    flags = Permission(flags)
    return [p.name for p in ALL_PERMISSIONS if p in flags]


def has_any_permission(held: Permission | int, required: Permission) -> bool:
    return bool(Permission(held) & required)


def require_signed_in(user, message: str = "You must be logged in to do that!"):
    """Return *user*, or raise ``AuthError`` when there is no session."""
    if user is None:
        raise AuthError(message)
    return user


def require_any_permission(user, required: Permission) -> None:
    """
    Raise ``PermissionDeniedError`` unless *user* holds at least one of the
    permissions in *required*.
    """
    if not has_any_permission(user.permissions, required):
        raise PermissionDeniedError(
            f"You do not have sufficient permissions: "
            f"{', '.join(to_names(required))}. "
            f"You have: {', '.join(to_names(user.permissions)) or 'none'}"
        )


class PermissionSet(TypeDecorator):
    """Persist a ``Permission`` flag value as a plain integer column."""

    impl = Integer
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return int(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Permission(value)

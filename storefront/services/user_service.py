"""
User service: read side for users and the permission editor.

Users are fetched without caching: the list is admin-only, small, and must
reflect permission edits immediately.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from storefront.exceptions import NotFoundError
from storefront.models import User
from storefront.permissions import (
    Permission,
    from_names,
    require_any_permission,
    require_signed_in,
    to_names,
)
from storefront.repositories import UserRepository
from storefront.schemas import MeResponse, UserResponse

logger = logging.getLogger(__name__)

USER_ADMIN_PERMISSIONS = Permission.ADMIN | Permission.PERMISSIONUPDATE


def _user_to_dict(user: User) -> dict:
    return UserResponse.model_validate(user).model_dump(mode="json")


async def get_me(db: AsyncSession, user: User | None) -> dict | None:
    """Return the signed-in user with their cart, or None without a session."""
    if user is None:
        return None
    me = await UserRepository(db).get_with_cart(user.id)
    if me is None:
        return None
    return MeResponse.model_validate(me).model_dump(mode="json")


async def get_users(db: AsyncSession, user: User | None) -> list[dict]:
    user = require_signed_in(user, "You must be logged in!")
    require_any_permission(user, USER_ADMIN_PERMISSIONS)

    return [_user_to_dict(u) for u in await UserRepository(db).list_all()]


async def update_permissions(
    db: AsyncSession, user: User | None, target_id: int, permissions: list[str]
) -> dict:
    """
    Replace the permission set of user *target_id* with *permissions*.

    The new set overwrites the old one; nothing is merged.
    """
    user = require_signed_in(user, "You must be logged in!")
    require_any_permission(user, USER_ADMIN_PERMISSIONS)

    users = UserRepository(db)
    target = await users.get(target_id)
    if target is None:
        raise NotFoundError(f"No user found for id {target_id}")

    await users.update(target, permissions=from_names(permissions))
    logger.info(
        "User %s set permissions of user %s to %s",
        user.id,
        target_id,
        to_names(target.permissions),
    )
    return _user_to_dict(target)

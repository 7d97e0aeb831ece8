"""
Item service: business logic for the Item aggregate.

Design notes
------------
- Public reads (``get_items``, ``get_item``, ``items_connection``) go
  through the cache-aside pattern (Redis, falling back to the DB). Cache
  keys encode every dimension that affects the result.
- Every write invalidates the listing and count caches, and the detail
  entry of the affected item.
- Writes are authorised here, not in the router: creating needs a session,
  updating and deleting need ownership or the matching item permission.
- Service functions flush but do not commit; the transaction boundary is
  owned by the ``get_db`` dependency in the router layer.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from storefront.cache import cache
from storefront.config import settings
from storefront.exceptions import NotFoundError, PermissionDeniedError
from storefront.models import Item, User
from storefront.permissions import Permission, has_any_permission, require_signed_in
from storefront.repositories import ItemRepository
from storefront.schemas import ItemCreate, ItemResponse, ItemUpdate

logger = logging.getLogger(__name__)

# Holding any of these lets a user change or remove someone else's item.
ITEM_UPDATE_PERMISSIONS = Permission.ADMIN | Permission.ITEMUPDATE
ITEM_DELETE_PERMISSIONS = Permission.ADMIN | Permission.ITEMDELETE


def _item_to_dict(item: Item) -> dict:
    return ItemResponse.model_validate(item).model_dump(mode="json")


def _authorize_item_write(user: User, item: Item, allowed: Permission) -> None:
    """Owners may always write their item; others need one of *allowed*."""
    if item.user_id == user.id or has_any_permission(user.permissions, allowed):
        return
    raise PermissionDeniedError("You do not have permission to do that")


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

async def get_items(
    db: AsyncSession,
    skip: int = 0,
    first: int | None = None,
    order_by: str = "created_at",
    order: str = "desc",
) -> list[dict]:
    """Return one page of items, newest first by default."""
    cache_key = f"items:list:{skip}:{first}:{order_by}:{order}"
    cached = await cache.get(cache_key)
    if cached is not None:
        return cached

    items = await ItemRepository(db).list_page(skip=skip, first=first, order_by=order_by, order=order)
    data = [_item_to_dict(i) for i in items]
    await cache.set(cache_key, data, ttl=settings.CACHE_TTL_LIST)
    return data


async def get_item(db: AsyncSession, item_id: int) -> dict:
    cache_key = f"items:detail:{item_id}"
    cached = await cache.get(cache_key)
    if cached is not None:
        return cached

    item = await ItemRepository(db).get(item_id)
    if item is None:
        raise NotFoundError(f"No item found for id {item_id}")

    data = _item_to_dict(item)
    await cache.set(cache_key, data, ttl=settings.CACHE_TTL_DETAIL)
    return data


async def items_connection(db: AsyncSession) -> dict:
    """Return the aggregate item count used for pagination."""
    cached = await cache.get("items:count")
    if cached is not None:
        return cached

    data = {"aggregate": {"count": await ItemRepository(db).count()}}
    await cache.set("items:count", data, ttl=settings.CACHE_TTL_LIST)
    return data


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------

async def create_item(db: AsyncSession, user: User | None, data: ItemCreate) -> dict:
    """Create an item owned by the signed-in *user*."""
    user = require_signed_in(user)
    item = await ItemRepository(db).create(user_id=user.id, **data.model_dump())
    logger.info("Item %s created by user %s", item.id, user.id)

    await cache.invalidate_items()
    return _item_to_dict(item)


async def update_item(
    db: AsyncSession, user: User | None, item_id: int, data: ItemUpdate
) -> dict:
    """
    Apply the fields explicitly set in *data* to the item.

    The id and owner are never part of the update payload.
    """
    user = require_signed_in(user)
    repo = ItemRepository(db)
    item = await repo.get(item_id)
    if item is None:
        raise NotFoundError(f"No item found for id {item_id}")
    _authorize_item_write(user, item, ITEM_UPDATE_PERMISSIONS)

    updates = data.model_dump(exclude_unset=True)
    await repo.update(item, **updates)

    await cache.invalidate_items(item_id)
    return _item_to_dict(item)


async def delete_item(db: AsyncSession, user: User | None, item_id: int) -> dict:
    """Delete the item and return what it was."""
    user = require_signed_in(user)
    repo = ItemRepository(db)
    item = await repo.get(item_id)
    if item is None:
        raise NotFoundError(f"No item found for id {item_id}")
    _authorize_item_write(user, item, ITEM_DELETE_PERMISSIONS)

    data = _item_to_dict(item)
    await repo.delete(item)
    logger.info("Item %s deleted by user %s", item_id, user.id)

    await cache.invalidate_items(item_id)
    return data

"""
Per-entity repositories over an ``AsyncSession``.

Each repository is the only place that builds SQL for its entity. The
contracts:

- ``get(id)`` returns the row or None.
- ``find_*`` methods take explicit filter arguments and return the first
  match or None (or a list for the ``list_*`` variants).
- ``create(**fields)`` adds and flushes, so the new row has its id.
- ``update(row, **fields)`` assigns only the given attributes and flushes.
- ``delete(row)`` deletes and flushes.

Repositories flush but never commit; the transaction boundary belongs to
the ``get_db`` dependency.
"""
from datetime import datetime
from typing import Any, Sequence

from sqlalchemy import asc, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront.models import CartItem, Item, User

# Columns items may be ordered by.
_ITEM_SORTABLE_COLUMNS: frozenset[str] = frozenset({"created_at", "price", "title"})


class _Repository:
    model: type

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get(self, pk: int):
        return await self.db.get(self.model, pk)

    async def create(self, **fields: Any):
        row = self.model(**fields)
        self.db.add(row)
        await self.db.flush()
        # Load server-side defaults (timestamps) while we are still async.
        await self.db.refresh(row)
        return row

    async def update(self, row, **fields: Any):
        for field, value in fields.items():
            setattr(row, field, value)
        await self.db.flush()
        return row

    async def delete(self, row) -> None:
        await self.db.delete(row)
        await self.db.flush()

    async def count(self) -> int:
        q = select(func.count()).select_from(self.model)
        return (await self.db.execute(q)).scalar_one()


class UserRepository(_Repository):
    model = User

    async def find_by_email(self, email: str) -> User | None:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def find_by_reset_token(self, token: str, valid_at: datetime) -> User | None:
        """
        Return the user holding *token* whose expiry has not passed at
        *valid_at*, or None.
        """
        q = select(User).where(
            User.reset_token == token,
            User.reset_token_expiry.is_not(None),
            User.reset_token_expiry >= valid_at,
        )
        result = await self.db.execute(q)
        return result.scalars().first()

    async def get_with_cart(self, user_id: int) -> User | None:
        q = (
            select(User)
            .where(User.id == user_id)
            .options(selectinload(User.cart).joinedload(CartItem.item))
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(q)
        return result.unique().scalar_one_or_none()

    async def list_all(self) -> Sequence[User]:
        result = await self.db.execute(select(User).order_by(User.id))
        return result.scalars().all()


class ItemRepository(_Repository):
    model = Item

    async def list_page(
        self,
        skip: int = 0,
        first: int | None = None,
        order_by: str = "created_at",
        order: str = "desc",
    ) -> Sequence[Item]:
        column = getattr(Item, order_by) if order_by in _ITEM_SORTABLE_COLUMNS else Item.created_at
        direction = desc if order == "desc" else asc
        q = select(Item).order_by(direction(column), direction(Item.id)).offset(skip)
        if first is not None:
            q = q.limit(first)
        result = await self.db.execute(q)
        return result.scalars().all()


class CartItemRepository(_Repository):
    model = CartItem

    async def find_for_user_and_item(self, user_id: int, item_id: int) -> CartItem | None:
        q = select(CartItem).where(CartItem.user_id == user_id, CartItem.item_id == item_id)
        result = await self.db.execute(q)
        return result.scalar_one_or_none()


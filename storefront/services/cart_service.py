"""
Cart service.

A user's cart holds at most one row per item; adding an item that is
already there bumps its quantity instead of inserting a second row. The
lookup and the increment are two statements, so two concurrent adds of the
same item can race; the (user_id, item_id) unique constraint rejects the
losing insert, which is reported as a ``ValidationError``.
"""
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.exceptions import NotFoundError, ValidationError
from storefront.models import User
from storefront.permissions import require_signed_in
from storefront.repositories import CartItemRepository, ItemRepository
from storefront.schemas import CartItemResponse

logger = logging.getLogger(__name__)


async def add_to_cart(db: AsyncSession, user: User | None, item_id: int) -> dict:
    user = require_signed_in(user, "You must be signed in to add to your cart")

    item = await ItemRepository(db).get(item_id)
    if item is None:
        raise NotFoundError(f"No item found for id {item_id}")

    carts = CartItemRepository(db)
    cart_item = await carts.find_for_user_and_item(user.id, item_id)
    if cart_item is not None:
        logger.debug("Item %s already in cart of user %s", item_id, user.id)
        await carts.update(cart_item, quantity=cart_item.quantity + 1)
    else:
        try:
            cart_item = await carts.create(user_id=user.id, item_id=item_id, quantity=1)
        except IntegrityError as exc:
            logger.warning("Concurrent add of item %s to cart of user %s", item_id, user.id)
            raise ValidationError(
                "This item was just added to your cart by another request, please try again"
            ) from exc

    cart_item.item = item
    return CartItemResponse.model_validate(cart_item).model_dump(mode="json")

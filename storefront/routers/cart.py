from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.database import get_db
from storefront.dependencies import get_current_user
from storefront.models import User
from storefront.schemas import CartItemResponse
from storefront.services import cart_service

router = APIRouter(prefix="/api/v1/cart", tags=["cart"])


@router.post("/{item_id}", response_model=CartItemResponse)
async def add_to_cart(
    item_id: int,
    user: User | None = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await cart_service.add_to_cart(db, user, item_id)

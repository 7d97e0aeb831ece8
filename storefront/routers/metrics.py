from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.cache import cache
from storefront.database import get_db
from storefront.repositories import CartItemRepository, ItemRepository, UserRepository
from storefront.schemas import MetricsResponse

router = APIRouter(prefix="/api/v1/metrics", tags=["metrics"])


@router.get("", response_model=MetricsResponse)
async def get_metrics(db: AsyncSession = Depends(get_db)):
    return MetricsResponse(
        total_items=await ItemRepository(db).count(),
        total_users=await UserRepository(db).count(),
        total_cart_items=await CartItemRepository(db).count(),
        cache_info=cache.stats,
    )

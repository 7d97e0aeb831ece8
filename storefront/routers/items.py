from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.database import get_db
from storefront.dependencies import PaginationParams, get_current_user
from storefront.models import User
from storefront.schemas import ItemCreate, ItemResponse, ItemsConnection, ItemUpdate
from storefront.services import item_service

router = APIRouter(prefix="/api/v1/items", tags=["items"])


@router.get("", response_model=list[ItemResponse])
async def list_items(
    pagination: PaginationParams = Depends(),
    db: AsyncSession = Depends(get_db),
):
    return await item_service.get_items(
        db, pagination.skip, pagination.first, pagination.order_by, pagination.order
    )


@router.get("/connection", response_model=ItemsConnection)
async def items_connection(db: AsyncSession = Depends(get_db)):
    return await item_service.items_connection(db)


@router.get("/{item_id}", response_model=ItemResponse)
async def get_item(item_id: int, db: AsyncSession = Depends(get_db)):
    return await item_service.get_item(db, item_id)


@router.post("", status_code=201, response_model=ItemResponse)
async def create_item(
    data: ItemCreate,
    user: User | None = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await item_service.create_item(db, user, data)


@router.put("/{item_id}", response_model=ItemResponse)
async def update_item(
    item_id: int,
    data: ItemUpdate,
    user: User | None = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await item_service.update_item(db, user, item_id, data)


@router.delete("/{item_id}", response_model=ItemResponse)
async def delete_item(
    item_id: int,
    user: User | None = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await item_service.delete_item(db, user, item_id)

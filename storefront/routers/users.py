from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.database import get_db
from storefront.dependencies import get_current_user
from storefront.models import User
from storefront.schemas import MeResponse, PermissionsUpdate, UserResponse
from storefront.services import user_service

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.get("/me", response_model=MeResponse | None)
async def me(
    user: User | None = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.get_me(db, user)


@router.get("", response_model=list[UserResponse])
async def list_users(
    user: User | None = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.get_users(db, user)


@router.put("/{user_id}/permissions", response_model=UserResponse)
async def update_permissions(
    user_id: int,
    data: PermissionsUpdate,
    user: User | None = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.update_permissions(db, user, user_id, data.permissions)

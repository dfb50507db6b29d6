from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from webblog.config import settings
from webblog.database import get_db
from webblog.dependencies import require_roles
from webblog.exceptions import DuplicateEntityError, EntityNotFoundError
from webblog.schemas import UserCreate, UserResponse, UserUpdate
from webblog.services import user_service

router = APIRouter(
    prefix="/User",
    tags=["users"],
    dependencies=[Depends(require_roles(settings.ADMIN_ROLE))],
)


@router.get("", response_model=list[UserResponse])
async def list_users(db: AsyncSession = Depends(get_db)):
    return [UserResponse.model_validate(u) for u in await user_service.list_users(db)]


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: int, db: AsyncSession = Depends(get_db)):
    user = await user_service.get_user(db, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return UserResponse.model_validate(user)


@router.post("", status_code=201, response_model=UserResponse)
async def create_user(data: UserCreate, db: AsyncSession = Depends(get_db)):
    try:
        user = await user_service.create_user(db, data, role_names=[settings.DEFAULT_ROLE])
    except DuplicateEntityError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    return UserResponse.model_validate(user)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(user_id: int, data: UserUpdate, db: AsyncSession = Depends(get_db)):
    try:
        user = await user_service.update_user(db, user_id, data)
    except EntityNotFoundError:
        raise HTTPException(status_code=404, detail="User not found")
    except DuplicateEntityError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    return UserResponse.model_validate(user)


@router.delete("/{user_id}", status_code=204)
async def delete_user(user_id: int, db: AsyncSession = Depends(get_db)):
    if not await user_service.delete_user(db, user_id):
        raise HTTPException(status_code=404, detail="User not found")


@router.post("/{user_id}/roles/{role_name}", response_model=UserResponse)
async def add_role_to_user(user_id: int, role_name: str, db: AsyncSession = Depends(get_db)):
    try:
        user = await user_service.add_role_to_user(db, user_id, role_name)
    except EntityNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return UserResponse.model_validate(user)


@router.delete("/{user_id}/roles/{role_name}", response_model=UserResponse)
async def remove_role_from_user(user_id: int, role_name: str, db: AsyncSession = Depends(get_db)):
    try:
        user = await user_service.remove_role_from_user(db, user_id, role_name)
    except EntityNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return UserResponse.model_validate(user)

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from webblog.config import settings
from webblog.database import get_db
from webblog.dependencies import require_roles
from webblog.exceptions import DuplicateEntityError, EntityNotFoundError
from webblog.schemas import RoleCreate, RoleResponse, RoleUpdate
from webblog.services import role_service

router = APIRouter(
    prefix="/Roles",
    tags=["roles"],
    dependencies=[Depends(require_roles(settings.ADMIN_ROLE))],
)


@router.get("", response_model=list[RoleResponse])
async def list_roles(db: AsyncSession = Depends(get_db)):
    return await role_service.list_roles(db)


@router.get("/Details/{role_id}", response_model=RoleResponse)
async def role_details(role_id: int, db: AsyncSession = Depends(get_db)):
    role = await role_service.get_role(db, role_id)
    if role is None:
        raise HTTPException(status_code=404, detail="Role not found")
    return role


@router.post("/Create", status_code=201, response_model=RoleResponse)
async def create_role(data: RoleCreate, db: AsyncSession = Depends(get_db)):
    try:
        return await role_service.create_role(db, data)
    except DuplicateEntityError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.put("/Edit/{role_id}", response_model=RoleResponse)
async def update_role(role_id: int, data: RoleUpdate, db: AsyncSession = Depends(get_db)):
    if role_id != data.id:
        raise HTTPException(status_code=400, detail="Role ID mismatch")
    try:
        return await role_service.update_role(db, data)
    except EntityNotFoundError:
        raise HTTPException(status_code=404, detail="Role not found")
    except DuplicateEntityError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.delete("/Delete/{role_id}", status_code=204)
async def delete_role(role_id: int, db: AsyncSession = Depends(get_db)):
    if not await role_service.delete_role(db, role_id):
        raise HTTPException(status_code=404, detail="Role not found")

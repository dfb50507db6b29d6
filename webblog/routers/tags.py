from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from webblog.database import get_db
from webblog.dependencies import get_current_user, require_elevated
from webblog.exceptions import DuplicateEntityError, EntityNotFoundError, UpdateFailedError
from webblog.models import User
from webblog.schemas import TagCreate, TagDetail, TagResponse, TagUpdate
from webblog.services import tag_service

router = APIRouter(prefix="/Tags", tags=["tags"])


@router.get("/GetTags", response_model=list[TagDetail])
async def list_tags(include_articles: bool = False, db: AsyncSession = Depends(get_db)):
    tags = await tag_service.list_tags(db, include_articles=include_articles)
    return [TagDetail.model_validate(t) for t in tags]


@router.get("/Details/{tag_id}", response_model=TagResponse)
async def tag_details(tag_id: int, db: AsyncSession = Depends(get_db)):
    tag = await tag_service.get_tag(db, tag_id)
    if tag is None:
        raise HTTPException(status_code=404, detail="Tag not found")
    return tag


@router.post("/Create", status_code=201, response_model=TagResponse)
async def create_tag(
    data: TagCreate,
    response: Response,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        tag = await tag_service.insert_tag(db, data)
    except DuplicateEntityError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    response.headers["Location"] = f"/Tags/Details/{tag.id}"
    return tag


@router.put("/Edit/{tag_id}", status_code=204)
async def update_tag(
    tag_id: int,
    data: TagUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    if tag_id != data.tag_id:
        raise HTTPException(status_code=400, detail="Tag ID mismatch")
    try:
        await tag_service.update_tag(db, data)
    except EntityNotFoundError:
        raise HTTPException(status_code=404, detail="Tag not found")
    except (DuplicateEntityError, UpdateFailedError) as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.delete("/Delete/{tag_id}", status_code=204)
async def delete_tag(
    tag_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_elevated),
):
    if await tag_service.get_tag(db, tag_id) is None:
        raise HTTPException(status_code=404, detail="Tag not found")
    if not await tag_service.delete_tag(db, tag_id):
        raise HTTPException(status_code=500, detail="Internal server error")

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from webblog.database import get_db
from webblog.dependencies import ensure_owner_or_elevated, get_current_user, require_elevated
from webblog.exceptions import EntityNotFoundError, UpdateFailedError
from webblog.models import User
from webblog.schemas import CommentCreate, CommentResponse, CommentUpdate
from webblog.services import comment_service

router = APIRouter(prefix="/Comments", tags=["comments"])


@router.get("/GetComments", response_model=list[CommentResponse])
async def list_comments(db: AsyncSession = Depends(get_db)):
    return await comment_service.list_comments(db)


@router.get("/GetCommentsForTheArticle", response_model=list[CommentResponse])
async def list_comments_for_article(article_id: int, db: AsyncSession = Depends(get_db)):
    return await comment_service.list_comments_for_article(db, article_id)


@router.get("/Details/{comment_id}", response_model=CommentResponse)
async def comment_details(comment_id: int, db: AsyncSession = Depends(get_db)):
    comment = await comment_service.get_comment(db, comment_id)
    if comment is None:
        raise HTTPException(status_code=404, detail="Comment not found")
    return comment


@router.post("/Create", status_code=201, response_model=CommentResponse)
async def create_comment(
    data: CommentCreate,
    response: Response,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        comment = await comment_service.add_comment(db, data, user)
    except EntityNotFoundError:
        raise HTTPException(status_code=404, detail="Article not found")
    response.headers["Location"] = f"/Comments/Details/{comment.id}"
    return comment


@router.put("/Edit/{comment_id}", status_code=204)
async def update_comment(
    comment_id: int,
    data: CommentUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    if comment_id != data.comment_id:
        raise HTTPException(status_code=400, detail="Comment ID mismatch")
    comment = await comment_service.get_comment(db, comment_id)
    if comment is None:
        raise HTTPException(status_code=404, detail="Comment not found")
    ensure_owner_or_elevated(user, comment.author_id)

    try:
        await comment_service.update_comment(db, data)
    except EntityNotFoundError:
        raise HTTPException(status_code=404, detail="Comment not found")
    except UpdateFailedError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.delete("/Delete/{comment_id}", status_code=204)
async def delete_comment(
    comment_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_elevated),
):
    if await comment_service.get_comment(db, comment_id) is None:
        raise HTTPException(status_code=404, detail="Comment not found")
    if not await comment_service.delete_comment(db, comment_id):
        raise HTTPException(status_code=500, detail="Internal server error")

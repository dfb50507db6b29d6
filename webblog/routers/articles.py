from fastapi import APIRouter, Depends, HTTPException, Response
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from webblog.database import get_db
from webblog.dependencies import (
    ArticleSortParams,
    ensure_owner_or_elevated,
    get_current_user,
    is_elevated,
)
from webblog.exceptions import ConcurrencyConflictError, EntityNotFoundError
from webblog.models import User
from webblog.schemas import (
    ArticleCreate,
    ArticleDeleteRequest,
    ArticleDeleteView,
    ArticleEditForm,
    ArticleResponse,
    ArticleUpdate,
    TagChoice,
)
from webblog.services import article_service

router = APIRouter(prefix="/Articles", tags=["articles"])

DELETE_FAILED_MESSAGE = (
    "Delete failed. Try again, and if the problem persists see your system administrator."
)


@router.get("", response_model=list[ArticleResponse])
async def list_articles(
    sorting: ArticleSortParams = Depends(),
    db: AsyncSession = Depends(get_db),
):
    articles = await article_service.list_articles(db)
    return [
        ArticleResponse.model_validate(a)
        for a in article_service.sort_articles(articles, sorting.sort_order)
    ]


@router.get("/Details/{article_id}", response_model=ArticleResponse)
async def article_details(article_id: int, db: AsyncSession = Depends(get_db)):
    await article_service.increment_view_count(db, article_id)
    article = await article_service.get_article(db, article_id)
    if article is None:
        raise HTTPException(status_code=404, detail="Article not found")
    return ArticleResponse.model_validate(article)


@router.get("/GetArticleByAuthor/{author_id}", response_model=list[ArticleResponse])
async def articles_by_author(author_id: int, db: AsyncSession = Depends(get_db)):
    articles = await article_service.list_articles_by_author(db, author_id)
    if not articles:
        raise HTTPException(status_code=404, detail="No articles for this author")
    return [ArticleResponse.model_validate(a) for a in articles]


@router.get("/Create", response_model=list[TagChoice])
async def create_article_form(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return await article_service.get_tag_choices(db)


@router.post("/Create", status_code=201, response_model=ArticleResponse)
async def create_article(
    data: ArticleCreate,
    response: Response,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    if data.author_id is not None and data.author_id != user.id and not is_elevated(user):
        raise HTTPException(status_code=403, detail="Cannot create articles for another author")
    try:
        article = await article_service.add_article(db, data, user)
    except EntityNotFoundError:
        raise HTTPException(status_code=400, detail=f"User AuthorId = {data.author_id} not found")
    if article is None:
        raise HTTPException(status_code=500, detail="Internal server error")

    response.headers["Location"] = f"/Articles/Details/{article.id}"
    return ArticleResponse.model_validate(article)


@router.get("/Edit/{article_id}", response_model=ArticleEditForm)
async def edit_article_form(
    article_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    form = await article_service.get_edit_form(db, article_id)
    if form is None:
        raise HTTPException(status_code=404, detail="Article not found")
    article, tags = form
    ensure_owner_or_elevated(user, article.author_id)
    return ArticleEditForm(article=ArticleResponse.model_validate(article), tags=tags)


@router.put("/Edit/{article_id}", response_model=ArticleResponse)
async def edit_article(
    article_id: int,
    data: ArticleUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    if article_id != data.article_id:
        raise HTTPException(status_code=404, detail="Article not found")
    article = await article_service.get_article(db, article_id)
    if article is None:
        raise HTTPException(status_code=404, detail="Article not found")
    ensure_owner_or_elevated(user, article.author_id)

    try:
        edited = await article_service.edit_article(db, data)
    except ConcurrencyConflictError:
        raise HTTPException(
            status_code=409,
            detail="The article was modified by another request; reload and try again",
        )
    if edited is None:
        raise HTTPException(status_code=404, detail="Article not found")
    return ArticleResponse.model_validate(edited)


@router.get("/Delete/{article_id}", response_model=ArticleDeleteView)
async def delete_article_view(
    article_id: int,
    save_changes_error: bool = False,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    article = await article_service.get_article(db, article_id)
    if article is None:
        raise HTTPException(status_code=404, detail="Article not found")
    ensure_owner_or_elevated(user, article.author_id)
    return ArticleDeleteView(
        article=ArticleResponse.model_validate(article),
        error_message=DELETE_FAILED_MESSAGE if save_changes_error else None,
    )


@router.delete("/Delete")
async def delete_article(
    data: ArticleDeleteRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    article = await article_service.get_article(db, data.id)
    if article is None:
        raise HTTPException(status_code=404, detail="Article not found")
    ensure_owner_or_elevated(user, article.author_id)

    if not await article_service.delete_article(db, data.id):
        return RedirectResponse(
            url=f"/Articles/Delete/{data.id}?save_changes_error=true", status_code=303
        )
    return RedirectResponse(url="/Articles", status_code=303)

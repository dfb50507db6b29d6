"""
Tag service — CRUD for Tag.

Tag names are unique and compared case-sensitively.  The duplicate check
runs here, before anything is staged, so a rejected insert or rename
leaves the store untouched.
"""
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from webblog.exceptions import DuplicateEntityError, EntityNotFoundError, UpdateFailedError
from webblog.models import Tag
from webblog.repositories import TagRepository
from webblog.schemas import TagCreate, TagUpdate

logger = logging.getLogger(__name__)


async def get_tag(db: AsyncSession, tag_id: int) -> Tag | None:
    return await TagRepository(db).get_by_id(tag_id)


async def get_tag_by_name(db: AsyncSession, name: str) -> Tag | None:
    return await TagRepository(db).get_by_name(name)


async def list_tags(db: AsyncSession, include_articles: bool = False) -> list[Tag]:
    return await TagRepository(db).list_all(include_articles=include_articles)


async def insert_tag(db: AsyncSession, data: TagCreate) -> Tag:
    """
    Persist a new tag.

    Raises:
        DuplicateEntityError: a tag with the same name already exists.
    """
    tags = TagRepository(db)
    if await tags.name_exists(data.name):
        raise DuplicateEntityError("Tag", "name", data.name)

    tag = Tag(name=data.name)
    await tags.insert(tag)
    await tags.save()

    logger.info("Tag '%s' added", tag.name)
    return tag


async def update_tag(db: AsyncSession, data: TagUpdate) -> Tag:
    """
    Rename the tag ``data.tag_id``.

    Raises:
        EntityNotFoundError: no tag with that id.
        DuplicateEntityError: another tag already uses the new name.
        UpdateFailedError: the tag could not be attached for update.
    """
    tags = TagRepository(db)
    if not await tags.exists(data.tag_id):
        raise EntityNotFoundError("Tag", data.tag_id)
    if await tags.name_exists(data.name, exclude_id=data.tag_id):
        raise DuplicateEntityError("Tag", "name", data.name)

    if not await tags.mark_modified(Tag(id=data.tag_id, name=data.name)):
        raise UpdateFailedError(f"Tag {data.tag_id} could not be updated")
    await tags.save()

    logger.info("Tag %s renamed to '%s'", data.tag_id, data.name)
    return await tags.get_by_id(data.tag_id)


async def delete_tag(db: AsyncSession, tag_id: int) -> bool:
    """
    Delete *tag_id*; its article links go with it, the articles stay.

    Returns False when the tag does not exist or the delete failed (logged).
    """
    tags = TagRepository(db)
    try:
        if await tags.get_by_id(tag_id) is None:
            return False
        await tags.delete(tag_id)
        await tags.save()
    except SQLAlchemyError:
        logger.exception("Failed to delete tag %s", tag_id)
        await db.rollback()
        return False

    logger.info("Tag %s deleted", tag_id)
    return True

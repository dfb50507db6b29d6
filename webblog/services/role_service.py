"""
Role service — CRUD for Role plus seeding of the built-in roles.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from webblog.exceptions import DuplicateEntityError, EntityNotFoundError
from webblog.models import Role
from webblog.repositories import RoleRepository
from webblog.schemas import RoleCreate, RoleUpdate

logger = logging.getLogger(__name__)

# name -> (security level, description)
DEFAULT_ROLES: dict[str, tuple[int, str]] = {
    "Administrator": (3, "Full access, manages users and roles"),
    "Moderator": (2, "Edits and deletes any article, tag or comment"),
    "User": (1, "Writes articles and comments"),
}


async def get_role(db: AsyncSession, role_id: int) -> Role | None:
    return await RoleRepository(db).get_by_id(role_id)


async def list_roles(db: AsyncSession) -> list[Role]:
    return await RoleRepository(db).list_all()


async def create_role(db: AsyncSession, data: RoleCreate) -> Role:
    """
    Raises:
        DuplicateEntityError: a role with that name exists.
    """
    roles = RoleRepository(db)
    if await roles.get_by_name(data.name) is not None:
        raise DuplicateEntityError("Role", "name", data.name)

    role = Role(name=data.name, security_level=data.security_level, description=data.description)
    await roles.insert(role)
    await roles.save()

    logger.info("Role '%s' created", role.name)
    return role


async def update_role(db: AsyncSession, data: RoleUpdate) -> Role:
    """
    Raises:
        EntityNotFoundError: no role with ``data.id``.
        DuplicateEntityError: another role already has the new name.
    """
    roles = RoleRepository(db)
    role = await roles.get_by_id(data.id)
    if role is None:
        raise EntityNotFoundError("Role", data.id)
    other = await roles.get_by_name(data.name)
    if other is not None and other.id != role.id:
        raise DuplicateEntityError("Role", "name", data.name)

    role.name = data.name
    role.security_level = data.security_level
    role.description = data.description
    await roles.save()

    logger.info("Role %s updated", role.id)
    return role


async def delete_role(db: AsyncSession, role_id: int) -> bool:
    roles = RoleRepository(db)
    if not await roles.exists(role_id):
        return False
    await roles.delete(role_id)
    await roles.save()

    logger.info("Role %s deleted", role_id)
    return True


async def ensure_default_roles(db: AsyncSession) -> list[Role]:
    """Create any of the built-in roles that are missing.  Idempotent."""
    roles = RoleRepository(db)
    created = []
    for name, (level, description) in DEFAULT_ROLES.items():
        if await roles.get_by_name(name) is None:
            role = Role(name=name, security_level=level, description=description)
            await roles.insert(role)
            created.append(role)
    await roles.save()

    if created:
        logger.info("Seeded roles: %s", ", ".join(r.name for r in created))
    return created

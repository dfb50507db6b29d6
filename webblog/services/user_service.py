"""
User service — accounts, credentials and role membership.

Passwords never leave this module in clear text: they are hashed with
bcrypt on the way in and only ever compared through ``verify_password``.
Username and e-mail uniqueness is checked here so callers get a
``DuplicateEntityError`` instead of a database integrity error.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from webblog.config import settings
from webblog.exceptions import AuthenticationError, DuplicateEntityError, EntityNotFoundError
from webblog.models import User
from webblog.repositories import RoleRepository, UserRepository
from webblog.schemas import UserCreate, UserUpdate
from webblog.security import hash_password, verify_password

logger = logging.getLogger(__name__)


async def _ensure_unique(users: UserRepository, username: str, email: str, user_id: int | None = None) -> None:
    existing = await users.get_by_username(username)
    if existing is not None and existing.id != user_id:
        raise DuplicateEntityError("User", "username", username)
    existing = await users.get_by_email(email)
    if existing is not None and existing.id != user_id:
        raise DuplicateEntityError("User", "email", email)


async def get_user(db: AsyncSession, user_id: int) -> User | None:
    return await UserRepository(db).get_by_id(user_id)


async def list_users(db: AsyncSession) -> list[User]:
    return await UserRepository(db).list_all()


async def create_user(db: AsyncSession, data: UserCreate, role_names: list[str] | None = None) -> User:
    """
    Create a user with a hashed password and the given roles.

    Unknown role names are skipped with a warning.

    Raises:
        DuplicateEntityError: username or e-mail already taken.
    """
    users = UserRepository(db)
    await _ensure_unique(users, data.username, data.email)

    user = User(
        username=data.username,
        email=data.email,
        custom_field=data.custom_field,
        phone_number=data.phone_number,
        password_hash=hash_password(data.password),
        roles=[],
    )
    roles = RoleRepository(db)
    for name in role_names or []:
        role = await roles.get_by_name(name)
        if role is None:
            logger.warning("Role '%s' does not exist; not granted to '%s'", name, data.username)
            continue
        user.roles.append(role)

    await users.insert(user)
    await users.save()

    logger.info("User %s '%s' created", user.id, user.username)
    return user


async def register_user(db: AsyncSession, data: UserCreate) -> User:
    """Self-service sign-up; the new account gets the default role."""
    return await create_user(db, data, role_names=[settings.DEFAULT_ROLE])


async def authenticate(db: AsyncSession, username: str, password: str) -> User:
    """
    Return the user matching *username* / *password*.

    Raises:
        AuthenticationError: unknown user or wrong password.
    """
    user = await UserRepository(db).get_by_username(username)
    if user is None or not verify_password(password, user.password_hash):
        logger.info("Rejected login for '%s'", username)
        raise AuthenticationError("Invalid username or password")
    return user


async def update_user(db: AsyncSession, user_id: int, data: UserUpdate) -> User:
    """
    Replace the profile fields of *user_id*.

    Raises:
        EntityNotFoundError: no such user.
        DuplicateEntityError: new username or e-mail taken by another user.
    """
    users = UserRepository(db)
    user = await users.get_by_id(user_id)
    if user is None:
        raise EntityNotFoundError("User", user_id)
    await _ensure_unique(users, data.username, data.email, user_id=user_id)

    user.username = data.username
    user.email = data.email
    user.custom_field = data.custom_field
    user.phone_number = data.phone_number
    await users.save()

    logger.info("User %s updated", user_id)
    return user


async def delete_user(db: AsyncSession, user_id: int) -> bool:
    """Delete *user_id* and, by cascade, their articles and comments."""
    users = UserRepository(db)
    if not await users.exists(user_id):
        return False
    await users.delete(user_id)
    await users.save()

    logger.info("User %s deleted", user_id)
    return True


async def add_role_to_user(db: AsyncSession, user_id: int, role_name: str) -> User:
    """
    Grant *role_name* to *user_id*; granting a role twice is a no-op.

    Raises:
        EntityNotFoundError: unknown user or role.
    """
    users = UserRepository(db)
    user = await users.get_by_id(user_id)
    if user is None:
        raise EntityNotFoundError("User", user_id)
    role = await RoleRepository(db).get_by_name(role_name)
    if role is None:
        raise EntityNotFoundError("Role", role_name)

    if role not in user.roles:
        user.roles.append(role)
        await users.save()
        logger.info("Role '%s' granted to user %s", role_name, user_id)
    return user


async def remove_role_from_user(db: AsyncSession, user_id: int, role_name: str) -> User:
    """
    Revoke *role_name* from *user_id*.

    Raises:
        EntityNotFoundError: unknown user or role.
    """
    users = UserRepository(db)
    user = await users.get_by_id(user_id)
    if user is None:
        raise EntityNotFoundError("User", user_id)
    role = await RoleRepository(db).get_by_name(role_name)
    if role is None:
        raise EntityNotFoundError("Role", role_name)

    if role in user.roles:
        user.roles.remove(role)
        await users.save()
        logger.info("Role '%s' revoked from user %s", role_name, user_id)
    return user

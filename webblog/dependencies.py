from fastapi import Depends, HTTPException, Query, Request
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from webblog.config import Settings, settings
from webblog.database import get_db
from webblog.models import User
from webblog.repositories import UserRepository
from webblog.security import decode_access_token


def get_settings() -> Settings:
    """
    Settings as a dependency, so request handlers receive configuration
    explicitly and tests can override it.
    """
    return settings


def _extract_token(request: Request, config: Settings) -> str | None:
    token = request.cookies.get(config.SESSION_COOKIE_NAME)
    if token:
        return token
    scheme, _, credentials = request.headers.get("authorization", "").partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials
    return None


async def get_current_user_optional(
    request: Request,
    db: AsyncSession = Depends(get_db),
    config: Settings = Depends(get_settings),
) -> User | None:
    """
    Resolve the user behind the session cookie or bearer token.

    Returns None for anonymous requests, invalid or expired tokens, and
    tokens whose user no longer exists.
    """
    token = _extract_token(request, config)
    if not token:
        return None
    try:
        payload = decode_access_token(token, config)
        user_id = int(payload.get("sub"))
    except (JWTError, TypeError, ValueError):
        return None
    return await UserRepository(db).get_by_id(user_id)


async def get_current_user(user: User | None = Depends(get_current_user_optional)) -> User:
    """Like ``get_current_user_optional`` but answers 401 when anonymous."""
    if user is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


def is_elevated(user: User, config: Settings = settings) -> bool:
    return any(name in config.ELEVATED_ROLES for name in user.role_names)


def ensure_owner_or_elevated(user: User, owner_id: int, config: Settings = settings) -> None:
    """
    Ownership policy for destructive routes: the author of the resource
    or anyone holding an elevated role may proceed, everybody else gets 403.
    """
    if user.id != owner_id and not is_elevated(user, config):
        raise HTTPException(status_code=403, detail="Not allowed to modify this resource")


def require_roles(*role_names: str):
    """
    Dependency factory: the current user must hold at least one of
    *role_names*.

    Usage in a router::

        @router.delete("/{id}", dependencies=[Depends(require_roles("Administrator"))])
    """

    async def _checker(user: User = Depends(get_current_user)) -> User:
        if not any(name in role_names for name in user.role_names):
            raise HTTPException(status_code=403, detail="Insufficient role")
        return user

    return _checker


async def require_elevated(
    user: User = Depends(get_current_user),
    config: Settings = Depends(get_settings),
) -> User:
    if not is_elevated(user, config):
        raise HTTPException(status_code=403, detail="Insufficient role")
    return user


class ArticleSortParams:
    """
    Reusable FastAPI dependency parsing the article list ordering.

    Attributes
    ----------
    sort_order:
        ``Title``, ``Author`` or ``DateCreation``.  Unknown values are
        accepted and fall back to newest first in the service layer.
    """

    def __init__(
        self,
        sort_order: str | None = Query(
            None,
            description="Title, Author (author e-mail) or DateCreation (newest first).",
        ),
    ) -> None:
        self.sort_order = sort_order

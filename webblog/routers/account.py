from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from webblog.config import Settings
from webblog.database import get_db
from webblog.dependencies import get_current_user, get_settings
from webblog.exceptions import AuthenticationError, DuplicateEntityError
from webblog.models import User
from webblog.schemas import LoginRequest, TokenResponse, UserCreate, UserResponse
from webblog.security import create_access_token
from webblog.services import user_service

router = APIRouter(prefix="/Account", tags=["account"])


def _issue_session(response: Response, user: User, config: Settings) -> TokenResponse:
    token = create_access_token(user.id, config)
    response.set_cookie(
        key=config.SESSION_COOKIE_NAME,
        value=token,
        max_age=config.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=config.COOKIE_SECURE,
        samesite="lax",
    )
    return TokenResponse(access_token=token, user=UserResponse.model_validate(user))


@router.post("/Register", status_code=201, response_model=TokenResponse)
async def register(
    data: UserCreate,
    response: Response,
    db: AsyncSession = Depends(get_db),
    config: Settings = Depends(get_settings),
):
    try:
        user = await user_service.register_user(db, data)
    except DuplicateEntityError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    return _issue_session(response, user, config)


@router.post("/Login", response_model=TokenResponse)
async def login(
    data: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
    config: Settings = Depends(get_settings),
):
    try:
        user = await user_service.authenticate(db, data.username, data.password)
    except AuthenticationError:
        raise HTTPException(status_code=401, detail="Invalid username or password")
    return _issue_session(response, user, config)


@router.post("/Logout", status_code=204)
async def logout(response: Response, config: Settings = Depends(get_settings)):
    response.delete_cookie(config.SESSION_COOKIE_NAME)


@router.get("/Me", response_model=UserResponse)
async def me(user: User = Depends(get_current_user)):
    return UserResponse.model_validate(user)

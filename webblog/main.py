import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from webblog.config import settings
from webblog.database import async_session
from webblog.middleware import RequestLogMiddleware
from webblog.routers import account, articles, comments, roles, tags, users
from webblog.services import role_service

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    async with async_session() as session:
        await role_service.ensure_default_roles(session)
        await session.commit()
    logger.info("%s %s started (%s)", settings.APP_NAME, settings.APP_VERSION, settings.APP_ENV)
    yield


app = FastAPI(
    title=settings.APP_NAME,
    description="A blog API: articles, tags, comments, users and roles",
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

# Middleware
app.add_middleware(RequestLogMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Error handlers
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed or missing fields are a 400 naming each violated field."""
    errors = [
        {
            "field": ".".join(str(part) for part in err["loc"] if part != "body"),
            "message": err["msg"],
        }
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content=jsonable_encoder({"detail": errors}))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error in %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# Routers
app.include_router(account.router)
app.include_router(articles.router)
app.include_router(tags.router)
app.include_router(comments.router)
app.include_router(users.router)
app.include_router(roles.router)


@app.get("/health")
async def health():
    return {"status": "healthy", "version": settings.APP_VERSION}

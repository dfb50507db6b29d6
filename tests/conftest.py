"""
Test infrastructure for the WebBlog API.

Strategy
--------
- SQLite in-memory via aiosqlite; StaticPool makes every session share the
  one connection, since an in-memory database is connection-scoped.
- Foreign keys are switched on for the test engine so the Article ->
  Comment / article_tags cascades behave as they do on PostgreSQL.
- The app's get_db dependency is overridden so every request uses the
  test session factory.
- Tables are created before each test and dropped after it, and the
  built-in roles are seeded, so each test starts from a known state.
- bcrypt runs at its minimum cost to keep the suite fast.
- Authenticated calls send the JWT as a bearer header; the cookie path is
  covered separately in test_account.py.
"""
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from webblog.config import settings
from webblog.database import Base, get_db, install_sqlite_pragmas
from webblog.main import app
from webblog.middleware import install_query_counter
from webblog.models import User
from webblog.schemas import UserCreate
from webblog.security import create_access_token
from webblog.services import role_service, user_service

# ---------------------------------------------------------------------------
# Test database engine: SQLite in-memory with aiosqlite
# ---------------------------------------------------------------------------

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine_test = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

install_query_counter(engine_test)
install_sqlite_pragmas(engine_test)

async_session_test = async_sessionmaker(
    engine_test,
    class_=AsyncSession,
    expire_on_commit=False,
)

settings.BCRYPT_ROUNDS = 4


# ---------------------------------------------------------------------------
# Dependency override: replace production get_db with the test session factory
# ---------------------------------------------------------------------------

async def override_get_db():
    async with async_session_test() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


app.dependency_overrides[get_db] = override_get_db


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

async def create_account(username: str, roles: list[str] | None = None) -> User:
    """Create a committed user with *roles* directly through the service layer."""
    async with async_session_test() as session:
        user = await user_service.create_user(
            session,
            UserCreate(username=username, email=f"{username}@example.com", password="secret"),
            role_names=roles if roles is not None else ["User"],
        )
        await session.commit()
        return user


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create all tables and seed roles before each test, drop after."""
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with async_session_test() as session:
        await role_service.ensure_default_roles(session)
        await session.commit()
    yield
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db_session() -> AsyncSession:
    """A live AsyncSession for tests that call services directly."""
    async with async_session_test() as session:
        yield session


@pytest_asyncio.fixture
async def async_client() -> AsyncClient:
    """An httpx.AsyncClient wired to the FastAPI app via ASGITransport."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def make_account():
    """Factory fixture: ``await make_account("name", roles=[...])``."""
    return create_account


@pytest.fixture
def headers_for():
    """Factory fixture: ``headers_for(user)`` -> bearer auth headers."""
    return auth_headers


@pytest_asyncio.fixture
async def author() -> User:
    return await create_account("author")


@pytest_asyncio.fixture
async def author_headers(author: User) -> dict[str, str]:
    return auth_headers(author)


@pytest_asyncio.fixture
async def admin() -> User:
    return await create_account("admin", roles=["Administrator"])


@pytest_asyncio.fixture
async def admin_headers(admin: User) -> dict[str, str]:
    return auth_headers(admin)

import os

# Must be set before the application modules read their settings
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")
os.environ.setdefault("WS_AUTH_TIMEOUT_SECONDS", "2")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from synergysphere.database import Base
from synergysphere.dependencies import get_db, get_notifier
from synergysphere.main import app
from synergysphere.models.project import Project, ProjectMember
from synergysphere.models.user import User
from synergysphere.services.membership import MembershipResolver
from synergysphere.services.notifier import Notifier
from synergysphere.services.registry import ConnectionRegistry, LiveConnection
from fakes import FakeWebSocket

PASSWORD = "correct-horse-battery"


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def enforce_foreign_keys(dbapi_connection, connection_record):
        # SQLite ignores foreign keys unless asked; PostgreSQL always checks them
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
def registry():
    return ConnectionRegistry()


@pytest.fixture
def notifier(registry, session_factory):
    return Notifier(registry, MembershipResolver(session_factory))


@pytest.fixture
def connect(registry):
    """Register a fake live connection for a user and return its socket."""
    def _connect(user_id: int, fail: bool = False) -> FakeWebSocket:
        ws = FakeWebSocket(fail=fail)
        registry.register(user_id, LiveConnection(ws, user_id))
        return ws
    return _connect


@pytest_asyncio.fixture
async def client(session_factory, notifier):
    async def override_get_db():
        async with session_factory() as db:
            yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def signup(client):
    """Create a user through the API and return (user_id, auth headers)."""
    async def _signup(username: str):
        response = await client.post("/users/", json={
            "username": username,
            "email": f"{username}@synergysphere.io",
            "full_name": username.title(),
            "password": PASSWORD,
        })
        assert response.status_code == 201, response.text
        user_id = response.json()["user_id"]

        response = await client.post("/token", data={"username": username, "password": PASSWORD})
        assert response.status_code == 200, response.text
        token = response.json()["access_token"]
        return user_id, {"Authorization": f"Bearer {token}"}
    return _signup


@pytest.fixture
def seed_project(session_factory):
    """Insert users and a project with the given members directly, bypassing the API."""
    async def _seed(member_names: list[str]):
        async with session_factory() as db:
            users = [
                User(username=name, email=f"{name}@synergysphere.io", hashed_password="x")
                for name in member_names
            ]
            db.add_all(users)
            await db.flush()
            project = Project(name="Seeded", manager_id=users[0].user_id, tags=[])
            db.add(project)
            await db.flush()
            for i, user in enumerate(users):
                db.add(ProjectMember(project_id=project.project_id, user_id=user.user_id,
                                     role="owner" if i == 0 else "member"))
            await db.commit()
            return project.project_id, [u.user_id for u in users]
    return _seed

import itertools
import os

# Keep the module-level engine off PostgreSQL while the app is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from fleet_issues.core.config import Settings, get_settings
from fleet_issues.core.database import get_db, init_models, make_session_dependency
from fleet_issues.core.security import create_access_token, get_password_hash
from fleet_issues.main import app
from fleet_issues.models.associations import user_vessel_link
from fleet_issues.models.enums import IssuePriority, IssueStatus, UserRole, VesselStatus
from fleet_issues.models.issue import Issue
from fleet_issues.models.user import User
from fleet_issues.models.vessel import Vessel

PASSWORD = "secret123"
_imo_numbers = itertools.count(9100000)


@pytest.fixture()
def settings(tmp_path):
    return Settings(
        SECRET_KEY="test-secret",
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        QUOTA_ENFORCEMENT="enforce",
        RESEND_API_KEY=None,
        APP_URL="http://fleet.test",
    )


@pytest_asyncio.fixture()
async def engine(settings):
    engine = create_async_engine(settings.SQLALCHEMY_DATABASE_URI)
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture()
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture()
async def client(session_factory, settings):
    app.dependency_overrides[get_db] = make_session_dependency(session_factory)
    app.dependency_overrides[get_settings] = lambda: settings

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# --- factories ---

@pytest.fixture()
def make_user(db):
    async def _make(email, role=UserRole.CREW, password=PASSWORD):
        user = User(email=email, password_hash=get_password_hash(password), role=role.value)
        db.add(user)
        await db.commit()
        return user

    return _make


@pytest.fixture()
def make_vessel(db):
    async def _make(name="Pacific Dawn", status=VesselStatus.ACTIVE, last_inspection_date=None):
        vessel = Vessel(
            name=name,
            imo=f"IMO{next(_imo_numbers)}",
            flag="Liberia",
            vessel_type="Container Ship",
            status=status.value,
            last_inspection_date=last_inspection_date,
        )
        db.add(vessel)
        await db.commit()
        return vessel

    return _make


@pytest.fixture()
def assign(db):
    async def _assign(user, *vessels):
        await db.execute(
            user_vessel_link.insert(),
            [{"user_id": user.id, "vessel_id": v.id} for v in vessels],
        )
        await db.commit()

    return _assign


@pytest.fixture()
def make_issue(db):
    async def _make(vessel, reporter=None, status=IssueStatus.OPEN, priority=IssuePriority.MED):
        issue = Issue(
            vessel_id=vessel.id,
            reported_by_id=reporter.id if reporter else None,
            category="Engine",
            description="Unusual noise from main engine.",
            priority=priority.value,
            status=status.value,
        )
        db.add(issue)
        await db.commit()
        return issue

    return _make


@pytest.fixture()
def auth_headers(settings):
    def _headers(user):
        token = create_access_token(user.id, user.email, UserRole(user.role), settings)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest_asyncio.fixture()
async def admin(make_user):
    return await make_user("admin@fleet.com", role=UserRole.ADMIN)


@pytest_asyncio.fixture()
async def crew(make_user):
    return await make_user("crew@vessel.com")

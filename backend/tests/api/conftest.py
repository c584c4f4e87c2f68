"""API test fixtures — async DB, FastAPI test client and seeded accounts.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - db_manager is swapped for one bound to the test engine: get_db runs
      unmodified, so routes see the production rollback and error mapping
    - Mail, assistant and process runners are swapped for test doubles

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
      (PostgreSQL-specific features not exercised here)
    - RecordingMailer keeps every send() call: credential and broadcast tests
      assert on recipients without SMTP
    - Seed helpers write rows directly instead of going through the API so each
      test exercises exactly one endpoint
"""

import sys
from datetime import timedelta
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import hackshield.infrastructure.database as db_module
from hackshield.core.time_utils import utc_now
from hackshield.db.base import Base
from hackshield.infrastructure.database import DatabaseSessionManager
from hackshield.infrastructure.mailer import get_mailer
from hackshield.main import app
from hackshield.models.hackathon import Hackathon
from hackshield.models.participant import Participant
from hackshield.models.team import Team, TeamMember
from hackshield.models.user import User
from hackshield.services.assistant import CodingAssistant, get_assistant
from hackshield.services.auth import hash_password
from hackshield.services.code_runner import CodeRunner, get_code_runner
from hackshield.services.terminal_runner import TerminalRunner, get_terminal_runner
from tests.api.helpers import PASSWORD



class RecordingMailer:
    def __init__(self):
        self.sent: list[dict] = []

    async def send(self, to, subject, body, html=None) -> bool:
        self.sent.append({"to": list(to), "subject": subject, "body": body})
        return True


@pytest.fixture
async def test_engine():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
async def client(test_engine, test_session_factory, mailer, tmp_path):
    """FastAPI test client with DB and side-effect dependencies overridden."""
    workspace = str(tmp_path / "workspaces")
    app.dependency_overrides[get_mailer] = lambda: mailer
    app.dependency_overrides[get_assistant] = lambda: CodingAssistant(None, "test-model", 256)
    app.dependency_overrides[get_code_runner] = lambda: CodeRunner(
        workspace_root=workspace, python_command=sys.executable, node_command="node",
        execution_timeout=10, compile_timeout=10,
    )
    app.dependency_overrides[get_terminal_runner] = lambda: TerminalRunner(
        workspace_root=workspace, timeout=10, max_output_bytes=64 * 1024,
        python_command=sys.executable,
    )

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
def fetch(test_session_factory):
    """Load a fresh copy of a row (never from a stale identity map)."""
    async def _fetch(model, pk):
        async with test_session_factory() as db:
            return await db.get(model, pk)
    return _fetch



@pytest.fixture
def make_user(test_session_factory):
    async def _make(role: str = "participant", name: str = "Test User", email: str | None = None, **fields) -> User:
        async with test_session_factory() as db:
            user = User(
                email=email or f"{uuid4().hex[:10]}@example.com",
                password_hash=hash_password(PASSWORD),
                name=name,
                role=role,
                **fields,
            )
            db.add(user)
            await db.commit()
            await db.refresh(user)
            return user
    return _make


@pytest.fixture
async def org(make_user):
    return await make_user(role="organization", name="Acme Org", org_name="Acme")


@pytest.fixture
def make_hackathon(test_session_factory):
    async def _make(owner: User, **overrides) -> Hackathon:
        now = utc_now()
        fields = {
            "title": "Build Week",
            "tagline": "Ship something",
            "description": "A week of building",
            "theme": "AI",
            "organization_id": owner.id,
            "organization_name": owner.org_name or owner.name,
            "start_date": now + timedelta(days=7),
            "end_date": now + timedelta(days=8),
            "registration_start": now - timedelta(days=1),
            "registration_end": now + timedelta(days=6),
            "mode": "online",
            "status": "published",
            "prizes": [{"place": "1", "amount": 1000.0, "description": "Winner"}],
            "total_prize_pool": 1000.0,
        }
        fields.update(overrides)
        async with test_session_factory() as db:
            hackathon = Hackathon(**fields)
            db.add(hackathon)
            await db.commit()
            await db.refresh(hackathon)
            return hackathon
    return _make


@pytest.fixture
async def hackathon(org, make_hackathon):
    return await make_hackathon(org)


@pytest.fixture
async def live_hackathon(org, make_hackathon):
    """Hackathon whose event window is open now."""
    now = utc_now()
    return await make_hackathon(
        org, status="active",
        start_date=now - timedelta(hours=1), end_date=now + timedelta(hours=23),
        registration_end=now - timedelta(hours=2),
    )


@pytest.fixture
def register(test_session_factory):
    async def _register(hackathon: Hackathon, user: User, **fields) -> Participant:
        async with test_session_factory() as db:
            participant = Participant(
                hackathon_id=hackathon.id, user_id=user.id, name=user.name, email=user.email,
                **fields,
            )
            db.add(participant)
            await db.commit()
            await db.refresh(participant)
            return participant
    return _register


@pytest.fixture
def make_team(test_session_factory):
    async def _make(hackathon: Hackathon, leader: User, members: tuple = (), **fields) -> Team:
        async with test_session_factory() as db:
            team = Team(
                name=fields.pop("name", "Byte Busters"),
                hackathon_id=hackathon.id,
                leader_id=leader.id,
                invite_code=fields.pop("invite_code", uuid4().hex[:8].upper()),
                members=[
                    TeamMember(user_id=leader.id, role="leader"),
                    *(TeamMember(user_id=m.id, role="member") for m in members),
                ],
                **fields,
            )
            db.add(team)
            await db.commit()
            await db.refresh(team)
            return team
    return _make


@pytest.fixture
async def ide_participant(live_hackathon, make_user, register):
    """Registered participant with IDE credentials, in an open event window."""
    user = await make_user(name="Ada")
    participant = await register(
        live_hackathon, user,
        ide_access_id="AB12CD34", ide_access_password="0123456789abcdef",
        ide_access_generated_at=utc_now(),
    )
    return participant

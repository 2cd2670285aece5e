"""
Pytest fixtures for the Challenge Arena test suite.

Every test gets a fresh in-memory Motor database (mongomock-motor), the
repositories and services built over it, and a controllable clock. Router
tests additionally get an httpx client over the app with a fake identity
verifier where the bearer token *is* the uid.
"""

from datetime import datetime, timedelta

import httpx
import pytest
import pytest_asyncio
from mongomock_motor import AsyncMongoMockClient

from arena.app import create_app
from arena.config import load_config
from arena.database import create_indexes
from arena.exceptions import UnauthorizedError
from arena.models import SubmissionStatus, UserRole
from arena.repositories.challenge_repository import ChallengeRepository
from arena.repositories.submission_repository import SubmissionRepository
from arena.repositories.user_repository import UserRepository
from arena.services.challenge_service import ChallengeService
from arena.services.leaderboard_service import LeaderboardService
from arena.services.submission_service import SubmissionService
from arena.services.user_service import UserService

# Wednesday; the week started Sunday 2024-03-10, the month on 2024-03-01
NOW = datetime(2024, 3, 13, 12, 0, 0)


class FixedClock:
    """Callable clock that only moves when a test moves it"""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class FakeIdentityVerifier:
    """Accepts any token as its own uid, except ones starting with 'invalid'"""

    async def verify(self, token: str) -> str:
        if token.startswith("invalid"):
            raise UnauthorizedError("Invalid authentication token")
        return token


def auth_header(uid: str) -> dict:
    return {"Authorization": f"Bearer {uid}"}


# ============================================================================
# STORE / REPOSITORIES
# ============================================================================

@pytest_asyncio.fixture
async def db():
    database = AsyncMongoMockClient()["challenge_arena_test"]
    await create_indexes(database)
    return database


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def user_repo(db):
    return UserRepository(db)


@pytest.fixture
def challenge_repo(db):
    return ChallengeRepository(db)


@pytest.fixture
def submission_repo(db):
    return SubmissionRepository(db)


# ============================================================================
# SERVICES
# ============================================================================

@pytest.fixture
def user_service(user_repo, clock):
    return UserService(user_repo, batch_size=10, clock=clock)


@pytest.fixture
def challenge_service(challenge_repo, clock):
    return ChallengeService(challenge_repo, clock=clock)


@pytest.fixture
def submission_service(submission_repo, user_repo, challenge_repo, clock):
    return SubmissionService(submission_repo, user_repo, challenge_repo, clock=clock)


@pytest.fixture
def leaderboard_service(submission_repo, user_repo, clock):
    return LeaderboardService(submission_repo, user_repo, batch_size=10, clock=clock)


# ============================================================================
# FACTORIES
# ============================================================================

@pytest.fixture
def make_user(user_repo):
    async def _make(user_id, display_name=None, role=UserRole.CHALLENGER, total_points=0, **extra):
        return await user_repo.create_with_id(user_id, {
            "display_name": display_name or user_id.title(),
            "email": f"{user_id}@example.com",
            "role": UserRole(role).value,
            "total_points": total_points,
            "joined_at": extra.pop("joined_at", NOW - timedelta(days=30)),
            **extra,
        })
    return _make


@pytest.fixture
def make_challenge(challenge_repo):
    async def _make(points=100, start_date=None, end_date=None, active=True, **extra):
        return await challenge_repo.create({
            "title": extra.pop("title", "Build a URL shortener"),
            "description": extra.pop("description", "Short links with click stats"),
            "requirements": [],
            "start_date": start_date or NOW - timedelta(days=1),
            "end_date": end_date or NOW + timedelta(days=7),
            "difficulty": extra.pop("difficulty", "medium"),
            "category": extra.pop("category", "backend"),
            "resources": [],
            "points": points,
            "active": active,
            "created_by": extra.pop("created_by", "maintainer"),
            "created_at": extra.pop("created_at", NOW - timedelta(days=2)),
            **extra,
        })
    return _make


@pytest.fixture
def make_approved_submission(submission_repo):
    """Seed an already-approved submission without going through review"""
    async def _make(user_id, challenge_id, points, reviewed_at=NOW, submitted_at=None):
        return await submission_repo.create_submission({
            "user_id": user_id,
            "challenge_id": challenge_id,
            "repository_url": f"https://github.com/{user_id}/{challenge_id}",
            "language": "python",
            "submitted_at": submitted_at or reviewed_at - timedelta(hours=1),
            "status": SubmissionStatus.APPROVED.value,
            "reviewer_id": "maintainer",
            "reviewed_at": reviewed_at,
            "points": points,
            "feedback": "",
        })
    return _make


# ============================================================================
# HTTP
# ============================================================================

@pytest.fixture
def app(db, clock, monkeypatch):
    monkeypatch.setenv("MONGO_URL", "mongodb://localhost:27017")
    return create_app(load_config(), db=db, identity_verifier=FakeIdentityVerifier(), clock=clock)


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client

import os
import tempfile

# 앱 import 전에 환경변수 설정
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key-for-ballot-api-0123456789abcdef"
os.environ["IP_HASH_SALT"] = "test-ip-hash-salt-0123456789"
os.environ["LOG_DIR"] = os.path.join(tempfile.gettempdir(), "ballot-test-logs")
os.environ["DEBUG"] = "false"

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from app.database import Base, get_db
from app.core.security import create_access_token, hash_password
from app.core.time_utils import utcnow
from app.models import user, election, vote, audit_log, rate_limit  # noqa: F401
from app.models.user import User, UserRole
from app.schemas.election import CandidateIn, ElectionCreate
from app.services import lifecycle_service

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

PASSWORD = "correct-horse-battery"


@pytest.fixture
def db():
    """Fresh schema per test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    """TestClient sharing the test session."""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    """Factory for persisted users."""
    counter = {"n": 0}

    def _make_user(role=UserRole.USER, email=None, password=PASSWORD):
        counter["n"] += 1
        new_user = User(
            email=email or f"user{counter['n']}@example.com",
            name=f"User {counter['n']}",
            hashed_password=hash_password(password),
            role=role,
        )
        db.add(new_user)
        db.commit()
        db.refresh(new_user)
        return new_user

    return _make_user


@pytest.fixture
def voter(make_user):
    return make_user()


@pytest.fixture
def admin(make_user):
    return make_user(role=UserRole.ADMIN, email="admin@example.com")


def auth_headers(target_user):
    token = create_access_token({"sub": target_user.id})
    return {"Authorization": f"Bearer {token}"}


def election_payload(start_at, end_at, candidates=None, is_public_results=False, title="Student Council"):
    return ElectionCreate(
        title=title,
        description="Annual student council election",
        start_at=start_at,
        end_at=end_at,
        candidates=candidates or [
            CandidateIn(candidate_id="A", name="Alice"),
            CandidateIn(candidate_id="B", name="Bob"),
        ],
        is_public_results=is_public_results,
    )


@pytest.fixture
def make_election(db, admin):
    """
    Factory for elections created as draft and optionally activated.

    Offsets are relative to the real current time so HTTP requests
    (which use the wall clock) see the intended status.
    """
    def _make_election(start_offset=timedelta(seconds=-1), end_offset=timedelta(days=7),
                       activate=True, is_public_results=False, candidates=None):
        now = utcnow()
        start_at = now + start_offset
        end_at = now + end_offset
        # 생성 시점은 시작 시각 이전이어야 함
        created_at = min(now, start_at) - timedelta(seconds=1)

        created = lifecycle_service.create_election(
            db,
            election_payload(start_at, end_at, candidates=candidates, is_public_results=is_public_results),
            admin,
            created_at,
        )
        if activate:
            lifecycle_service.activate_election(db, created, admin, created_at)
        return created

    return _make_election

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")

from datetime import timedelta
from typing import List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app import models  # noqa: F401  (register tables)
from app.core.clock import utcnow
from app.core.database import Base
from app.core.security import create_jwt_token
from app.main import app as fastapi_app
from app.models import Membership, Party, TrustVote, User
from app.services.deps import get_db


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    fastapi_app.dependency_overrides[get_db] = _get_db
    with TestClient(fastapi_app) as c:
        yield c
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(username: Optional[str] = None, display_name: Optional[str] = None) -> User:
        counter["n"] += 1
        user = User(
            username=username or f"user{counter['n']}",
            display_name=display_name,
            hashed_password="not-a-real-hash",
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_party(db):
    def _make(members: List[User] = (), issue_text: str = "Fix the potholes on MG Road",
              pincodes: Optional[List[str]] = None) -> Party:
        party = Party(
            issue_text=issue_text,
            pincodes=pincodes or ["560001"],
            created_by=members[0].id if members else None,
        )
        db.add(party)
        db.flush()
        for u in members:
            db.add(Membership(party_id=party.id, user_id=u.id))
        db.commit()
        db.refresh(party)
        return party

    return _make


@pytest.fixture
def add_members(db, make_user):
    """Attach n fresh users to a party and return them."""
    def _add(party: Party, n: int) -> List[User]:
        users = [make_user() for _ in range(n)]
        for u in users:
            db.add(Membership(party_id=party.id, user_id=u.id))
        db.commit()
        return users

    return _add


@pytest.fixture
def make_leader(db):
    """Give a member a self-vote so they lead a party with no other votes."""
    def _make(party: Party, user: User) -> User:
        now = utcnow()
        db.add(TrustVote(
            party_id=party.id,
            from_user_id=user.id,
            to_user_id=user.id,
            created_at=now,
            expires_at=now + timedelta(days=90),
        ))
        db.commit()
        return user

    return _make


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_jwt_token({'sub': str(user.id)})}"}


@pytest.fixture
def headers():
    return auth_headers

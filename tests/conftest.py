"""
Pytest configuration and fixtures for testing
"""

import itertools
import os
from datetime import datetime

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("DB_LOG_SLOW_QUERIES", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tutorpair.database import Base, get_db
from tutorpair.main import app
from tutorpair.models import (
    PairingRequest,
    Participant,
    ParticipantRole,
    RequestStatus,
    Subject,
    Track,
)
from tutorpair.services.clock import Clock

# Wednesday of the week starting Monday 2025-01-20
FIXED_NOW = datetime(2025, 1, 22, 12, 0)


@pytest.fixture(scope="function")
def engine():
    """In-memory database with fresh tables for each test"""
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture(scope="function")
def db(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture
def clock():
    return Clock(FIXED_NOW)


@pytest.fixture
def maths(db):
    subject = Subject(code="MATHS", display_name="Mathematics")
    db.add(subject)
    db.commit()
    return subject


@pytest.fixture
def physics(db):
    subject = Subject(code="PHYSICS", display_name="Physics")
    db.add(subject)
    db.commit()
    return subject


@pytest.fixture
def make_participant(db):
    """Factory creating persisted participants"""
    counter = itertools.count(1)

    def _make(level=12, track=Track.NONE, role=ParticipantRole.STUDENT, name=None):
        n = next(counter)
        participant = Participant(
            full_name=name or f"Student {n}",
            email=f"student{n}@example.org",
            level=level,
            track=track,
            role=role,
            availability=[],
        )
        db.add(participant)
        db.commit()
        db.refresh(participant)
        return participant

    return _make


@pytest.fixture
def make_request(db):
    """Factory creating persisted pairing requests in any state"""

    def _make(owner, intent, subject, timeslots, status=RequestStatus.PENDING, **fields):
        request = PairingRequest(
            owner_id=owner.id,
            intent=intent,
            subject_id=subject.id,
            timeslots=list(timeslots),
            status=status,
            archived=fields.pop("archived", False),
            **fields,
        )
        db.add(request)
        db.commit()
        db.refresh(request)
        return request

    return _make


@pytest.fixture
def client(db):
    """API client sharing the test session"""

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()

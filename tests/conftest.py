"""
Shared fixtures: an in-memory database per test, a private change feed, and
profiles for a regular user, a second user and an admin.
"""

from typing import Dict, Optional
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from helpdesk.api.deps import get_change_feed, get_db
from helpdesk.core.context import ActorContext
from helpdesk.db.init_db import init_db
from helpdesk.db.session import create_db_engine, create_session_factory
from helpdesk.main import create_app
from helpdesk.models.complaint import Complaint
from helpdesk.models.enums import (
    ComplaintCategory,
    ComplaintPriority,
    ComplaintStatus,
    UserRole,
)
from helpdesk.models.user import Profile
from helpdesk.realtime.change_feed import ChangeCapture, ChangeFeed
from helpdesk.schemas.complaint import ComplaintCreate
from helpdesk.services.complaint_service import ComplaintService


@pytest.fixture
def engine():
    engine = create_db_engine("sqlite://", memory=True)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def feed() -> ChangeFeed:
    return ChangeFeed()


@pytest.fixture
def session_factory(engine, feed):
    return create_session_factory(engine, capture=ChangeCapture(feed))


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


def make_profile(
    db,
    full_name: str,
    role: UserRole = UserRole.USER,
    email: Optional[str] = None,
) -> ActorContext:
    """Insert a profile and return the matching actor context."""
    profile_id = str(uuid4())
    email = email or f"{full_name.lower().replace(' ', '.')}@example.com"
    db.add(Profile(id=profile_id, email=email, full_name=full_name, role_type=role))
    db.commit()
    return ActorContext(user_id=profile_id, role=role, email=email, full_name=full_name)


@pytest.fixture
def user(db) -> ActorContext:
    return make_profile(db, "Asha Rao")


@pytest.fixture
def other_user(db) -> ActorContext:
    return make_profile(db, "Ben Okafor")


@pytest.fixture
def admin(db) -> ActorContext:
    return make_profile(db, "Carla Admin", role=UserRole.ADMIN)


@pytest.fixture
def submit(db):
    """Submit a complaint through the service and return its id."""

    def _submit(actor: ActorContext, title: str = "VPN down", **overrides) -> str:
        data = {
            "title": title,
            "description": "Cannot reach the corporate VPN since this morning",
            "category": ComplaintCategory.NETWORK,
            "priority": ComplaintPriority.HIGH,
        }
        data.update(overrides)
        complaint = ComplaintService(db).submit_complaint(actor, ComplaintCreate(**data))
        complaint_id = complaint.id
        # Close the read transaction the refresh above opened
        db.commit()
        return complaint_id

    return _submit


@pytest.fixture
def insert_complaint(db):
    """Insert a bare complaint row (no ticket, no notifications)."""

    def _insert(actor: ActorContext, status: ComplaintStatus = ComplaintStatus.PENDING) -> str:
        complaint_id = str(uuid4())
        db.add(Complaint(
            id=complaint_id,
            user_id=actor.user_id,
            title="Laptop overheating",
            description="Fan runs constantly",
            category=ComplaintCategory.TECHNICAL_SUPPORT,
            priority=ComplaintPriority.MEDIUM,
            status=status,
        ))
        db.commit()
        return complaint_id

    return _insert


@pytest.fixture
def app(session_factory, feed):
    application = create_app()

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    application.dependency_overrides[get_db] = override_get_db
    application.dependency_overrides[get_change_feed] = lambda: feed
    return application


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def auth():
    """Request headers identifying an actor."""

    def _auth(actor: ActorContext) -> Dict[str, str]:
        return {"X-User-Id": actor.user_id}

    return _auth

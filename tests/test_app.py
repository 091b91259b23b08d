import logging

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import func, select

import helpdesk.main as main_module
from helpdesk.config.settings import settings
from helpdesk.db.init_db import init_db
from helpdesk.models.ticket import Ticket


@pytest.fixture
def startup_env(monkeypatch, caplog, engine, session_factory, feed):
    """Point the lifespan at the test database and feed."""
    monkeypatch.setattr(main_module, "init_db", lambda: init_db(engine))
    monkeypatch.setattr(main_module, "SessionLocal", session_factory)
    monkeypatch.setattr(main_module, "change_feed", feed)
    monkeypatch.setattr(settings, "AUTO_CREATE_TABLES", True)
    monkeypatch.setattr(settings, "SYNC_TICKETS_ON_STARTUP", True)
    # Startup log records must actually be built
    caplog.set_level(logging.INFO, logger="helpdesk.main")


def test_startup_syncs_tickets_and_shutdown_stops(startup_env, app, feed, session_factory, user, insert_complaint):
    insert_complaint(user)

    with TestClient(app) as client:
        synchronizer = app.state.ticket_synchronizer
        assert synchronizer.is_running
        assert len(feed.subscriptions) == 1
        assert client.get("/api/v1/health").json()["status"] == "ok"

    assert not synchronizer.is_running
    assert feed.subscriptions == []
    with session_factory() as session:
        assert session.scalar(select(func.count()).select_from(Ticket)) == 1


def test_startup_without_sync(startup_env, monkeypatch, app, feed):
    monkeypatch.setattr(settings, "SYNC_TICKETS_ON_STARTUP", False)

    with TestClient(app) as client:
        assert app.state.ticket_synchronizer is None
        assert client.get("/api/v1/health").status_code == 200

    assert feed.subscriptions == []

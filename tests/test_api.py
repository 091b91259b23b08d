"""
End-to-end flows through the HTTP API.
"""

import logging
import re
from unittest.mock import MagicMock

import pytest

from helpdesk.api.deps import get_functions_client
from helpdesk.core.exceptions import ExternalServiceError
from helpdesk.integrations.functions_client import FunctionsClient

API = "/api/v1"
TICKET_NUMBER = re.compile(r"^TKT-\d{8}-\d{4}$")
LINK = "https://meet.example/abc"


@pytest.fixture
def complaint(client, auth, user):
    response = client.post(
        f"{API}/complaints",
        json={
            "title": "VPN down",
            "description": "Cannot reach the corporate VPN",
            "category": "network",
            "priority": "high",
        },
        headers=auth(user),
    )
    assert response.status_code == 201
    return response.json()


def _ticket_for(client, auth, admin, complaint_id):
    response = client.get(f"{API}/tickets", headers=auth(admin))
    assert response.status_code == 200
    matches = [t for t in response.json() if t["complaint_id"] == complaint_id]
    assert len(matches) == 1
    return matches[0]


def test_requests_without_identity_are_rejected(client):
    response = client.get(f"{API}/complaints")

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "AUTHENTICATION_FAILED"


def test_unknown_identity_is_rejected(client):
    response = client.get(f"{API}/complaints", headers={"X-User-Id": "nobody"})
    assert response.status_code == 401


def test_submission_opens_ticket_and_notifies(client, auth, user, admin, complaint):
    assert complaint["status"] == "Pending"
    assert complaint["user_id"] == user.user_id
    assert TICKET_NUMBER.match(complaint["ticket_number"])

    ticket = _ticket_for(client, auth, admin, complaint["id"])
    assert ticket["status"] == "open"
    assert ticket["ticket_number"] == complaint["ticket_number"]

    notes = client.get(f"{API}/notifications", headers=auth(user)).json()
    assert [n["type"] for n in notes] == ["complaint_submitted"]
    assert notes[0]["metadata"]["complaint_id"] == complaint["id"]

    admin_notes = client.get(f"{API}/notifications/admin", headers=auth(admin)).json()
    assert [n["notification_type"] for n in admin_notes] == ["new_complaint"]


def test_accepting_leaves_ticket_open(client, auth, admin, complaint):
    response = client.post(f"{API}/complaints/{complaint['id']}/accept", headers=auth(admin))

    assert response.status_code == 200
    assert response.json()["status"] == "Accepted"
    assert _ticket_for(client, auth, admin, complaint["id"])["status"] == "open"


def test_scheduled_meeting_notifies_invitee(client, auth, user, admin, complaint):
    response = client.post(
        f"{API}/meetings",
        json={
            "invited_user_id": user.user_id,
            "title": "VPN follow-up",
            "schedule_time": "2025-01-01T10:00",
            "meet_link": LINK,
            "complaint_id": complaint["id"],
        },
        headers=auth(admin),
    )

    assert response.status_code == 201
    meeting = response.json()
    assert meeting["status"] == "scheduled"
    assert meeting["complaint_title"] == "VPN down"

    notes = client.get(f"{API}/notifications", headers=auth(user)).json()
    scheduled = [n for n in notes if n["type"] == "meeting_scheduled"]
    assert len(scheduled) == 1
    assert scheduled[0]["metadata"]["meet_link"] == LINK

    listed = client.get(f"{API}/meetings", headers=auth(user)).json()
    assert [m["id"] for m in listed] == [meeting["id"]]


def test_feedback_closes_complaint_and_ticket(client, auth, user, admin, complaint):
    complaint_id = complaint["id"]
    resolved = client.put(
        f"{API}/complaints/{complaint_id}/status",
        json={"status": "Resolved"},
        headers=auth(admin),
    )
    assert resolved.json()["status"] == "Resolved"

    eligibility = client.get(f"{API}/feedback/eligibility/{complaint_id}", headers=auth(user)).json()
    assert eligibility["can_submit_feedback"] is True

    response = client.post(
        f"{API}/feedback",
        json={"complaint_id": complaint_id, "rating": 4, "comments": "Fixed fast"},
        headers=auth(user),
    )
    assert response.status_code == 201

    assert client.get(f"{API}/complaints/{complaint_id}", headers=auth(user)).json()["status"] == "Closed"
    ticket = _ticket_for(client, auth, admin, complaint_id)
    assert ticket["status"] == "closed"
    assert "4" in ticket["resolution_notes"]

    admin_notes = client.get(f"{API}/notifications/admin", headers=auth(admin)).json()
    feedback_notes = [n for n in admin_notes if n["notification_type"] == "feedback_received"]
    assert len(feedback_notes) == 1
    assert feedback_notes[0]["metadata"]["rating"] == 4

    again = client.post(
        f"{API}/feedback",
        json={"complaint_id": complaint_id, "rating": 5},
        headers=auth(user),
    )
    assert again.status_code == 409
    assert again.json()["error"]["code"] == "DUPLICATE_ENTRY"


def test_error_responses(client, auth, user, other_user, complaint):
    complaint_id = complaint["id"]

    forbidden = client.put(
        f"{API}/complaints/{complaint_id}/status",
        json={"status": "Closed"},
        headers=auth(user),
    )
    assert forbidden.status_code == 403
    assert forbidden.json()["error"]["code"] == "AUTHORIZATION_FAILED"

    hidden = client.get(f"{API}/complaints/{complaint_id}", headers=auth(other_user))
    assert hidden.status_code == 404
    assert hidden.json()["error"]["type"] == "ResourceNotFoundError"

    tickets = client.get(f"{API}/tickets", headers=auth(user))
    assert tickets.status_code == 403

    invalid = client.post(
        f"{API}/feedback",
        json={"complaint_id": complaint_id, "rating": 7},
        headers=auth(user),
    )
    assert invalid.status_code == 422


def test_meeting_missing_field_is_reported(client, auth, user, admin):
    response = client.post(
        f"{API}/meetings",
        json={"invited_user_id": user.user_id, "title": "Call", "meet_link": LINK},
        headers=auth(admin),
    )

    assert response.status_code == 422
    error = response.json()["error"]
    assert error["code"] == "MISSING_REQUIRED_FIELD"
    assert error["message"] == "Schedule time is required"


def test_notifications_mark_read(client, auth, user, complaint):
    headers = auth(user)
    assert client.get(f"{API}/notifications/stats", headers=headers).json() == {
        "unread_count": 1,
        "total_count": 1,
    }

    response = client.post(f"{API}/notifications/read-all", headers=headers)
    assert response.json()["count"] == 1
    assert client.get(f"{API}/notifications/stats", headers=headers).json()["unread_count"] == 0


def test_analytics_endpoints(client, auth, user, admin, complaint):
    dashboard = client.get(f"{API}/analytics/dashboard", headers=auth(admin)).json()
    assert dashboard["total_complaints"] == 1
    assert dashboard["pending_tickets"] == 1

    trend = client.get(f"{API}/analytics/trend", params={"days": 3}, headers=auth(admin)).json()
    assert len(trend) == 3

    assert client.get(f"{API}/analytics/dashboard", headers=auth(user)).status_code == 403
    mine = client.get(f"{API}/analytics/me", headers=auth(user)).json()
    assert mine["total"] == 1
    assert mine["pending"] == 1


def test_owner_deletes_pending_complaint(client, auth, user, admin, complaint):
    response = client.delete(f"{API}/complaints/{complaint['id']}", headers=auth(user))

    assert response.json() == {"message": "Complaint deleted", "count": None}
    assert client.get(f"{API}/tickets", headers=auth(admin)).json() == []


def test_health_and_request_id(client):
    response = client.get(f"{API}/health", headers={"X-Request-ID": "req-42"})

    assert response.status_code == 200
    assert response.json()["database"] == "ok"
    assert response.headers["X-Request-ID"] == "req-42"
    assert "X-Process-Time" in response.headers
    assert response.headers["Cache-Control"] == "no-store"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert "Strict-Transport-Security" not in response.headers


def test_error_status_is_access_logged(client, caplog):
    caplog.set_level(logging.INFO, logger="helpdesk.api.middleware")

    client.get(f"{API}/complaints", headers={"X-Request-ID": "req-7"})

    access = [r for r in caplog.records if r.name == "helpdesk.api.middleware"]
    assert access[-1].levelno == logging.WARNING
    assert access[-1].status_code == 401
    assert access[-1].path == "/api/v1/complaints"


def test_profile_and_user_listing(client, auth, user, admin):
    me = client.get(f"{API}/users/me", headers=auth(user)).json()
    assert me["full_name"] == "Asha Rao"
    assert me["role_type"] == "user"

    assert client.get(f"{API}/users", headers=auth(user)).status_code == 403
    names = {p["full_name"] for p in client.get(f"{API}/users", headers=auth(admin)).json()}
    assert names == {"Asha Rao", "Carla Admin"}


def test_chat_is_forwarded_to_functions(app, client, auth, user):
    functions = MagicMock(spec=FunctionsClient)
    functions.chat.return_value = {"reply": "Reconnect the VPN client"}
    app.dependency_overrides[get_functions_client] = lambda: functions

    response = client.post(
        f"{API}/chat",
        json={"message": "VPN down", "chat_history": [{"role": "user", "content": "hello"}]},
        headers=auth(user),
    )

    assert response.status_code == 200
    assert response.json() == {"function": "gemini-chat", "data": {"reply": "Reconnect the VPN client"}}
    functions.chat.assert_called_once_with(
        message="VPN down",
        chat_history=[{"role": "user", "content": "hello"}],
        user_id=user.user_id,
    )


def test_functions_failure_maps_to_bad_gateway(app, client, auth, user):
    functions = MagicMock(spec=FunctionsClient)
    functions.send_verification_email.side_effect = ExternalServiceError("send-verification-email")
    app.dependency_overrides[get_functions_client] = lambda: functions

    response = client.post(f"{API}/users/me/verification-email", headers=auth(user))

    assert response.status_code == 502
    assert response.json()["error"]["code"] == "EXTERNAL_SERVICE_ERROR"

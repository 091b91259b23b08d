import pytest

from helpdesk.api.deps import build_actor
from helpdesk.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DuplicateEntryError,
    InvalidStateError,
)
from helpdesk.integrations.functions_client import FunctionsClient
from helpdesk.models.enums import AccountStatus
from helpdesk.models.user import Profile
from helpdesk.schemas.user import ProfileUpdate
from helpdesk.services.user_service import UserService

API = "/api/v1"


@pytest.fixture
def service(db):
    return UserService(db, functions=FunctionsClient(base_url="https://functions.example"))


def test_update_profile_changes_only_given_fields(db, service, user):
    profile = service.update_profile(
        user, ProfileUpdate(full_name="Asha R. Rao", avatar_url="avatars/asha.png")
    )

    assert profile.full_name == "Asha R. Rao"
    assert profile.avatar_url == "avatars/asha.png"
    assert profile.email == user.email
    db.commit()
    assert db.get(Profile, user.user_id).full_name == "Asha R. Rao"


def test_update_profile_rejects_taken_email(db, service, user, other_user):
    with pytest.raises(DuplicateEntryError):
        service.update_profile(user, ProfileUpdate(email=other_user.email))

    assert db.get(Profile, user.user_id).email == user.email


def test_suspended_account_is_refused(db, service, user, admin):
    profile = service.set_account_status(admin, user.user_id, AccountStatus.SUSPENDED)
    assert profile.account_status is AccountStatus.SUSPENDED

    with pytest.raises(AuthenticationError, match="Account is suspended"):
        build_actor(db, user.user_id)

    service.set_account_status(admin, user.user_id, AccountStatus.ACTIVE)
    assert build_actor(db, user.user_id).user_id == user.user_id


def test_deactivated_accounts_leave_the_active_list(db, service, user, other_user, admin):
    service.set_account_status(admin, other_user.user_id, AccountStatus.DEACTIVATED)

    active = [p.full_name for p in service.list_users(admin, AccountStatus.ACTIVE)]
    everyone = [p.full_name for p in service.list_users(admin)]

    assert active == ["Asha Rao", "Carla Admin"]
    assert everyone == ["Asha Rao", "Ben Okafor", "Carla Admin"]


def test_account_status_guards(service, user, other_user, admin):
    with pytest.raises(AuthorizationError):
        service.set_account_status(user, other_user.user_id, AccountStatus.SUSPENDED)
    with pytest.raises(InvalidStateError):
        service.set_account_status(admin, admin.user_id, AccountStatus.DEACTIVATED)


def test_profile_edit_and_suspension_over_http(client, auth, user, admin):
    edited = client.patch(f"{API}/users/me", json={"full_name": "Asha Rao-Singh"}, headers=auth(user))
    assert edited.status_code == 200
    assert edited.json()["full_name"] == "Asha Rao-Singh"

    forbidden = client.put(
        f"{API}/users/{admin.user_id}/status",
        json={"account_status": "suspended"},
        headers=auth(user),
    )
    assert forbidden.status_code == 403

    suspended = client.put(
        f"{API}/users/{user.user_id}/status",
        json={"account_status": "suspended"},
        headers=auth(admin),
    )
    assert suspended.json()["account_status"] == "suspended"

    refused = client.get(f"{API}/users/me", headers=auth(user))
    assert refused.status_code == 401
    assert refused.json()["error"]["message"] == "Account is suspended"

    listed = client.get(f"{API}/users", params={"status": "active"}, headers=auth(admin)).json()
    assert [p["full_name"] for p in listed] == ["Carla Admin"]

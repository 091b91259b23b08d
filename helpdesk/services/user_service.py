"""
Profile lookups and the user-facing serverless function calls.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from helpdesk.core.context import ActorContext
from helpdesk.core.exceptions import InvalidStateError, ValidationError
from helpdesk.integrations.functions_client import FunctionsClient
from helpdesk.models.enums import AccountStatus
from helpdesk.models.user import Profile
from helpdesk.repositories.user_repository import ProfileRepository
from helpdesk.schemas.user import ChatRequest, ProfileUpdate
from helpdesk.services.base_service import BaseService

logger = logging.getLogger(__name__)


class UserService(BaseService[Profile, ProfileRepository]):

    def __init__(self, db_session: Session, functions: Optional[FunctionsClient] = None):
        super().__init__(ProfileRepository(db_session), db_session)
        self.functions = functions or FunctionsClient.from_settings()
        self._logger = logger

    def get_profile(self, actor: ActorContext) -> Profile:
        return self.repository.get_by_id(actor.user_id)

    def update_profile(self, actor: ActorContext, changes: ProfileUpdate) -> Profile:
        """
        Edit the caller's own name, email or avatar.

        Raises:
            DuplicateEntryError: If the email belongs to another profile
        """
        data = changes.model_dump(exclude_unset=True, exclude_none=True)
        with self.transaction():
            profile = self.get_profile(actor)
            if data:
                self.repository.update(profile, data)
            return profile

    def list_users(
        self,
        actor: ActorContext,
        account_status: Optional[AccountStatus] = None,
    ) -> List[Profile]:
        """Profiles for the admin user list; filter on `active` for the invitee pick-list."""
        self._require_admin(actor, "list users")
        return self.repository.list_profiles(account_status)

    def set_account_status(
        self,
        actor: ActorContext,
        profile_id: str,
        account_status: AccountStatus,
    ) -> Profile:
        """
        Activate, suspend or deactivate an account. Non-active accounts are
        refused at authentication.

        Raises:
            AuthorizationError: If the actor is not an admin
            InvalidStateError: If an admin targets their own account
        """
        self._require_admin(actor, "change account status")
        account_status = AccountStatus(account_status)
        if actor.owns(profile_id):
            raise InvalidStateError("You cannot change the status of your own account")

        with self.transaction():
            profile = self.repository.get_by_id(profile_id)
            old_status = profile.account_status
            self.repository.update(profile, {"account_status": account_status})

        self._logger.info(
            f"Account {profile_id} status {old_status.value} -> {account_status.value} "
            f"by {actor.user_id}"
        )
        return profile

    def send_verification_email(self, actor: ActorContext) -> Dict[str, Any]:
        profile = self.get_profile(actor)
        if not profile.email:
            raise ValidationError(
                "Profile has no email address",
                field_errors={"email": ["missing"]},
            )
        result = self.functions.send_verification_email(
            email=profile.email,
            full_name=profile.full_name,
            user_id=profile.id,
        )
        self._logger.info(f"Verification email requested for user {profile.id}")
        return result

    def chat(self, actor: ActorContext, request: ChatRequest) -> Dict[str, Any]:
        """Forward a chat turn to the AI assistant function."""
        return self.functions.chat(
            message=request.message,
            chat_history=[m.model_dump() for m in request.chat_history],
            user_id=actor.user_id,
        )

"""
Client for the serverless functions the service delegates to:

- ``gemini-chat``: AI assistant replies (message, chatHistory, userId)
- ``send-verification-email``: account verification mail (email, fullName, userId)

Functions are invoked by name with a JSON body and return JSON. Calls are
attempted once; failures surface as ExternalServiceError.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

import requests

from helpdesk.config.settings import Settings, settings as default_settings
from helpdesk.core.exceptions import ConfigurationError, ExternalServiceError

logger = logging.getLogger(__name__)

CHAT_FUNCTION = "gemini-chat"
VERIFICATION_EMAIL_FUNCTION = "send-verification-email"


class FunctionsClient:
    """Thin HTTP wrapper over the functions endpoint."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = (base_url or "").rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, config: Settings = default_settings) -> "FunctionsClient":
        return cls(
            base_url=config.FUNCTIONS_BASE_URL,
            api_key=config.FUNCTIONS_API_KEY,
            timeout=config.FUNCTIONS_TIMEOUT,
        )

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def invoke(self, name: str, body: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Invoke a function by name.

        Args:
            name: Function name, appended to the base URL
            body: JSON-serialisable request body

        Returns:
            Decoded JSON response (empty dict for an empty body)

        Raises:
            ConfigurationError: If no base URL is configured
            ExternalServiceError: On transport errors, non-2xx responses or
                undecodable bodies
        """
        if not self.base_url:
            raise ConfigurationError("FUNCTIONS_BASE_URL is not configured")

        url = f"{self.base_url}/{name}"
        try:
            response = self.session.post(
                url,
                json=dict(body),
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Function {name} unreachable: {e}")
            raise ExternalServiceError(name, f"Function '{name}' is unreachable") from e

        if not response.ok:
            logger.error(f"Function {name} returned HTTP {response.status_code}")
            raise ExternalServiceError(
                name,
                f"Function '{name}' failed with status {response.status_code}",
                details={"status_code": response.status_code},
            )

        if not response.content:
            return {}
        try:
            payload = response.json()
        except ValueError as e:
            raise ExternalServiceError(name, f"Function '{name}' returned invalid JSON") from e
        return payload if isinstance(payload, dict) else {"data": payload}

    # -------------------------------------------------------------------------
    # Named functions
    # -------------------------------------------------------------------------

    def chat(
        self,
        message: str,
        chat_history: List[Mapping[str, Any]],
        user_id: str,
    ) -> Dict[str, Any]:
        return self.invoke(CHAT_FUNCTION, {
            "message": message,
            "chatHistory": list(chat_history),
            "userId": user_id,
        })

    def send_verification_email(
        self,
        email: str,
        full_name: Optional[str],
        user_id: str,
    ) -> Dict[str, Any]:
        return self.invoke(VERIFICATION_EMAIL_FUNCTION, {
            "email": email,
            "fullName": full_name,
            "userId": user_id,
        })

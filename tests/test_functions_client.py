from unittest.mock import MagicMock

import pytest
import requests

from helpdesk.core.exceptions import ConfigurationError, ExternalServiceError
from helpdesk.integrations.functions_client import (
    CHAT_FUNCTION,
    VERIFICATION_EMAIL_FUNCTION,
    FunctionsClient,
)
from helpdesk.schemas.user import ChatMessage, ChatRequest
from helpdesk.services.user_service import UserService

BASE_URL = "https://functions.example/v1/"


def _response(status_code=200, payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.content = b"{}" if payload is None else b"x"
    response.json.return_value = payload if payload is not None else {}
    return response


def _client(response=None, side_effect=None):
    session = MagicMock(spec=requests.Session)
    session.post.return_value = response or _response(payload={"reply": "Try reconnecting"})
    if side_effect is not None:
        session.post.side_effect = side_effect
    return FunctionsClient(base_url=BASE_URL, api_key="secret", timeout=5, session=session), session


def test_chat_posts_to_named_function():
    client, session = _client()

    result = client.chat("VPN keeps dropping", [{"role": "user", "content": "hi"}], "u-1")

    assert result == {"reply": "Try reconnecting"}
    args, kwargs = session.post.call_args
    assert args[0] == f"https://functions.example/v1/{CHAT_FUNCTION}"
    assert kwargs["headers"]["Authorization"] == "Bearer secret"
    assert kwargs["json"] == {
        "message": "VPN keeps dropping",
        "chatHistory": [{"role": "user", "content": "hi"}],
        "userId": "u-1",
    }
    assert kwargs["timeout"] == 5


def test_verification_email_body():
    client, session = _client()

    client.send_verification_email("asha@example.com", "Asha Rao", "u-1")

    args, kwargs = session.post.call_args
    assert args[0].endswith(VERIFICATION_EMAIL_FUNCTION)
    assert kwargs["json"] == {"email": "asha@example.com", "fullName": "Asha Rao", "userId": "u-1"}


def test_non_2xx_response_raises():
    client, _ = _client(response=_response(status_code=500))

    with pytest.raises(ExternalServiceError) as excinfo:
        client.invoke(CHAT_FUNCTION, {"message": "hi"})

    assert excinfo.value.details["status_code"] == 500
    assert excinfo.value.status_code == 502


def test_transport_error_raises():
    client, _ = _client(side_effect=requests.ConnectionError("refused"))

    with pytest.raises(ExternalServiceError):
        client.invoke(CHAT_FUNCTION, {"message": "hi"})


def test_missing_base_url_is_a_configuration_error():
    client = FunctionsClient(base_url=None, session=MagicMock())

    with pytest.raises(ConfigurationError):
        client.invoke(CHAT_FUNCTION, {})


def test_user_service_chat_forwards_history(db, user):
    functions = MagicMock(spec=FunctionsClient)
    functions.chat.return_value = {"reply": "Restart the client"}
    service = UserService(db, functions=functions)

    result = service.chat(
        user,
        ChatRequest(
            message="VPN down",
            chat_history=[ChatMessage(role="assistant", content="How can I help?")],
        ),
    )

    assert result == {"reply": "Restart the client"}
    functions.chat.assert_called_once_with(
        message="VPN down",
        chat_history=[{"role": "assistant", "content": "How can I help?"}],
        user_id=user.user_id,
    )


def test_user_service_verification_email_uses_profile(db, user):
    functions = MagicMock(spec=FunctionsClient)
    functions.send_verification_email.return_value = {}

    UserService(db, functions=functions).send_verification_email(user)

    functions.send_verification_email.assert_called_once_with(
        email=user.email,
        full_name="Asha Rao",
        user_id=user.user_id,
    )

from helpdesk.integrations.functions_client import (
    CHAT_FUNCTION,
    VERIFICATION_EMAIL_FUNCTION,
    FunctionsClient,
)

__all__ = ["CHAT_FUNCTION", "VERIFICATION_EMAIL_FUNCTION", "FunctionsClient"]

from helpdesk.api.errors import register_exception_handlers
from helpdesk.api.middleware import register_middlewares

__all__ = ["register_exception_handlers", "register_middlewares"]

"""
Base service class providing common functionality for all services.
"""

from contextlib import contextmanager
from typing import Generic, Iterator, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from helpdesk.core.context import ActorContext
from helpdesk.core.exceptions import AuthorizationError, DatabaseError
from helpdesk.core.logging import get_logger
from helpdesk.repositories.base_repository import BaseRepository

TModel = TypeVar("TModel")
TRepo = TypeVar("TRepo", bound=BaseRepository)

_DEPTH_KEY = "helpdesk.transaction_depth"


class BaseService(Generic[TModel, TRepo]):
    """
    Base service with common behaviors:
    - Shared logger and db session
    - Re-entrant transaction boundary
    - Best-effort side effects isolated in savepoints
    - Role checks against the acting user
    """

    def __init__(self, repository: TRepo, db_session: Session):
        """
        Initialize base service.

        Args:
            repository: Repository instance for data access
            db_session: SQLAlchemy database session
        """
        self.repository: TRepo = repository
        self.db: Session = db_session
        self._logger = get_logger(self.__class__.__name__)

    # -------------------------------------------------------------------------
    # Transaction Management
    # -------------------------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """
        Context manager for database transactions with automatic rollback.

        Re-entrant: when a service operation runs inside another one on the
        same session, only the outermost block commits or rolls back.

        Example:
            with self.transaction():
                self.repository.create(entity)
                # commit on success, rollback on exception
        """
        depth = self.db.info.get(_DEPTH_KEY, 0)
        self.db.info[_DEPTH_KEY] = depth + 1
        try:
            yield self.db
            if depth == 0:
                self._commit()
        except SQLAlchemyError as e:
            if depth == 0:
                self._rollback()
                self._logger.error(f"Transaction failed: {e}", exc_info=True)
            raise DatabaseError(f"Database operation failed: {e.__class__.__name__}") from e
        except Exception:
            if depth == 0:
                self._rollback()
            raise
        finally:
            self.db.info[_DEPTH_KEY] = depth

    def _commit(self) -> None:
        """Commit the current transaction with error handling."""
        self.db.commit()
        self._logger.debug("Transaction committed successfully")

    def _rollback(self) -> None:
        """Rollback the current transaction, suppressing rollback errors."""
        try:
            self.db.rollback()
            self._logger.debug("Transaction rolled back")
        except SQLAlchemyError as e:
            # Rollback errors must not mask the original error
            self._logger.warning(f"Rollback failed: {e}")

    @contextmanager
    def best_effort(self, operation: str, **context) -> Iterator[None]:
        """
        Run a side effect inside a savepoint; log and swallow its failure.

        The enclosing transaction is unaffected when the side effect fails.
        """
        try:
            with self.db.begin_nested():
                yield
        except Exception as e:
            self._logger.warning(
                f"{operation} failed: {e}",
                extra={"operation": operation, "error_type": type(e).__name__, **context},
            )

    # -------------------------------------------------------------------------
    # Authorization helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _require_admin(actor: ActorContext, action: str = "perform this action") -> None:
        if not actor.is_admin:
            raise AuthorizationError(f"Only administrators can {action}")


__all__ = ["BaseService"]

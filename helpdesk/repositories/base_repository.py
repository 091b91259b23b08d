"""
Base repository with standardized CRUD operations and error handling.

Repositories flush but never commit: the owning service decides the
transaction boundary.
"""

from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from helpdesk.core.exceptions import DatabaseError, DuplicateEntryError, ResourceNotFoundError
from helpdesk.core.logging import get_logger
from helpdesk.models.base import BaseModel

logger = get_logger(__name__)

# Type variable for model classes
ModelType = TypeVar("ModelType", bound=BaseModel)


class BaseRepository(Generic[ModelType]):
    """
    Generic repository for one model class.

    Provides CRUD operations and criteria queries shared by all domain
    repositories.
    """

    def __init__(self, model: Type[ModelType], db: Session):
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            db: Database session
        """
        self.model = model
        self.db = db

    @property
    def resource_name(self) -> str:
        return self.model.__name__

    # ==================== Create Operations ====================

    def create(self, entity: ModelType) -> ModelType:
        """
        Add and flush a new entity.

        Raises:
            DuplicateEntryError: If a unique constraint is violated
            DatabaseError: On any other database failure
        """
        try:
            self.db.add(entity)
            self.db.flush()
            logger.debug(f"Created {self.resource_name} with id: {entity.id}")
            return entity
        except IntegrityError as e:
            raise DuplicateEntryError(
                f"{self.resource_name} already exists",
                details={"constraint": str(e.orig)},
            ) from e
        except SQLAlchemyError as e:
            raise DatabaseError(f"Create failed: {str(e)}") from e

    def create_from_dict(self, data: Dict[str, Any]) -> ModelType:
        return self.create(self.model(**data))

    # ==================== Read Operations ====================

    def find_by_id(self, id: str) -> Optional[ModelType]:
        """
        Find entity by ID.

        Returns:
            Entity or None
        """
        if not id:
            return None
        try:
            return self.db.get(self.model, id)
        except SQLAlchemyError as e:
            raise DatabaseError(f"Find by ID failed: {str(e)}") from e

    def get_by_id(self, id: str) -> ModelType:
        """
        Get entity by ID or raise exception.

        Raises:
            ResourceNotFoundError: If entity not found
        """
        entity = self.find_by_id(id)
        if entity is None:
            raise ResourceNotFoundError(self.resource_name, id)
        return entity

    def find_all(self, skip: int = 0, limit: Optional[int] = None) -> List[ModelType]:
        try:
            stmt = select(self.model).offset(skip)
            if limit is not None:
                stmt = stmt.limit(limit)
            return list(self.db.scalars(stmt).unique())
        except SQLAlchemyError as e:
            raise DatabaseError(f"Find all failed: {str(e)}") from e

    def find_by_criteria(
        self,
        criteria: Dict[str, Any],
        skip: int = 0,
        limit: Optional[int] = None,
        order_by: Optional[List[str]] = None,
    ) -> List[ModelType]:
        """
        Find entities matching criteria.

        Args:
            criteria: Filter criteria as key-value pairs (lists become IN)
            skip: Number of records to skip
            limit: Maximum number of records
            order_by: List of fields to order by (prefix with - for desc)

        Returns:
            List of matching entities
        """
        try:
            stmt = select(self.model)

            for key, value in criteria.items():
                column = getattr(self.model, key)
                if isinstance(value, (list, tuple, set, frozenset)):
                    stmt = stmt.where(column.in_(list(value)))
                else:
                    stmt = stmt.where(column == value)

            for field in order_by or []:
                if field.startswith('-'):
                    stmt = stmt.order_by(getattr(self.model, field[1:]).desc())
                else:
                    stmt = stmt.order_by(getattr(self.model, field))

            stmt = stmt.offset(skip)
            if limit is not None:
                stmt = stmt.limit(limit)
            return list(self.db.scalars(stmt).unique())

        except SQLAlchemyError as e:
            raise DatabaseError(f"Find by criteria failed: {str(e)}") from e

    def find_one_by_criteria(self, criteria: Dict[str, Any]) -> Optional[ModelType]:
        results = self.find_by_criteria(criteria, limit=1)
        return results[0] if results else None

    def count(self, criteria: Optional[Dict[str, Any]] = None) -> int:
        try:
            stmt = select(func.count()).select_from(self.model)
            for key, value in (criteria or {}).items():
                column = getattr(self.model, key)
                if isinstance(value, (list, tuple, set, frozenset)):
                    stmt = stmt.where(column.in_(list(value)))
                else:
                    stmt = stmt.where(column == value)
            return self.db.scalar(stmt) or 0
        except SQLAlchemyError as e:
            raise DatabaseError(f"Count failed: {str(e)}") from e

    # ==================== Update Operations ====================

    def update(self, entity: ModelType, data: Dict[str, Any]) -> ModelType:
        """
        Apply field updates to a loaded entity and flush.

        Unknown keys are ignored.
        """
        try:
            for key, value in data.items():
                if hasattr(entity, key):
                    setattr(entity, key, value)
            self.db.flush()
            return entity
        except IntegrityError as e:
            raise DuplicateEntryError(
                f"{self.resource_name} update violates a unique constraint",
                details={"constraint": str(e.orig)},
            ) from e
        except SQLAlchemyError as e:
            raise DatabaseError(f"Update failed: {str(e)}") from e

    def update_by_id(self, id: str, data: Dict[str, Any]) -> ModelType:
        return self.update(self.get_by_id(id), data)

    # ==================== Delete Operations ====================

    def delete(self, entity: ModelType) -> None:
        try:
            self.db.delete(entity)
            self.db.flush()
            logger.debug(f"Deleted {self.resource_name} with id: {entity.id}")
        except SQLAlchemyError as e:
            raise DatabaseError(f"Delete failed: {str(e)}") from e


__all__ = ["BaseRepository", "ModelType"]

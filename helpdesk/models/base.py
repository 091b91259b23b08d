"""
Base model configuration for SQLAlchemy ORM.

Provides the declarative base, an abstract model with a string UUID
primary key and serialization helpers, and the timestamp mixin.
"""

import enum
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import uuid4

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, declarative_base, mapped_column

from helpdesk.utils.date_utils import now_utc

# Create declarative base
Base = declarative_base()


def new_uuid() -> str:
    return str(uuid4())


class BaseModel(Base):
    """
    Abstract base model with common fields and methods.
    """

    __abstract__ = True

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=new_uuid,
        nullable=False,
        comment="Primary key (UUID)"
    )

    def to_dict(self, exclude: Optional[List[str]] = None) -> Dict[str, Any]:
        """
        Convert model instance to a JSON-friendly dictionary keyed by column name.

        Args:
            exclude: List of column names to exclude

        Returns:
            Dictionary representation of the row
        """
        exclude = exclude or []
        result = {}

        for attr in self.__mapper__.column_attrs:
            column = attr.columns[0]
            if column.name in exclude:
                continue
            value = getattr(self, attr.key)
            if isinstance(value, datetime):
                result[column.name] = value.isoformat()
            elif isinstance(value, enum.Enum):
                result[column.name] = value.value
            else:
                result[column.name] = value

        return result

    def __repr__(self) -> str:
        """String representation of model instance."""
        return f"<{self.__class__.__name__}(id={getattr(self, 'id', None)})>"


class TimestampMixin:
    """
    Mixin for automatic timestamp tracking.

    Timestamps are set application-side so updates advance them even on
    databases with coarse server clocks.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=now_utc,
        index=True,
        comment="Record creation timestamp (UTC)"
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=now_utc,
        onupdate=now_utc,
        comment="Record last update timestamp (UTC)"
    )


__all__ = ["Base", "BaseModel", "TimestampMixin", "new_uuid"]

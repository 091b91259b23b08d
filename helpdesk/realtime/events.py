"""
Row-level change events delivered by the realtime feed.
"""

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from helpdesk.utils.date_utils import now_utc


class ChangeType(str, enum.Enum):
    """Event-type discriminator."""
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass
class ChangeEvent:
    """
    A committed change to one row.

    `new` is the row snapshot after the change (empty for DELETE) and `old`
    holds the primary key plus, for UPDATE, the previous values of the
    columns that changed.
    """

    table: str
    type: ChangeType
    new: Dict[str, Any] = field(default_factory=dict)
    old: Dict[str, Any] = field(default_factory=dict)
    commit_timestamp: datetime = field(default_factory=now_utc)

    @property
    def record(self) -> Dict[str, Any]:
        """The row the event is about: `new` for writes, `old` for deletes."""
        return self.old if self.type is ChangeType.DELETE else self.new

    @property
    def record_id(self) -> Optional[str]:
        return self.record.get("id")

    def to_dict(self, channel: Optional[str] = None) -> Dict[str, Any]:
        payload = {
            "table": self.table,
            "type": self.type.value,
            "new": self.new,
            "old": self.old,
            "commit_timestamp": self.commit_timestamp.isoformat(),
        }
        if channel is not None:
            payload["channel"] = channel
        return payload


__all__ = ["ChangeType", "ChangeEvent"]

"""
Realtime change feed.

In-process pub/sub that turns committed ORM writes into row-level change
events. Subscriptions are keyed by channel name and table, optionally
narrowed by an equality filter on a column (``user_id=eq.<id>``) and by
event type.

Events are captured from SQLAlchemy session hooks and only published once the
outermost transaction commits. Events recorded inside a savepoint that is
rolled back, or inside a transaction that is rolled back, are discarded.
"""

import enum
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Optional, Tuple, Union
from uuid import uuid4

from sqlalchemy import event, inspect
from sqlalchemy.orm import Session, SessionTransaction

from helpdesk.models.base import BaseModel
from helpdesk.realtime.events import ChangeEvent, ChangeType

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[ChangeEvent], None]

PENDING_KEY = "helpdesk.pending_changes"


def parse_filter(expression: Optional[str]) -> Dict[str, str]:
    """
    Parse a ``column=eq.value`` filter expression.

    Returns an empty dict for a blank expression.

    Raises:
        ValueError: If the expression is malformed or uses another operator
    """
    if not expression:
        return {}
    column, sep, rest = expression.partition("=")
    operator, dot, value = rest.partition(".")
    if not sep or not dot or not column.strip() or operator != "eq":
        raise ValueError(f"Unsupported filter expression: {expression!r}")
    return {column.strip(): value}


@dataclass
class Subscription:
    """A registered interest in changes to one table."""

    channel: str
    table: str
    callback: ChangeCallback
    filter: Dict[str, Any] = field(default_factory=dict)
    events: Optional[FrozenSet[ChangeType]] = None
    id: str = field(default_factory=lambda: str(uuid4()))

    def matches(self, change: ChangeEvent) -> bool:
        if change.table != self.table:
            return False
        if self.events is not None and change.type not in self.events:
            return False
        record = change.record
        for column, expected in self.filter.items():
            if str(record.get(column)) != str(expected):
                return False
        return True


class ChangeFeed:
    """
    Thread-safe subscriber registry and dispatcher.

    Callbacks run synchronously in the publishing thread. A failing callback
    is logged and does not prevent delivery to other subscribers.
    """

    def __init__(self):
        self._subscriptions: Dict[str, Subscription] = {}
        self._lock = threading.RLock()

    def subscribe(
        self,
        channel: str,
        table: str,
        callback: ChangeCallback,
        filter: Optional[Union[str, Dict[str, Any]]] = None,
        events: Optional[Iterable[Union[ChangeType, str]]] = None,
    ) -> Subscription:
        """
        Register a callback for changes on a table.

        Args:
            channel: Channel name the subscription belongs to
            table: Table to watch
            callback: Called with each matching ChangeEvent
            filter: ``column=eq.value`` expression or a column->value dict
            events: Restrict to these event types (default: all)

        Returns:
            The subscription handle, used to unsubscribe
        """
        criteria = parse_filter(filter) if isinstance(filter, str) else dict(filter or {})
        event_types = frozenset(ChangeType(e) for e in events) if events else None
        subscription = Subscription(
            channel=channel,
            table=table,
            callback=callback,
            filter=criteria,
            events=event_types,
        )
        with self._lock:
            self._subscriptions[subscription.id] = subscription
        logger.debug(
            "Subscribed to %s on channel %s (filter=%s)", table, channel, criteria
        )
        return subscription

    def unsubscribe(self, subscription: Union[Subscription, str]) -> bool:
        subscription_id = subscription.id if isinstance(subscription, Subscription) else subscription
        with self._lock:
            removed = self._subscriptions.pop(subscription_id, None)
        return removed is not None

    def remove_channel(self, channel: str) -> int:
        """Drop every subscription registered under a channel name."""
        with self._lock:
            ids = [s.id for s in self._subscriptions.values() if s.channel == channel]
            for subscription_id in ids:
                del self._subscriptions[subscription_id]
        return len(ids)

    @property
    def subscriptions(self) -> List[Subscription]:
        with self._lock:
            return list(self._subscriptions.values())

    def publish(self, change: ChangeEvent) -> int:
        """
        Deliver an event to every matching subscriber.

        Returns:
            Number of subscribers the event was delivered to
        """
        delivered = 0
        for subscription in self.subscriptions:
            if not subscription.matches(change):
                continue
            try:
                subscription.callback(change)
                delivered += 1
            except Exception:
                logger.exception(
                    "Change subscriber on channel %s failed for %s %s",
                    subscription.channel,
                    change.type.value,
                    change.table,
                )
        return delivered

    def publish_many(self, changes: Iterable[ChangeEvent]) -> int:
        return sum(self.publish(change) for change in changes)


# ---------------------------------------------------------------------------
# Session capture
# ---------------------------------------------------------------------------

def _lineage(transaction: Optional[SessionTransaction]):
    while transaction is not None:
        yield transaction
        transaction = transaction.parent


def _rollback_boundary(transaction: SessionTransaction) -> SessionTransaction:
    """The savepoint or root transaction a rollback actually undid."""
    for candidate in _lineage(transaction):
        if candidate.nested or candidate.parent is None:
            return candidate
    return transaction


def _old_values(obj: BaseModel) -> Dict[str, Any]:
    """Primary key plus pre-change values of modified columns."""
    old: Dict[str, Any] = {"id": obj.id}
    state = inspect(obj)
    for attr in state.mapper.column_attrs:
        history = state.attrs[attr.key].history
        if history.has_changes() and history.deleted:
            value = history.deleted[0]
            if isinstance(value, datetime):
                value = value.isoformat()
            elif isinstance(value, enum.Enum):
                value = value.value
            old[attr.columns[0].name] = value
    return old


class ChangeCapture:
    """
    Session event listeners feeding a ChangeFeed.

    Install on a ``sessionmaker`` (or the ``Session`` class) to capture every
    session it produces.
    """

    def __init__(self, feed: ChangeFeed):
        self.feed = feed

    # Listener registration ---------------------------------------------------

    def _listeners(self) -> List[Tuple[str, Callable]]:
        return [
            ("before_flush", self._before_flush),
            ("after_flush", self._after_flush),
            ("after_commit", self._after_commit),
            ("after_soft_rollback", self._after_soft_rollback),
            ("after_transaction_end", self._after_transaction_end),
        ]

    def install(self, target) -> None:
        for name, fn in self._listeners():
            if not event.contains(target, name, fn):
                event.listen(target, name, fn)

    def uninstall(self, target) -> None:
        for name, fn in self._listeners():
            if event.contains(target, name, fn):
                event.remove(target, name, fn)

    # Pending buffer ----------------------------------------------------------

    @staticmethod
    def _pending(session: Session) -> List[Tuple[SessionTransaction, ChangeEvent]]:
        return session.info.setdefault(PENDING_KEY, [])

    @staticmethod
    def _current_transaction(session: Session) -> Optional[SessionTransaction]:
        return session.get_nested_transaction() or session.get_transaction()

    def _record(self, session: Session, change: ChangeEvent) -> None:
        self._pending(session).append((self._current_transaction(session), change))

    # Hooks -------------------------------------------------------------------

    def _before_flush(self, session: Session, flush_context, instances) -> None:
        # Deleted rows can no longer be loaded once the DELETE has run
        for obj in session.deleted:
            if isinstance(obj, BaseModel):
                self._record(session, ChangeEvent(
                    table=obj.__tablename__,
                    type=ChangeType.DELETE,
                    old=obj.to_dict(),
                ))

    def _after_flush(self, session: Session, flush_context) -> None:
        for obj in session.new:
            if isinstance(obj, BaseModel):
                self._record(session, ChangeEvent(
                    table=obj.__tablename__,
                    type=ChangeType.INSERT,
                    new=obj.to_dict(),
                ))
        for obj in session.dirty:
            if isinstance(obj, BaseModel) and session.is_modified(obj, include_collections=False):
                self._record(session, ChangeEvent(
                    table=obj.__tablename__,
                    type=ChangeType.UPDATE,
                    new=obj.to_dict(),
                    old=_old_values(obj),
                ))

    def _after_commit(self, session: Session) -> None:
        # Fired for savepoint releases too; only the outermost commit publishes
        if session.in_nested_transaction():
            return
        pending = session.info.pop(PENDING_KEY, [])
        if pending:
            self.feed.publish_many(change for _, change in pending)

    def _after_soft_rollback(self, session: Session, previous_transaction: SessionTransaction) -> None:
        pending = session.info.get(PENDING_KEY)
        if not pending:
            return
        boundary = _rollback_boundary(previous_transaction)
        if boundary.parent is None:
            session.info.pop(PENDING_KEY, None)
            return
        session.info[PENDING_KEY] = [
            (tx, change) for tx, change in pending
            if boundary not in _lineage(tx)
        ]

    def _after_transaction_end(self, session: Session, transaction: SessionTransaction) -> None:
        if transaction.parent is None:
            session.info.pop(PENDING_KEY, None)


# Process-wide feed used by the application
change_feed = ChangeFeed()


__all__ = [
    "ChangeCallback",
    "ChangeCapture",
    "ChangeFeed",
    "Subscription",
    "change_feed",
    "parse_filter",
]

"""
Event-driven reconciliation of an in-memory view against the change feed.

A reconciler keeps an id-indexed collection of rows for one table. Change
events are merged incrementally; the loader is only called for the initial
load and again on reconnect.
"""

import logging
import threading
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from helpdesk.realtime.change_feed import ChangeFeed, Subscription
from helpdesk.realtime.events import ChangeEvent, ChangeType

logger = logging.getLogger(__name__)

Row = Dict[str, Any]
Loader = Callable[[], Iterable[Row]]


class IndexedCollection:
    """Rows keyed by id, preserving insertion order."""

    def __init__(self, rows: Optional[Iterable[Row]] = None, key: str = "id"):
        self._key = key
        self._rows: Dict[Any, Row] = {}
        self._lock = threading.RLock()
        if rows is not None:
            self.replace(rows)

    def replace(self, rows: Iterable[Row]) -> None:
        indexed = {row[self._key]: dict(row) for row in rows}
        with self._lock:
            self._rows = indexed

    def upsert(self, row: Row) -> None:
        with self._lock:
            current = self._rows.get(row[self._key], {})
            current.update(row)
            self._rows[row[self._key]] = current

    def remove(self, row_id: Any) -> Optional[Row]:
        with self._lock:
            return self._rows.pop(row_id, None)

    def get(self, row_id: Any) -> Optional[Row]:
        with self._lock:
            return self._rows.get(row_id)

    def values(self) -> List[Row]:
        with self._lock:
            return list(self._rows.values())

    def __contains__(self, row_id: Any) -> bool:
        with self._lock:
            return row_id in self._rows

    def __len__(self) -> int:
        with self._lock:
            return len(self._rows)


class ChangeReconciler:
    """
    Channel consumer maintaining an IndexedCollection for one table.

    Args:
        feed: Change feed to subscribe to
        channel: Channel name for the subscription
        table: Table to mirror
        loader: Returns the full current row set (used on start/reconnect)
        filter: Optional ``column=eq.value`` filter
        on_change: Optional hook called after each merged event
    """

    def __init__(
        self,
        feed: ChangeFeed,
        channel: str,
        table: str,
        loader: Loader,
        filter: Optional[Union[str, Dict[str, Any]]] = None,
        on_change: Optional[Callable[[ChangeEvent], None]] = None,
    ):
        self.feed = feed
        self.channel = channel
        self.table = table
        self.collection = IndexedCollection()
        self._loader = loader
        self._filter = filter
        self._on_change = on_change
        self._subscription: Optional[Subscription] = None
        self.reload_count = 0

    @property
    def is_connected(self) -> bool:
        return self._subscription is not None

    def start(self) -> None:
        """Subscribe and perform the initial full load."""
        if self._subscription is not None:
            return
        self._subscription = self.feed.subscribe(
            self.channel, self.table, self.apply, filter=self._filter
        )
        self.reload()

    def stop(self) -> None:
        if self._subscription is not None:
            self.feed.unsubscribe(self._subscription)
            self._subscription = None

    def reconnect(self) -> None:
        """Resubscribe and refetch everything; events may have been missed."""
        self.stop()
        self.start()

    def reload(self) -> None:
        self.collection.replace(self._loader())
        self.reload_count += 1
        logger.debug(
            "Reloaded %d %s rows for channel %s",
            len(self.collection), self.table, self.channel,
        )

    def apply(self, change: ChangeEvent) -> None:
        """Merge a single change event into the collection."""
        if change.type is ChangeType.DELETE:
            self.collection.remove(change.record_id)
        elif change.new:
            self.collection.upsert(change.new)
        if self._on_change is not None:
            self._on_change(change)

    def rows(self) -> List[Row]:
        return self.collection.values()


__all__ = ["IndexedCollection", "ChangeReconciler"]

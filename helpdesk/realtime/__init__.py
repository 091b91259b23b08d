"""
Realtime change feed, reconciler and channel consumers.
"""

from helpdesk.realtime.change_feed import (
    ChangeCapture,
    ChangeFeed,
    Subscription,
    change_feed,
    parse_filter,
)
from helpdesk.realtime.events import ChangeEvent, ChangeType
from helpdesk.realtime.reconciler import ChangeReconciler, IndexedCollection

__all__ = [
    "ChangeCapture",
    "ChangeEvent",
    "ChangeFeed",
    "ChangeReconciler",
    "ChangeType",
    "IndexedCollection",
    "Subscription",
    "change_feed",
    "parse_filter",
]

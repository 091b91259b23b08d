"""
Realtime WebSocket endpoint.

A client connects to ``/realtime/{channel}?table=<table>&filter=<col>=eq.<value>``
and receives one JSON change event per committed row change on that table.
Identity comes from the ``X-User-Id`` header or a ``user_id`` query
parameter. Non-admins may only watch their own rows of user-scoped tables.
"""

import asyncio
from typing import Dict, Optional

from fastapi import APIRouter, Depends, Query, WebSocket, status
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from helpdesk.api.deps import USER_ID_HEADER, build_actor, get_change_feed, get_db
from helpdesk.core.context import ActorContext
from helpdesk.core.exceptions import AuthenticationError
from helpdesk.core.logging import get_logger, get_structured_logger
from helpdesk.models.base import Base
from helpdesk.realtime.change_feed import ChangeFeed, parse_filter
from helpdesk.realtime.events import ChangeEvent

logger = get_logger(__name__)

router = APIRouter(prefix="/realtime")

# Table -> column holding the owning user for rows a non-admin may watch
USER_SCOPED_TABLES: Dict[str, str] = {
    "complaints": "user_id",
    "notifications": "user_id",
    "meetings": "invited_user_id",
    "feedback": "user_id",
}


def authorize_subscription(actor: ActorContext, table: str, criteria: Dict[str, str]) -> Optional[str]:
    """
    Check a subscription request.

    Returns:
        None when allowed, otherwise the reason it is refused
    """
    if table not in Base.metadata.tables:
        return f"Unknown table '{table}'"
    if actor.is_admin:
        return None
    owner_column = USER_SCOPED_TABLES.get(table)
    if owner_column is None:
        return f"Table '{table}' is restricted to administrators"
    if criteria != {owner_column: actor.user_id}:
        return f"Subscriptions to '{table}' must filter on {owner_column}=eq.<your id>"
    return None


@router.websocket("/{channel}")
async def realtime_channel(
    websocket: WebSocket,
    channel: str,
    table: str = Query(...),
    row_filter: Optional[str] = Query(default=None, alias="filter"),
    user_id: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
):
    identity = websocket.headers.get(USER_ID_HEADER) or user_id
    try:
        actor = await run_in_threadpool(build_actor, db, identity)
    except AuthenticationError as e:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=e.message)
        return
    finally:
        await run_in_threadpool(db.close)

    try:
        criteria = parse_filter(row_filter)
    except ValueError as e:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=str(e))
        return

    refusal = authorize_subscription(actor, table, criteria)
    if refusal:
        logger.info(f"Realtime subscription refused for {actor.user_id}: {refusal}")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=refusal)
        return

    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()

    def deliver(change: ChangeEvent) -> None:
        # Runs on the committing thread
        loop.call_soon_threadsafe(queue.put_nowait, change.to_dict(channel))

    subscription = feed.subscribe(channel, table, deliver, filter=criteria)
    await websocket.accept()
    log = get_structured_logger(__name__).bind(
        channel=channel, table=table, user_id=actor.user_id, subscription_id=subscription.id
    )
    log.info("realtime_channel_opened", filter=criteria)

    async def pump() -> None:
        while True:
            await websocket.send_json(await queue.get())

    async def drain() -> None:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                return

    sender = asyncio.ensure_future(pump())
    receiver = asyncio.ensure_future(drain())
    try:
        done, pending = await asyncio.wait({sender, receiver}, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        for task in done:
            if not task.cancelled() and task.exception() is not None:
                log.warning("realtime_channel_failed", error=str(task.exception()))
    finally:
        feed.unsubscribe(subscription)
        log.info("realtime_channel_closed")

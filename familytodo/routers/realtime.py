"""Realtime updates via WebSocket."""

from __future__ import annotations

from typing import Any
import asyncio
import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect


logger = logging.getLogger("familytodo.realtime")

TASK_CREATED = "task-created"
TASK_UPDATED = "task-updated"
TASK_COMPLETED = "task-completed"
TASK_UNCOMPLETED = "task-uncompleted"
TASK_DELETED = "task-deleted"
COMMENT_ADDED = "task-comment-added"
COMMENT_UPDATED = "task-comment-updated"
COMMENT_DELETED = "task-comment-deleted"
PERSON_CREATED = "person-created"
PERSON_UPDATED = "person-updated"
PERSON_DELETED = "person-deleted"
CATEGORY_CREATED = "category-created"
CATEGORY_UPDATED = "category-updated"
CATEGORY_DELETED = "category-deleted"


class ConnectionManager:
    """Manage WebSocket connections and broadcasting messages."""

    def __init__(self) -> None:
        self._connections: set[WebSocket] = set()
        self._meta: dict[WebSocket, dict[str, Any]] = {}

    async def connect(self, websocket: WebSocket) -> None:
        """Accept and register a new WebSocket connection."""
        await websocket.accept()
        self._connections.add(websocket)
        client = websocket.client
        self._meta[websocket] = {
            "id": id(websocket),
            "host": client.host if client else None,
            "port": client.port if client else None,
        }
        logger.info(
            "WS connect: id=%s host=%s port=%s total=%d",
            self._meta[websocket]["id"],
            self._meta[websocket]["host"],
            self._meta[websocket]["port"],
            len(self._connections),
        )

    def disconnect(self, websocket: WebSocket) -> None:
        """Unregister a WebSocket connection."""
        self._connections.discard(websocket)
        meta = self._meta.pop(websocket, {"id": id(websocket)})
        logger.info("WS disconnect: id=%s, total=%d", meta.get("id"), len(self._connections))

    async def broadcast(self, message: dict[str, Any]) -> None:
        """Broadcast a JSON message to all active connections."""
        to_remove: list[WebSocket] = []
        logger.debug(
            "WS broadcast: targets=%d, payload=%s",
            len(self._connections),
            json.dumps(message, ensure_ascii=False),
        )
        for ws in list(self._connections):
            try:
                await ws.send_json(message)
            except (RuntimeError, WebSocketDisconnect) as exc:
                logger.info("WS send failed, dropping id=%s: %s", id(ws), exc)
                to_remove.append(ws)
        for ws in to_remove:
            self.disconnect(ws)

    def status(self) -> dict[str, Any]:
        """Return current connection status and metadata."""
        return {
            "active_connections": len(self._connections),
            "clients": list(self._meta.values()),
        }


router = APIRouter()
manager = ConnectionManager()

# Strong references to broadcasts scheduled on a running loop
_pending_broadcasts: set[asyncio.Task] = set()


def _broadcast_done(task: asyncio.Task) -> None:
    _pending_broadcasts.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Scheduled broadcast failed: %s", exc, exc_info=exc)


def publish(event: str, payload: dict[str, Any]) -> None:
    """Send ``{"event": ..., "data": ...}`` to every connected client.

    Called from sync route handlers, which FastAPI runs in a worker thread.
    Delivery is best effort: a failed broadcast is logged and never fails the
    request whose changes are already committed.
    """
    message = {"event": event, "data": payload}
    try:
        import anyio.from_thread

        anyio.from_thread.run(manager.broadcast, message)
        return
    except RuntimeError as exc_anyio:
        # Not in a worker thread of a running loop (e.g. direct service calls)
        logger.debug("Broadcast via anyio unavailable: %s, trying asyncio", exc_anyio)

    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        loop = None

    if loop is not None:
        task = loop.create_task(manager.broadcast(message))
        _pending_broadcasts.add(task)
        task.add_done_callback(_broadcast_done)
        return
    try:
        asyncio.run(manager.broadcast(message))
    except Exception as exc:
        logger.error("Failed to broadcast %s: %s", event, exc, exc_info=True)


@router.websocket("/tasks/stream")
async def websocket_endpoint(websocket: WebSocket) -> None:
    """WebSocket endpoint for realtime updates.

    The server pushes JSON messages like:
    {"event": "task-created|task-updated|task-completed|task-uncompleted|task-deleted",
     "data": {...}}
    Comments, people and categories use the task-comment-*, person-* and
    category-* events in the same shape.
    """
    origin = websocket.headers.get("origin")
    logger.info("WS connection attempt, origin: %s", origin)
    await manager.connect(websocket)
    try:
        while True:
            # Keep the connection alive; ignore incoming messages
            await websocket.receive_text()
    except WebSocketDisconnect:
        manager.disconnect(websocket)


@router.get("/tasks/stream/status")
def websocket_status() -> dict[str, Any]:
    """HTTP endpoint to introspect current WS connections (for debugging)."""
    return manager.status()

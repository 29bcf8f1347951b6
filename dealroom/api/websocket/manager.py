"""WebSocket connection manager.

Holds active connections per deal and provides deal-scoped broadcast.
Use via app.state.ws_manager (set in lifespan).
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Tracks WebSocket connections per deal; the connection count is lock-protected."""

    def __init__(self) -> None:
        self._connections_by_deal: dict[str, set[WebSocket]] = {}
        self._websocket_to_deal: dict[WebSocket, str] = {}
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket, deal_id: str) -> None:
        """Accept and register a connection for the deal."""
        await websocket.accept()
        async with self._lock:
            self._connections_by_deal.setdefault(deal_id, set()).add(websocket)
            self._websocket_to_deal[websocket] = deal_id

    async def disconnect(self, websocket: WebSocket) -> None:
        async with self._lock:
            self._forget(websocket)

    def _forget(self, websocket: WebSocket) -> None:
        deal_id = self._websocket_to_deal.pop(websocket, None)
        if deal_id is None:
            return
        conns = self._connections_by_deal.get(deal_id)
        if conns is None:
            return
        conns.discard(websocket)
        if not conns:
            del self._connections_by_deal[deal_id]

    async def broadcast_to_deal(self, deal_id: str, message: dict[str, Any]) -> None:
        """Send a JSON message to every connection watching the deal."""
        async with self._lock:
            snapshot = list(self._connections_by_deal.get(deal_id, ()))
        dead: list[WebSocket] = []
        for ws in snapshot:
            try:
                await ws.send_json(message)
            except Exception:
                logger.debug("Dropping dead websocket for deal %s", deal_id)
                dead.append(ws)
        if dead:
            async with self._lock:
                for ws in dead:
                    self._forget(ws)

    async def get_connection_count(self, deal_id: str | None = None) -> int:
        async with self._lock:
            if deal_id is not None:
                return len(self._connections_by_deal.get(deal_id, ()))
            return sum(len(c) for c in self._connections_by_deal.values())

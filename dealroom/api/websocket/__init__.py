"""WebSocket support: per-deal connection manager."""

from dealroom.api.websocket.manager import ConnectionManager

__all__ = ["ConnectionManager"]

"""WebSocket endpoint: per-deal document change notifications.

Connections register with the ConnectionManager from app.state; the lifespan
broadcast task relays Redis change events to them.
"""

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

router = APIRouter()


@router.websocket("/deals/{deal_id}/documents")
async def deal_documents_feed(websocket: WebSocket, deal_id: str) -> None:
    """Push change events for one deal until the client disconnects."""
    manager = getattr(websocket.app.state, "ws_manager", None)
    if manager is None:
        await websocket.accept()
        await websocket.close(code=1013, reason="Change feed unavailable")
        return
    await manager.connect(websocket, deal_id)
    try:
        await websocket.send_json({"type": "subscribed", "deal_id": deal_id})
        while True:
            # Clients only listen; reading keeps the disconnect visible.
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        await manager.disconnect(websocket)

"""API v1 router aggregation."""

from fastapi import APIRouter

from dealroom.api.v1.endpoints import (
    categories,
    deal_documents,
    documents,
    health,
    storage,
    websocket as ws_endpoint,
)

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(
    categories.router, prefix="/document-categories", tags=["categories"]
)
api_router.include_router(deal_documents.router, prefix="/deals", tags=["deal-documents"])
api_router.include_router(documents.router, prefix="/documents", tags=["documents"])
api_router.include_router(storage.router, prefix="/storage", tags=["storage"])
api_router.include_router(ws_endpoint.router, prefix="/ws", tags=["websocket"])

"""Redis Pub/Sub for document change notifications.

Metadata writes publish one event per changed row on the deal's channel.
Reconciliation streams subscribe per deal (or to every deal), and the API
relays events to the deal's WebSocket connections.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator
from typing import Any

import redis.asyncio as redis

from dealroom.application.dtos.change import DocumentChangeEvent
from dealroom.core.config import get_settings

logger = logging.getLogger(__name__)


class _RedisPubSubBase:
    """Shared Redis connection and channel naming for document change pub/sub."""

    CHANNEL_PREFIX = "document_changes"

    def __init__(self, redis_client: redis.Redis | None = None) -> None:
        """Pass redis_client for DI/testing."""
        self.redis = redis_client
        self.settings = get_settings()
        self._connected = redis_client is not None

    async def connect(self) -> None:
        """Establish the Redis connection. Call on app startup."""
        if self._connected:
            return
        if self.redis is None:
            try:
                self.redis = redis.Redis(
                    host=self.settings.redis_host,
                    port=self.settings.redis_port,
                    db=self.settings.redis_db,
                    password=self.settings.redis_password.get_secret_value()
                    if self.settings.redis_password
                    else None,
                    decode_responses=True,
                    socket_connect_timeout=5,
                )
                await self.redis.ping()
                self._connected = True
                logger.info("Redis pub/sub connected")
            except (redis.ConnectionError, redis.TimeoutError) as e:
                logger.warning("Redis pub/sub connection failed: %s", e)
                self._connected = False
                self.redis = None

    async def disconnect(self) -> None:
        if self.redis:
            await self.redis.aclose()
            self._connected = False
            logger.info("Redis pub/sub disconnected")

    def is_available(self) -> bool:
        return self._connected and self.redis is not None

    def _get_channel(self, deal_id: str) -> str:
        return f"{self.CHANNEL_PREFIX}:{deal_id}"


class DocumentChangePublisher(_RedisPubSubBase):
    """Publishes document change events to the deal's channel."""

    async def publish(self, event: DocumentChangeEvent) -> bool:
        """Publish one event.

        Returns:
            True if published, False if Redis is unavailable or publishing failed.
        """
        if not self.is_available() or self.redis is None:
            logger.debug("Redis not available, skipping publish")
            return False
        channel = self._get_channel(event.deal_id)
        try:
            await self.redis.publish(channel, json.dumps(event.to_dict()))
        except redis.RedisError:
            logger.exception("Failed to publish document change")
            return False
        logger.debug(
            "Published %s for document %s to %s",
            event.change_type.value,
            event.document_id,
            channel,
        )
        return True


def _parse(message: dict[str, Any]) -> DocumentChangeEvent | None:
    try:
        return DocumentChangeEvent.from_dict(json.loads(message["data"]))
    except (json.JSONDecodeError, KeyError, TypeError, ValueError):
        logger.exception("Failed to parse document change message")
        return None


class DocumentChangeSubscriber(_RedisPubSubBase):
    """Subscribes to document change events.

    subscribe() is reentrant: each call uses its own PubSub, closed in
    finally, so concurrent subscriptions are safe.
    """

    async def subscribe(self, deal_id: str | None) -> AsyncIterator[DocumentChangeEvent]:
        """Yield events for one deal, or for every deal when deal_id is None."""
        if not self.is_available() or self.redis is None:
            logger.warning("Redis not available for subscription")
            return
        pubsub = self.redis.pubsub()
        pattern = deal_id is None
        channel = f"{self.CHANNEL_PREFIX}:*" if pattern else self._get_channel(deal_id)
        try:
            if pattern:
                await pubsub.psubscribe(channel)
            else:
                await pubsub.subscribe(channel)
            logger.info("Subscribed to %s", channel)
            async for message in pubsub.listen():
                if message["type"] not in ("message", "pmessage"):
                    continue
                event = _parse(message)
                if event is not None:
                    yield event
        finally:
            if pattern:
                await pubsub.punsubscribe(channel)
            else:
                await pubsub.unsubscribe(channel)
            await pubsub.aclose()
            logger.info("Unsubscribed from %s", channel)


async def run_document_change_broadcast(app: Any) -> None:
    """Relay every deal's change events to that deal's WebSocket connections.

    Started as a background task from lifespan when Redis is enabled.
    Cancelling the task stops the loop.
    """
    subscriber = DocumentChangeSubscriber()
    await subscriber.connect()
    if not subscriber.is_available():
        logger.warning("Redis not available, document change broadcast not started")
        return
    try:
        async for event in subscriber.subscribe(None):
            manager = getattr(app.state, "ws_manager", None)
            if manager is not None:
                await manager.broadcast_to_deal(
                    event.deal_id, {**event.to_dict(), "type": "document_change"}
                )
    except asyncio.CancelledError:
        logger.info("Document change broadcast task cancelled")
        raise
    finally:
        await subscriber.disconnect()


_publisher: DocumentChangePublisher | None = None


def get_change_publisher() -> DocumentChangePublisher | None:
    """Return the process-wide publisher (set at startup), if any."""
    return _publisher


def set_change_publisher(publisher: DocumentChangePublisher | None) -> None:
    global _publisher
    _publisher = publisher

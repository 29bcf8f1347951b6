"""Messaging: Redis pub/sub change feed."""

from dealroom.infrastructure.messaging.redis_pubsub import (
    DocumentChangePublisher,
    DocumentChangeSubscriber,
    get_change_publisher,
    run_document_change_broadcast,
    set_change_publisher,
)

__all__ = [
    "DocumentChangePublisher",
    "DocumentChangeSubscriber",
    "get_change_publisher",
    "run_document_change_broadcast",
    "set_change_publisher",
]

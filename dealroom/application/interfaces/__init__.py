"""Ports implemented by infrastructure."""

from dealroom.application.interfaces.messaging import IChangeFeed, IChangePublisher
from dealroom.application.interfaces.repositories import IDocumentRepository
from dealroom.application.interfaces.storage import IStorageService

__all__ = [
    "IChangeFeed",
    "IChangePublisher",
    "IDocumentRepository",
    "IStorageService",
]

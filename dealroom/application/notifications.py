"""Transient user notifications (toasts).

Operations report outcomes through a Notifier. The API layer collects them
into the response; other consumers log them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from dealroom.shared.enums import NotificationVariant

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    title: str
    message: str
    variant: NotificationVariant = NotificationVariant.DEFAULT

    def to_dict(self) -> dict[str, str]:
        return {"title": self.title, "message": self.message, "variant": self.variant.value}


class Notifier(Protocol):
    def notify(self, notification: Notification) -> None:
        """Deliver one notification."""


class LoggingNotifier:
    """Writes notifications to the log (destructive ones as warnings)."""

    def notify(self, notification: Notification) -> None:
        level = (
            logging.WARNING
            if notification.variant is NotificationVariant.DESTRUCTIVE
            else logging.INFO
        )
        logger.log(level, "%s: %s", notification.title, notification.message)


class CollectingNotifier:
    """Keeps notifications in order of delivery."""

    def __init__(self) -> None:
        self.notifications: list[Notification] = []

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)

    def titles(self) -> list[str]:
        return [n.title for n in self.notifications]


def success(title: str, message: str) -> Notification:
    return Notification(title, message)


def failure(title: str, message: str) -> Notification:
    return Notification(title, message, NotificationVariant.DESTRUCTIVE)

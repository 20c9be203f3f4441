"""User-facing outcome notifications."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from grocer.models.actions import Notice

logger = logging.getLogger(__name__)

_LEVELS = {
    "info": logging.INFO,
    "success": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class NotificationSink(ABC):
    """Receives fire-and-forget outcome reports such as UI toasts."""

    @abstractmethod
    def notify(self, notice: Notice) -> None:
        """Deliver the notice; must not raise."""


class LoggingNotifier(NotificationSink):
    """Default sink that writes notices to the application log."""

    def notify(self, notice: Notice) -> None:
        logger.log(_LEVELS.get(notice.severity, logging.INFO), "%s: %s", notice.title, notice.description)


class RecentNotices(NotificationSink):
    """Keeps the most recent notices so an API response can echo them."""

    def __init__(self, limit: int = 20) -> None:
        self._limit = limit
        self._notices: list[Notice] = []

    def notify(self, notice: Notice) -> None:
        logger.debug("Notice %s: %s", notice.title, notice.description)
        self._notices.append(notice)
        del self._notices[: -self._limit]

    def drain(self) -> list[Notice]:
        notices, self._notices = self._notices, []
        return notices


__all__ = ["LoggingNotifier", "NotificationSink", "RecentNotices"]

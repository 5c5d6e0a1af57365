from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


LEVEL_ICONS = {
    NotificationLevel.SUCCESS: "✅",
    NotificationLevel.INFO: "ℹ️",
    NotificationLevel.WARNING: "⚠️",
    NotificationLevel.ERROR: "❌",
}


@dataclass(frozen=True)
class Notification:
    level: NotificationLevel
    title: str
    description: Optional[str] = None


@runtime_checkable
class NotificationSink(Protocol):
    """Anything the dashboard can report to."""

    def notify(self, notification: Notification) -> None: ...


class NotificationService:
    """
    Buffers the notifications shown to the operator.

    The service is handed explicitly to whoever needs to report something;
    the channel drains it after each operation and renders the messages.
    Every notification is logged as it is recorded.
    """

    def __init__(self) -> None:
        self._pending: List[Notification] = []
        self._lock = threading.Lock()

    def notify(self, notification: Notification) -> None:
        log = logger.error if notification.level == NotificationLevel.ERROR else logger.info
        log(f"[{notification.level.value}] {notification.title}: {notification.description or ''}")
        with self._lock:
            self._pending.append(notification)

    def drain(self) -> List[Notification]:
        """Returns and forgets everything recorded so far."""
        with self._lock:
            pending, self._pending = self._pending, []
        return pending

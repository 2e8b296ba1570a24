"""Transient user notifications (toasts)."""

import itertools
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Set

from ..utils.helpers import utcnow

logger = logging.getLogger(__name__)


class NotificationKind(Enum):
    """Kinds of transient notification."""
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class Notification:
    """A notification emitted to the user."""
    id: int
    kind: NotificationKind
    message: str
    description: Optional[str] = None
    timestamp: datetime = field(default_factory=utcnow)


class Notifier(ABC):
    """Sink for loading, success and error notifications."""

    @abstractmethod
    def loading(self, message: str) -> int:
        """Show a loading indicator and return its id."""
        pass

    @abstractmethod
    def dismiss(self, notification_id: int) -> None:
        """Dismiss a notification (normally a loading indicator)."""
        pass

    @abstractmethod
    def success(self, message: str, description: Optional[str] = None) -> int:
        pass

    @abstractmethod
    def error(self, message: str, description: Optional[str] = None) -> int:
        pass


class LogNotifier(Notifier):
    """
    Notifier that writes to the log and keeps an in-memory history.

    `history` holds every notification emitted; `active` holds the ids of
    loading indicators not yet dismissed.
    """

    def __init__(self):
        self.history: List[Notification] = []
        self.active: Set[int] = set()
        self._ids = itertools.count(1)

    def _emit(self, kind: NotificationKind, message: str, description: Optional[str] = None) -> int:
        notification = Notification(
            id=next(self._ids),
            kind=kind,
            message=message,
            description=description,
        )
        self.history.append(notification)
        return notification.id

    def loading(self, message: str) -> int:
        notification_id = self._emit(NotificationKind.LOADING, message)
        self.active.add(notification_id)
        logger.debug(f"[loading:{notification_id}] {message}")
        return notification_id

    def dismiss(self, notification_id: int) -> None:
        self.active.discard(notification_id)

    def success(self, message: str, description: Optional[str] = None) -> int:
        logger.info(f"{message}{f' - {description}' if description else ''}")
        return self._emit(NotificationKind.SUCCESS, message, description)

    def error(self, message: str, description: Optional[str] = None) -> int:
        logger.warning(f"{message}{f' - {description}' if description else ''}")
        return self._emit(NotificationKind.ERROR, message, description)

    def of_kind(self, kind: NotificationKind) -> List[Notification]:
        """Get emitted notifications of one kind."""
        return [n for n in self.history if n.kind == kind]

    @property
    def is_loading(self) -> bool:
        return bool(self.active)

"""
User-facing notice channel.

Every message the user should see (success confirmations and every
failure) goes through a single Notifier. Notices are transient: each one
expires after a fixed display time, after which ``active()`` no longer
returns it. Error notices are also logged with their underlying detail.
"""

import logging
import time
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional


logger = logging.getLogger(__name__)


class NoticeLevel(Enum):
    """Notice severity."""
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class Notice:
    """
    A transient message shown to the user.

    Attributes:
        message: Text shown to the user
        level: SUCCESS or ERROR
        expires_at: Clock value after which the notice is dismissed
    """

    message: str
    level: NoticeLevel
    expires_at: float

    @property
    def is_error(self) -> bool:
        return self.level == NoticeLevel.ERROR


class Notifier:
    """
    Single reporting channel for user-visible notices.

    Examples:
        >>> notifier = Notifier(display_seconds=3)
        >>> notifier.error("Error: Not Found", detail="GET /api/v1/students/9 -> 404")
        >>> [n.message for n in notifier.active()]
        ['Error: Not Found']
        >>> notifier.last_error()
        'Error: Not Found'
    """

    HISTORY_SIZE = 100

    def __init__(
        self,
        display_seconds: float = 3.0,
        clock: Callable[[], float] = time.monotonic
    ):
        self.display_seconds = display_seconds
        self._clock = clock
        self._notices: deque = deque(maxlen=self.HISTORY_SIZE)
        self._pending: List[Notice] = []
        self._listeners: List[Callable[[Notice], None]] = []

    def subscribe(self, listener: Callable[[Notice], None]):
        """Register a callback invoked for every new notice."""
        self._listeners.append(listener)

    def success(self, message: str):
        """Show a success notice."""
        logger.info(message)
        self._publish(message, NoticeLevel.SUCCESS)

    def error(self, message: str, detail: Optional[str] = None):
        """
        Show an error notice and log the underlying detail.

        Args:
            message: One-line message for the user
            detail: Diagnostic detail, logged only
        """
        if detail:
            logger.error(f"{message} ({detail})")
        else:
            logger.error(message)
        self._publish(message, NoticeLevel.ERROR)

    def _publish(self, message: str, level: NoticeLevel):
        notice = Notice(
            message=message,
            level=level,
            expires_at=self._clock() + self.display_seconds
        )
        self._notices.append(notice)
        self._pending.append(notice)

        for listener in self._listeners:
            listener(notice)

    def active(self) -> List[Notice]:
        """Return notices that have not been auto-dismissed yet."""
        now = self._clock()
        return [n for n in self._notices if n.expires_at > now]

    def drain(self) -> List[Notice]:
        """Return and clear notices not yet handed to a front end."""
        pending, self._pending = self._pending, []
        return pending

    def history(self) -> List[Notice]:
        """Return every notice still held, expired or not, oldest first."""
        return list(self._notices)

    def last_error(self) -> Optional[str]:
        """Return the most recent active error message, if any."""
        for notice in reversed(self.active()):
            if notice.is_error:
                return notice.message
        return None

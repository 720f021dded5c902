from __future__ import annotations

import logging
from typing import Optional

from .models import Notification

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class NotificationSlot:
    """
    Holds at most one undisplayed notification.

    Posting replaces whatever is waiting; consuming hands the notification to
    the caller and empties the slot so it is shown exactly once.
    """

    def __init__(self) -> None:
        self._current: Optional[Notification] = None

    def post(self, message: str, is_error: bool = False) -> Notification:
        if self._current is not None:
            logger.debug("Notification superseded: %s", self._current.message)
        self._current = Notification(message=message, is_error=is_error)
        return self._current

    def peek(self) -> Optional[Notification]:
        return self._current

    def consume(self) -> Optional[Notification]:
        current, self._current = self._current, None
        return current

    def dismiss(self) -> None:
        self._current = None

    def __bool__(self) -> bool:
        return self._current is not None

from __future__ import annotations

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class NotificationSink(Protocol):
    def success(self, message: str) -> None:
        ...

    def error(self, message: str) -> None:
        ...


class LoggingNotifier:
    """Sink used when no UI is attached."""

    def success(self, message: str) -> None:
        logger.info(message)

    def error(self, message: str) -> None:
        logger.error(message)


def error_message(exc: BaseException, fallback: str) -> str:
    """Server-provided message when there is one, the fallback otherwise."""
    message = getattr(exc, "message", None) or str(exc)
    return message or fallback

"""
Voice command notifications.

Front ends subscribe to learn that a command succeeded (e.g. to reload
their transaction lists). The flow notifies after every successful
command; failed, unrecognized and cancelled commands are not broadcast.
"""

import asyncio
from typing import Any, Callable

import structlog

from voicebudget.models.result import VoiceResponse


logger = structlog.get_logger(__name__)


Handler = Callable[[VoiceResponse], Any]


class VoiceCommandNotifier:
    """Observer registry for successful voice commands."""

    def __init__(self):
        self._handlers: list[Handler] = []

    def subscribe(self, handler: Handler) -> Callable[[], None]:
        """
        Register a handler (sync or async).

        Returns:
            A callable that removes this subscription
        """
        self._handlers.append(handler)
        return lambda: self.unsubscribe(handler)

    def unsubscribe(self, handler: Handler) -> None:
        """Remove a handler; unknown handlers are ignored."""
        try:
            self._handlers.remove(handler)
        except ValueError:
            pass

    @property
    def subscriber_count(self) -> int:
        return len(self._handlers)

    async def notify(self, response: VoiceResponse) -> None:
        """Call every handler in subscription order, awaiting async ones."""
        for handler in list(self._handlers):
            try:
                result = handler(response)
                if asyncio.iscoroutine(result):
                    await result
            except Exception as e:
                logger.error(
                    "notification_handler_failed",
                    handler=getattr(handler, "__name__", repr(handler)),
                    error=str(e),
                )

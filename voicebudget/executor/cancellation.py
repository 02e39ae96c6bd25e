"""Cooperative cancellation for command execution."""


class CommandCancelled(Exception):
    """Raised inside the executor when the caller has cancelled."""

    def __init__(self, stage: str):
        self.stage = stage
        super().__init__(f"Cancelled before {stage}")


class CancellationToken:
    """
    Flag shared between a caller and an in-flight command.

    The executor checks it before every store call; once set, no further
    calls are issued. Calls already completed are not undone.
    """

    def __init__(self):
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def raise_if_cancelled(self, stage: str) -> None:
        if self._cancelled:
            raise CommandCancelled(stage)

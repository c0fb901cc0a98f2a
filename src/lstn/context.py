"""Run context carrying the deadline and the cancellation signal of one invocation."""

import threading
import time

from .errors import CancelledError

DEADLINE_EXCEEDED = "context deadline exceeded"
CANCELED = "context canceled"


class RunContext:
    """Deadline plus cooperative cancellation shared by workers, clients and child processes.

    Created once per subcommand invocation from the ``timeout`` option.
    """

    def __init__(self, timeout: float | None = None) -> None:
        self._deadline = time.monotonic() + timeout if timeout else None
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def remaining(self) -> float | None:
        """Seconds left before the deadline, None when there is no deadline."""
        if self._deadline is None:
            return None
        return max(self._deadline - time.monotonic(), 0.0)

    def done(self) -> bool:
        if self.cancelled:
            return True
        remaining = self.remaining()
        return remaining is not None and remaining <= 0

    def error(self) -> CancelledError | None:
        """Return the cancellation error, or None while the context is alive."""
        if self.cancelled:
            return CancelledError(CANCELED)
        remaining = self.remaining()
        if remaining is not None and remaining <= 0:
            return CancelledError(DEADLINE_EXCEEDED)
        return None

    def check(self) -> None:
        """Raise CancelledError once the context is done."""
        err = self.error()
        if err is not None:
            raise err

    def timeout(self, ceiling: float | None = None) -> float | None:
        """Timeout to hand to a blocking call, bounded by the deadline."""
        remaining = self.remaining()
        if remaining is None:
            return ceiling
        if ceiling is None:
            return remaining
        return min(remaining, ceiling)


def background() -> RunContext:
    """A context without deadline, for calls made outside a command."""
    return RunContext()

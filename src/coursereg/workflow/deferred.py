"""Cancellable delayed actions bound to the running event loop."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)


class DeferredAction:
    """A callback that runs once after a delay unless cancelled first.

    Owned by whoever schedules it; cancelling is always safe, including after
    the action has fired.
    """

    def __init__(self, delay: float, callback: Callable[[], None]) -> None:
        self.delay = delay
        self._callback = callback
        self._handle: asyncio.TimerHandle | None = None
        self._fired = False
        self._cancelled = False

    @classmethod
    def schedule(cls, delay: float, callback: Callable[[], None]) -> DeferredAction:
        """Create and start a deferred action on the running loop."""
        action = cls(delay, callback)
        action.start()
        return action

    def start(self) -> None:
        """Arm the timer.

        Raises:
            RuntimeError: If already started, or no event loop is running.
        """
        if self._handle is not None:
            raise RuntimeError("Deferred action already started")
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire)

    def cancel(self) -> bool:
        """Prevent the callback from running.

        Returns:
            True if a pending callback was suppressed.
        """
        if not self.pending:
            return False
        assert self._handle is not None
        self._handle.cancel()
        self._cancelled = True
        return True

    @property
    def pending(self) -> bool:
        """Whether the callback is armed and has neither fired nor been cancelled."""
        return self._handle is not None and not self._fired and not self._cancelled

    @property
    def fired(self) -> bool:
        return self._fired

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def _fire(self) -> None:
        if self._cancelled:
            return
        self._fired = True
        try:
            self._callback()
        except Exception:
            logger.exception("Deferred action failed")

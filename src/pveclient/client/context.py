"""Per-call cancellation and deadline handling.

A CallContext travels with one (or several) client calls. The transport
checks it before sending, arms a timer that cancels it when the deadline
passes, and waits on it alongside the in-flight exchange so that ``cancel()``
from another thread returns control to the caller at once.
"""

import threading
import time
from typing import Callable, List, Optional

from pveclient.client.exceptions import Cancelled


class CallContext:
    """Deadline plus explicit cancel signal for blocking calls.

    Attributes:
        deadline: Absolute ``time.monotonic()`` timestamp, or None for no deadline
    """

    def __init__(self, timeout: Optional[float] = None):
        """Initialize call context.

        Args:
            timeout: Seconds from now until the deadline; None means no deadline
        """
        self.deadline: Optional[float] = (
            time.monotonic() + timeout if timeout is not None else None
        )
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: List[Callable[[], None]] = []

    @classmethod
    def with_deadline(cls, deadline: float) -> "CallContext":
        """Create a context expiring at an absolute monotonic timestamp."""
        ctx = cls()
        ctx.deadline = deadline
        return ctx

    @classmethod
    def background(cls) -> "CallContext":
        """Create a context that never expires on its own."""
        return cls()

    def remaining(self) -> Optional[float]:
        """Seconds left until the deadline, or None without one."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    @property
    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    @property
    def cancelled(self) -> bool:
        """True once cancel() was called or the deadline has passed."""
        return self._event.is_set() or self.expired

    def cancel(self) -> None:
        """Fire the cancel signal and run registered abort hooks."""
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks = list(self._callbacks)
            self._callbacks.clear()

        for callback in callbacks:
            callback()

    def on_cancel(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register an abort hook.

        The hook runs at most once, on the thread calling cancel(). If the
        context is already cancelled the hook runs immediately.

        Args:
            callback: Zero-argument callable

        Returns:
            A function that unregisters the hook
        """
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                registered = True
            else:
                registered = False

        if not registered:
            callback()

        def unregister() -> None:
            with self._lock:
                if callback in self._callbacks:
                    self._callbacks.remove(callback)

        return unregister

    def raise_if_cancelled(self) -> None:
        """Raise Cancelled if the signal fired or the deadline passed."""
        if self.expired:
            raise Cancelled("call deadline exceeded")
        if self._event.is_set():
            raise Cancelled("call was cancelled")

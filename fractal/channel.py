"""A single-slot channel carrying a worker's progress to the coordinator."""

from __future__ import annotations

import threading
from typing import Optional


class ChannelClosed(Exception):
    """Raised when sending on a channel that has already been closed."""


class ProgressChannel:
    """Hand cumulative pixel counts from one worker to the coordinator.

    At most one value is in flight: :meth:`send` blocks until the previous
    value has been received. Closing the channel is the only way a worker
    signals that it is done; a value sent before :meth:`close` is still
    delivered before the closure is reported.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._value: Optional[int] = None
        self._pending = False
        self._closed = False

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    def send(self, value: int) -> None:
        with self._cond:
            self._cond.wait_for(lambda: not self._pending or self._closed)
            if self._closed:
                raise ChannelClosed("send on closed channel")
            self._value = value
            self._pending = True
            self._cond.notify_all()

    def close(self) -> None:
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def receive(self, timeout: Optional[float] = None) -> tuple[Optional[int], bool]:
        """Wait for the next value.

        Returns ``(value, True)`` when a value arrived, ``(None, True)`` when
        ``timeout`` elapsed while the channel is still open, and
        ``(None, False)`` once the channel is closed and drained.
        """

        with self._cond:
            ready = self._cond.wait_for(lambda: self._pending or self._closed, timeout)
            if not ready:
                return None, True
            if self._pending:
                value = self._value
                self._value = None
                self._pending = False
                self._cond.notify_all()
                return value, True
            return None, False

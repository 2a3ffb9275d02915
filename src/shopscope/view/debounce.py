"""Delay-and-collapse for bursts of search input on the asyncio loop."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_UNSET: Any = object()


class Debouncer(Generic[T]):
    """Forward only the last value of a burst to *callback*.

    Each :meth:`push` cancels the timer armed by the previous one, so a
    value is delivered only after *delay* seconds without a newer push.
    :meth:`flush` skips the wait (explicit submit / clear).  All calls must
    come from the thread that owns the event loop.
    """

    def __init__(
        self,
        callback: Callable[[T], None],
        delay: float = 0.3,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        if delay < 0:
            raise ValueError("delay must be >= 0")
        self.delay = delay
        self._callback = callback
        self._loop = loop
        self._handle: asyncio.TimerHandle | None = None
        self._value: Any = _UNSET

    @property
    def pending(self) -> bool:
        """``True`` while a value is waiting for the timer."""
        return self._handle is not None

    def push(self, value: T) -> None:
        self._cancel_timer()
        self._value = value
        loop = self._loop or asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire)

    def flush(self, value: Any = _UNSET) -> None:
        """Deliver *value* (or the pending one) right away.

        Does nothing when called without a value and nothing is pending.
        """
        self._cancel_timer()
        if value is _UNSET:
            value = self._value
        self._value = _UNSET
        if value is _UNSET:
            return
        self._callback(value)

    def cancel(self) -> None:
        """Drop the pending value without delivering it."""
        self._cancel_timer()
        self._value = _UNSET

    def _cancel_timer(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        value, self._value = self._value, _UNSET
        if value is _UNSET:
            return
        logger.debug("Debounced value delivered: %r", value)
        self._callback(value)

from __future__ import annotations

import asyncio
from typing import Callable


class IntervalTimer:
    """One-shot, cancelable delay that invokes ``callback`` on the running loop."""

    def __init__(self, delay: float, callback: Callable[[], None]):
        self._delay = delay
        self._callback = callback
        self._handle: asyncio.TimerHandle | None = None
        self._fired = False

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def active(self) -> bool:
        return self._handle is not None

    @property
    def fired(self) -> bool:
        return self._fired

    def start(self) -> None:
        if self._handle is not None or self._fired:
            raise RuntimeError("IntervalTimer already started")
        self._handle = asyncio.get_running_loop().call_later(self._delay, self._fire)

    def cancel(self) -> None:
        """Disarm the timer. No-op if it already fired or was never started."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        self._fired = True
        self._callback()

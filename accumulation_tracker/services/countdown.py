"""Cancellable once-per-second callback for the rest countdown."""
from __future__ import annotations

import asyncio
from typing import Callable


def _on_loop(loop: asyncio.AbstractEventLoop) -> bool:
    try:
        return asyncio.get_running_loop() is loop
    except RuntimeError:
        return False


class RestCountdown:
    """Calls ``on_tick`` every ``interval`` seconds on an event loop for as
    long as it returns True.

    ``start`` and ``cancel`` may be called from worker threads (sync routes
    run in FastAPI's threadpool); scheduling is then handed to ``loop`` with
    ``call_soon_threadsafe``. Without an explicit loop the running one is used.

    Each run gets a generation number. ``cancel`` (or a new ``start``) bumps
    it, so a callback from an older run that still fires is a no-op and can't
    move a session that has already left its rest.
    """

    def __init__(self, on_tick: Callable[[], bool], *, interval: float = 1.0,
                 loop: asyncio.AbstractEventLoop | None = None):
        self._on_tick = on_tick
        self._interval = interval
        self._loop = loop
        self._handle: asyncio.TimerHandle | None = None
        self._generation = 0

    @property
    def active(self) -> bool:
        return self._handle is not None

    def start(self) -> None:
        self.cancel()
        generation = self._generation
        loop = self._loop or asyncio.get_running_loop()
        if _on_loop(loop):
            self._schedule(loop, generation)
        else:
            loop.call_soon_threadsafe(self._schedule, loop, generation)

    def cancel(self) -> None:
        self._generation += 1
        handle, self._handle = self._handle, None
        if handle is not None:
            handle.cancel()

    def _schedule(self, loop: asyncio.AbstractEventLoop, generation: int) -> None:
        if generation != self._generation:
            return
        self._handle = loop.call_later(self._interval, self._fire, loop, generation)

    def _fire(self, loop: asyncio.AbstractEventLoop, generation: int) -> None:
        if generation != self._generation:
            return
        self._handle = None
        if self._on_tick():
            self._schedule(loop, generation)

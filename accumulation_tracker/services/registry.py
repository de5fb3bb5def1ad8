from __future__ import annotations
import logging
import threading
import time
from typing import Callable, Optional

from accumulation_tracker.services.live_session import LiveSession

log = logging.getLogger(__name__)


class LiveSessionRegistry:
    """In-memory live sessions for the HTTP adapter, keyed by session id.

    Nothing here is persisted: restarting the process drops every live
    session, which is the same as the user abandoning it. Sessions nobody has
    looked up for ``idle_timeout`` seconds are dropped the same way, swept
    whenever a new session is created.
    """

    def __init__(
        self,
        factory: Callable[..., LiveSession] = LiveSession,
        *,
        idle_timeout: float = 3600.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._factory = factory
        self._idle_timeout = idle_timeout
        self._clock = clock
        self._sessions: dict[str, LiveSession] = {}
        self._touched: dict[str, float] = {}
        self._lock = threading.Lock()

    def create(self, **kwargs) -> LiveSession:
        self.sweep()
        live = self._factory(**kwargs)
        with self._lock:
            self._sessions[live.id] = live
            self._touched[live.id] = self._clock()
        return live

    def get(self, session_id: str) -> Optional[LiveSession]:
        with self._lock:
            live = self._sessions.get(session_id)
            if live is not None:
                self._touched[session_id] = self._clock()
            return live

    def discard(self, session_id: str) -> bool:
        with self._lock:
            live = self._sessions.pop(session_id, None)
            self._touched.pop(session_id, None)
        if live is None:
            return False
        live.close()
        return True

    def sweep(self) -> int:
        """Drop idle sessions; returns how many went."""
        cutoff = self._clock() - self._idle_timeout
        with self._lock:
            idle = [sid for sid, touched in self._touched.items() if touched <= cutoff]
        for sid in idle:
            self.discard(sid)
        if idle:
            log.info("dropped %d idle live sessions", len(idle))
        return len(idle)

    def __len__(self) -> int:
        return len(self._sessions)

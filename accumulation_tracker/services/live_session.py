"""
A running training session: owns the engine state between user actions,
plays the rest countdown when asked to, tells listeners about cues and hands
the finished session to the history store.

Saving is best-effort. A store that fails is logged and the session still
ends in ``complete`` with its results available.
"""
from __future__ import annotations

import asyncio
import logging
import threading
import uuid
from typing import Callable, Iterable

from sqlalchemy.exc import SQLAlchemyError

from accumulation_tracker import engine
from accumulation_tracker.engine import (
    ARMING_DELAY_SECONDS,
    REST_WARNING_AT,
    Cue,
    Phase,
    SessionState,
    TrainingConfig,
    utcnow,
)
from accumulation_tracker.errors import PersistenceFailure
from accumulation_tracker.repositories.base import HistoryStore
from accumulation_tracker.schemas.history import HistoryCreate
from accumulation_tracker.services.countdown import RestCountdown
from accumulation_tracker.services.stats import PersonalRecords, check_personal_records

log = logging.getLogger(__name__)

# Failures a store may raise; anything else is a bug and propagates
STORE_ERRORS = (PersistenceFailure, SQLAlchemyError, OSError)


class LiveSession:
    """One user's session between requests.

    Actions may arrive on threadpool workers while the auto countdown ticks on
    the event loop, so transitions are serialised by a lock. Persistence of a
    finished session runs after the lock is released.
    """

    def __init__(
        self,
        *,
        store: HistoryStore | None = None,
        mirrors: Iterable = (),
        clock: Callable[[], object] = utcnow,
        arming_delay: float = ARMING_DELAY_SECONDS,
        warning_at: int = REST_WARNING_AT,
        auto_countdown: bool = False,
        countdown_interval: float = 1.0,
        loop: asyncio.AbstractEventLoop | None = None,
    ):
        self.id = uuid.uuid4().hex
        self.store = store
        self.mirrors = list(mirrors)
        self.clock = clock
        self.arming_delay = arming_delay
        self.warning_at = warning_at
        self.state: SessionState = engine.initial_state()
        self.preset_id: int | None = None
        self.preset_name: str | None = None
        self.records: PersonalRecords | None = None
        self.saved = False
        self._lock = threading.RLock()
        self._listeners: list[Callable[[Cue], None]] = []
        self._countdown = (
            RestCountdown(self._auto_tick, interval=countdown_interval, loop=loop)
            if auto_countdown else None
        )

    def on_cue(self, listener: Callable[[Cue], None]) -> None:
        self._listeners.append(listener)

    # ---- user actions ----

    def start(self, config: TrainingConfig, *, preset_id: int | None = None, preset_name: str | None = None) -> SessionState:
        """Start from setup. Without a preset this is a quick session and is never saved."""
        with self._lock:
            state = engine.start_session(self.state, config, now=self.clock())
            self.preset_id, self.preset_name = preset_id, preset_name
            self.records, self.saved = None, False
            log.info("session %s started: %s target=%s preset=%s",
                     self.id, state.config.mode.value, state.config.target, preset_id)
            return self._apply(state)

    def bail_out(self, raw_hold_seconds: float) -> SessionState:
        return self._step(lambda s: engine.bail_out(
            s, raw_hold_seconds, now=self.clock(), arming_delay=self.arming_delay))

    def stop(self, raw_hold_seconds: float) -> SessionState:
        return self._step(lambda s: engine.stop(
            s, raw_hold_seconds, now=self.clock(), arming_delay=self.arming_delay))

    def done_with_set(self, raw_reps: float) -> SessionState:
        return self._step(lambda s: engine.done_with_set(s, raw_reps, now=self.clock()))

    def rest_tick(self) -> Cue | None:
        with self._lock:
            state, cue = engine.rest_tick(self.state, now=self.clock(), warning_at=self.warning_at)
            self._apply(state)
        if cue is not None:
            for listener in self._listeners:
                listener(cue)
        return cue

    def skip_rest(self) -> SessionState:
        with self._lock:
            return self._apply(engine.skip_rest(self.state, now=self.clock()))

    def reset(self) -> SessionState:
        with self._lock:
            return self._apply(engine.reset(self.state))

    def close(self) -> None:
        if self._countdown is not None:
            self._countdown.cancel()

    # ---- internals ----

    def _step(self, transition: Callable[[SessionState], SessionState]) -> SessionState:
        with self._lock:
            was_complete = self.state.phase is Phase.complete
            state = self._apply(transition(self.state))
            finished = state.phase is Phase.complete and not was_complete
            preset_id, preset_name = self.preset_id, self.preset_name
        if finished:
            self._finish(state, preset_id, preset_name)
        return state

    def _apply(self, state: SessionState) -> SessionState:
        before = self.state.phase
        self.state = state
        if self._countdown is not None:
            if state.phase is Phase.resting and before is not Phase.resting:
                self._countdown.start()
            elif state.phase is not Phase.resting:
                self._countdown.cancel()
        return state

    def _auto_tick(self) -> bool:
        if self.state.phase is not Phase.resting:
            return False
        self.rest_tick()
        return self.state.phase is Phase.resting

    def _finish(self, state: SessionState, preset_id: int | None, preset_name: str | None) -> None:
        duration = engine.session_duration(state)
        log.info("session %s complete: total=%s/%s attempts=%d in %ss",
                 self.id, state.accumulated_total, state.config.target,
                 len(state.attempts), duration)
        if preset_id is None:
            return

        history = HistoryCreate.from_state(state, preset_id=preset_id, exercise_name=preset_name)
        if self.store is not None:
            # records are judged against the sessions saved before this one
            try:
                previous = self.store.list_for_preset(preset_id)
                self.records = check_personal_records(state, duration, previous)
            except STORE_ERRORS as e:
                log.warning("session %s: could not load previous sessions: %s", self.id, e)
            try:
                self.store.save(history)
                self.saved = True
            except STORE_ERRORS as e:
                log.warning("session %s: could not save history: %s", self.id, e)
        for mirror in self.mirrors:
            try:
                mirror.save(history)
            except STORE_ERRORS as e:
                log.warning("session %s: could not mirror history: %s", self.id, e)

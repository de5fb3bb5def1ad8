"""
Session engine: the accumulation-training state machine.

Every operation takes the current SessionState (plus the user input and the
current time) and returns a new SessionState; nothing here does I/O, so the
HTTP adapter, the live-session runner and the tests all drive it the same way.

    setup -> training -> resting -> training -> ... -> complete
                 \\__________________________________/
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum

from accumulation_tracker.errors import InvalidConfiguration, InvalidTransition, NotArmed

ARMING_DELAY_SECONDS = 1.0
REST_WARNING_AT = 3


class TrainingMode(str, Enum):
    time = "time"
    reps = "reps"


class Phase(str, Enum):
    setup = "setup"
    training = "training"
    resting = "resting"
    complete = "complete"


class Cue(str, Enum):
    rest_warning = "rest_warning"
    rest_complete = "rest_complete"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class TrainingConfig:
    mode: TrainingMode
    target: float
    rest_seconds: int
    adjustment: float


@dataclass(frozen=True, slots=True)
class Attempt:
    value: float        # hold seconds or reps performed
    adjustment: float   # subtracted (time) or added (reps); 0 for a stop
    counted: float      # what went into the accumulated total
    timestamp: datetime


@dataclass(frozen=True, slots=True)
class SessionState:
    phase: Phase = Phase.setup
    config: TrainingConfig | None = None
    accumulated_total: float = 0
    attempts: tuple[Attempt, ...] = field(default_factory=tuple)
    rest_remaining: int = 0
    started_at: datetime | None = None
    training_entered_at: datetime | None = None
    completed_at: datetime | None = None


def initial_state() -> SessionState:
    return SessionState()


def validate_config(config: TrainingConfig) -> TrainingConfig:
    """Return a normalised copy of ``config`` or raise InvalidConfiguration."""
    try:
        mode = TrainingMode(config.mode)
    except ValueError:
        raise InvalidConfiguration(f"unknown mode {config.mode!r}")
    # written as `not (x >= n)` so NaN is rejected too
    if not (config.target >= 1):
        raise InvalidConfiguration("target must be at least 1")
    rest = config.rest_seconds
    if not (rest >= 0) or math.isinf(rest) or rest != int(rest):
        raise InvalidConfiguration("rest must be a whole number of seconds >= 0")
    if not (config.adjustment >= 0) or math.isinf(config.adjustment):
        raise InvalidConfiguration("adjustment must be >= 0")
    return replace(config, mode=mode, rest_seconds=int(config.rest_seconds))


# ---- transitions ----

def start_session(state: SessionState, config: TrainingConfig, *, now: datetime | None = None) -> SessionState:
    if state.phase is not Phase.setup:
        raise InvalidTransition(f"cannot start a session while {state.phase.value}")
    config = validate_config(config)
    now = now or utcnow()
    return SessionState(
        phase=Phase.training,
        config=config,
        started_at=now,
        training_entered_at=now,
    )


def bail_out(
    state: SessionState,
    raw_hold_seconds: float,
    *,
    now: datetime | None = None,
    arming_delay: float = ARMING_DELAY_SECONDS,
) -> SessionState:
    """End a hold early; the adjustment is taken off before it counts."""
    now = now or utcnow()
    config = _require_training(state, TrainingMode.time)
    _require_measurement(raw_hold_seconds)
    _require_armed(state, now, arming_delay)
    counted = max(0, raw_hold_seconds - config.adjustment)
    return _record(state, Attempt(raw_hold_seconds, config.adjustment, counted, now), now)


def stop(
    state: SessionState,
    raw_hold_seconds: float,
    *,
    now: datetime | None = None,
    arming_delay: float = ARMING_DELAY_SECONDS,
) -> SessionState:
    """End a hold and the session. The full hold counts and the target is not checked."""
    now = now or utcnow()
    _require_training(state, TrainingMode.time)
    _require_measurement(raw_hold_seconds)
    _require_armed(state, now, arming_delay)
    attempt =Attempt(raw_hold_seconds, 0, raw_hold_seconds, now)
    return replace(
        state,
        phase=Phase.complete,
        accumulated_total=state.accumulated_total + attempt.counted,
        attempts=state.attempts + (attempt,),
        rest_remaining=0,
        completed_at=now,
    )


def done_with_set(state: SessionState, raw_reps: float, *, now: datetime | None = None) -> SessionState:
    now = now or utcnow()
    config = _require_training(state, TrainingMode.reps)
    _require_measurement(raw_reps)
    counted = raw_reps + config.adjustment
    return _record(state, Attempt(raw_reps, config.adjustment, counted, now), now)


def rest_tick(
    state: SessionState,
    *,
    now: datetime | None = None,
    warning_at: int = REST_WARNING_AT,
) -> tuple[SessionState, Cue | None]:
    """Advance the rest countdown by one second.

    Returns the new state and the cue to play, if any: ``rest_warning`` on
    the tick that leaves ``warning_at`` seconds, ``rest_complete`` when the
    countdown runs out and training resumes.
    """
    if state.phase is not Phase.resting:
        raise InvalidTransition(f"no rest in progress while {state.phase.value}")
    cue = Cue.rest_warning if state.rest_remaining == warning_at else None
    remaining = max(0, state.rest_remaining - 1)
    if remaining == 0:
        return _back_to_training(state, now or utcnow()), Cue.rest_complete
    return replace(state, rest_remaining=remaining), cue


def skip_rest(state: SessionState, *, now: datetime | None = None) -> SessionState:
    if state.phase is not Phase.resting:
        raise InvalidTransition(f"no rest in progress while {state.phase.value}")
    return _back_to_training(state, now or utcnow())


def reset(state: SessionState) -> SessionState:
    return initial_state()


# ---- derived values ----

def remaining(state: SessionState) -> float:
    if state.config is None:
        return 0
    return max(0, state.config.target - state.accumulated_total)


def progress_percent(state: SessionState) -> float:
    if state.config is None:
        return 0.0
    return min(100.0, state.accumulated_total / state.config.target * 100)


def session_duration(state: SessionState, now: datetime | None = None) -> int:
    """Whole seconds from start to completion (or to ``now`` while running)."""
    if state.started_at is None:
        return 0
    end = state.completed_at or now or utcnow()
    return int((end - state.started_at).total_seconds())


def best_hold(state: SessionState) -> float:
    return max((a.value for a in state.attempts), default=0)


# ---- helpers ----

def _require_training(state: SessionState, mode: TrainingMode) -> TrainingConfig:
    if state.phase is not Phase.training:
        raise InvalidTransition(f"no attempt in progress while {state.phase.value}")
    if state.config.mode is not mode:
        raise InvalidTransition(f"not available in {state.config.mode.value} mode")
    return state.config


def _require_measurement(value: float) -> None:
    # keeps accumulated_total >= 0; NaN fails the comparison
    if not (value >= 0) or math.isinf(value):
        raise InvalidTransition(f"hold or rep count must be a finite number >= 0, got {value!r}")


def _require_armed(state: SessionState, now: datetime, arming_delay: float) -> None:
    elapsed = (now - state.training_entered_at).total_seconds()
    if elapsed < arming_delay:
        raise NotArmed(f"hold controls arm {arming_delay:g}s after training starts")


def _record(state: SessionState, attempt: Attempt, now: datetime) -> SessionState:
    total = state.accumulated_total + attempt.counted
    attempts = state.attempts + (attempt,)
    if total >= state.config.target:
        return replace(
            state,
            phase=Phase.complete,
            accumulated_total=total,
            attempts=attempts,
            rest_remaining=0,
            completed_at=now,
        )
    return replace(
        state,
        phase=Phase.resting,
        accumulated_total=total,
        attempts=attempts,
        rest_remaining=state.config.rest_seconds,
    )


def _back_to_training(state: SessionState, now: datetime) -> SessionState:
    return replace(state, phase=Phase.training, rest_remaining=0, training_entered_at=now)

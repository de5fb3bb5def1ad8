from __future__ import annotations
from datetime import datetime
from typing import Annotated
from pydantic import BaseModel, Field, model_validator

from accumulation_tracker import display, engine
from accumulation_tracker.engine import Cue, Phase, TrainingConfig, TrainingMode
from accumulation_tracker.services.live_session import LiveSession

# Bounds are checked by the engine so a bad config is an InvalidConfiguration,
# same as for any other caller.
class ConfigIn(BaseModel):
    mode: TrainingMode
    target: float
    rest_seconds: int = 0
    adjustment: float = 0

    def to_config(self) -> TrainingConfig:
        return TrainingConfig(self.mode, self.target, self.rest_seconds, self.adjustment)

class LiveStart(BaseModel):
    # Either a preset, an explicit config, or both (config overrides the preset's values)
    preset_id: int | None = None
    config: ConfigIn | None = None

    @model_validator(mode="after")
    def preset_or_config(self) -> LiveStart:
        if self.preset_id is None and self.config is None:
            raise ValueError("give a preset_id or a config")
        return self

# What the user measured: finite and never negative
Measurement = Annotated[float, Field(ge=0, allow_inf_nan=False)]

class HoldIn(BaseModel):
    value: Measurement   # seconds held, measured by the client

class RepsIn(BaseModel):
    reps: Measurement

class LiveAttemptRead(BaseModel):
    value: float
    adjustment: float
    counted: float
    timestamp: datetime

class RecordsRead(BaseModel):
    best_hold: bool
    fastest_completion: bool
    highest_total: bool

class DisplayRead(BaseModel):
    accumulated: str
    target: str
    remaining: str
    rest: str
    duration: str

class LiveStateRead(BaseModel):
    id: str
    phase: Phase
    preset_id: int | None = None
    mode: TrainingMode | None = None
    target: float | None = None
    rest_seconds: int | None = None
    adjustment: float | None = None
    accumulated_total: float
    remaining: float
    progress_percent: float
    rest_remaining: int
    attempts: list[LiveAttemptRead]
    started_at: datetime | None = None
    completed_at: datetime | None = None
    session_duration: int
    cue: Cue | None = None
    records: RecordsRead | None = None
    saved: bool = False
    display: DisplayRead | None = None

    @classmethod
    def from_live(cls, live: LiveSession, *, cue: Cue | None = None) -> LiveStateRead:
        state = live.state
        config = state.config
        now = live.clock()
        duration = engine.session_duration(state, now)
        out = cls(
            id=live.id,
            phase=state.phase,
            preset_id=live.preset_id,
            accumulated_total=state.accumulated_total,
            remaining=engine.remaining(state),
            progress_percent=engine.progress_percent(state),
            rest_remaining=state.rest_remaining,
            attempts=[
                LiveAttemptRead(value=a.value, adjustment=a.adjustment, counted=a.counted, timestamp=a.timestamp)
                for a in state.attempts
            ],
            started_at=state.started_at,
            completed_at=state.completed_at,
            session_duration=duration,
            cue=cue,
            records=RecordsRead(
                best_hold=live.records.best_hold,
                fastest_completion=live.records.fastest_completion,
                highest_total=live.records.highest_total,
            ) if live.records else None,
            saved=live.saved,
        )
        if config is not None:
            out.mode = config.mode
            out.target = config.target
            out.rest_seconds = config.rest_seconds
            out.adjustment = config.adjustment
            out.display = DisplayRead(
                accumulated=display.format_amount(state.accumulated_total, config.mode),
                target=display.format_amount(config.target, config.mode),
                remaining=display.format_amount(engine.remaining(state), config.mode),
                rest=display.format_countdown(state.rest_remaining),
                duration=display.format_time(duration),
            )
        return out

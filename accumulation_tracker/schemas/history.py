from __future__ import annotations
from datetime import datetime
from pydantic import BaseModel, Field
from accumulation_tracker.engine import SessionState, TrainingMode, session_duration

class AttemptCreate(BaseModel):
    value: float
    adjustment: float
    total_counted: float
    timestamp: datetime

class HistoryCreate(BaseModel):
    """A finished session, ready to hand to a history store."""
    preset_id: int
    date: datetime
    total_accumulated: float
    target: float
    attempt_count: int
    session_duration: int
    attempts: list[AttemptCreate] = Field(default_factory=list)

    # Context for stores that denormalise the configuration (table storage)
    exercise_name: str | None = None
    mode: TrainingMode | None = None
    rest_time: int | None = None
    adjustment: float | None = None

    @classmethod
    def from_state(cls, state: SessionState, *, preset_id: int, exercise_name: str | None = None) -> HistoryCreate:
        config = state.config
        return cls(
            preset_id=preset_id,
            date=state.completed_at,
            total_accumulated=state.accumulated_total,
            target=config.target,
            attempt_count=len(state.attempts),
            session_duration=session_duration(state),
            attempts=[
                AttemptCreate(
                    value=a.value,
                    adjustment=a.adjustment,
                    total_counted=a.counted,
                    timestamp=a.timestamp,
                )
                for a in state.attempts
            ],
            exercise_name=exercise_name,
            mode=config.mode,
            rest_time=config.rest_seconds,
            adjustment=config.adjustment,
        )

class AttemptRead(BaseModel):
    attempt_number: int
    value: float
    adjustment: float
    total_counted: float
    timestamp: datetime

    model_config = {"from_attributes": True}

class HistoryRead(BaseModel):
    id: int
    preset_id: int
    date: datetime
    total_accumulated: float
    target: float
    attempt_count: int
    session_duration: int
    attempts: list[AttemptRead] = Field(default_factory=list)

    model_config = {"from_attributes": True}

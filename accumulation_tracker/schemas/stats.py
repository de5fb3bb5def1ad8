from datetime import datetime
from pydantic import BaseModel
from accumulation_tracker.services.stats import Trend

class PresetStatsRead(BaseModel):
    total_sessions: int
    average_duration: int
    best_duration: int
    average_attempts: float
    trend: Trend

    model_config = {"from_attributes": True}

class ProgressPointRead(BaseModel):
    session_number: int
    total_accumulated: float
    session_duration: int
    best_hold: float

    model_config = {"from_attributes": True}

class PresetOverviewRead(BaseModel):
    preset_id: int
    name: str
    total_sessions: int
    best_session: float
    average_accumulated: float
    average_attempts: float
    average_session_duration: float
    last_session_date: datetime
    trend: Trend

    model_config = {"from_attributes": True}

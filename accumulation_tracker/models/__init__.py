from accumulation_tracker.models.preset import Preset
from accumulation_tracker.models.session_history import SessionHistory
from accumulation_tracker.models.attempt import AttemptRecord

__all__ = ["Preset", "SessionHistory", "AttemptRecord"]

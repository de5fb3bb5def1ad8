# accumulation_tracker/repositories/base.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Generic, Protocol, Sequence, TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from accumulation_tracker.engine import TrainingMode
from accumulation_tracker.errors import PersistenceFailure

T = TypeVar("T")  # SQLAlchemy model type

@dataclass(slots=True)
class Page(Generic[T]):
    items: list[T]
    total: int
    limit: int
    offset: int

class BaseRepository(Generic[T]):
    """Lightweight base for repositories using SQLAlchemy 2.0 style."""
    model: type

    def __init__(self, db: Session):
        self.db = db

    def count(self) -> int:
        return self.db.execute(select(func.count()).select_from(self.model)).scalar_one()

    def commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceFailure(f"could not write {self.model.__tablename__}: {e}") from e

    def add_and_commit(self, entity: T) -> T:
        self.db.add(entity)
        self.commit()
        self.db.refresh(entity)
        return entity


# Contracts shared by the SQL repositories and the local key-value store.
# Routers and the live-session runner only depend on these.

class PresetStore(Protocol):
    def list(self, *, limit: int = 50, offset: int = 0) -> Page[Any]: ...
    def get(self, preset_id: int) -> Any | None: ...
    def create(self, payload) -> Any: ...
    def update(self, preset_id: int, payload) -> Any | None: ...
    def delete(self, preset_id: int) -> bool: ...
    def ensure_defaults(self) -> None: ...

class HistoryStore(Protocol):
    def save(self, history) -> Any: ...
    def list_for_preset(self, preset_id: int) -> Sequence[Any]: ...
    def get(self, history_id: int) -> Any | None: ...
    def delete(self, history_id: int) -> bool: ...


DEFAULT_PRESETS = (
    {"name": "Straight Handstand", "mode": TrainingMode.time, "target": 60, "rest_time": 15, "adjustment": 5},
    {"name": "Tuck 7 Straddle", "mode": TrainingMode.time, "target": 45, "rest_time": 20, "adjustment": 3},
    {"name": "Pull-ups", "mode": TrainingMode.reps, "target": 20, "rest_time": 30, "adjustment": 2},
)

from __future__ import annotations
from typing import Optional
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from accumulation_tracker import db as database
from accumulation_tracker.errors import PersistenceFailure
from accumulation_tracker.models import AttemptRecord, SessionHistory
from accumulation_tracker.schemas.history import HistoryCreate, HistoryRead

class HistoryRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, history_id: int) -> Optional[SessionHistory]:
        return self.db.get(SessionHistory, history_id)

    def list_for_preset(self, preset_id: int) -> list[SessionHistory]:
        stmt = select(SessionHistory).where(SessionHistory.preset_id == preset_id)\
                                     .options(selectinload(SessionHistory.attempts))\
                                     .order_by(SessionHistory.date.desc(), SessionHistory.id.desc())
        return list(self.db.execute(stmt).scalars().all())

    def save(self, history: HistoryCreate) -> SessionHistory:
        row = SessionHistory(
            preset_id=history.preset_id,
            date=history.date,
            total_accumulated=history.total_accumulated,
            target=history.target,
            attempt_count=history.attempt_count,
            session_duration=history.session_duration,
            attempts=[
                AttemptRecord(
                    attempt_number=i,
                    value=a.value,
                    adjustment=a.adjustment,
                    total_counted=a.total_counted,
                    timestamp=a.timestamp,
                )
                for i, a in enumerate(history.attempts, start=1)
            ],
        )
        try:
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
            return row
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceFailure(f"could not save session history: {e}") from e

    def delete(self, history_id: int) -> bool:
        row = self.get(history_id)
        if not row:
            return False
        self.db.delete(row)
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceFailure(f"could not delete session history: {e}") from e
        return True

class ScopedHistoryRepository:
    """HistoryStore for callers that outlive a request (live sessions).

    Opens its own DB session per call and hands back detached HistoryRead
    models instead of ORM rows.
    """
    def __init__(self, session_factory=None):
        self._session_factory = session_factory

    def _open(self) -> Session:
        if self._session_factory is not None:
            return self._session_factory()
        return database.SessionLocal()

    def get(self, history_id: int) -> Optional[HistoryRead]:
        with self._open() as s:
            row = HistoryRepository(s).get(history_id)
            return HistoryRead.model_validate(row) if row else None

    def list_for_preset(self, preset_id: int) -> list[HistoryRead]:
        with self._open() as s:
            return [HistoryRead.model_validate(r) for r in HistoryRepository(s).list_for_preset(preset_id)]

    def save(self, history: HistoryCreate) -> HistoryRead:
        with self._open() as s:
            return HistoryRead.model_validate(HistoryRepository(s).save(history))

    def delete(self, history_id: int) -> bool:
        with self._open() as s:
            return HistoryRepository(s).delete(history_id)

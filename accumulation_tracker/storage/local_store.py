"""
Presets and session histories kept as two encoded collections in a
key-value store, the way the mobile app keeps them on device.

Unreadable collections load as empty (and are logged); write failures
surface as PersistenceFailure for the caller to tolerate.
"""
from __future__ import annotations
import logging
from typing import Optional

from pydantic import TypeAdapter, ValidationError

from accumulation_tracker.engine import utcnow
from accumulation_tracker.errors import DecodeFailure
from accumulation_tracker.repositories.base import Page, DEFAULT_PRESETS
from accumulation_tracker.schemas.history import AttemptRead, HistoryCreate, HistoryRead
from accumulation_tracker.schemas.preset import PresetCreate, PresetRead, PresetUpdate
from accumulation_tracker.storage.kv_store import JsonFileKeyValueStore

log = logging.getLogger(__name__)

PRESETS_KEY = "AccumulationTracker.Presets"
HISTORIES_KEY = "AccumulationTracker.SessionHistories"

_presets = TypeAdapter(list[PresetRead])
_histories = TypeAdapter(list[HistoryRead])


class LocalCollections:
    """Both collections, loaded once and written back whole on every change.

    ``replace_*`` writes the new list first and only then swaps it in, so a
    failed write leaves memory matching what is on disk.
    """
    def __init__(self, kv: JsonFileKeyValueStore):
        self.kv = kv
        self.presets: list[PresetRead] = self._load(PRESETS_KEY, _presets)
        self.histories: list[HistoryRead] = self._load(HISTORIES_KEY, _histories)

    def _load(self, key: str, adapter: TypeAdapter) -> list:
        try:
            raw = self.kv.get(key)
            return adapter.validate_json(raw) if raw else []
        except (DecodeFailure, ValidationError) as e:
            log.warning("could not decode %s, starting empty: %s", key, e)
            return []

    def replace_presets(self, presets: list[PresetRead]) -> None:
        self.kv.set(PRESETS_KEY, _presets.dump_json(presets).decode())
        self.presets = presets

    def replace_histories(self, histories: list[HistoryRead]) -> None:
        self.kv.set(HISTORIES_KEY, _histories.dump_json(histories).decode())
        self.histories = histories

    @staticmethod
    def next_id(items: list) -> int:
        return max((i.id for i in items), default=0) + 1


class LocalPresetStore:
    def __init__(self, collections: LocalCollections):
        self.c = collections

    def get(self, preset_id: int) -> Optional[PresetRead]:
        return next((p for p in self.c.presets if p.id == preset_id), None)

    def list(self, *, limit: int = 50, offset: int = 0) -> Page[PresetRead]:
        items = self.c.presets[offset:offset + limit]
        return Page(items=items, total=len(self.c.presets), limit=limit, offset=offset)

    def create(self, payload: PresetCreate) -> PresetRead:
        preset = PresetRead(id=self.c.next_id(self.c.presets), created_at=utcnow(), **payload.model_dump())
        self.c.replace_presets([*self.c.presets, preset])
        return preset

    def update(self, preset_id: int, payload: PresetUpdate) -> Optional[PresetRead]:
        current = self.get(preset_id)
        if current is None:
            return None
        updated = current.model_copy(update=payload.model_dump(exclude_unset=True, exclude_none=True))
        self.c.replace_presets([updated if p.id == preset_id else p for p in self.c.presets])
        return updated

    def delete(self, preset_id: int) -> bool:
        """Deletes the preset together with its session histories."""
        if self.get(preset_id) is None:
            return False
        # presets first; a failed second write leaves only orphaned histories
        self.c.replace_presets([p for p in self.c.presets if p.id != preset_id])
        self.c.replace_histories([h for h in self.c.histories if h.preset_id != preset_id])
        return True

    def ensure_defaults(self) -> None:
        if self.c.presets:
            return
        now = utcnow()
        self.c.replace_presets([
            PresetRead(id=i, created_at=now, **fields)
            for i, fields in enumerate(DEFAULT_PRESETS, start=1)
        ])


class LocalHistoryStore:
    def __init__(self, collections: LocalCollections):
        self.c = collections

    def get(self, history_id: int) -> Optional[HistoryRead]:
        return next((h for h in self.c.histories if h.id == history_id), None)

    def list_for_preset(self, preset_id: int) -> list[HistoryRead]:
        matching = [h for h in self.c.histories if h.preset_id == preset_id]
        return sorted(matching, key=lambda h: h.date, reverse=True)

    def save(self, history: HistoryCreate) -> HistoryRead:
        row = HistoryRead(
            id=self.c.next_id(self.c.histories),
            preset_id=history.preset_id,
            date=history.date,
            total_accumulated=history.total_accumulated,
            target=history.target,
            attempt_count=history.attempt_count,
            session_duration=history.session_duration,
            attempts=[
                AttemptRead(attempt_number=i, **a.model_dump())
                for i, a in enumerate(history.attempts, start=1)
            ],
        )
        self.c.replace_histories([*self.c.histories, row])
        return row

    def delete(self, history_id: int) -> bool:
        if self.get(history_id) is None:
            return False
        self.c.replace_histories([h for h in self.c.histories if h.id != history_id])
        return True

from __future__ import annotations
from typing import Optional
from sqlalchemy import select
from sqlalchemy.orm import Session

from accumulation_tracker.models import Preset
from accumulation_tracker.repositories.base import BaseRepository, Page, DEFAULT_PRESETS
from accumulation_tracker.schemas.preset import PresetCreate, PresetUpdate

class PresetRepository(BaseRepository[Preset]):
    model = Preset

    # READS
    def get(self, preset_id: int) -> Optional[Preset]:
        return self.db.get(Preset, preset_id)

    def list(self, *, limit: int = 50, offset: int = 0) -> Page[Preset]:
        stmt = select(Preset).order_by(Preset.id.asc())
        items = self.db.execute(stmt.limit(limit).offset(offset)).scalars().all()
        return Page(items=list(items), total=self.count(), limit=limit, offset=offset)

    # WRITES
    def create(self, payload: PresetCreate) -> Preset:
        return self.add_and_commit(Preset(**payload.model_dump()))

    def update(self, preset_id: int, payload: PresetUpdate) -> Optional[Preset]:
        preset = self.get(preset_id)
        if not preset:
            return None
        for key, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(preset, key, value)
        self.commit()
        self.db.refresh(preset)
        return preset

    def delete(self, preset_id: int) -> bool:
        """Deletes the preset together with its session histories."""
        preset = self.get(preset_id)
        if not preset:
            return False
        self.db.delete(preset)
        self.commit()
        return True

    def ensure_defaults(self) -> None:
        if self.count():
            return
        self.db.add_all(Preset(**fields) for fields in DEFAULT_PRESETS)
        self.commit()

from typing import Annotated
from datetime import datetime
from pydantic import BaseModel, Field, field_validator
from accumulation_tracker.engine import TrainingMode

# Keep max length via Field
PresetName = Annotated[str, Field(max_length=120)]
Target = Annotated[float, Field(ge=1)]
RestSeconds = Annotated[int, Field(ge=0)]
Adjustment = Annotated[float, Field(ge=0)]

class PresetCreate(BaseModel):
    name: PresetName
    mode: TrainingMode
    target: Target
    rest_time: RestSeconds = 0
    adjustment: Adjustment = 0

    @field_validator("name")
    @classmethod
    def name_non_blank(cls, v: str) -> str:
        v2 = v.strip()
        if not v2:
            raise ValueError("name cannot be blank")
        return v2

class PresetUpdate(BaseModel):
    name: PresetName | None = None
    mode: TrainingMode | None = None
    target: Target | None = None
    rest_time: RestSeconds | None = None
    adjustment: Adjustment | None = None

    @field_validator("name")
    @classmethod
    def name_non_blank(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v2 = v.strip()
        if not v2:
            raise ValueError("name cannot be blank")
        return v2

class PresetRead(BaseModel):
    id: int
    name: str
    mode: TrainingMode
    target: float
    rest_time: int
    adjustment: float
    created_at: datetime

    model_config = {"from_attributes": True}

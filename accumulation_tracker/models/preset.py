from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Integer, String, Float, DateTime, func, Enum as SAEnum
from accumulation_tracker.db import Base
from accumulation_tracker.engine import TrainingMode

class Preset(Base):
    __tablename__ = "presets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    mode: Mapped[TrainingMode] = mapped_column(
        SAEnum(TrainingMode, name="training_mode"),
        nullable=False,
        server_default=TrainingMode.time.value,
    )
    target: Mapped[float] = mapped_column(Float, nullable=False)
    rest_time: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    adjustment: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    created_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    histories = relationship("SessionHistory", back_populates="preset", cascade="all, delete-orphan")

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Integer, ForeignKey, DateTime, Float, func
from accumulation_tracker.db import Base

class SessionHistory(Base):
    __tablename__ = "session_histories"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    preset_id: Mapped[int] = mapped_column(ForeignKey("presets.id", ondelete="CASCADE"), index=True)
    date: Mapped[DateTime] = mapped_column(DateTime(timezone=True), server_default=func.now(), index=True)
    total_accumulated: Mapped[float] = mapped_column(Float, nullable=False)
    target: Mapped[float] = mapped_column(Float, nullable=False)
    attempt_count: Mapped[int] = mapped_column(Integer, nullable=False)
    session_duration: Mapped[int] = mapped_column(Integer, nullable=False)   # wall time, seconds

    preset = relationship("Preset", back_populates="histories")
    attempts = relationship(
        "AttemptRecord",
        back_populates="history",
        cascade="all, delete-orphan",
        order_by="AttemptRecord.attempt_number",
    )

"""RotationRun ORM: audit row for one rotation run.

Invariants:
    - Written once, after the run finishes (succeeded or failed)
    - committed_batches < batch_count on a failed run marks a partial rotation
"""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from slot_rotation.db.base import Base
from slot_rotation.models.purchased_slot import as_utc


class RotationRun(Base):
    """One rotation run and its outcome."""
    __tablename__ = "rotation_runs"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    seed: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    rotated_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    overflow_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    batch_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    committed_batches: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    error_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    duration_ms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    finished_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "seed": self.seed,
            "status": self.status,
            "rotated_count": self.rotated_count,
            "overflow_count": self.overflow_count,
            "batch_count": self.batch_count,
            "committed_batches": self.committed_batches,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "duration_ms": self.duration_ms,
            "started_at": as_utc(self.started_at),
            "finished_at": as_utc(self.finished_at),
        }

"""RotationLeaseRecord ORM: who may rotate right now, and until when.

Invariants:
    - One row per lease name; the primary key settles racing first inserts
    - A lease whose expires_at has passed may be taken over by any holder
"""

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from slot_rotation.db.base import Base


class RotationLeaseRecord(Base):
    __tablename__ = "rotation_leases"

    name: Mapped[str] = mapped_column(String(64), primary_key=True)
    holder: Mapped[str] = mapped_column(String(64), nullable=False)
    acquired_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )

"""PurchasedSlot ORM: one paid listing occupying a numbered slot.

Invariants:
    - id is the stable record identity (string, assigned by the purchase flow)
    - The rotation engine writes only slot_number, group_number,
      last_rotation_at and last_rotation_seed
    - payment_confirmed is nullable: NULL is a legacy row, read as confirmed

Design Decisions:
    - No unique constraint on slot_number: batched commits pass through states
      where two rows briefly share a slot
    - BigInteger for last_rotation_seed: seeds are epoch milliseconds
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import BigInteger, Boolean, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from slot_rotation.core.domain_types import RecordStatus
from slot_rotation.core.slot_record import SlotRecord
from slot_rotation.db.base import Base


def as_utc(value: datetime | None) -> datetime | None:
    """SQLite hands back naive datetimes; the rotation core compares aware ones."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class PurchasedSlot(Base):
    """Purchased slot entity, mutated in place by every rotation."""
    __tablename__ = "purchased_slots"
    __table_args__ = (
        Index("ix_purchased_slots_status_created", "status", "created_at"),
    )

    id: Mapped[str] = mapped_column(
        String(64), primary_key=True, default=lambda: uuid.uuid4().hex,
    )
    slot_number: Mapped[int] = mapped_column(Integer, nullable=False)
    group_number: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=RecordStatus.ACTIVE.value,
    )
    payment_confirmed: Mapped[bool | None] = mapped_column(
        Boolean, nullable=True,
    )
    expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    display_asset: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Business fields owned by the purchase flow
    business_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    contact_email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    destination_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    last_rotation_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    last_rotation_seed: Mapped[int | None] = mapped_column(
        BigInteger, nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def to_record(self) -> SlotRecord:
        return SlotRecord(
            record_id=self.id,
            slot_number=self.slot_number,
            group_number=self.group_number,
            status=self.status,
            payment_confirmed=self.payment_confirmed,
            expires_at=as_utc(self.expires_at),
            display_asset=self.display_asset,
            last_rotation_seed=self.last_rotation_seed,
            last_rotation_at=as_utc(self.last_rotation_at),
            created_at=as_utc(self.created_at),
        )

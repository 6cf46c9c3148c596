"""SQL Rotation Lease: run-level mutual exclusion through a single lease row.

Invariants:
    - At most one unexpired holder per lease name
    - A stale lease (expires_at <= now) is taken over, so a crashed run blocks
      rotation for at most one TTL
    - Losing a first-insert race returns False instead of raising
"""

import logging
from datetime import datetime, timedelta

from sqlalchemy import delete

from slot_rotation.core.errors import StoreConflictError
from slot_rotation.infrastructure.database import DatabaseSessionManager
from slot_rotation.models.purchased_slot import as_utc
from slot_rotation.models.rotation_lease import RotationLeaseRecord

logger = logging.getLogger(__name__)

ROTATION_LEASE_NAME = "slot-rotation"


class SqlRotationLease:

    def __init__(self, db: DatabaseSessionManager, name: str = ROTATION_LEASE_NAME):
        self._db = db
        self.name = name

    async def try_acquire(
        self, holder: str, now: datetime, ttl_seconds: int,
    ) -> bool:
        expires_at = now + timedelta(seconds=ttl_seconds)
        try:
            async with self._db.session("lease acquire") as session:
                async with session.begin():
                    lease = await session.get(
                        RotationLeaseRecord, self.name, with_for_update=True,
                    )
                    if lease is None:
                        session.add(RotationLeaseRecord(
                            name=self.name, holder=holder,
                            acquired_at=now, expires_at=expires_at,
                        ))
                    elif lease.holder != holder and as_utc(lease.expires_at) > now:
                        return False
                    else:
                        if lease.holder != holder:
                            logger.warning(
                                f"Taking over stale rotation lease from {lease.holder}",
                            )
                        lease.holder = holder
                        lease.acquired_at = now
                        lease.expires_at = expires_at
        except StoreConflictError:
            return False
        return True

    async def current_holder(self, now: datetime) -> str | None:
        async with self._db.session("lease read") as session:
            lease = await session.get(RotationLeaseRecord, self.name)
            if lease is None or as_utc(lease.expires_at) <= now:
                return None
            return lease.holder

    async def release(self, holder: str) -> None:
        async with self._db.session("lease release") as session:
            async with session.begin():
                await session.execute(
                    delete(RotationLeaseRecord).where(
                        RotationLeaseRecord.name == self.name,
                        RotationLeaseRecord.holder == holder,
                    ),
                )

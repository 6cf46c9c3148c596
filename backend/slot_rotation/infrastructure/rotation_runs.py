"""SQL Rotation Run Log: audit history of rotation runs, newest first."""

from sqlalchemy import select

from slot_rotation.infrastructure.database import DatabaseSessionManager
from slot_rotation.models.rotation_run import RotationRun


class SqlRotationRunLog:

    def __init__(self, db: DatabaseSessionManager):
        self._db = db

    async def record(self, run: dict) -> None:
        async with self._db.session("run log write") as session:
            async with session.begin():
                session.add(RotationRun(**run))

    async def latest(self, limit: int = 20) -> list[dict]:
        async with self._db.session("run log read") as session:
            result = await session.execute(
                select(RotationRun)
                .order_by(RotationRun.started_at.desc())
                .limit(limit),
            )
            return [row.to_dict() for row in result.scalars().all()]

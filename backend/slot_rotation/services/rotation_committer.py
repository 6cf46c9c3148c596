"""Batched Committer: writes an assignment set in bounded, sequential batches.

Invariants:
    - ceil(M / batch_limit) batches for M assignments, each <= batch_limit
    - Batches commit strictly one after another, in the order they were built
    - A failing batch leaves earlier batches committed; the raised StoreError
      says which batch failed and how much was already written
    - Records deleted after the read are skipped by the store and counted in
      skipped_count, never in committed_count

Design Decisions:
    - No rollback across batches: the store's atomic unit is one batch, so a
      failure is reported for reconciliation rather than hidden
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Sequence

from slot_rotation.core.batching import STORE_MAX_BATCH_OPS, chunk
from slot_rotation.core.errors import (
    ErrorContext, InvalidRotationParameterError, StoreError,
)
from slot_rotation.core.repository_protocols import SlotRecordRepository
from slot_rotation.core.slot_assigner import SlotAssignment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommitResult:
    committed_count: int
    batch_count: int
    skipped_count: int = 0


class BatchedCommitter:
    """Commits rotation assignments through SlotRecordRepository.apply_batch."""

    def __init__(
        self,
        repository: SlotRecordRepository,
        batch_limit: int = STORE_MAX_BATCH_OPS,
    ):
        if not 1 <= batch_limit <= STORE_MAX_BATCH_OPS:
            raise InvalidRotationParameterError(
                f"batch_limit must be within 1..{STORE_MAX_BATCH_OPS}, got {batch_limit}",
                "batch_limit",
            )
        self.repository = repository
        self.batch_limit = batch_limit

    async def commit(
        self,
        assignments: Sequence[SlotAssignment],
        seed: int,
        rotated_at: datetime,
        run_id: str | None = None,
    ) -> CommitResult:
        batches = chunk(assignments, self.batch_limit)
        total = len(assignments)
        committed = skipped = 0
        for index, batch in enumerate(batches):
            try:
                applied = await self.repository.apply_batch(batch, seed, rotated_at)
            except StoreError as exc:
                logger.error(
                    f"Batch {index + 1}/{len(batches)} failed after "
                    f"{committed}/{total} records committed: {exc.detail}",
                    extra={"run_id": run_id, "seed": seed, "batch_index": index},
                )
                raise StoreError(
                    exc.detail, "commit",
                    batch_index=index,
                    committed_batches=index,
                    committed_count=committed,
                    context=ErrorContext(run_id=run_id, seed=seed),
                ) from exc
            committed += applied
            if applied < len(batch):
                skipped += len(batch) - applied
                logger.warning(
                    f"Batch {index + 1}/{len(batches)}: {len(batch) - applied} "
                    f"records no longer in the store, skipped",
                    extra={"run_id": run_id, "batch_index": index},
                )
            logger.info(
                f"Batch {index + 1}/{len(batches)}: updated {applied} records "
                f"({committed}/{total})",
                extra={"run_id": run_id, "batch_index": index},
            )
        return CommitResult(
            committed_count=committed,
            batch_count=len(batches),
            skipped_count=skipped,
        )

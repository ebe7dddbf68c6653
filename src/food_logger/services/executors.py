"""Delivery of pending food logs to the estimation pipeline."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Protocol
from uuid import UUID

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from pydantic import ValidationError

from food_logger.domain.estimates import EstimationJob

if TYPE_CHECKING:
    from food_logger.services.estimation import EstimationService
    from food_logger.services.logs import FoodLogRepository

_RECOVERY_JOB_ID = "recover-pending-estimations"

_logger = logging.getLogger(__name__)


class InvalidJob(ValueError):
    """Raised for delivery payloads that are not a valid estimation job."""


def parse_job(payload: object) -> EstimationJob:
    """Validate a raw delivery payload into an estimation job."""
    if isinstance(payload, EstimationJob):
        return payload
    try:
        return EstimationJob.model_validate(payload)
    except ValidationError as exc:
        raise InvalidJob(f"Invalid estimation job payload: {payload!r}") from exc


class EstimationExecutor(Protocol):
    """Delivers log ids to the estimation pipeline at least once."""

    async def start(self) -> None:
        """Start background processing, if any."""

    async def stop(self) -> None:
        """Stop background processing, if any."""

    async def submit(self, log_id: UUID | str) -> None:
        """Schedule estimation for a log; raise InvalidJob for a malformed id."""


@dataclass
class InlineExecutor(EstimationExecutor):
    """Run estimations immediately in the caller's task.

    Failures are already recorded on the log by the pipeline, so they are
    logged here rather than raised to the caller.
    """

    estimation_service: EstimationService

    async def start(self) -> None:
        """Nothing to start for inline execution."""

    async def stop(self) -> None:
        """Nothing to stop for inline execution."""

    async def submit(self, log_id: UUID | str) -> None:
        """Process the log now."""
        job = parse_job({"log_id": log_id})
        try:
            await self.estimation_service.process(job.log_id)
        except Exception:
            _logger.exception("Inline estimation failed for log %s", job.log_id)


@dataclass
class FifoExecutor(EstimationExecutor):
    """Single-consumer in-process queue with a crash-recovery sweep.

    One estimation runs at a time. Logs left pending by a crash or a failed
    state write are resubmitted by a periodic sweep once they are older than
    `recovery_age_seconds`.
    """

    estimation_service: EstimationService
    log_repository: FoodLogRepository
    recovery_interval_seconds: int = 60
    recovery_age_seconds: int = 120
    recovery_batch_size: int = 100
    _queue: asyncio.Queue[EstimationJob] | None = field(
        default=None, init=False, repr=False
    )
    _queued: set[UUID] = field(default_factory=set, init=False, repr=False)
    _worker: asyncio.Task[None] | None = field(default=None, init=False, repr=False)
    _scheduler: AsyncIOScheduler | None = field(default=None, init=False, repr=False)

    @property
    def running(self) -> bool:
        """Whether the consumer task is active."""
        return self._worker is not None and not self._worker.done()

    async def start(self) -> None:
        """Sweep once, start the consumer, then schedule periodic sweeps."""
        if self._worker is not None:
            _logger.warning("FIFO executor already started")
            return
        self._queue = asyncio.Queue()
        try:
            await self.recover_pending()
        except Exception:
            self._queue = None
            self._queued.clear()
            raise
        self._worker = asyncio.create_task(self._consume(), name="estimation-fifo")

        self._scheduler = AsyncIOScheduler(timezone="UTC")
        self._scheduler.add_job(
            self.recover_pending,
            trigger=IntervalTrigger(seconds=self.recovery_interval_seconds),
            id=_RECOVERY_JOB_ID,
            coalesce=True,
            max_instances=1,
        )
        self._scheduler.start()
        _logger.info("FIFO estimation executor started")

    async def stop(self) -> None:
        """Stop the sweep and the consumer; queued logs stay pending."""
        if self._scheduler is not None:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
        if self._worker is not None:
            self._worker.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._worker
            self._worker = None
        self._queue = None
        self._queued.clear()
        _logger.info("FIFO estimation executor stopped")

    async def submit(self, log_id: UUID | str) -> None:
        """Enqueue a log unless it is already waiting in the queue."""
        job = parse_job({"log_id": log_id})
        if self._queue is None:
            raise RuntimeError("FIFO executor is not started")
        if job.log_id in self._queued:
            _logger.debug("Log %s already queued", job.log_id)
            return
        self._queued.add(job.log_id)
        await self._queue.put(job)

    async def join(self) -> None:
        """Wait until every queued log has been processed."""
        if self._queue is not None:
            await self._queue.join()

    async def recover_pending(self) -> int:
        """Resubmit stale pending logs; return how many were submitted."""
        cutoff = datetime.now(tz=UTC) - timedelta(seconds=self.recovery_age_seconds)
        pending = self.log_repository.list_pending(cutoff, self.recovery_batch_size)
        for log in pending:
            await self.submit(log.id)
        if pending:
            _logger.info("Recovered %s pending estimations", len(pending))
        return len(pending)

    async def _consume(self) -> None:
        queue = self._queue
        if queue is None:
            return
        while True:
            job = await queue.get()
            try:
                await self.estimation_service.process(job.log_id)
            except Exception:
                _logger.exception("Estimation failed for log %s", job.log_id)
            finally:
                self._queued.discard(job.log_id)
                queue.task_done()

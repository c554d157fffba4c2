"""Processing orchestrator: submits jobs and drives them through the pipeline."""

from __future__ import annotations

import asyncio
import dataclasses
import random
import uuid
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional

import structlog

from vidsum.config import Settings
from vidsum.schemas.common import (
    Job,
    JobStatus,
    ProcessingResult,
    TERMINAL_STATUSES,
    VideoDescriptor,
)
from vidsum.schemas.jobs import JobStatusResponse
from vidsum.services.content_generator import ContentGenerator, MockContentGenerator
from vidsum.services.errors import SubmissionError
from vidsum.services.formatting import format_duration
from vidsum.services.stages import (
    UPLOAD_STEP_NAME,
    PipelineContext,
    Stage,
    build_default_stages,
)
from vidsum.storage.job_store import JobStore

logger = structlog.get_logger(__name__)

# Progress stays below this until the terminal write
MAX_RUNNING_PROGRESS = 95


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_job_id() -> str:
    return f"job_{uuid.uuid4().hex}"


class ProcessingOrchestrator:
    """Turns a submitted video into a tracked, asynchronously advancing job.

    ``submit`` must be called from a running event loop: each job's pipeline
    is scheduled as its own task on that loop and ``submit`` returns before
    any stage runs. ``get_status`` is a plain read of the job store.

    Args:
        store: Where job records live.
        generator: Content backend used by the default stages.
        stages: Pipeline stages in execution order (defaults to the four
            summarization stages over ``generator``).
        min_seconds: Lower bound of the total pipeline duration.
        max_seconds: Upper bound of the total pipeline duration.
        initial_progress: Progress written at submission.
        max_upload_bytes: Largest accepted video; None disables the check.
        rng: Random source for pipeline timing.
        sleep: Awaitable used to wait out each stage's share of the duration.
    """

    def __init__(
        self,
        store: JobStore,
        generator: Optional[ContentGenerator] = None,
        stages: Optional[list[Stage]] = None,
        *,
        min_seconds: float = 8.0,
        max_seconds: float = 15.0,
        initial_progress: int = 5,
        max_upload_bytes: Optional[int] = None,
        rng: Optional[random.Random] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        if min_seconds < 0 or max_seconds < min_seconds:
            raise ValueError(f"Invalid pipeline duration bounds: {min_seconds}..{max_seconds}")
        if not 0 <= initial_progress < 100:
            raise ValueError(f"Initial progress must be in [0, 100): {initial_progress}")
        self._store = store
        self._generator = generator or MockContentGenerator()
        self._stages = stages if stages is not None else build_default_stages(self._generator)
        if not self._stages:
            raise ValueError("At least one pipeline stage is required")
        self._min_seconds = min_seconds
        self._max_seconds = max_seconds
        self._initial_progress = initial_progress
        self._max_upload_bytes = max_upload_bytes
        self._rng = rng or random.Random()
        self._sleep = sleep
        self._tasks: dict[str, asyncio.Task] = {}

    @classmethod
    def from_settings(
        cls,
        store: JobStore,
        settings: Settings,
        generator: Optional[ContentGenerator] = None,
    ) -> "ProcessingOrchestrator":
        """Build an orchestrator configured from application settings."""
        generator = generator or MockContentGenerator()
        stages = build_default_stages(generator)
        if len(settings.stage_weights) == len(stages):
            stages = [
                dataclasses.replace(stage, weight=weight)
                for stage, weight in zip(stages, settings.stage_weights)
            ]
        else:
            logger.warning(
                "stage_weights_ignored",
                expected=len(stages),
                got=len(settings.stage_weights),
            )
        return cls(
            store,
            generator,
            stages,
            min_seconds=settings.pipeline_min_seconds,
            max_seconds=settings.pipeline_max_seconds,
            initial_progress=settings.initial_progress_percent,
            max_upload_bytes=settings.max_upload_bytes,
        )

    @property
    def stages(self) -> list[Stage]:
        return list(self._stages)

    @property
    def pending_count(self) -> int:
        """Number of pipelines still running."""
        return len(self._tasks)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def submit(self, video: VideoDescriptor) -> str:
        """Create a job for ``video`` and start its pipeline in the background.

        Raises:
            SubmissionError: The descriptor is blank, negative or too large.
        """
        self._validate(video)
        # Raises before anything is stored when no loop is running
        loop = asyncio.get_running_loop()

        job_id = new_job_id()
        now = _now()
        job = Job(
            job_id=job_id,
            video_name=video.name,
            video_size_bytes=video.size_bytes,
            status=JobStatus.PROCESSING,
            current_step_name=UPLOAD_STEP_NAME,
            progress_percent=self._initial_progress,
            submitted_at=now,
            updated_at=now,
        )
        self._store.put(job_id, job)

        ctx = PipelineContext(job_id=job_id, video=video)
        task = loop.create_task(self._run_pipeline(ctx))
        self._tasks[job_id] = task
        task.add_done_callback(lambda _t: self._tasks.pop(job_id, None))

        logger.info(
            "job_submitted",
            job_id=job_id,
            video=video.name,
            size_bytes=video.size_bytes,
        )
        return job_id

    def get_status(self, job_id: str) -> JobStatusResponse:
        """Snapshot of a job's status; unknown ids report ``not_found``."""
        job = self._store.get(job_id)
        if job is None:
            return JobStatusResponse(status=JobStatus.NOT_FOUND)

        if job.status == JobStatus.PROCESSING:
            return JobStatusResponse(
                status=job.status,
                current_step_name=job.current_step_name,
                progress_percent=job.progress_percent,
            )
        if job.status == JobStatus.COMPLETED:
            return JobStatusResponse(
                status=job.status,
                progress_percent=job.progress_percent,
                result=job.result,
            )
        return JobStatusResponse(status=job.status)

    async def join(self) -> None:
        """Wait for every running pipeline to reach a terminal state."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks.values()), return_exceptions=True)

    async def close(self) -> None:
        """Cancel running pipelines and mark their jobs failed. Used at process shutdown."""
        tasks = dict(self._tasks)
        for task in tasks.values():
            task.cancel()
        if not tasks:
            return
        await asyncio.gather(*tasks.values(), return_exceptions=True)

        # Tasks cancelled before their first step never reach the driver's handler
        for job_id in tasks:
            job = self._store.get(job_id)
            if job is not None and job.status == JobStatus.PROCESSING:
                self._mark_failed(job_id, logger.bind(job_id=job_id))
        logger.info("pipelines_cancelled", count=len(tasks))

    # ------------------------------------------------------------------
    # Pipeline driver
    # ------------------------------------------------------------------

    def _validate(self, video: VideoDescriptor) -> None:
        if not video.name or not video.name.strip():
            raise SubmissionError("Video name must not be empty")
        if video.size_bytes < 0:
            raise SubmissionError(f"Invalid video size: {video.size_bytes}")
        if self._max_upload_bytes is not None and video.size_bytes > self._max_upload_bytes:
            raise SubmissionError(
                f"Video exceeds the {self._max_upload_bytes} byte limit",
                too_large=True,
            )

    def _stage_delays(self) -> list[float]:
        total = self._rng.uniform(self._min_seconds, self._max_seconds)
        weights = [max(stage.weight, 0.0) for stage in self._stages]
        weight_sum = sum(weights)
        if weight_sum <= 0:
            return [total / len(weights)] * len(weights)
        return [total * w / weight_sum for w in weights]

    def _update(self, job_id: str, **changes: Any) -> Job:
        """Read the current record, merge ``changes`` and write it back whole."""
        job = self._store.get(job_id)
        if job is None:
            raise KeyError(job_id)
        if job.status in TERMINAL_STATUSES:
            raise RuntimeError(f"Job {job_id} is already {job.status.value}")
        updated = job.model_copy(update={**changes, "updated_at": _now()})
        self._store.put(job_id, updated)
        return updated

    async def _run_pipeline(self, ctx: PipelineContext) -> None:
        log = logger.bind(job_id=ctx.job_id, video=ctx.video.name)
        total = len(self._stages)
        delays = self._stage_delays()
        log.info("pipeline_started", stages=total, duration_s=round(sum(delays), 2))

        try:
            # Measured once, before any stage, so every stage sees the same value
            ctx.duration_seconds = self._generator.probe_duration(ctx.video)

            for index, (stage, delay) in enumerate(zip(self._stages, delays), start=1):
                job = self._store.get(ctx.job_id)
                target = min(round(100 * index / total), MAX_RUNNING_PROGRESS)
                progress = max(job.progress_percent if job else 0, target)
                self._update(ctx.job_id, current_step_name=stage.label, progress_percent=progress)
                log.info("stage_started", stage=stage.name, index=index, progress=progress)

                await self._sleep(delay)
                fields = await stage.run(ctx)
                ctx.partial.update(fields)
                log.info("stage_completed", stage=stage.name, fields=sorted(fields))

            result = ProcessingResult(
                video_name=ctx.video.name,
                duration=format_duration(ctx.duration_seconds),
                **ctx.partial,
            )
            self._update(
                ctx.job_id,
                status=JobStatus.COMPLETED,
                current_step_name=None,
                progress_percent=100,
                completed_at=_now(),
                result=result,
            )
            log.info("job_completed", key_frames=len(result.key_frames))

        except asyncio.CancelledError:
            log.warning("pipeline_cancelled")
            self._mark_failed(ctx.job_id, log)
            raise
        except Exception as exc:
            log.error("pipeline_failed", error=str(exc), exc_info=True)
            self._mark_failed(ctx.job_id, log)

    def _mark_failed(self, job_id: str, log) -> None:
        """Write the terminal failed record; a failing write is logged, not raised."""
        try:
            self._update(
                job_id,
                status=JobStatus.FAILED,
                current_step_name=None,
                completed_at=_now(),
                result=None,
            )
        except Exception as exc:
            log.error("pipeline_fail_write_failed", error=str(exc), exc_info=True)

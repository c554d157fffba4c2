"""Pipeline stages. Each one is an async step returning partial result fields."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from vidsum.schemas.common import VideoDescriptor
from vidsum.services.content_generator import ContentGenerator
from vidsum.services.errors import StageFailure

UPLOAD_STEP_NAME = "Uploading video"


@dataclass
class PipelineContext:
    """State shared by the stages of one job run."""
    job_id: str
    video: VideoDescriptor
    duration_seconds: int = 0
    partial: dict[str, Any] = field(default_factory=dict)


StageFn = Callable[[PipelineContext], Awaitable[dict[str, Any]]]


@dataclass(frozen=True)
class Stage:
    """A named pipeline step."""
    name: str
    label: str
    run: StageFn
    weight: float = 1.0


def build_default_stages(generator: ContentGenerator) -> list[Stage]:
    """The four summarization stages, in execution order."""

    async def extract_frames(ctx: PipelineContext) -> dict[str, Any]:
        await generator.extract_frames(ctx.video)
        return {}

    async def transcribe(ctx: PipelineContext) -> dict[str, Any]:
        return {"transcription": await generator.transcribe(ctx.video)}

    async def analyze_key_frames(ctx: PipelineContext) -> dict[str, Any]:
        frames = await generator.describe_key_frames(ctx.video, ctx.duration_seconds)
        return {"key_frames": frames}

    async def summarize(ctx: PipelineContext) -> dict[str, Any]:
        missing = [k for k in ("transcription", "key_frames") if k not in ctx.partial]
        if missing:
            raise StageFailure("summarize", f"missing inputs: {', '.join(missing)}")
        summary = await generator.summarize(ctx.partial["transcription"], ctx.partial["key_frames"])
        return {"summary": summary}

    return [
        Stage(name="extract_frames", label="Extracting video frames", run=extract_frames),
        Stage(name="transcribe", label="Transcribing audio", run=transcribe),
        Stage(name="analyze_key_frames", label="Analyzing key moments", run=analyze_key_frames),
        Stage(name="summarize", label="Generating summary", run=summarize),
    ]

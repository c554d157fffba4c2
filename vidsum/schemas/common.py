"""Shared schema types used across the application."""

from __future__ import annotations

import enum
from typing import Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class JobStatus(str, enum.Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    # Returned by lookups for unknown ids, never stored
    NOT_FOUND = "not_found"


TERMINAL_STATUSES = frozenset({JobStatus.COMPLETED, JobStatus.FAILED})


# ---------------------------------------------------------------------------
# Data Models
# ---------------------------------------------------------------------------

class VideoDescriptor(BaseModel):
    """The submitted video as seen by the pipeline."""
    name: str = Field(..., description="Original file name")
    size_bytes: int = Field(..., description="File size in bytes")


class KeyFrame(BaseModel):
    """A notable moment in the video."""
    timestamp: str = Field(..., description="Position in the video, M:SS")
    description: str = Field(..., description="What is shown at this moment")


class ProcessingResult(BaseModel):
    """Final artifact of a completed job."""
    video_name: str
    duration: str = Field(..., description="Video duration, M:SS")
    key_frames: list[KeyFrame] = Field(default_factory=list)
    transcription: str
    summary: str


class Job(BaseModel):
    """Stored record of one processing job."""
    job_id: str
    video_name: str
    video_size_bytes: int
    status: JobStatus
    current_step_name: Optional[str] = Field(None, description="Label of the running stage")
    progress_percent: int = Field(0, ge=0, le=100)
    submitted_at: str
    completed_at: Optional[str] = None
    updated_at: str
    result: Optional[ProcessingResult] = None

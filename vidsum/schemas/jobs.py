"""Schemas for job management endpoints."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from vidsum.schemas.common import JobStatus, ProcessingResult


class SubmitRequest(BaseModel):
    """Request body describing the video to summarize."""
    name: str = Field(..., description="Video file name")
    size_bytes: int = Field(..., description="Video size in bytes")


class SubmitResponse(BaseModel):
    """Response returned as soon as a job is accepted."""
    job_id: str = Field(..., description="Identifier to poll, job_<token>")


class JobStatusResponse(BaseModel):
    """Response for job status queries.

    Fields that do not apply to the current status are left unset so they
    can be dropped from the serialized payload.
    """
    status: JobStatus
    current_step_name: Optional[str] = Field(None, description="Current processing step")
    progress_percent: Optional[int] = Field(None, ge=0, le=100, description="Progress 0 - 100")
    result: Optional[ProcessingResult] = Field(None, description="Final result when completed")

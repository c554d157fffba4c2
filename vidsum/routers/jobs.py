"""Router: /v1/jobs, submit videos and poll job status."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, File, HTTPException, Request, UploadFile
from fastapi.responses import JSONResponse

from vidsum.schemas.common import JobStatus, VideoDescriptor
from vidsum.schemas.jobs import JobStatusResponse, SubmitRequest, SubmitResponse
from vidsum.services.errors import SubmissionError
from vidsum.services.orchestrator import ProcessingOrchestrator

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/v1", tags=["jobs"])

# Read uploads in chunks so the size is known without holding the file
_UPLOAD_CHUNK_BYTES = 1024 * 1024


def get_orchestrator(request: Request) -> ProcessingOrchestrator:
    return request.app.state.orchestrator


def _submit(request: Request, video: VideoDescriptor) -> SubmitResponse:
    try:
        job_id = get_orchestrator(request).submit(video)
    except SubmissionError as exc:
        logger.warning("submission_rejected", video=video.name, error=str(exc))
        raise HTTPException(status_code=413 if exc.too_large else 400, detail=str(exc))
    return SubmitResponse(job_id=job_id)


@router.post("/jobs", response_model=SubmitResponse, status_code=202)
async def submit_job(req: SubmitRequest, request: Request):
    """Start summarizing a video described by name and size.

    Returns a job_id that can be polled via GET /v1/jobs/{job_id}.
    """
    return _submit(request, VideoDescriptor(name=req.name, size_bytes=req.size_bytes))


@router.post("/jobs/upload", response_model=SubmitResponse, status_code=202)
async def upload_video(request: Request, file: UploadFile = File(...)):
    """Upload a video file and start summarizing it.

    Only the file name and size are used; the content is discarded.
    """
    if file.content_type and not file.content_type.startswith("video/"):
        raise HTTPException(status_code=400, detail="Only video files are accepted")

    size = 0
    while chunk := await file.read(_UPLOAD_CHUNK_BYTES):
        size += len(chunk)

    return _submit(request, VideoDescriptor(name=file.filename or "", size_bytes=size))


@router.get(
    "/jobs/{job_id}",
    response_model=JobStatusResponse,
    response_model_exclude_none=True,
    responses={404: {"description": "Unknown job id, body is {\"status\": \"not_found\"}"}},
)
async def get_job_status(job_id: str, request: Request):
    """Get the status, progress, and result of a processing job.

    Poll this endpoint until the status is completed or failed.
    """
    status = get_orchestrator(request).get_status(job_id)
    if status.status == JobStatus.NOT_FOUND:
        return JSONResponse(status_code=404, content={"status": JobStatus.NOT_FOUND.value})
    return status

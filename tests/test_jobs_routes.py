"""Tests for the /v1/jobs endpoints."""

import re
import time

import pytest
from fastapi.testclient import TestClient

from vidsum.config import Settings
from vidsum.main import create_app

STAGE_LABELS = {
    "Uploading video",
    "Extracting video frames",
    "Transcribing audio",
    "Analyzing key moments",
    "Generating summary",
}


def _client(**overrides) -> TestClient:
    """Helper to build a client over an app with the given settings."""
    fields = dict(job_store_backend="memory", pipeline_min_seconds=0.0, pipeline_max_seconds=0.0)
    fields.update(overrides)
    return TestClient(create_app(Settings(**fields)))


def _wait_for_terminal(client: TestClient, job_id: str, timeout: float = 5.0) -> dict:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        body = client.get(f"/v1/jobs/{job_id}").json()
        if body["status"] != "processing":
            return body
        time.sleep(0.01)
    raise AssertionError(f"Job {job_id} still processing after {timeout}s")


@pytest.fixture
def client():
    with _client() as c:
        yield c


class TestSystemRoutes:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"

    def test_root(self, client):
        assert client.get("/").json()["docs"] == "/docs"


class TestSubmitJob:
    def test_submit_returns_job_id(self, client):
        resp = client.post("/v1/jobs", json={"name": "demo.mp4", "size_bytes": 1048576})
        assert resp.status_code == 202
        assert re.fullmatch(r"job_[0-9a-f]+", resp.json()["job_id"])

    def test_job_completes(self, client):
        job_id = client.post(
            "/v1/jobs", json={"name": "demo.mp4", "size_bytes": 1048576}
        ).json()["job_id"]

        body = _wait_for_terminal(client, job_id)
        assert body["status"] == "completed"
        assert body["progress_percent"] == 100
        assert "current_step_name" not in body
        result = body["result"]
        assert result["video_name"] == "demo.mp4"
        assert re.fullmatch(r"\d+:\d{2}", result["duration"])
        assert result["transcription"]
        assert result["summary"]
        assert len(result["key_frames"]) >= 3

    def test_processing_payload(self):
        """A long pipeline is still processing right after submission."""
        with _client(pipeline_min_seconds=60.0, pipeline_max_seconds=60.0) as c:
            job_id = c.post(
                "/v1/jobs", json={"name": "demo.mp4", "size_bytes": 1048576}
            ).json()["job_id"]
            body = c.get(f"/v1/jobs/{job_id}").json()

        assert body["status"] == "processing"
        assert body["current_step_name"] in STAGE_LABELS
        assert 0 < body["progress_percent"] < 100
        assert "result" not in body

    def test_blank_name_rejected(self, client):
        resp = client.post("/v1/jobs", json={"name": " ", "size_bytes": 10})
        assert resp.status_code == 400

    def test_oversized_rejected(self):
        with _client(max_upload_bytes=1000) as c:
            resp = c.post("/v1/jobs", json={"name": "big.mp4", "size_bytes": 1001})
        assert resp.status_code == 413

    def test_missing_fields_rejected(self, client):
        resp = client.post("/v1/jobs", json={"name": "demo.mp4"})
        assert resp.status_code == 422


class TestUploadVideo:
    def test_upload_uses_file_name_and_size(self, client):
        resp = client.post(
            "/v1/jobs/upload",
            files={"file": ("holiday.mp4", b"\x00" * 2048, "video/mp4")},
        )
        assert resp.status_code == 202

        body = _wait_for_terminal(client, resp.json()["job_id"])
        assert body["status"] == "completed"
        assert body["result"]["video_name"] == "holiday.mp4"

    def test_non_video_rejected(self, client):
        resp = client.post(
            "/v1/jobs/upload",
            files={"file": ("notes.txt", b"hello", "text/plain")},
        )
        assert resp.status_code == 400

    def test_upload_over_limit_rejected(self):
        with _client(max_upload_bytes=100) as c:
            resp = c.post(
                "/v1/jobs/upload",
                files={"file": ("clip.mp4", b"\x00" * 101, "video/mp4")},
            )
        assert resp.status_code == 413


class TestGetJobStatus:
    def test_unknown_job_is_not_found(self, client):
        resp = client.get("/v1/jobs/job_doesnotexist")
        assert resp.status_code == 404
        assert resp.json() == {"status": "not_found"}

    def test_completed_status_is_stable(self, client):
        job_id = client.post(
            "/v1/jobs", json={"name": "demo.mp4", "size_bytes": 1}
        ).json()["job_id"]
        first = _wait_for_terminal(client, job_id)
        for _ in range(3):
            assert client.get(f"/v1/jobs/{job_id}").json() == first

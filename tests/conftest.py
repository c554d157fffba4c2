"""Shared fixtures for the vidsum test suite."""

from __future__ import annotations

import asyncio
import random

import pytest

from vidsum.schemas.common import VideoDescriptor
from vidsum.services.content_generator import MockContentGenerator
from vidsum.services.orchestrator import ProcessingOrchestrator
from vidsum.storage.job_store import MemoryJobStore


@pytest.fixture
def demo_video() -> VideoDescriptor:
    return VideoDescriptor(name="demo.mp4", size_bytes=1048576)


@pytest.fixture
def store() -> MemoryJobStore:
    return MemoryJobStore()


@pytest.fixture
def generator() -> MockContentGenerator:
    return MockContentGenerator(rng=random.Random(42))


async def _yield_sleep(_seconds: float) -> None:
    await asyncio.sleep(0)


@pytest.fixture
def orchestrator(store, generator) -> ProcessingOrchestrator:
    return ProcessingOrchestrator(
        store,
        generator,
        min_seconds=8.0,
        max_seconds=15.0,
        max_upload_bytes=500 * 1024 * 1024,
        rng=random.Random(7),
        sleep=_yield_sleep,
    )

"""Content generators that produce transcription, key frames and summary text.

The orchestrator only talks to the ``ContentGenerator`` interface, so an
inference backend can replace the randomized mock without touching the
pipeline driver.
"""

from __future__ import annotations

import abc
import json
import random
from typing import Optional

import structlog

from vidsum.schemas.common import KeyFrame, VideoDescriptor
from vidsum.services.formatting import format_duration

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Summary prompt
# ---------------------------------------------------------------------------

SUMMARY_PROMPT = """Generate a summary for this video based on the transcription and key frames.

Transcription: {transcription}

Key Frames: {key_frames}"""

SUMMARY_MAX_TOKENS = 500
SUMMARY_TEMPERATURE = 0.7


def build_summary_prompt(transcription: str, key_frames: list[KeyFrame]) -> str:
    """Build the prompt an LLM summarizer would receive."""
    frames = json.dumps([kf.model_dump() for kf in key_frames], ensure_ascii=False)
    return SUMMARY_PROMPT.format(transcription=transcription, key_frames=frames)


class ContentGenerator(abc.ABC):
    """Synthesizes the analysis output for a submitted video."""

    @abc.abstractmethod
    def probe_duration(self, video: VideoDescriptor) -> int:
        """Return the video duration in seconds."""

    @abc.abstractmethod
    async def extract_frames(self, video: VideoDescriptor) -> None:
        """Extract frames for later analysis. Produces no result fields."""

    @abc.abstractmethod
    async def transcribe(self, video: VideoDescriptor) -> str:
        ...

    @abc.abstractmethod
    async def describe_key_frames(
        self, video: VideoDescriptor, duration_seconds: int
    ) -> list[KeyFrame]:
        """Return key frames ordered by strictly increasing timestamp, all within the video."""

    @abc.abstractmethod
    async def summarize(self, transcription: str, key_frames: list[KeyFrame]) -> str:
        ...


# ---------------------------------------------------------------------------
# Mock content
# ---------------------------------------------------------------------------

TRANSCRIPT_SECTIONS = [
    "Welcome to our presentation on the latest developments in artificial intelligence.",
    "As you can see from the data, we've made significant progress in the past quarter.",
    "The key findings from our research suggest three main areas of opportunity.",
    "First, natural language processing has advanced considerably with new model architectures.",
    "Second, computer vision applications are becoming more accurate and efficient.",
    "Finally, the integration of these technologies allows for new types of applications.",
    "We're particularly excited about the implications for video summarization technology.",
    "Our team has been working on algorithms that can identify the most important moments in a video.",
    "This could save users hundreds of hours when processing large video collections.",
    "In the next phase, we'll be focusing on improving processing speed and accuracy.",
]

SCENES = [
    "Person speaking to camera in interview setting",
    "Group discussion in conference room",
    "Product demonstration with close-up details",
    "Outdoor scene with people walking",
    "Graph animation showing data trends",
    "Software interface walkthrough",
    "Aerial view of landscape",
    "Speaker presenting to audience",
]

SUMMARIES = [
    (
        "This video presents an overview of recent advancements in AI technology, focusing on "
        "natural language processing, computer vision, and their integration. The speaker "
        "highlights potential applications in video summarization, noting that their team is "
        "developing algorithms to identify key moments in videos, which could save significant "
        "time when processing large video collections. Future work will focus on improving "
        "processing speed and accuracy."
    ),
    (
        "The presentation covers quarterly progress in AI research, identifying three main "
        "opportunity areas: improved natural language processing architectures, more accurate "
        "computer vision applications, and the integration of these technologies. The speaker "
        "emphasizes their video summarization technology that can identify important moments in "
        "videos, potentially saving hundreds of hours of manual work. The next phase will "
        "prioritize processing speed and accuracy improvements."
    ),
    (
        "In this technical overview, the speaker details recent AI developments with a focus on "
        "practical applications. Key points include advances in NLP model architectures, "
        "efficiency improvements in computer vision, and new possibilities through technology "
        "integration. The team's video summarization algorithm is highlighted as a particularly "
        "promising application that could dramatically reduce the time needed to process video "
        "collections. Future development will concentrate on performance optimization."
    ),
]


class MockContentGenerator(ContentGenerator):
    """Randomized canned content.

    Args:
        rng: Random source; pass a seeded ``random.Random`` for repeatable output.
    """

    MIN_DURATION_SECONDS = 30
    MAX_DURATION_SECONDS = 629
    MIN_SECTIONS = 4
    MAX_SECTIONS = 7
    MIN_KEY_FRAMES = 3
    MAX_KEY_FRAMES = 7
    MIN_FRAME_GAP_SECONDS = 10
    MAX_FRAME_GAP_SECONDS = 119

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()

    def probe_duration(self, video: VideoDescriptor) -> int:
        return self._rng.randint(self.MIN_DURATION_SECONDS, self.MAX_DURATION_SECONDS)

    async def extract_frames(self, video: VideoDescriptor) -> None:
        logger.info("frame_extraction", video=video.name, frame_rate=1, quality="medium")

    async def transcribe(self, video: VideoDescriptor) -> str:
        count = self._rng.randint(self.MIN_SECTIONS, self.MAX_SECTIONS)
        sections = [self._rng.choice(TRANSCRIPT_SECTIONS) for _ in range(count)]
        return " ".join(sections)

    async def describe_key_frames(
        self, video: VideoDescriptor, duration_seconds: int
    ) -> list[KeyFrame]:
        count = min(self._rng.randint(self.MIN_KEY_FRAMES, self.MAX_KEY_FRAMES), duration_seconds)
        position = 0
        frames: list[KeyFrame] = []
        for remaining in range(count, 0, -1):
            # Gaps of at least one second keep timestamps strictly increasing;
            # leaving room for the remaining frames keeps them inside the video
            upper = min(self.MAX_FRAME_GAP_SECONDS, (duration_seconds - position) // remaining)
            lower = min(self.MIN_FRAME_GAP_SECONDS, upper)
            position += self._rng.randint(lower, upper)
            frames.append(
                KeyFrame(
                    timestamp=format_duration(position),
                    description=self._rng.choice(SCENES),
                )
            )
        return frames

    async def summarize(self, transcription: str, key_frames: list[KeyFrame]) -> str:
        prompt = build_summary_prompt(transcription, key_frames)
        logger.info(
            "summary_request",
            prompt_len=len(prompt),
            max_tokens=SUMMARY_MAX_TOKENS,
            temperature=SUMMARY_TEMPERATURE,
        )
        return self._rng.choice(SUMMARIES)

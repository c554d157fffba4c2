"""Helpers for rendering video positions as M:SS."""

from __future__ import annotations


def format_duration(seconds: int) -> str:
    """Format a whole number of seconds as ``M:SS`` (minutes are not capped)."""
    if seconds < 0:
        raise ValueError(f"Negative duration: {seconds}")
    minutes, remaining = divmod(int(seconds), 60)
    return f"{minutes}:{remaining:02d}"


def parse_duration(value: str) -> int:
    """Parse an ``M:SS`` string back to seconds."""
    minutes, sep, secs = value.partition(":")
    if not sep or len(secs) != 2 or not minutes.isdigit() or not secs.isdigit():
        raise ValueError(f"Not an M:SS duration: {value!r}")
    if int(secs) >= 60:
        raise ValueError(f"Seconds out of range: {value!r}")
    return int(minutes) * 60 + int(secs)

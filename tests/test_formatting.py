"""Tests for M:SS duration helpers."""

import pytest

from vidsum.services.formatting import format_duration, parse_duration


class TestFormatDuration:
    def test_pads_seconds(self):
        assert format_duration(65) == "1:05"

    def test_under_a_minute(self):
        assert format_duration(9) == "0:09"

    def test_zero(self):
        assert format_duration(0) == "0:00"

    def test_minutes_not_capped(self):
        """Durations past an hour keep counting minutes."""
        assert format_duration(3725) == "62:05"

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            format_duration(-1)


class TestParseDuration:
    def test_parses_minutes_and_seconds(self):
        assert parse_duration("10:30") == 630

    def test_matches_format(self):
        assert parse_duration(format_duration(599)) == 599

    @pytest.mark.parametrize("value", ["", "130", "1:5", "1:60", "a:10", "1:xx"])
    def test_rejects_malformed(self, value):
        with pytest.raises(ValueError):
            parse_duration(value)

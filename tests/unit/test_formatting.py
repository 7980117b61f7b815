"""Unit tests for pathfinder/utils/formatting.py and pathfinder/utils/text_utils.py"""

import pytest

from pathfinder.models.learning_path import LearningPath
from pathfinder.utils.formatting import (
    format_total_time,
    parse_duration_label,
    render_learning_path_text,
    sum_duration_labels,
)
from pathfinder.utils.text_utils import has_content, sanitize_input, strip_html


class TestParseDurationLabel:

    @pytest.mark.parametrize("label,expected", [
        ("04:05", 245),
        ("1:02:03", 3723),
        ("0:30", 30),
        (" 10:00 ", 600),
    ])
    def test_valid(self, label, expected):
        assert parse_duration_label(label) == expected

    @pytest.mark.parametrize("label", [None, "", "Unknown", "10 minutes", "1:2"])
    def test_invalid(self, label):
        assert parse_duration_label(label) is None


class TestFormatTotalTime:

    @pytest.mark.parametrize("seconds,expected", [
        (245, "5 minutes"),
        (60, "1 minute"),
        (0, "0 minutes"),
        (3600, "1 hour"),
        (3723, "1 hour 3 minutes"),
        (7200 + 60, "2 hours 1 minute"),
    ])
    def test_labels(self, seconds, expected):
        assert format_total_time(seconds) == expected


class TestSumDurationLabels:

    def test_sum(self):
        assert sum_duration_labels(["10:00", "20:00", "40:00"]) == "1 hour 10 minutes"

    def test_any_unknown_gives_none(self):
        assert sum_duration_labels(["10:00", None]) is None

    def test_empty(self):
        assert sum_duration_labels([]) is None


class TestRenderLearningPathText:

    def test_sections(self, sample_learning_path):
        text = render_learning_path_text(sample_learning_path)

        assert text.startswith("YOUR PERSONALIZED PYTHON LEARNING PATH")
        assert "4 videos | 40 minutes" in text
        assert "STAGE 1" in text
        assert "STAGE 2" in text
        assert '1. "Video v1"' in text
        assert "Quality: 8/10" in text
        assert "Concepts: variables, loops" in text
        assert "AFTER COMPLETING THIS PATH, YOU'LL BE ABLE TO:" in text
        assert "- Build a command line tool" in text

    def test_stage_order_preserved(self, sample_learning_path):
        text = render_learning_path_text(sample_learning_path)
        assert text.index("STAGE 1") < text.index("STAGE 2")
        assert text.index('"Video v2"') < text.index('"Video v3"')

    def test_empty_path(self):
        path = LearningPath(topic="python", user_level="beginner", user_goal="quick", total_videos=0)
        assert render_learning_path_text(path) == ""


class TestTextUtils:

    def test_strip_html(self):
        assert strip_html("<p>a &amp; b</p>").strip() == "a & b"

    def test_sanitize_collapses_whitespace(self):
        assert sanitize_input("  learn\n\n <i>rust</i>  ") == "learn rust"

    def test_sanitize_none(self):
        assert sanitize_input(None) == ""

    @pytest.mark.parametrize("text,expected", [("abc", True), ("42", True), ("?!", False), ("", False)])
    def test_has_content(self, text, expected):
        assert has_content(text) is expected

"""
Formatting Utilities

Duration arithmetic and the plain-text rendering of a learning path that is
appended to the chat reply.
"""

import re
from typing import Optional

from pathfinder.models.learning_path import LearningPath

_CLOCK_DURATION = re.compile(r"^(?:(\d+):)?(\d{1,2}):(\d{2})$")
_RULE = "-" * 45


def parse_duration_label(label: Optional[str]) -> Optional[int]:
    """'1:02:03' -> 3723, '04:05' -> 245. None when the label is not a clock time."""
    match = _CLOCK_DURATION.match((label or "").strip())
    if not match:
        return None
    hours, minutes, seconds = match.groups()
    return int(hours or 0) * 3600 + int(minutes) * 60 + int(seconds)


def format_total_time(total_seconds: int) -> str:
    """3723 -> '1 hour 3 minutes', 245 -> '5 minutes'. Partial minutes round up."""
    minutes_total = (total_seconds + 59) // 60
    hours, minutes = divmod(minutes_total, 60)
    parts = []
    if hours:
        parts.append(f"{hours} hour{'s' if hours != 1 else ''}")
    if minutes or not hours:
        parts.append(f"{minutes} minute{'s' if minutes != 1 else ''}")
    return " ".join(parts)


def sum_duration_labels(labels: list[Optional[str]]) -> Optional[str]:
    """Total of all labels, or None if any label cannot be parsed."""
    total = 0
    for label in labels:
        seconds = parse_duration_label(label)
        if seconds is None:
            return None
        total += seconds
    return format_total_time(total) if labels else None


def render_learning_path_text(path: LearningPath) -> str:
    """Plain-text rendering of a learning path. Empty string for an empty path."""
    if path.is_empty:
        return ""

    lines = [
        f"YOUR PERSONALIZED {path.topic.upper()} LEARNING PATH",
        "",
    ]
    if path.summary:
        lines.append(path.summary)
    lines.append(f"{path.total_videos} videos | {path.estimated_total_time}")
    lines.append("")

    for stage in path.stages:
        lines.extend([_RULE, stage.stage_name.upper()])
        if stage.description:
            lines.append(stage.description)
        lines.extend([_RULE, ""])

        for video in stage.videos:
            lines.append(f'{video.order}. "{video.title}"')
            lines.append(f"   {video.estimated_time} | Quality: {video.quality_score}/10")
            if video.concepts_covered:
                lines.append(f"   Concepts: {', '.join(video.concepts_covered)}")
            if video.learning_outcomes:
                lines.append(f"   You'll learn: {'; '.join(video.learning_outcomes[:2])}")
            if video.why_recommended:
                lines.append(f"   Why this: {video.why_recommended}")
            lines.append("")

    if path.completion_goals:
        lines.extend([_RULE, "AFTER COMPLETING THIS PATH, YOU'LL BE ABLE TO:", _RULE])
        lines.extend(f"- {goal}" for goal in path.completion_goals)

    return "\n".join(lines).rstrip()

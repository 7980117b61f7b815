"""
Progress Models

Watched state of the videos in a saved learning path.
"""

from pydantic import BaseModel, Field


class ProgressReport(BaseModel):
    """Live completion summary for a learning path."""

    learning_path_id: str
    per_video: dict[str, bool] = Field(default_factory=dict, description="Watched flag per video id, in path order")
    watched_count: int = Field(default=0, ge=0)
    total_videos: int = Field(default=0, ge=0)
    percent: int = Field(default=0, ge=0, le=100)


def completion_percent(watched_count: int, total_videos: int) -> int:
    """round(100 * watched / total) with halves rounded up; 0 for an empty path."""
    if total_videos <= 0:
        return 0
    return (200 * watched_count + total_videos) // (2 * total_videos)

"""
Learning Path Models

Search candidates returned by the video provider and the curated,
staged curriculum built from them.
"""

from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator


SkillLevel = Literal["beginner", "intermediate", "advanced"]
LearningGoal = Literal["project", "concepts", "quick"]


class SearchCandidate(BaseModel):
    """One video returned by the search provider. Immutable once fetched."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Provider video id, unique within a batch")
    title: str
    description: str = ""
    channel_label: str = ""
    published_at: str = ""
    duration_label: Optional[str] = Field(default=None, description="Human-readable duration, e.g. 12:05")
    view_count_label: Optional[str] = Field(default=None, description="Human-readable views, e.g. 1.2M views")
    url: str
    thumbnail: str = ""


class VideoAnalysis(BaseModel):
    """Curated annotation of one search candidate."""

    video_id: str = Field(description="Id of the SearchCandidate this analysis refers to")
    title: str = Field(description="Candidate title")
    quality_score: int = Field(ge=1, le=10)
    difficulty: SkillLevel
    concepts_covered: list[str] = Field(default_factory=list)
    learning_outcomes: list[str] = Field(default_factory=list)
    prerequisites: list[str] = Field(default_factory=list)
    why_recommended: str = ""
    estimated_time: str = Field(description="Duration label inherited from the candidate")
    order: int = Field(ge=1, description="Watch order within its stage")


class LearningStage(BaseModel):
    """A group of ordered videos within a curated curriculum."""

    stage_name: str
    stage_number: int = Field(ge=1)
    description: str = ""
    videos: list[VideoAnalysis] = Field(min_length=1)


class LearningPath(BaseModel):
    """A validated, staged curriculum for a topic."""

    topic: str
    user_level: str
    user_goal: str
    total_videos: int = Field(ge=0)
    estimated_total_time: str = "Unknown"
    stages: list[LearningStage] = Field(default_factory=list)
    completion_goals: list[str] = Field(default_factory=list)
    summary: str = ""

    @model_validator(mode="after")
    def check_unique_videos(self) -> "LearningPath":
        ids = self.video_ids()
        duplicates = sorted({video_id for video_id in ids if ids.count(video_id) > 1})
        if duplicates:
            raise ValueError(f"video ids must be unique across stages: {duplicates}")
        return self

    @property
    def is_empty(self) -> bool:
        return len(self.stages) == 0

    def video_ids(self) -> list[str]:
        return [video.video_id for stage in self.stages for video in stage.videos]

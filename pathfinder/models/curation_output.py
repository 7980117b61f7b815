"""
Curation Output Schema

Shape the reasoning service must return. Anything that does not validate
against these models is rejected as a whole before it is merged with the
search candidates.
"""

from typing import Optional
from pydantic import BaseModel, Field

from pathfinder.models.learning_path import SkillLevel


class CuratedVideo(BaseModel):
    video_id: str = Field(min_length=1, description="Id of one of the provided videos")
    order: int = Field(ge=1, description="Watch order within the stage")
    quality_score: int = Field(ge=1, le=10, description="Honest educational quality, 1-10")
    difficulty: SkillLevel
    concepts_covered: list[str] = Field(default_factory=list)
    learning_outcomes: list[str] = Field(default_factory=list)
    prerequisites: list[str] = Field(default_factory=list)
    why_recommended: str = ""


class CuratedStage(BaseModel):
    stage_name: str = Field(min_length=1)
    stage_number: int = Field(ge=1)
    description: str = ""
    videos: list[CuratedVideo] = Field(default_factory=list)


class CurationOutput(BaseModel):
    summary: str = ""
    estimated_total_time: Optional[str] = None
    completion_goals: list[str] = Field(default_factory=list)
    stages: list[CuratedStage]

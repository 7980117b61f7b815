"""Pydantic API request/response schemas."""
from datetime import datetime
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional

from pathfinder.models.learning_path import LearningPath, LearningStage, SearchCandidate
from pathfinder.models.messages import Message
from shared.utils.constants import DIRECT_SEARCH_DEFAULT_RESULTS, DIRECT_SEARCH_MAX_RESULTS


class ChatMessageRequest(BaseModel):
    """One user utterance in a conversation."""
    message: str = Field(default="", description="What the user typed")
    conversation_id: Optional[str] = Field(default=None, description="Omit to start a new conversation")


class ChatMessageResponse(BaseModel):
    """Reply for one chat turn."""
    prompt_text: str
    conversation_id: str
    tutorials: Optional[List[SearchCandidate]] = None
    learning_path: Optional[LearningPath] = None


class ConversationStateResponse(BaseModel):
    """Where a conversation stands: its stage, resolved slots and message log."""
    conversation_id: str
    stage: str
    topic: Optional[str] = None
    skill_level: Optional[str] = None
    goal: Optional[str] = None
    history: List[Message] = Field(default_factory=list)


class DeleteConversationResponse(BaseModel):
    conversation_id: str
    deleted: bool


class ChatHistoryEntry(BaseModel):
    """Summary of one past search."""
    id: str
    conversation_id: str
    topic: Optional[str] = None
    level: Optional[str] = None
    goal: Optional[str] = None
    query: Optional[str] = None
    learning_path: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None


class SearchRequest(BaseModel):
    """Direct video search, bypassing the dialogue."""
    query: str = Field(min_length=1)
    max_results: int = Field(default=DIRECT_SEARCH_DEFAULT_RESULTS, ge=1, le=DIRECT_SEARCH_MAX_RESULTS)


class SearchResponse(BaseModel):
    query: str
    tutorials: List[SearchCandidate]


class SaveLearningPathRequest(BaseModel):
    learning_path: LearningPath


class SavedLearningPathResponse(BaseModel):
    """A saved path together with its live progress."""
    id: str
    topic: str
    user_level: str
    user_goal: str
    total_videos: int
    estimated_total_time: str
    summary: Optional[str] = None
    completion_goals: List[str] = Field(default_factory=list)
    stages: List[LearningStage] = Field(default_factory=list)
    watched_count: int = 0
    percent: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProgressUpdateRequest(BaseModel):
    video_id: str = Field(min_length=1)
    watched: bool = True

"""
Conversation State Models

Per-stage conversation records. Each dialogue stage is its own model
carrying exactly the slots that are valid at that stage; the stages are
combined into a discriminated union keyed on ``stage``.
"""

from datetime import datetime
from typing import Annotated, Literal, Optional, Union
from pydantic import BaseModel, Field, TypeAdapter
import uuid

from pathfinder.models.learning_path import LearningGoal, SkillLevel
from pathfinder.models.messages import Message


Stage = Literal["greeting", "got_topic", "got_level", "ready_to_search", "results"]


class ConversationBase(BaseModel):
    """Fields shared by every stage."""

    conversation_id: str = Field(
        default_factory=lambda: f"conv_{uuid.uuid4().hex[:12]}",
        description="Unique conversation identifier",
    )
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
    history: list[Message] = Field(default_factory=list, description="Append-only message log")

    def carry(self) -> dict:
        """Fields that survive any stage transition."""
        return {
            "conversation_id": self.conversation_id,
            "created_at": self.created_at,
            "updated_at": datetime.utcnow(),
            "history": list(self.history),
        }

    def add_message(self, message: Message) -> None:
        self.history.append(message)
        self.updated_at = datetime.utcnow()


class GreetingState(ConversationBase):
    """No topic yet. A level or goal mentioned before the topic is held here."""

    stage: Literal["greeting"] = "greeting"
    skill_level: Optional[SkillLevel] = None
    goal: Optional[LearningGoal] = None


class GotTopicState(ConversationBase):
    """Topic known; skill level still missing. A goal may already have been mentioned."""

    stage: Literal["got_topic"] = "got_topic"
    topic: str
    goal: Optional[LearningGoal] = None
    reprompts: int = Field(default=0, ge=0, description="Times the level question was re-asked")


class GotLevelState(ConversationBase):
    """Topic and skill level known; goal missing."""

    stage: Literal["got_level"] = "got_level"
    topic: str
    skill_level: SkillLevel
    reprompts: int = Field(default=0, ge=0, description="Times the goal question was re-asked")


class ReadyToSearchState(ConversationBase):
    """All slots resolved; a search is pending."""

    stage: Literal["ready_to_search"] = "ready_to_search"
    topic: str
    skill_level: SkillLevel
    goal: LearningGoal
    refinement: Optional[str] = Field(default=None, description="Extra query words from a follow-up")


class ResultsState(ConversationBase):
    """A search has completed for the resolved slots."""

    stage: Literal["results"] = "results"
    topic: str
    skill_level: SkillLevel
    goal: LearningGoal
    refinement: Optional[str] = None
    last_query: str
    candidate_count: int = Field(default=0, ge=0)


ConversationState = Annotated[
    Union[GreetingState, GotTopicState, GotLevelState, ReadyToSearchState, ResultsState],
    Field(discriminator="stage"),
]

_state_adapter: TypeAdapter = TypeAdapter(ConversationState)


def parse_conversation_state(raw: str) -> ConversationState:
    """Deserialize a stored conversation into its stage-specific model."""
    return _state_adapter.validate_json(raw)


def create_conversation(conversation_id: Optional[str] = None) -> GreetingState:
    """Create a new conversation at the greeting stage."""
    if conversation_id:
        return GreetingState(conversation_id=conversation_id)
    return GreetingState()

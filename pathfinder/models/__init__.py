"""Pathfinder models."""
from pathfinder.models.messages import Message, create_user_message, create_assistant_message
from pathfinder.models.learning_path import (
    SkillLevel,
    LearningGoal,
    SearchCandidate,
    VideoAnalysis,
    LearningStage,
    LearningPath,
)
from pathfinder.models.conversation_state import (
    ConversationState,
    GreetingState,
    GotTopicState,
    GotLevelState,
    ReadyToSearchState,
    ResultsState,
    parse_conversation_state,
    create_conversation,
)
from pathfinder.models.progress import ProgressReport, completion_percent

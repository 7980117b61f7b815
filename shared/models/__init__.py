"""Database entities and API schemas."""
from shared.models.entities import Base, ConversationSnapshot, ChatHistory, SavedLearningPath, VideoProgress
from shared.models.schemas import (
    ChatMessageRequest,
    ChatMessageResponse,
    ChatHistoryEntry,
    DeleteConversationResponse,
    SearchRequest,
    SearchResponse,
    SaveLearningPathRequest,
    SavedLearningPathResponse,
    ProgressUpdateRequest,
)

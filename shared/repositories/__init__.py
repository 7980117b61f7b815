"""Data access layer - repository pattern for database operations."""
from shared.repositories.chat_history_repository import ChatHistoryRepository
from shared.repositories.learning_path_repository import LearningPathRepository
from shared.repositories.progress_repository import ProgressRepository

__all__ = [
    "ChatHistoryRepository",
    "LearningPathRepository",
    "ProgressRepository",
]

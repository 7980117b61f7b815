"""Custom exception hierarchy for better error handling."""
from fastapi import HTTPException, status


class LinkMeException(Exception):
    """Base exception for all application errors."""
    pass


class ConversationNotFoundException(LinkMeException):
    """Raised when a conversation is missing or has expired from the session store."""

    def __init__(self, conversation_id: str):
        self.conversation_id = conversation_id
        super().__init__(f"Conversation {conversation_id} not found")

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Conversation not found or expired"
        )


class LearningPathNotFoundException(LinkMeException):
    """Raised when a saved learning path does not exist or belongs to someone else."""

    def __init__(self, learning_path_id: str):
        self.learning_path_id = learning_path_id
        super().__init__(f"Learning path {learning_path_id} not found")

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Learning path not found"
        )


class VideoNotInPathException(LinkMeException):
    """Raised when progress is recorded for a video the path does not contain."""

    def __init__(self, learning_path_id: str, video_id: str):
        self.learning_path_id = learning_path_id
        self.video_id = video_id
        super().__init__(f"Video {video_id} is not part of learning path {learning_path_id}")

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Video {self.video_id} is not part of this learning path"
        )


class SearchUnavailableException(LinkMeException):
    """Raised when the video search provider cannot be reached."""

    def __init__(self, original_error: Exception):
        self.original_error = original_error
        super().__init__(f"Video search error: {str(original_error)}")

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Video search temporarily unavailable"
        )


class DatabaseException(LinkMeException):
    """Raised when a repository write fails; the session has been rolled back."""

    def __init__(self, operation: str, original_error: Exception):
        self.operation = operation
        self.original_error = original_error
        super().__init__(f"Database {operation} failed: {str(original_error)}")

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database operation failed"
        )


class StaleStateError(LinkMeException):
    """Raised when an optimistic locking conflict is detected during a conversation update."""

    def __init__(self, message: str):
        super().__init__(message)

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(self)
        )

"""Video progress data access layer."""
import logging
import uuid
from datetime import datetime
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session as DBSession

from shared.models.entities import VideoProgress
from shared.utils.exceptions import DatabaseException

logger = logging.getLogger(__name__)


class ProgressRepository:
    """Repository for per-video watched flags."""

    def __init__(self, db: DBSession):
        self.db = db

    def get(self, learning_path_id: str, video_id: str) -> Optional[VideoProgress]:
        return (
            self.db.query(VideoProgress)
            .filter(
                VideoProgress.learning_path_id == learning_path_id,
                VideoProgress.video_id == video_id,
            )
            .first()
        )

    def upsert(self, user_id: str, learning_path_id: str, video_id: str, watched: bool) -> VideoProgress:
        """
        Set the watched flag for one video.

        Repeating a call leaves the row unchanged: marking an already-watched
        video keeps its original watched_at, unmarking clears it.
        """
        row = self.get(learning_path_id, video_id)
        if row is None:
            row = VideoProgress(
                id=str(uuid.uuid4()),
                user_id=user_id,
                learning_path_id=learning_path_id,
                video_id=video_id,
                watched=False,
                watched_at=None,
            )
            self.db.add(row)

        if watched and not row.watched:
            row.watched = True
            row.watched_at = datetime.utcnow()
        elif not watched:
            row.watched = False
            row.watched_at = None

        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to update video progress: {e}")
            raise DatabaseException("update video progress", e) from e
        self.db.refresh(row)
        return row

    def list_for_path(self, learning_path_id: str) -> list[VideoProgress]:
        return (
            self.db.query(VideoProgress)
            .filter(VideoProgress.learning_path_id == learning_path_id)
            .all()
        )

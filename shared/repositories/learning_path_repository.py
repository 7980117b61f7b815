"""Saved learning path data access layer."""
import json
import logging
import uuid
from datetime import datetime
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session as DBSession

from shared.models.entities import SavedLearningPath, VideoProgress
from shared.utils.exceptions import DatabaseException
from pathfinder.models.learning_path import LearningPath, LearningStage

logger = logging.getLogger(__name__)


class LearningPathRepository:
    """Repository for saved learning paths, always scoped to an owner."""

    def __init__(self, db: DBSession):
        self.db = db

    def save(self, user_id: str, path: LearningPath) -> SavedLearningPath:
        """
        Save a learning path, replacing an existing one for the same slots.

        A user keeps at most one path per (topic, level, goal). Replacing a
        path drops progress rows for videos the new path no longer contains.

        Args:
            user_id: Owner of the path
            path: Curated learning path

        Returns:
            The stored SavedLearningPath row
        """
        row = (
            self.db.query(SavedLearningPath)
            .filter(
                SavedLearningPath.user_id == user_id,
                SavedLearningPath.topic == path.topic,
                SavedLearningPath.user_level == path.user_level,
                SavedLearningPath.user_goal == path.user_goal,
            )
            .first()
        )

        now = datetime.utcnow()
        if row is None:
            row = SavedLearningPath(
                id=str(uuid.uuid4()),
                user_id=user_id,
                topic=path.topic,
                user_level=path.user_level,
                user_goal=path.user_goal,
                created_at=now,
            )
            self.db.add(row)
        else:
            kept_ids = sorted(set(path.video_ids()))
            (
                self.db.query(VideoProgress)
                .filter(
                    VideoProgress.learning_path_id == row.id,
                    VideoProgress.video_id.notin_(kept_ids),
                )
                .delete(synchronize_session=False)
            )
            logger.info(f"Replacing saved learning path {row.id} for user {user_id}")

        row.total_videos = len(path.video_ids())
        row.estimated_total_time = path.estimated_total_time
        row.summary = path.summary
        row.completion_goals_json = json.dumps(path.completion_goals)
        row.stages_json = json.dumps([stage.model_dump() for stage in path.stages])
        row.updated_at = now

        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to save learning path: {e}")
            raise DatabaseException("save learning path", e) from e
        self.db.refresh(row)
        return row

    def get_for_owner(self, learning_path_id: str, user_id: str) -> Optional[SavedLearningPath]:
        """Return the path only when it belongs to the given user."""
        return (
            self.db.query(SavedLearningPath)
            .filter(
                SavedLearningPath.id == learning_path_id,
                SavedLearningPath.user_id == user_id,
            )
            .first()
        )

    def list_for_owner(self, user_id: str) -> list[SavedLearningPath]:
        return (
            self.db.query(SavedLearningPath)
            .filter(SavedLearningPath.user_id == user_id)
            .order_by(SavedLearningPath.updated_at.desc())
            .all()
        )

    @staticmethod
    def to_learning_path(row: SavedLearningPath) -> LearningPath:
        """Rebuild the domain model from a stored row."""
        stages = [LearningStage.model_validate(raw) for raw in json.loads(row.stages_json or "[]")]
        return LearningPath(
            topic=row.topic,
            user_level=row.user_level,
            user_goal=row.user_goal,
            total_videos=row.total_videos or 0,
            estimated_total_time=row.estimated_total_time or "Unknown",
            stages=stages,
            completion_goals=json.loads(row.completion_goals_json or "[]"),
            summary=row.summary or "",
        )

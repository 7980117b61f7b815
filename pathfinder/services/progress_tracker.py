"""
Progress Tracker

Watched/unwatched state per video of a saved learning path. Ownership is
checked before anything is read or written; percentages are always
computed from the stored rows.
"""

import logging
from sqlalchemy.orm import Session as DBSession

from pathfinder.models.progress import ProgressReport, completion_percent
from shared.models.entities import SavedLearningPath
from shared.repositories.learning_path_repository import LearningPathRepository
from shared.repositories.progress_repository import ProgressRepository
from shared.utils.exceptions import LearningPathNotFoundException, VideoNotInPathException

logger = logging.getLogger("pathfinder.progress")


class ProgressTracker:
    """Records watched flags and reports completion for one owner's paths."""

    def __init__(self, db: DBSession):
        self.paths = LearningPathRepository(db)
        self.progress = ProgressRepository(db)

    def set_watched(self, owner_id: str, learning_path_id: str, video_id: str, watched: bool) -> ProgressReport:
        """
        Mark a video watched or unwatched. Repeating the call changes nothing.

        Raises:
            LearningPathNotFoundException: path missing or owned by someone else
            VideoNotInPathException: video is not part of the path
        """
        row = self._owned_path(owner_id, learning_path_id)
        video_ids = LearningPathRepository.to_learning_path(row).video_ids()
        if video_id not in video_ids:
            raise VideoNotInPathException(learning_path_id, video_id)

        self.progress.upsert(owner_id, learning_path_id, video_id, watched)
        logger.info(f"Video {video_id} in path {learning_path_id} marked watched={watched}")
        return self._report(learning_path_id, video_ids)

    def get_progress(self, owner_id: str, learning_path_id: str) -> ProgressReport:
        row = self._owned_path(owner_id, learning_path_id)
        video_ids = LearningPathRepository.to_learning_path(row).video_ids()
        return self._report(learning_path_id, video_ids)

    def _owned_path(self, owner_id: str, learning_path_id: str) -> SavedLearningPath:
        row = self.paths.get_for_owner(learning_path_id, owner_id)
        if row is None:
            raise LearningPathNotFoundException(learning_path_id)
        return row

    def _report(self, learning_path_id: str, video_ids: list[str]) -> ProgressReport:
        watched = {
            record.video_id
            for record in self.progress.list_for_path(learning_path_id)
            if record.watched
        }
        per_video = {video_id: video_id in watched for video_id in video_ids}
        watched_count = sum(per_video.values())
        return ProgressReport(
            learning_path_id=learning_path_id,
            per_video=per_video,
            watched_count=watched_count,
            total_videos=len(video_ids),
            percent=completion_percent(watched_count, len(video_ids)),
        )

"""Saved learning path and progress endpoints."""
from typing import List
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session as DBSession

from database import get_db
from pathfinder.models.progress import ProgressReport
from pathfinder.services.progress_tracker import ProgressTracker
from shared.api.auth import AuthenticatedUser, get_current_user
from shared.models.entities import SavedLearningPath
from shared.models.schemas import ProgressUpdateRequest, SaveLearningPathRequest, SavedLearningPathResponse
from shared.repositories.learning_path_repository import LearningPathRepository
from shared.utils.exceptions import LinkMeException

router = APIRouter(prefix="/learning-paths", tags=["learning-paths"])


def _to_response(row: SavedLearningPath, report: ProgressReport) -> SavedLearningPathResponse:
    path = LearningPathRepository.to_learning_path(row)
    return SavedLearningPathResponse(
        id=row.id,
        topic=path.topic,
        user_level=path.user_level,
        user_goal=path.user_goal,
        total_videos=path.total_videos,
        estimated_total_time=path.estimated_total_time,
        summary=path.summary,
        completion_goals=path.completion_goals,
        stages=path.stages,
        watched_count=report.watched_count,
        percent=report.percent,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


@router.post("", response_model=SavedLearningPathResponse)
def save_learning_path(
    request: SaveLearningPathRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    db: DBSession = Depends(get_db),
):
    """Save a curated path; saving the same topic, level and goal again replaces it."""
    if request.learning_path.is_empty:
        raise HTTPException(status_code=400, detail="Learning path has no stages")

    try:
        row = LearningPathRepository(db).save(user.id, request.learning_path)
        report = ProgressTracker(db).get_progress(user.id, row.id)
        return _to_response(row, report)
    except LinkMeException as e:
        raise e.to_http_exception()


@router.get("", response_model=List[SavedLearningPathResponse])
def list_learning_paths(
    user: AuthenticatedUser = Depends(get_current_user),
    db: DBSession = Depends(get_db),
):
    """The caller's saved paths with live progress."""
    tracker = ProgressTracker(db)
    rows = LearningPathRepository(db).list_for_owner(user.id)
    return [_to_response(row, tracker.get_progress(user.id, row.id)) for row in rows]


@router.post("/{learning_path_id}/progress", response_model=ProgressReport)
def update_progress(
    learning_path_id: str,
    request: ProgressUpdateRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    db: DBSession = Depends(get_db),
):
    """Mark one video watched or unwatched."""
    try:
        return ProgressTracker(db).set_watched(user.id, learning_path_id, request.video_id, request.watched)
    except LinkMeException as e:
        raise e.to_http_exception()


@router.get("/{learning_path_id}/progress", response_model=ProgressReport)
def get_progress(
    learning_path_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    db: DBSession = Depends(get_db),
):
    try:
        return ProgressTracker(db).get_progress(user.id, learning_path_id)
    except LinkMeException as e:
        raise e.to_http_exception()

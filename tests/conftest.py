"""Pytest configuration and shared fixtures."""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from shared.models.entities import Base
# Import all models to ensure they are registered with Base.metadata
from shared.models.entities import *

from pathfinder.models.learning_path import LearningPath, LearningStage, SearchCandidate, VideoAnalysis


@pytest.fixture(scope="function")
def db_engine():
    """
    In-memory SQLite engine shared by every session of one test.

    StaticPool keeps a single connection so the TestClient worker thread
    sees the same database as the test itself.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine):
    """
    Create a test database session with in-memory SQLite.

    This fixture creates a fresh database for each test function,
    ensuring test isolation.
    """
    SessionLocal = sessionmaker(bind=db_engine)
    session = SessionLocal()

    yield session

    session.close()


@pytest.fixture
def second_db_session(db_engine):
    """A second session on the same database, for concurrent-writer tests."""
    session = sessionmaker(bind=db_engine)()
    yield session
    session.close()


def _make_candidate(video_id: str, duration: str = "10:00", views: str = "1.0K views") -> SearchCandidate:
    return SearchCandidate(
        id=video_id,
        title=f"Video {video_id}",
        description=f"Description of {video_id}",
        channel_label="Some Channel",
        published_at="2025-01-01T00:00:00Z",
        duration_label=duration,
        view_count_label=views,
        url=f"https://www.youtube.com/watch?v={video_id}",
        thumbnail=f"https://i.ytimg.com/vi/{video_id}/hqdefault.jpg",
    )


def _make_video(video_id: str, order: int = 1) -> VideoAnalysis:
    return VideoAnalysis(
        video_id=video_id,
        title=f"Video {video_id}",
        quality_score=8,
        difficulty="beginner",
        concepts_covered=["variables", "loops"],
        learning_outcomes=["Write a small script"],
        why_recommended="Clear and well paced",
        estimated_time="10:00",
        order=order,
    )


def _make_learning_path(
    topic: str = "python",
    level: str = "beginner",
    goal: str = "project",
    stage_video_ids: tuple = (("v1", "v2"), ("v3", "v4")),
) -> LearningPath:
    stages = [
        LearningStage(
            stage_name=f"Stage {number}",
            stage_number=number,
            description=f"Stage {number} description",
            videos=[_make_video(video_id, order) for order, video_id in enumerate(ids, start=1)],
        )
        for number, ids in enumerate(stage_video_ids, start=1)
    ]
    total = sum(len(ids) for ids in stage_video_ids)
    return LearningPath(
        topic=topic,
        user_level=level,
        user_goal=goal,
        total_videos=total,
        estimated_total_time="40 minutes",
        stages=stages,
        completion_goals=["Build a command line tool"],
        summary="From first steps to a small project.",
    )


@pytest.fixture
def sample_candidates():
    """Ten search candidates, vid0..vid9, ten minutes each."""
    return [_make_candidate(f"vid{i}") for i in range(10)]


@pytest.fixture
def sample_learning_path():
    """A two-stage python path with videos v1..v4."""
    return _make_learning_path()


@pytest.fixture
def learning_path_factory():
    """Build learning paths with custom slots or stage layout."""
    return _make_learning_path


@pytest.fixture
def candidate_factory():
    return _make_candidate

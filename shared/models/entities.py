"""SQLAlchemy ORM database models."""
from datetime import datetime
from sqlalchemy import Column, String, Integer, Text, DateTime, Boolean, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class ConversationSnapshot(Base):
    """Conversation snapshot table - dialogue state between chat turns."""
    __tablename__ = "conversation_snapshots"

    id = Column(String, primary_key=True)
    stage = Column(String, nullable=False)  # greeting, got_topic, got_level, ready_to_search, results
    state_json = Column(Text, nullable=False)  # Full ConversationState serialized
    state_version = Column(Integer, default=1, nullable=False)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index("idx_snapshot_expires", "expires_at"),
    )


class ChatHistory(Base):
    """Chat history table - one row per completed search for a signed-in user."""
    __tablename__ = "chat_history"

    id = Column(String, primary_key=True)
    user_id = Column(String, nullable=False)
    conversation_id = Column(String, nullable=False)
    payload_json = Column(Text, nullable=False)  # JSON: {topic, level, goal, query, learning_path}
    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        Index("idx_chat_history_user", "user_id", "created_at"),
    )


class SavedLearningPath(Base):
    """Saved learning path table - curated paths kept by a user."""
    __tablename__ = "learning_paths"

    id = Column(String, primary_key=True)
    user_id = Column(String, nullable=False)
    topic = Column(String, nullable=False)
    user_level = Column(String, nullable=False)
    user_goal = Column(String, nullable=False)
    total_videos = Column(Integer, default=0, nullable=False)
    estimated_total_time = Column(String, default="Unknown")
    summary = Column(Text, nullable=True)
    completion_goals_json = Column(Text, nullable=False, default="[]")  # JSON: list[str]
    stages_json = Column(Text, nullable=False)  # JSON: list[LearningStage]
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    progress = relationship("VideoProgress", back_populates="learning_path", cascade="all, delete-orphan")

    __table_args__ = (
        UniqueConstraint("user_id", "topic", "user_level", "user_goal", name="uq_learning_path_owner_slots"),
        Index("idx_learning_path_user", "user_id"),
    )


class VideoProgress(Base):
    """Video progress table - watched flag per video of a saved path."""
    __tablename__ = "video_progress"

    id = Column(String, primary_key=True)
    user_id = Column(String, nullable=False)
    learning_path_id = Column(String, ForeignKey("learning_paths.id"), nullable=False)
    video_id = Column(String, nullable=False)
    watched = Column(Boolean, default=False, nullable=False)
    watched_at = Column(DateTime, nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    learning_path = relationship("SavedLearningPath", back_populates="progress")

    __table_args__ = (
        UniqueConstraint("learning_path_id", "video_id", name="uq_progress_path_video"),
    )

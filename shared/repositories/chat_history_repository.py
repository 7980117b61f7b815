"""Chat history data access layer."""
import json
import logging
import uuid
from datetime import datetime
from sqlalchemy.orm import Session as DBSession

from shared.models.entities import ChatHistory

logger = logging.getLogger(__name__)


class ChatHistoryRepository:
    """Repository for saved search summaries of signed-in users."""

    def __init__(self, db: DBSession):
        self.db = db

    def add(self, user_id: str, conversation_id: str, payload: dict) -> ChatHistory:
        row = ChatHistory(
            id=str(uuid.uuid4()),
            user_id=user_id,
            conversation_id=conversation_id,
            payload_json=json.dumps(payload),
            created_at=datetime.utcnow(),
        )
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return row

    def list_by_user(self, user_id: str, limit: int = 50) -> list[dict]:
        """Return the user's most recent searches, newest first."""
        rows = (
            self.db.query(ChatHistory)
            .filter(ChatHistory.user_id == user_id)
            .order_by(ChatHistory.created_at.desc())
            .limit(limit)
            .all()
        )
        results = []
        for row in rows:
            try:
                payload = json.loads(row.payload_json)
            except json.JSONDecodeError:
                logger.warning(f"Skipping unreadable chat history payload {row.id}")
                payload = {}

            results.append({
                "id": row.id,
                "conversation_id": row.conversation_id,
                "topic": payload.get("topic"),
                "level": payload.get("level"),
                "goal": payload.get("goal"),
                "query": payload.get("query"),
                "learning_path": payload.get("learning_path"),
                "created_at": row.created_at,
            })
        return results

"""
Message Models

Conversation messages kept in a conversation's history.
"""

from datetime import datetime
from typing import Literal
from pydantic import BaseModel, Field


class Message(BaseModel):
    """Individual message in a conversation."""

    role: Literal["user", "assistant"] = Field(description="Role of the message sender")
    content: str = Field(description="Message content text")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="When the message was created")


def create_user_message(content: str) -> Message:
    return Message(role="user", content=content)


def create_assistant_message(content: str) -> Message:
    return Message(role="assistant", content=content)

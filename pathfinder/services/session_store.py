"""
Session Store

Keyed storage of conversation state between chat turns.

Two backends share one interface:
- InMemorySessionStore: process-local dict with per-key TTL (development, tests)
- DatabaseSessionStore: ConversationSnapshot rows with TTL and an optimistic
  state_version, so writers in different processes cannot overwrite each other

Both serialize turns of one conversation inside the process via lock(id).
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import Callable, Iterator, Optional

from pydantic import ValidationError
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session as DBSession

from pathfinder.exceptions import SessionStoreError
from pathfinder.models.conversation_state import ConversationState, parse_conversation_state
from shared.models.entities import ConversationSnapshot
from shared.utils.exceptions import StaleStateError

logger = logging.getLogger("pathfinder.session_store")


class _KeyedLocks:
    """One lock per key, dropped once nobody holds or waits for it."""

    def __init__(self):
        self._guard = threading.Lock()
        self._entries: dict[str, list] = {}

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            entry = self._entries.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        lock = entry[0]
        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    self._entries.pop(key, None)


_conversation_locks = _KeyedLocks()


class SessionStore(ABC):
    """Keyed table of conversation id -> ConversationState. Storage only, no policy."""

    @abstractmethod
    def get(self, conversation_id: str) -> Optional[ConversationState]:
        """Return the stored state, or None if missing or expired."""

    @abstractmethod
    def put(self, conversation_id: str, state: ConversationState) -> None:
        """Store the state and refresh its TTL."""

    @abstractmethod
    def delete(self, conversation_id: str) -> bool:
        """Remove the state. Returns True if something was removed."""

    @abstractmethod
    def purge_expired(self) -> int:
        """Drop every expired state. Returns the number removed."""

    @contextmanager
    def lock(self, conversation_id: str) -> Iterator[None]:
        """Serialize read-modify-write of one conversation within this process."""
        with _conversation_locks.hold(conversation_id):
            yield


class InMemorySessionStore(SessionStore):
    """Process-local store. States are kept serialized so callers never share instances."""

    def __init__(self, ttl_seconds: int, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._guard = threading.Lock()
        self._items: dict[str, tuple[str, float]] = {}

    def get(self, conversation_id: str) -> Optional[ConversationState]:
        with self._guard:
            item = self._items.get(conversation_id)
            if item is None:
                return None
            raw, expires_at = item
            if expires_at <= self._clock():
                del self._items[conversation_id]
                logger.info(f"Conversation {conversation_id} expired")
                return None
        return parse_conversation_state(raw)

    def put(self, conversation_id: str, state: ConversationState) -> None:
        with self._guard:
            now = self._clock()
            # Every write also sweeps expired conversations.
            self._drop_expired(now)
            self._items[conversation_id] = (state.model_dump_json(), now + self.ttl_seconds)

    def delete(self, conversation_id: str) -> bool:
        with self._guard:
            return self._items.pop(conversation_id, None) is not None

    def purge_expired(self) -> int:
        with self._guard:
            removed = self._drop_expired(self._clock())
        if removed:
            logger.info(f"Purged {removed} expired conversations")
        return removed

    def _drop_expired(self, now: float) -> int:
        expired = [key for key, (_, expires_at) in self._items.items() if expires_at <= now]
        for key in expired:
            del self._items[key]
        return len(expired)

    def __len__(self) -> int:
        return len(self._items)


class DatabaseSessionStore(SessionStore):
    """
    Store backed by the conversation_snapshots table.

    get() remembers the state_version it read; put() only succeeds if the row
    still has that version, otherwise StaleStateError is raised. Use one
    instance per request.
    """

    def __init__(self, db: DBSession, ttl_seconds: int):
        self.db = db
        self.ttl_seconds = ttl_seconds
        self._versions: dict[str, int] = {}

    def get(self, conversation_id: str) -> Optional[ConversationState]:
        row = self.db.query(ConversationSnapshot).filter(ConversationSnapshot.id == conversation_id).first()
        if row is None:
            self._versions.pop(conversation_id, None)
            return None

        if row.expires_at <= datetime.utcnow():
            self.db.delete(row)
            self.db.commit()
            self._versions.pop(conversation_id, None)
            logger.info(f"Conversation {conversation_id} expired")
            return None

        try:
            state = parse_conversation_state(row.state_json)
        except ValidationError as e:
            raise SessionStoreError(conversation_id, str(e)) from e

        self._versions[conversation_id] = row.state_version or 1
        return state

    def put(self, conversation_id: str, state: ConversationState) -> None:
        now = datetime.utcnow()
        expires_at = now + timedelta(seconds=self.ttl_seconds)
        expected_version = self._versions.get(conversation_id)

        if expected_version is None:
            self.db.add(ConversationSnapshot(
                id=conversation_id,
                stage=state.stage,
                state_json=state.model_dump_json(),
                state_version=1,
                expires_at=expires_at,
                created_at=now,
                updated_at=now,
            ))
            try:
                self.db.commit()
            except IntegrityError as e:
                self.db.rollback()
                raise StaleStateError(f"Conversation {conversation_id} was created concurrently") from e
            self._versions[conversation_id] = 1
            return

        result = self.db.execute(
            update(ConversationSnapshot)
            .where(
                ConversationSnapshot.id == conversation_id,
                ConversationSnapshot.state_version == expected_version,
            )
            .values(
                stage=state.stage,
                state_json=state.model_dump_json(),
                state_version=expected_version + 1,
                expires_at=expires_at,
                updated_at=now,
            )
        )
        if result.rowcount == 0:
            self.db.rollback()
            raise StaleStateError(
                f"Conversation {conversation_id} was modified concurrently (expected version {expected_version})"
            )
        self.db.commit()
        self._versions[conversation_id] = expected_version + 1

    def delete(self, conversation_id: str) -> bool:
        deleted = (
            self.db.query(ConversationSnapshot)
            .filter(ConversationSnapshot.id == conversation_id)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        self._versions.pop(conversation_id, None)
        return deleted > 0

    def purge_expired(self) -> int:
        """Delete every expired snapshot. Returns the number removed."""
        removed = (
            self.db.query(ConversationSnapshot)
            .filter(ConversationSnapshot.expires_at <= datetime.utcnow())
            .delete(synchronize_session=False)
        )
        self.db.commit()
        if removed:
            logger.info(f"Purged {removed} expired conversations")
        return removed

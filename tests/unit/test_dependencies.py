"""Unit tests for pathfinder/api/dependencies.py"""

import pytest
from unittest.mock import MagicMock

from config import reset_settings
from pathfinder.api import dependencies
from pathfinder.services.chat_service import ChatService
from pathfinder.services.session_store import DatabaseSessionStore, InMemorySessionStore


@pytest.fixture(autouse=True)
def fresh_dependencies(monkeypatch):
    for name in ("GEMINI_API_KEY", "OPENAI_API_KEY", "LLM_PROVIDER", "SESSION_STORE_BACKEND"):
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    dependencies.reset_dependencies()
    yield
    dependencies.reset_dependencies()
    reset_settings()


class TestGetSessionStore:

    def test_memory_backend_is_shared(self, monkeypatch):
        monkeypatch.setenv("SESSION_STORE_BACKEND", "memory")
        first = dependencies.get_session_store(db=MagicMock())
        second = dependencies.get_session_store(db=MagicMock())

        assert isinstance(first, InMemorySessionStore)
        assert first is second

    def test_database_backend_per_request(self, monkeypatch):
        monkeypatch.setenv("SESSION_STORE_BACKEND", "database")
        db = MagicMock()
        store = dependencies.get_session_store(db=db)

        assert isinstance(store, DatabaseSessionStore)
        assert store.db is db


class TestClients:

    def test_curation_engine_without_key(self):
        engine = dependencies.get_curation_engine()
        assert engine.llm is None
        assert dependencies.get_curation_engine() is engine

    def test_search_gateway_is_cached(self):
        assert dependencies.get_search_gateway() is dependencies.get_search_gateway()

    def test_chat_service_wiring(self):
        store = InMemorySessionStore(60)
        gateway = MagicMock()
        engine = MagicMock()

        service = dependencies.get_chat_service(store=store, search_gateway=gateway, curation_engine=engine, db=MagicMock())

        assert isinstance(service, ChatService)
        assert service.store is store
        assert service.max_results == 15
        assert service.controller.max_message_length == 2000

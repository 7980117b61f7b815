"""FastAPI dependency providers for the pathfinder routes."""
from typing import Optional
from fastapi import Depends
from sqlalchemy.orm import Session as DBSession

from config import get_settings
from database import get_db
from pathfinder.orchestration.dialogue_controller import DialogueController
from pathfinder.services.chat_service import ChatService
from pathfinder.services.curation_engine import CurationEngine
from pathfinder.services.search_gateway import YouTubeSearchGateway
from pathfinder.services.session_store import DatabaseSessionStore, InMemorySessionStore, SessionStore
from shared.repositories.chat_history_repository import ChatHistoryRepository
from shared.services.llm_service import build_llm_service

_memory_store: Optional[InMemorySessionStore] = None
_search_gateway: Optional[YouTubeSearchGateway] = None
_curation_engine: Optional[CurationEngine] = None


def get_session_store(db: DBSession = Depends(get_db)) -> SessionStore:
    global _memory_store
    settings = get_settings()
    if settings.session_store_backend == "memory":
        if _memory_store is None:
            _memory_store = InMemorySessionStore(settings.session_ttl_seconds)
        return _memory_store
    return DatabaseSessionStore(db, settings.session_ttl_seconds)


def get_search_gateway() -> YouTubeSearchGateway:
    global _search_gateway
    if _search_gateway is None:
        settings = get_settings()
        _search_gateway = YouTubeSearchGateway(settings.youtube_api_key, settings.youtube_timeout_seconds)
    return _search_gateway


def get_curation_engine() -> CurationEngine:
    global _curation_engine
    if _curation_engine is None:
        _curation_engine = CurationEngine(build_llm_service(get_settings()))
    return _curation_engine


def get_chat_service(
    store: SessionStore = Depends(get_session_store),
    search_gateway: YouTubeSearchGateway = Depends(get_search_gateway),
    curation_engine: CurationEngine = Depends(get_curation_engine),
    db: DBSession = Depends(get_db),
) -> ChatService:
    settings = get_settings()
    return ChatService(
        store=store,
        search_gateway=search_gateway,
        curation_engine=curation_engine,
        controller=DialogueController(settings.max_message_length),
        history_repo=ChatHistoryRepository(db),
        max_results=settings.search_max_results,
    )


def reset_dependencies():
    """Drop cached clients and the in-memory store (useful for testing)."""
    global _memory_store, _search_gateway, _curation_engine
    _memory_store = None
    _search_gateway = None
    _curation_engine = None

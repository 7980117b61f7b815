"""
LinkMe Learning Path Backend - FastAPI Application

Entry point for the conversational tutorial-finder API: a chat that
resolves what the user wants to learn, searches for tutorials and curates
them into a staged learning path.
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import get_settings, validate_required_settings
from database import get_db_manager
from shared.api import health
from pathfinder.api import chat, learning_paths, search
from pathfinder.services.session_store import DatabaseSessionStore

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("linkme")

# Initialize FastAPI app
app = FastAPI(
    title="LinkMe Learning Path Backend",
    description="Conversational tutorial search with curated learning paths",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router)
app.include_router(chat.router)
app.include_router(search.router)
app.include_router(learning_paths.router)


@app.on_event("startup")
def startup_event():
    """Validate configuration and database, create missing tables."""
    logger.info("Starting LinkMe Learning Path Backend...")
    validate_required_settings()

    db_manager = get_db_manager()
    if not db_manager.health_check():
        logger.warning("Database health check failed on startup")
        return

    db_manager.create_tables()
    with db_manager.session_scope() as session:
        DatabaseSessionStore(session, settings.session_ttl_seconds).purge_expired()
    logger.info("Application started successfully")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.environment == "development"
    )

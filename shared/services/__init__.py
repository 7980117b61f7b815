"""Shared services."""
from shared.services.llm_service import LLMService, LLMServiceError, build_llm_service

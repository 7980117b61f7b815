"""
Custom Exception Hierarchy for the Pathfinder Module

Exception Hierarchy:
    PathfinderError (base)
    ├── SearchError
    │   └── SearchProviderError
    ├── CurationError
    │   └── CurationOutputError
    ├── StateError
    │   └── StateTransitionError
    ├── SessionStoreError
    └── PromptTemplateError
"""

from typing import Optional


class PathfinderError(Exception):
    """Base exception for all pathfinder errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


# Search Errors

class SearchError(PathfinderError):
    """Base exception for video search errors."""
    pass


class SearchProviderError(SearchError):
    """Raised when the video search provider fails or is not configured."""

    def __init__(self, message: str, status_code: Optional[int] = None, query: Optional[str] = None):
        super().__init__(message, {"status_code": status_code, "query": query})
        self.status_code = status_code
        self.query = query


# Curation Errors

class CurationError(PathfinderError):
    """Base exception for learning-path curation errors."""
    pass


class CurationOutputError(CurationError):
    """Raised when the reasoning service output cannot be decoded into a curation."""

    def __init__(self, reason: str, raw_excerpt: Optional[str] = None):
        message = f"Invalid curation output: {reason}"
        super().__init__(message, {"raw_excerpt": raw_excerpt})
        self.reason = reason
        self.raw_excerpt = raw_excerpt


# State Errors

class StateError(PathfinderError):
    """Base exception for conversation state errors."""
    pass


class StateTransitionError(StateError):
    """Raised when a conversation state transition is invalid."""

    def __init__(self, from_state: str, to_state: str, reason: str):
        message = f"Invalid state transition from '{from_state}' to '{to_state}': {reason}"
        super().__init__(message)
        self.from_state = from_state
        self.to_state = to_state
        self.reason = reason


class SessionStoreError(PathfinderError):
    """Raised when stored conversation data cannot be read back."""

    def __init__(self, conversation_id: str, reason: str):
        message = f"Conversation {conversation_id} could not be loaded: {reason}"
        super().__init__(message)
        self.conversation_id = conversation_id
        self.reason = reason


class PromptTemplateError(PathfinderError):
    """Raised when a prompt template is rendered without all of its variables."""

    def __init__(self, template_name: str, missing_vars: list[str]):
        message = f"Template '{template_name}' missing variables: {', '.join(sorted(missing_vars))}"
        super().__init__(message, {"missing_vars": missing_vars})
        self.template_name = template_name
        self.missing_vars = missing_vars

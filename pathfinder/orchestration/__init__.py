"""Dialogue orchestration."""
from pathfinder.orchestration.dialogue_controller import DialogueController, TurnDecision, build_search_query

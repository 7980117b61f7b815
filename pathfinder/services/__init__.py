"""Pathfinder services: intent extraction, session storage, search, curation, progress, chat."""

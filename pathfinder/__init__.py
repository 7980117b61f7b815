"""Pathfinder: intent resolution, tutorial search and learning-path curation."""

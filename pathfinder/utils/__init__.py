"""Pathfinder utilities."""

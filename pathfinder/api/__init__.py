"""Pathfinder API routes."""

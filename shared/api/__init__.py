"""Shared API routes and dependencies."""

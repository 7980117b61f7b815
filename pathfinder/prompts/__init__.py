"""Prompt templates and reply texts."""

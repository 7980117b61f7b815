"""Shared infrastructure: persistence, reasoning-service access, HTTP helpers."""

"""Domain layer: addon records, ids, lifecycle states, and error shapes.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""

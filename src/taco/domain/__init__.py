"""Domain layer — schema engine, issue entity, changelog, templates.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""

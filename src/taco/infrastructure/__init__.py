"""Infrastructure layer — issue files, derived index, editor process.

This layer depends on stdlib, SQLAlchemy, and the domain layer.
It must never import from services, commands, or output.
"""

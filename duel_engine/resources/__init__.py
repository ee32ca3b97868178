"""
Resources module.

Exports:
- Database: JSON definition loading with schema validation
"""

from duel_engine.resources.database import Database

__all__ = ["Database"]

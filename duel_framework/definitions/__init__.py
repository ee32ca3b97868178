"""
Definitions module - bundled heroes, enemies, attacks and potions.

Usage:
    from duel_framework.definitions import DefinitionRegistry

    registry = DefinitionRegistry()
    knight = registry.create_combatant("knight", is_player=True)
    dravik = registry.create_combatant("lord_dravik")
"""

from duel_framework.definitions.registry import DefinitionRegistry, DEFAULT_DATA_PATH

__all__ = [
    "DefinitionRegistry",
    "DEFAULT_DATA_PATH",
]

"""
Duel Framework module.

Provides the battle core built on top of the engine layer:
- Battle (combatants, actions, status effects, engine, sequence)
- Definitions (data-driven heroes, enemies, attacks and items)
"""

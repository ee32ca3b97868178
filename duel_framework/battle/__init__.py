"""
Battle module - deterministic turn-based combat between two combatants.

Provides:
- Combatants (HP, stats, actions, status effects)
- Actions (attacks, items and their status-applying variants)
- Status effects with lifecycle hooks
- The battle engine state machine and fixed turn order
- The battle sequence wrapper with target selection
"""

from duel_framework.battle.effects import (
    StatusEffect,
    StatusType,
    EffectBehavior,
    StatusDefinition,
    STATUS_DEFINITIONS,
    PERMANENT,
    create_status_effect,
    status_type_from_name,
)
from duel_framework.battle.actions import (
    Action,
    ActionType,
    Attack,
    Item,
    ItemData,
    ItemKind,
    PresentationHook,
    mystery_good_chance,
)
from duel_framework.battle.combatant import Combatant, Health
from duel_framework.battle.engine import (
    BattleEngine,
    BattleState,
    BattleResult,
    TurnOrder,
)
from duel_framework.battle.sequence import BattleSequence, TargetSelector
from duel_framework.battle.ai import RandomActionPolicy
from duel_framework.battle.errors import (
    BattleError,
    TargetSelectionError,
    DefinitionError,
)

__all__ = [
    # Effects
    "StatusEffect",
    "StatusType",
    "EffectBehavior",
    "StatusDefinition",
    "STATUS_DEFINITIONS",
    "PERMANENT",
    "create_status_effect",
    "status_type_from_name",
    # Actions
    "Action",
    "ActionType",
    "Attack",
    "Item",
    "ItemData",
    "ItemKind",
    "PresentationHook",
    "mystery_good_chance",
    # Combatant
    "Combatant",
    "Health",
    # Engine
    "BattleEngine",
    "BattleState",
    "BattleResult",
    "TurnOrder",
    # Sequence
    "BattleSequence",
    "TargetSelector",
    "RandomActionPolicy",
    # Errors
    "BattleError",
    "TargetSelectionError",
    "DefinitionError",
]

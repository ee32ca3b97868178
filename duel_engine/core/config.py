"""
Battle configuration.

A single typed record scoped to one battle engine. It replaces a free-form
"global state" bag: every tunable the battle flow consults is a named,
validated field here.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Side(str, Enum):
    """Which of the two originally supplied combatants."""
    A = "A"
    B = "B"


class MergePolicy(Enum):
    """What happens when a status effect is added while one of the same name is active."""
    REFRESH = "refresh"  # Keep existing instance, extend remaining turns
    STACK = "stack"      # Attach the new instance alongside the old one
    IGNORE = "ignore"    # Drop the new instance


class BattleConfig(BaseModel):
    """
    Configuration for a battle engine.

    Attributes:
        min_damage: Floor applied to attack damage after defense reduction
        defense_divisor: Target DEF is divided by this before subtraction
        status_merge: Policy for re-applying an already active status effect
        tie_breaker: Side that acts first when SPD values are equal
        seed: Seed for the engine's random source when none is injected
        echo_log: Mirror battle log lines to the Python logger
    """

    model_config = ConfigDict(validate_assignment=True, extra='forbid')

    min_damage: int = Field(default=1, ge=0)
    defense_divisor: float = Field(default=2.0, gt=0)
    status_merge: MergePolicy = MergePolicy.REFRESH
    tie_breaker: Side = Side.A
    seed: Optional[int] = None
    echo_log: bool = True

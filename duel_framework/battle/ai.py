"""
Action selection for computer-controlled combatants.
"""

from __future__ import annotations

import random
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from duel_framework.battle.actions import Action
    from duel_framework.battle.combatant import Combatant


class RandomActionPolicy:
    """
    Picks a uniformly random action.

    Attacks only by default; with ``use_items`` the combatant's items are
    part of the draw too.
    """

    def __init__(self, rng: Optional[random.Random] = None, use_items: bool = False):
        self.rng = rng if rng is not None else random.Random()
        self.use_items = use_items

    def choose_action(self, combatant: Combatant) -> Optional[Action]:
        """Return an action for `combatant`, or None if it has nothing usable."""
        choices = list(combatant.actions) if self.use_items else combatant.attacks
        if not choices:
            return None
        return self.rng.choice(choices)

"""
Combatants - the two participants of a battle.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from pydantic import Field

from duel_engine.core.component import Component
from duel_engine.core.config import MergePolicy
from duel_framework.battle.actions import ActionType
from duel_framework.battle.effects import StatusEffect

if TYPE_CHECKING:
    from duel_framework.battle.actions import Action, Attack, Item
    from duel_framework.battle.engine import BattleEngine


logger = logging.getLogger(__name__)

CORE_STATS = ("ATK", "DEF", "SPD")


class Health(Component):
    """
    Health points tracking.

    Attributes:
        current: Current HP, always within [0, max_hp]
        max_hp: Maximum HP
    """
    current: int = Field(default=100, ge=0)
    max_hp: int = Field(default=100, ge=1)

    def model_post_init(self, __context):
        """Ensure current doesn't exceed max."""
        if self.current > self.max_hp:
            self.current = self.max_hp

    @property
    def is_dead(self) -> bool:
        return self.current <= 0

    @property
    def percent(self) -> float:
        """Get health as percentage (0-1)."""
        return self.current / self.max_hp

    def take_damage(self, amount: int) -> int:
        """
        Take damage.

        Args:
            amount: Damage to take (negative counts as 0)

        Returns:
            Actual damage dealt
        """
        actual = min(max(0, amount), self.current)
        self.current -= actual
        return actual

    def heal(self, amount: int) -> int:
        """
        Heal health.

        Args:
            amount: Amount to heal (negative counts as 0)

        Returns:
            Actual amount healed
        """
        old = self.current
        self.current = min(self.current + max(0, amount), self.max_hp)
        return self.current - old


@dataclass(eq=False)
class Combatant:
    """
    A participant in battle.

    Combatants compare by identity: two goblins with the same stats are
    still two different combatants.

    Attributes:
        name: Display name
        health: HP component
        stats: Named stats (at least ATK, DEF, SPD)
        actions: Available actions, each object at most once
        sprite: Opaque asset reference for the presentation layer
        is_player: Controlled by a human
        status_effects: Active effects owned by this combatant
    """
    name: str
    health: Health
    stats: dict[str, int] = field(default_factory=dict)
    actions: list[Action] = field(default_factory=list)
    sprite: str = ""
    is_player: bool = False
    status_effects: list[StatusEffect] = field(default_factory=list)

    def __post_init__(self):
        for stat in CORE_STATS:
            self.stats.setdefault(stat, 0)

        unique: list[Action] = []
        for action in self.actions:
            if any(action is existing for existing in unique):
                logger.warning("Duplicate action '%s' dropped from %s", action.name, self.name)
                continue
            unique.append(action)
        self.actions = unique

    @classmethod
    def create(
        cls,
        name: str,
        max_hp: int,
        stats: Optional[dict[str, int]] = None,
        actions: Optional[list[Action]] = None,
        sprite: str = "",
        is_player: bool = False,
        current_hp: Optional[int] = None,
    ) -> Combatant:
        """Convenience constructor taking plain HP values."""
        health = Health(
            current=max_hp if current_hp is None else current_hp,
            max_hp=max_hp,
        )
        return cls(
            name=name,
            health=health,
            stats=dict(stats or {}),
            actions=list(actions or []),
            sprite=sprite,
            is_player=is_player,
        )

    # --- Vitals ---

    @property
    def current_hp(self) -> int:
        return self.health.current

    @property
    def max_hp(self) -> int:
        return self.health.max_hp

    @property
    def hp_percent(self) -> float:
        return self.health.percent

    def is_alive(self) -> bool:
        """Alive iff current HP is above zero."""
        return self.health.current > 0

    def take_damage(self, amount: int) -> int:
        """Lose HP, clamped at 0. Returns the damage actually taken."""
        return self.health.take_damage(amount)

    def heal(self, amount: int) -> int:
        """Recover HP, clamped at max HP. Returns the HP actually recovered."""
        return self.health.heal(amount)

    # --- Stats ---

    def get_stat(self, stat_name: str, default: int = 0) -> int:
        """Base stat value without status modifiers."""
        return self.stats.get(stat_name, default)

    def modify_stat(self, stat_name: str, delta: int) -> Optional[int]:
        """
        Permanently change a stat.

        Returns:
            New value, or None if the combatant has no such stat
        """
        if stat_name not in self.stats:
            logger.warning("%s has no stat '%s'; change of %+d ignored", self.name, stat_name, delta)
            return None
        self.stats[stat_name] += delta
        return self.stats[stat_name]

    def get_modified_stat(self, stat_name: str) -> int:
        """Stat value with every active effect's modifier applied."""
        value = self.stats.get(stat_name, 0)
        for effect in self.status_effects:
            value = effect.get_modified_stat(stat_name, value)
        return value

    # --- Actions ---

    @property
    def attacks(self) -> list[Attack]:
        return [a for a in self.actions if a.action_type is ActionType.ATTACK]

    @property
    def items(self) -> list[Item]:
        return [a for a in self.actions if a.action_type is ActionType.ITEM]

    def has_action(self, action: Action) -> bool:
        return any(action is existing for existing in self.actions)

    def add_action(self, action: Action) -> bool:
        """Add an action unless this exact object is already available."""
        if self.has_action(action):
            return False
        self.actions.append(action)
        return True

    def remove_action(self, action: Action) -> bool:
        """Remove an action. Removing an absent action is a no-op."""
        for i, existing in enumerate(self.actions):
            if existing is action:
                self.actions.pop(i)
                return True
        return False

    # --- Status effects ---

    def add_status_effect(
        self,
        effect: StatusEffect,
        engine: Optional[BattleEngine] = None,
        policy: Optional[MergePolicy] = None,
    ) -> bool:
        """
        Attach and apply a status effect.

        If an effect with the same name is already active, the merge policy
        decides what happens (default: the engine's configured policy, or
        REFRESH without an engine).

        Returns:
            True if `effect` itself was attached
        """
        if any(effect is active for active in self.status_effects):
            logger.warning("%s is already attached to %s; ignored", effect.name, self.name)
            return False
        if effect.combatant is not None and effect.combatant is not self:
            logger.warning(
                "%s is attached to %s; cannot also attach it to %s",
                effect.name, effect.combatant.name, self.name,
            )
            return False

        if policy is None:
            policy = engine.config.status_merge if engine is not None else MergePolicy.REFRESH

        unknown = [name for name in effect.stat_modifiers if name not in self.stats]
        if unknown:
            logger.warning(
                "%s modifies unknown stat(s) %s on %s", effect.name, ", ".join(unknown), self.name
            )

        existing = self.get_status_effect(effect.name)
        if existing is not None and policy is not MergePolicy.STACK:
            if policy is MergePolicy.IGNORE:
                logger.warning("%s already has %s; new effect ignored", self.name, effect.name)
                return False
            if existing.refresh(effect.duration) and engine is not None:
                if existing.is_permanent():
                    engine.log_event(f"{self.name}'s {existing.name} is refreshed!")
                else:
                    engine.log_event(
                        f"{self.name}'s {existing.name} is refreshed "
                        f"({existing.remaining_turns} turns)!"
                    )
            return False

        self.status_effects.append(effect)
        effect.apply(self, engine)
        return True

    def remove_status_effect(self, effect: StatusEffect) -> bool:
        """Detach an effect without firing hooks. Absent effects are ignored."""
        for i, existing in enumerate(self.status_effects):
            if existing is effect:
                self.status_effects.pop(i)
                return True
        return False

    def get_status_effect(self, name: str) -> Optional[StatusEffect]:
        for effect in self.status_effects:
            if effect.name == name:
                return effect
        return None

    def has_status(self, name: str) -> bool:
        return self.get_status_effect(name) is not None

    def get_status_effects(self) -> tuple[StatusEffect, ...]:
        return tuple(self.status_effects)

    def is_action_prevented(self) -> bool:
        """True while any active effect prevents acting (e.g. Freeze)."""
        return any(effect.prevents_action for effect in self.status_effects)

    def process_status_effects_turn_start(self, engine: Optional[BattleEngine] = None) -> None:
        """Run on_turn_start for every active effect, then sweep expired ones."""
        for effect in list(self.status_effects):
            if effect.combatant is self:
                effect.process_turn_start(self, engine)
        self._sweep_expired(engine)

    def process_status_effects_turn_end(self, engine: Optional[BattleEngine] = None) -> None:
        """Run on_turn_end (and countdown) for every active effect, then sweep expired ones."""
        for effect in list(self.status_effects):
            if effect.combatant is self:
                effect.process_turn_end(self, engine)
        self._sweep_expired(engine)

    def clear_status_effects(self, engine: Optional[BattleEngine] = None) -> None:
        """Force-remove every active effect."""
        for effect in list(self.status_effects):
            effect.remove(engine)
        self.status_effects.clear()

    def _sweep_expired(self, engine: Optional[BattleEngine]) -> None:
        for effect in list(self.status_effects):
            if effect.is_expired():
                effect.remove(engine)
                # Effects that were never applied have no owner to detach from
                self.remove_status_effect(effect)

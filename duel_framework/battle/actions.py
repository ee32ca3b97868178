"""
Battle actions - attacks and items.

Every action exposes one coroutine, ``execute(source, target, engine)``.
It mutates game state first, in log order, and then awaits the optional
presentation hook (animation, sound) before returning. A dead or missing
target turns the call into a silent no-op.

Items are a closed set of kinds (ItemKind). The kind selects the extra
status effect an item attaches after its numeric payload is applied.
"""

from __future__ import annotations

import math
from enum import Enum, auto
from typing import TYPE_CHECKING, Awaitable, Callable, ClassVar, Optional

from pydantic import Field

from duel_engine.core.component import Component
from duel_framework.battle.effects import StatusType, create_status_effect

if TYPE_CHECKING:
    from random import Random

    from duel_engine.core.config import BattleConfig
    from duel_framework.battle.combatant import Combatant
    from duel_framework.battle.engine import BattleEngine


# (source, target, engine) -> awaitable completion
PresentationHook = Callable[["Combatant", "Combatant", "BattleEngine"], Awaitable[None]]


class ActionType(Enum):
    """Types of battle actions."""
    ATTACK = auto()
    ITEM = auto()


class ItemKind(Enum):
    """Item variants."""
    BASIC = auto()
    POISON = auto()
    BURN = auto()
    FREEZE = auto()
    REGENERATION = auto()
    ADRENALINE = auto()
    MYSTERY = auto()


class Action:
    """
    Base class for all turn choices.

    Attributes:
        name: Display name
        requires_target_selection: The caller must pick a target before execution
        presentation: Optional awaited hook run after state changes
        description: Flavour text for UIs
    """

    action_type: ClassVar[ActionType]

    def __init__(
        self,
        name: str,
        requires_target_selection: bool = False,
        presentation: Optional[PresentationHook] = None,
        description: str = "",
    ):
        self.name = name
        self.requires_target_selection = requires_target_selection
        self.presentation = presentation
        self.description = description

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"

    async def execute(self, source: Combatant, target: Optional[Combatant], engine: BattleEngine) -> None:
        """Perform the action. Resolves once the presentation hook has finished."""
        raise NotImplementedError

    async def play_presentation(self, source: Combatant, target: Combatant, engine: BattleEngine) -> None:
        """Await the presentation hook, if any."""
        if self.presentation is not None:
            await self.presentation(source, target, engine)


class Attack(Action):
    """
    A combat move focused on dealing damage.

    Damage is ``floor(ATK * power - DEF / defense_divisor)`` using
    status-modified stats, never less than the configured minimum.
    """

    action_type = ActionType.ATTACK

    def __init__(
        self,
        name: str,
        power: float = 1.0,
        requires_target_selection: bool = False,
        presentation: Optional[PresentationHook] = None,
        status_effect: Optional[StatusType] = None,
        status_chance: float = 0.0,
        status_duration: Optional[int] = None,
        lifesteal: float = 0.0,
        description: str = "",
    ):
        super().__init__(name, requires_target_selection, presentation, description)
        self.power = power
        self.status_effect = status_effect
        self.status_chance = status_chance
        self.status_duration = status_duration
        self.lifesteal = lifesteal

    def calculate_damage(self, source: Combatant, target: Combatant, config: BattleConfig) -> int:
        attack = source.get_modified_stat("ATK")
        defense = target.get_modified_stat("DEF")
        raw = math.floor(attack * self.power - defense / config.defense_divisor)
        return max(config.min_damage, raw)

    async def execute(self, source: Combatant, target: Optional[Combatant], engine: BattleEngine) -> None:
        if target is None or not target.is_alive():
            return

        engine.log_event(f"{source.name} uses {self.name}!")

        dealt = target.take_damage(self.calculate_damage(source, target, engine.config))
        engine.log_event(f"{target.name} takes {dealt} damage!")

        if not target.is_alive():
            engine.log_event(f"{target.name} is defeated!")
        elif self.status_effect is not None and engine.rng.random() < self.status_chance:
            effect = create_status_effect(self.status_effect, self.status_duration)
            target.add_status_effect(effect, engine)

        if self.lifesteal > 0 and dealt > 0 and source.is_alive():
            siphoned = source.heal(math.floor(dealt * self.lifesteal))
            if siphoned > 0:
                engine.log_event(f"{source.name} siphons {siphoned} HP!")

        await self.play_presentation(source, target, engine)


class ItemData(Component):
    """
    Numeric payload of an item. Every present field is applied.

    Attributes:
        heal: HP restored to the target
        damage: HP removed from the target
        stats: Permanent stat deltas, applied in insertion order
    """
    heal: Optional[int] = Field(default=None, ge=0)
    damage: Optional[int] = Field(default=None, ge=0)
    stats: dict[str, int] = Field(default_factory=dict)


class Item(Action):
    """
    A consumable or reusable item.

    Execution order: heal, damage, stat deltas, kind-specific status effect,
    consumable removal, presentation hook.
    """

    action_type = ActionType.ITEM

    def __init__(
        self,
        name: str,
        data: Optional[ItemData] = None,
        kind: ItemKind = ItemKind.BASIC,
        is_consumable: bool = True,
        requires_target_selection: bool = False,
        presentation: Optional[PresentationHook] = None,
        status_duration: Optional[int] = None,
        description: str = "",
        sprite: str = "",
    ):
        super().__init__(name, requires_target_selection, presentation, description)
        self.data = data if data is not None else ItemData()
        self.kind = kind
        self.is_consumable = is_consumable
        self.status_duration = status_duration
        self.sprite = sprite

    async def execute(self, source: Combatant, target: Optional[Combatant], engine: BattleEngine) -> None:
        if target is None or not target.is_alive():
            return

        engine.log_event(f"{source.name} uses {self.name}!")

        self.apply_effects(source, target, engine)
        if target.is_alive():
            _KIND_EFFECTS[self.kind](self, source, target, engine)
        self.remove_if_consumable(source)

        await self.play_presentation(source, target, engine)

    def apply_effects(self, source: Combatant, target: Combatant, engine: BattleEngine) -> None:
        """Apply the numeric payload: heal, then damage, then stat deltas."""
        if self.data.heal is not None:
            healed = target.heal(self.data.heal)
            if healed > 0:
                engine.log_event(f"{target.name} recovers {healed} HP!")

        if self.data.damage is not None:
            dealt = target.take_damage(self.data.damage)
            engine.log_event(f"{target.name} takes {dealt} damage!")
            if not target.is_alive():
                engine.log_event(f"{target.name} is defeated!")

        for stat_name, delta in self.data.stats.items():
            if target.modify_stat(stat_name, delta) is None:
                continue
            direction = "increased" if delta >= 0 else "decreased"
            engine.log_event(f"{target.name}'s {stat_name} {direction} by {abs(delta)}!")

    def remove_if_consumable(self, source: Combatant) -> None:
        """Drop this item from the source's actions. Repeated calls are harmless."""
        if self.is_consumable:
            source.remove_action(self)

    def roll_duration(self, rng: Random, low: int, high: int) -> int:
        """Fixed override if configured, otherwise uniform in [low, high]."""
        if self.status_duration is not None:
            return self.status_duration
        if low == high:
            return low
        return rng.randint(low, high)


# --- Kind-specific effects ---

# kind -> (status, min duration, max duration)
ITEM_STATUS_TABLE: dict[ItemKind, tuple[StatusType, int, int]] = {
    ItemKind.POISON: (StatusType.POISON, 2, 5),
    ItemKind.BURN: (StatusType.BURN, 3, 3),
    ItemKind.FREEZE: (StatusType.FREEZE, 1, 1),
    ItemKind.REGENERATION: (StatusType.REGENERATION, 3, 5),
    ItemKind.ADRENALINE: (StatusType.ADRENALINE, 2, 2),
}

MYSTERY_HEAL = 40

# Branches are picked by thirds of a uniform draw
MYSTERY_GOOD = ("heal", ItemKind.ADRENALINE, ItemKind.REGENERATION)
MYSTERY_BAD = (ItemKind.FREEZE, ItemKind.POISON, ItemKind.BURN)


def _no_effect(item: Item, source: Combatant, target: Combatant, engine: BattleEngine) -> None:
    pass


def _status_effect(item: Item, source: Combatant, target: Combatant, engine: BattleEngine) -> None:
    status_type, low, high = ITEM_STATUS_TABLE[item.kind]
    duration = item.roll_duration(engine.rng, low, high)
    target.add_status_effect(create_status_effect(status_type, duration), engine)


def mystery_good_chance(source: Combatant, target: Combatant) -> float:
    """
    Probability that a mystery item picks a beneficial branch.

    0.5, shifted by up to 0.25 towards whoever has more LUCK.
    """
    source_luck = source.get_modified_stat("LUCK")
    target_luck = target.get_modified_stat("LUCK")
    total = source_luck + target_luck
    if total <= 0:
        return 0.5
    chance = 0.5 + 0.25 * (source_luck - target_luck) / total
    return min(1.0, max(0.0, chance))


def _branch_index(roll: float) -> int:
    if roll <= 0.33:
        return 0
    if roll < 0.67:
        return 1
    return 2


def _mystery_effect(item: Item, source: Combatant, target: Combatant, engine: BattleEngine) -> None:
    # First draw picks the branch, second draw decides good or bad
    branch = _branch_index(engine.rng.random())
    lucky = engine.rng.random() < mystery_good_chance(source, target)
    outcome = (MYSTERY_GOOD if lucky else MYSTERY_BAD)[branch]

    if outcome == "heal":
        healed = target.heal(MYSTERY_HEAL)
        if healed > 0:
            engine.log_event(f"{target.name} recovers {healed} HP!")
        return

    # The override duration only applies to the item's own kind
    status_type, low, high = ITEM_STATUS_TABLE[outcome]
    duration = low if low == high else engine.rng.randint(low, high)
    target.add_status_effect(create_status_effect(status_type, duration), engine)


_KIND_EFFECTS: dict[ItemKind, Callable[[Item, "Combatant", "Combatant", "BattleEngine"], None]] = {
    ItemKind.BASIC: _no_effect,
    ItemKind.POISON: _status_effect,
    ItemKind.BURN: _status_effect,
    ItemKind.FREEZE: _status_effect,
    ItemKind.REGENERATION: _status_effect,
    ItemKind.ADRENALINE: _status_effect,
    ItemKind.MYSTERY: _mystery_effect,
}

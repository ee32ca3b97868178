"""
Status effects - timed modifiers attached to a single combatant.

An effect is plain data (name, duration, stat modifiers, potency) plus an
EffectBehavior descriptor holding up to four lifecycle hooks. Built-in
effects are described in STATUS_DEFINITIONS and instantiated with
create_status_effect().
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING, Callable, Optional

if TYPE_CHECKING:
    from duel_framework.battle.combatant import Combatant
    from duel_framework.battle.engine import BattleEngine


logger = logging.getLogger(__name__)

PERMANENT = -1

# Hook signature: (effect, owner, engine or None)
EffectHook = Callable[["StatusEffect", "Combatant", Optional["BattleEngine"]], None]


class StatusType(Enum):
    """Built-in status effects."""
    # Debuffs
    POISON = auto()
    BURN = auto()
    DARK_RESONANCE = auto()
    FREEZE = auto()
    MEMORY_DRAIN = auto()
    FRACTURED_GUARD = auto()
    # Buffs
    REGENERATION = auto()
    ADRENALINE = auto()
    ALCHEMICAL_SHIELD = auto()
    SHACKLES_RATTLE = auto()


@dataclass(frozen=True)
class EffectBehavior:
    """Lifecycle hooks of a status effect. Any of them may be None."""
    on_apply: Optional[EffectHook] = None
    on_turn_start: Optional[EffectHook] = None
    on_turn_end: Optional[EffectHook] = None
    on_remove: Optional[EffectHook] = None


@dataclass(eq=False)
class StatusEffect:
    """
    A single status effect instance.

    Attributes:
        name: Display name, also the identity used for merging
        duration: Turns the effect lasts (-1 for permanent)
        stat_modifiers: Additive stat changes while active (e.g. {"ATK": -3})
        potency: Per-turn magnitude for damage/heal over time
        prevents_action: Owner should skip its action while this is active
        behavior: Lifecycle hooks
        status_type: Built-in type, if created from the definition table
        description: Flavour text for UIs
        remaining_turns: Countdown, starts at duration
        combatant: Owner while attached
    """
    name: str
    duration: int = PERMANENT
    stat_modifiers: dict[str, int] = field(default_factory=dict)
    potency: int = 0
    prevents_action: bool = False
    behavior: EffectBehavior = field(default_factory=EffectBehavior)
    status_type: Optional[StatusType] = None
    description: str = ""
    remaining_turns: int = field(init=False)
    combatant: Optional[Combatant] = field(default=None, init=False, repr=False)
    _removed: bool = field(default=False, init=False, repr=False)

    def __post_init__(self):
        self.remaining_turns = self.duration

    def is_permanent(self) -> bool:
        """Check if this effect never expires on its own."""
        return self.duration == PERMANENT

    def is_expired(self) -> bool:
        """Check if a finite effect has run out of turns."""
        return not self.is_permanent() and self.remaining_turns <= 0

    @property
    def is_removed(self) -> bool:
        return self._removed

    def apply(self, combatant: Combatant, engine: Optional[BattleEngine] = None) -> None:
        """
        Bind this effect to its owner and fire on_apply.

        A previously removed effect starts a fresh application: the
        countdown restarts and on_remove will fire again when it ends.

        Args:
            combatant: The owner
            engine: Battle engine for logging (optional)
        """
        self.combatant = combatant
        self.remaining_turns = self.duration
        self._removed = False
        if engine is not None:
            if self.is_permanent():
                engine.log_event(f"{combatant.name} is affected by {self.name}!")
            else:
                engine.log_event(
                    f"{combatant.name} is affected by {self.name} for {self.duration} turns!"
                )
        if self.behavior.on_apply:
            self.behavior.on_apply(self, combatant, engine)

    def remove(self, engine: Optional[BattleEngine] = None) -> None:
        """
        Fire on_remove and detach from the owner.

        Safe to call more than once; only the first call has any effect.
        """
        if self._removed:
            return
        self._removed = True

        owner = self.combatant
        if owner is not None:
            if engine is not None:
                engine.log_event(f"{owner.name}'s {self.name} wore off.")
            if self.behavior.on_remove:
                self.behavior.on_remove(self, owner, engine)
            owner.remove_status_effect(self)
        self.combatant = None

    def process_turn_start(self, combatant: Combatant, engine: Optional[BattleEngine]) -> None:
        """Fire on_turn_start."""
        if self.behavior.on_turn_start:
            self.behavior.on_turn_start(self, combatant, engine)

    def process_turn_end(self, combatant: Combatant, engine: Optional[BattleEngine]) -> None:
        """Fire on_turn_end, then count down and remove on expiry."""
        if self.behavior.on_turn_end:
            self.behavior.on_turn_end(self, combatant, engine)

        if not self.is_permanent():
            self.remaining_turns -= 1
            if self.remaining_turns <= 0:
                self.remove(engine)

    def get_modified_stat(self, stat_name: str, base_value: int) -> int:
        """Return base_value plus this effect's modifier for stat_name."""
        return base_value + self.stat_modifiers.get(stat_name, 0)

    def refresh(self, duration: int) -> bool:
        """
        Extend the countdown to at least `duration` turns.

        Returns:
            True if the countdown or duration changed
        """
        if self.is_permanent():
            return False
        if duration == PERMANENT:
            self.duration = PERMANENT
            self.remaining_turns = PERMANENT
            return True
        if duration <= self.remaining_turns:
            return False
        self.remaining_turns = duration
        return True


# --- Built-in behaviours ---

def _log(engine: Optional[BattleEngine], message: str) -> None:
    if engine is not None:
        engine.log_event(message)


def _damage_over_time(effect: StatusEffect, combatant: Combatant, engine: Optional[BattleEngine]) -> None:
    if not combatant.is_alive():
        return
    dealt = combatant.take_damage(effect.potency)
    _log(engine, f"{combatant.name} takes {dealt} damage from {effect.name}!")
    if not combatant.is_alive():
        _log(engine, f"{combatant.name} is defeated!")


def _heal_over_time(effect: StatusEffect, combatant: Combatant, engine: Optional[BattleEngine]) -> None:
    if not combatant.is_alive():
        return
    healed = combatant.heal(effect.potency)
    if healed > 0:
        _log(engine, f"{combatant.name} recovers {healed} HP from {effect.name}!")


def _frozen(effect: StatusEffect, combatant: Combatant, engine: Optional[BattleEngine]) -> None:
    _log(engine, f"{combatant.name} is frozen and cannot act!")


DAMAGE_OVER_TIME = EffectBehavior(on_turn_end=_damage_over_time)
HEAL_OVER_TIME = EffectBehavior(on_turn_end=_heal_over_time)
FROZEN = EffectBehavior(on_turn_start=_frozen)


@dataclass(frozen=True)
class StatusDefinition:
    """Static description of a built-in status effect."""
    name: str
    description: str
    duration: int
    potency: int = 0
    stat_modifiers: dict[str, int] = field(default_factory=dict)
    prevents_action: bool = False
    behavior: EffectBehavior = field(default_factory=EffectBehavior)


STATUS_DEFINITIONS: dict[StatusType, StatusDefinition] = {
    StatusType.POISON: StatusDefinition(
        "Poison", "Inflicts 4 damage per turn", 2,
        potency=4, behavior=DAMAGE_OVER_TIME,
    ),
    StatusType.BURN: StatusDefinition(
        "Burn", "Deals 5 damage per turn", 3,
        potency=5, behavior=DAMAGE_OVER_TIME,
    ),
    StatusType.DARK_RESONANCE: StatusDefinition(
        "Dark Resonance", "The sigil burns with dark energy, dealing 6 damage per turn", 3,
        potency=6, behavior=DAMAGE_OVER_TIME,
    ),
    StatusType.FREEZE: StatusDefinition(
        "Freeze", "Prevents action for a turn", 1,
        prevents_action=True, behavior=FROZEN,
    ),
    StatusType.MEMORY_DRAIN: StatusDefinition(
        "Memory Drain", "Reduces attack power as memories fade", 3,
        stat_modifiers={"ATK": -3},
    ),
    StatusType.FRACTURED_GUARD: StatusDefinition(
        "Fractured Guard", "Shattered memories erode defenses", 3,
        stat_modifiers={"DEF": -4},
    ),
    StatusType.REGENERATION: StatusDefinition(
        "Regeneration", "Restores 5 HP per turn", 3,
        potency=5, behavior=HEAL_OVER_TIME,
    ),
    StatusType.ADRENALINE: StatusDefinition(
        "Adrenaline", "Boosts speed", 2,
        stat_modifiers={"SPD": 5},
    ),
    StatusType.ALCHEMICAL_SHIELD: StatusDefinition(
        "Alchemical Shield", "A protective barrier that increases defense", 2,
        stat_modifiers={"DEF": 5},
    ),
    StatusType.SHACKLES_RATTLE: StatusDefinition(
        "Shackles Rattle", "Adrenaline surges, raising attack briefly", 2,
        stat_modifiers={"ATK": 2},
    ),
}


def create_status_effect(status_type: StatusType, duration: Optional[int] = None) -> StatusEffect:
    """
    Build a fresh effect from the definition table.

    Args:
        status_type: Built-in effect to create
        duration: Override for the default duration

    Returns:
        New, unattached StatusEffect
    """
    definition = STATUS_DEFINITIONS[status_type]
    return StatusEffect(
        name=definition.name,
        duration=definition.duration if duration is None else duration,
        stat_modifiers=dict(definition.stat_modifiers),
        potency=definition.potency,
        prevents_action=definition.prevents_action,
        behavior=definition.behavior,
        status_type=status_type,
        description=definition.description,
    )


def status_type_from_name(name: str) -> Optional[StatusType]:
    """
    Resolve a status name such as "poison" or "Dark Resonance".

    Unknown names are logged and return None.
    """
    key = name.strip().upper().replace(" ", "_").replace("-", "_")
    try:
        return StatusType[key]
    except KeyError:
        logger.warning("Unknown status effect '%s' ignored", name)
        return None

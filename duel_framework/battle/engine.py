"""
Battle engine - the turn-sequencing state machine for a two-combatant battle.

The engine never picks actions. Callers drive it one turn at a time with
``await engine.process_turn(actor, action, target)`` and must await each
turn before starting the next one.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, Callable, Optional

from duel_engine.core.config import BattleConfig, Side
from duel_engine.core.events import BattleEvent, EventBus, OneShotSignal

if TYPE_CHECKING:
    from duel_framework.battle.actions import Action
    from duel_framework.battle.combatant import Combatant


logger = logging.getLogger(__name__)


class BattleState(Enum):
    """State of the battle."""
    PENDING = auto()
    ACTIVE = auto()
    ENDED = auto()


@dataclass(frozen=True)
class BattleResult:
    """Terminal outcome of a battle."""
    winner: Combatant
    loser: Combatant
    loser_side: Side

    @property
    def winner_side(self) -> Side:
        return Side.B if self.loser_side is Side.A else Side.A


class TurnOrder:
    """
    Fixed turn order for a battle.

    Computed once from SPD when the battle starts and never re-sorted,
    even if SPD changes later. Dead combatants are skipped, not removed.
    """

    def __init__(self):
        self._actors: tuple[Combatant, ...] = ()
        self._current_index: int = 0
        self._round: int = 0

    def initialize(self, first: Combatant, second: Combatant, tie_breaker: Side = Side.A) -> None:
        """
        Order two combatants by SPD, highest first.

        Args:
            first: Combatant on side A
            second: Combatant on side B
            tie_breaker: Side that goes first on equal SPD
        """
        first_speed = first.get_stat("SPD")
        second_speed = second.get_stat("SPD")

        if first_speed > second_speed:
            self._actors = (first, second)
        elif second_speed > first_speed:
            self._actors = (second, first)
        elif tie_breaker is Side.A:
            self._actors = (first, second)
        else:
            self._actors = (second, first)

        self._current_index = 0
        self._round = 1

    @property
    def actors(self) -> tuple[Combatant, ...]:
        return self._actors

    @property
    def round(self) -> int:
        """Current round number (1-based, 0 before initialization)."""
        return self._round

    def get_current_actor(self) -> Optional[Combatant]:
        """Get the combatant whose turn it is, skipping the dead."""
        if not self._actors:
            return None

        for offset in range(len(self._actors)):
            actor = self._actors[(self._current_index + offset) % len(self._actors)]
            if actor.is_alive():
                return actor
        return None

    def advance(self) -> Optional[Combatant]:
        """Move to the next living combatant and return it."""
        count = len(self._actors)
        index = self._current_index
        for _ in range(count):
            index += 1
            if index >= count:
                index = 0
                self._round += 1
            if self._actors[index].is_alive():
                self._current_index = index
                return self._actors[index]
        return None

    def next_after(self, actor: Combatant) -> Optional[Combatant]:
        """The living combatant that follows `actor` in the order."""
        if actor not in self._actors:
            return None
        index = self._actors.index(actor)
        for step in range(1, len(self._actors) + 1):
            candidate = self._actors[(index + step) % len(self._actors)]
            if candidate.is_alive():
                return candidate
        return None


class BattleEngine:
    """
    Turn-based battle state machine: PENDING -> ACTIVE -> ENDED.

    Attributes:
        combatant_a: First combatant (side A)
        combatant_b: Second combatant (side B)
        config: Engine-scoped configuration
        rng: Random source for every probabilistic rule
        event_bus: Optional bus receiving BattleEvent notifications
        outcome: Fires once with the BattleResult when the battle ends
    """

    def __init__(
        self,
        combatant_a: Combatant,
        combatant_b: Combatant,
        config: Optional[BattleConfig] = None,
        rng: Optional[random.Random] = None,
        event_bus: Optional[EventBus] = None,
    ):
        if combatant_a is combatant_b:
            raise ValueError("A battle needs two distinct combatants")

        self.combatant_a = combatant_a
        self.combatant_b = combatant_b
        self.config = config if config is not None else BattleConfig()
        self.rng = rng if rng is not None else random.Random(self.config.seed)
        self.event_bus = event_bus

        self.state = BattleState.PENDING
        self.turn_order = TurnOrder()
        self.outcome: OneShotSignal[BattleResult] = OneShotSignal()

        self._battle_log: list[str] = []
        self._turn_count = 0
        self._turn_in_progress = False

    # --- Queries ---

    @property
    def is_battle_active(self) -> bool:
        return self.state is BattleState.ACTIVE

    @property
    def turn_count(self) -> int:
        """Number of turns processed so far."""
        return self._turn_count

    @property
    def combatants(self) -> tuple[Combatant, Combatant]:
        return (self.combatant_a, self.combatant_b)

    def get_turn_order(self) -> tuple[Combatant, ...]:
        return self.turn_order.actors

    def alive_combatants(self) -> list[Combatant]:
        return [c for c in self.combatants if c.is_alive()]

    def is_participant(self, combatant: Combatant) -> bool:
        return combatant is self.combatant_a or combatant is self.combatant_b

    def side_of(self, combatant: Combatant) -> Side:
        """Side of a participant, by identity."""
        if combatant is self.combatant_a:
            return Side.A
        if combatant is self.combatant_b:
            return Side.B
        raise ValueError(f"{combatant.name} is not part of this battle")

    def opponent_of(self, combatant: Combatant) -> Combatant:
        return self.combatant_b if self.side_of(combatant) is Side.A else self.combatant_a

    def next_actor(self, after: Combatant) -> Optional[Combatant]:
        """The living combatant that acts after `after` in the fixed order."""
        return self.turn_order.next_after(after)

    # --- Lifecycle ---

    def start_battle(self) -> bool:
        """
        Start the battle: reset the log and fix the turn order.

        Returns:
            True if the battle started, False if it was already started
        """
        if self.state is not BattleState.PENDING:
            return False

        self.state = BattleState.ACTIVE
        self._battle_log = []
        self._turn_count = 0
        self.turn_order.initialize(self.combatant_a, self.combatant_b, self.config.tie_breaker)

        self.log_event("Battle begins!")
        self.log_event(f"{self.combatant_a.name} vs {self.combatant_b.name}")

        self._publish(
            BattleEvent.BATTLE_STARTED,
            combatant_a=self.combatant_a,
            combatant_b=self.combatant_b,
            turn_order=self.turn_order.actors,
        )
        return True

    async def process_turn(
        self,
        entity: Combatant,
        action: Optional[Action] = None,
        target: Optional[Combatant] = None,
    ) -> None:
        """
        Run one turn for `entity`.

        1. Turn-start status effects
        2. The action, including its presentation hook (if an action is given)
        3. Turn-end status effects (countdown and expiry)
        4. Win/loss check

        Does nothing if the battle is not active or `entity` is dead. An
        exception from step 2 is logged and the turn continues with step 3.
        """
        if not self.is_battle_active or not entity.is_alive():
            return
        if not self.is_participant(entity):
            logger.warning("%s is not part of this battle; turn ignored", entity.name)
            return
        if self._turn_in_progress:
            logger.warning("Turn for %s requested while another turn is running; ignored", entity.name)
            return

        self._turn_in_progress = True
        try:
            self._turn_count += 1
            self.log_event(f"--- {entity.name}'s turn ---")
            self._publish(BattleEvent.TURN_STARTED, combatant=entity, turn=self._turn_count)

            entity.process_status_effects_turn_start(self)

            if action is not None and entity.is_alive():
                try:
                    await action.execute(entity, target, self)
                except Exception:
                    # State changes made before the failure stand; the turn still finishes
                    logger.exception("%s failed during %s's turn", action.name, entity.name)

            entity.process_status_effects_turn_end(self)

            self._publish(BattleEvent.TURN_ENDED, combatant=entity, turn=self._turn_count)
            self.check_battle_end()
        finally:
            self._turn_in_progress = False

    def check_battle_end(self) -> bool:
        """
        End the battle if either combatant is down.

        Fires the outcome at most once; later calls return False.
        """
        if self.state is not BattleState.ACTIVE:
            return False

        if not self.combatant_a.is_alive():
            winner, loser = self.combatant_b, self.combatant_a
        elif not self.combatant_b.is_alive():
            winner, loser = self.combatant_a, self.combatant_b
        else:
            return False

        self.state = BattleState.ENDED
        self.log_event(f"{winner.name} wins!")

        result = BattleResult(winner=winner, loser=loser, loser_side=self.side_of(loser))
        self._publish(BattleEvent.BATTLE_ENDED, winner=winner, loser=loser)
        self.outcome.fire(result)
        return True

    def subscribe(self, observer: Callable[[BattleResult], None]) -> None:
        """Be notified once with the BattleResult when the battle ends."""
        self.outcome.subscribe(observer)

    # --- Log ---

    def log_event(self, message: str) -> None:
        """Append a line to the battle log."""
        self._battle_log.append(message)
        if self.config.echo_log:
            logger.debug("[Battle] %s", message)
        self._publish(BattleEvent.LOG_ENTRY, message=message, index=len(self._battle_log) - 1)

    def get_battle_log(self) -> list[str]:
        """Copy of the battle log, oldest line first."""
        return list(self._battle_log)

    def _publish(self, event_type: BattleEvent, **data) -> None:
        if self.event_bus is not None:
            self.event_bus.publish(event_type, **data)

"""
Battle sequence - runs a whole battle as one awaitable outcome.

Usage:
    async def pick_target(action, alive):
        return await ui.ask_for_target(alive)

    sequence = BattleSequence(hero, enemy, select_target=pick_target)
    outcome = sequence.start()

    # Driven by the UI, one awaited turn at a time
    await sequence.process_turn(hero, hero.attacks[0], enemy)
    await sequence.process_computer_turn(enemy, RandomActionPolicy())

    result = await outcome
    if result.loser_side is Side.A:
        ...
"""

from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING, Awaitable, Callable, Optional

from duel_engine.core.config import BattleConfig, Side
from duel_engine.core.events import EventBus, OneShotSignal
from duel_framework.battle.actions import ActionType, ItemKind
from duel_framework.battle.engine import BattleEngine, BattleResult
from duel_framework.battle.errors import TargetSelectionError

if TYPE_CHECKING:
    from duel_framework.battle.actions import Action
    from duel_framework.battle.ai import RandomActionPolicy
    from duel_framework.battle.combatant import Combatant


logger = logging.getLogger(__name__)

# (action, alive combatants) -> awaitable chosen combatant
TargetSelector = Callable[["Action", list["Combatant"]], Awaitable["Combatant"]]

# Item kinds a computer-controlled combatant uses on itself
SELF_TARGETED_KINDS = {ItemKind.REGENERATION, ItemKind.ADRENALINE}


class BattleSequence:
    """
    Complete battle flow from start to finish.

    Wraps a BattleEngine, resolves targets for actions that require a
    choice, and exposes the end of the battle as a single BattleResult.
    """

    def __init__(
        self,
        combatant_a: Combatant,
        combatant_b: Combatant,
        select_target: Optional[TargetSelector] = None,
        config: Optional[BattleConfig] = None,
        rng: Optional[random.Random] = None,
        event_bus: Optional[EventBus] = None,
    ):
        self.combatant_a = combatant_a
        self.combatant_b = combatant_b
        self.config = config
        self.event_bus = event_bus
        self._rng = rng
        self._select_target = select_target
        self._engine: Optional[BattleEngine] = None
        self._outcome: OneShotSignal[BattleResult] = OneShotSignal()

    @property
    def engine(self) -> Optional[BattleEngine]:
        """The underlying engine, once started."""
        return self._engine

    @property
    def outcome(self) -> OneShotSignal[BattleResult]:
        return self._outcome

    @property
    def result(self) -> Optional[BattleResult]:
        """The BattleResult once the battle has ended."""
        return self._outcome.value

    def start(self) -> OneShotSignal[BattleResult]:
        """
        Create the engine and begin the battle.

        Returns:
            Awaitable that resolves once with the BattleResult. Calling
            start() again returns the same awaitable.
        """
        if self._engine is not None:
            return self._outcome

        self._engine = BattleEngine(
            self.combatant_a,
            self.combatant_b,
            config=self.config,
            rng=self._rng,
            event_bus=self.event_bus,
        )
        self._engine.subscribe(self._on_battle_end)
        self._engine.start_battle()
        return self._outcome

    def set_target_selector(self, select_target: Optional[TargetSelector]) -> None:
        self._select_target = select_target

    def is_active(self) -> bool:
        return self._engine is not None and self._engine.is_battle_active

    def alive_combatants(self) -> list[Combatant]:
        return [c for c in (self.combatant_a, self.combatant_b) if c.is_alive()]

    def get_battle_log(self) -> list[str]:
        return self._engine.get_battle_log() if self._engine is not None else []

    async def process_turn(
        self,
        entity: Combatant,
        action: Optional[Action],
        target: Optional[Combatant] = None,
    ) -> None:
        """
        Play one turn.

        If the action requires target selection, the target selector is
        awaited first and its choice replaces `target`. A combatant that is
        prevented from acting (e.g. frozen) still takes its turn, without
        the action.

        Raises:
            TargetSelectionError: No selector is set, or it chose a
                combatant that was not offered
        """
        engine = self._engine
        if engine is None or not engine.is_battle_active or not entity.is_alive():
            return

        if action is not None and entity.is_action_prevented():
            logger.debug("%s cannot act this turn; %s skipped", entity.name, action.name)
            action = None

        if action is not None and action.requires_target_selection:
            target = await self._resolve_target(action)

        await engine.process_turn(entity, action, target)

    async def process_computer_turn(
        self,
        entity: Combatant,
        policy: RandomActionPolicy,
    ) -> Optional[Action]:
        """
        Let `policy` choose an action for `entity` and play the turn.

        Attacks and harmful items target the opponent; healing and buffing
        items target `entity` itself. The target selector is not consulted.

        Returns:
            The chosen action (None if the combatant had nothing to use)
        """
        engine = self._engine
        if engine is None or not engine.is_battle_active or not entity.is_alive():
            return None

        action = policy.choose_action(entity)
        if action is not None and entity.is_action_prevented():
            action = None

        target = engine.opponent_of(entity)
        if action is not None and self._is_self_targeted(action):
            target = entity

        await engine.process_turn(entity, action, target)
        return action

    async def _resolve_target(self, action: Action) -> Combatant:
        if self._select_target is None:
            raise TargetSelectionError(
                f"{action.name} requires target selection but no target selector is set"
            )

        alive = self.alive_combatants()
        chosen = await self._select_target(action, alive)
        if not any(chosen is candidate for candidate in alive):
            raise TargetSelectionError(
                f"Target selector returned {chosen!r} for {action.name}, "
                f"expected one of {[c.name for c in alive]}"
            )
        return chosen

    def _on_battle_end(self, result: BattleResult) -> None:
        loser_side = Side.A if result.loser is self.combatant_a else Side.B
        self._outcome.fire(
            BattleResult(winner=result.winner, loser=result.loser, loser_side=loser_side)
        )

    @staticmethod
    def _is_self_targeted(action: Action) -> bool:
        if action.action_type is not ActionType.ITEM:
            return False
        if action.kind in SELF_TARGETED_KINDS:
            return True
        if action.kind is not ItemKind.BASIC or action.data.damage is not None:
            return False
        stats = action.data.stats
        return action.data.heal is not None or (bool(stats) and all(d >= 0 for d in stats.values()))

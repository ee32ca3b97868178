import os
import random
import sys

import pytest

# Ensure packages can be imported without installation
sys.path.append(os.getcwd())

from duel_engine.core.config import BattleConfig
from duel_engine.core.events import EventBus
from duel_framework.battle.actions import Attack
from duel_framework.battle.combatant import Combatant
from duel_framework.battle.engine import BattleEngine


class ScriptedRandom(random.Random):
    """
    Random source that replays queued values.

    random() pops from `rolls`, randint() pops from `ints` (or returns the
    low bound once the queue is empty).
    """

    def __init__(self, rolls=(), ints=()):
        super().__init__(0)
        self.rolls = list(rolls)
        self.ints = list(ints)

    def random(self):
        if self.rolls:
            return self.rolls.pop(0)
        return 0.99

    def randint(self, a, b):
        if self.ints:
            return self.ints.pop(0)
        return a


@pytest.fixture
def event_bus():
    """Fresh EventBus for each test."""
    return EventBus()


@pytest.fixture
def make_combatant():
    """Factory for plain combatants with sensible defaults."""
    def factory(name="Fighter", hp=100, atk=10, defense=10, spd=10, luck=None, actions=None, **kwargs):
        stats = {"ATK": atk, "DEF": defense, "SPD": spd}
        if luck is not None:
            stats["LUCK"] = luck
        return Combatant.create(name, hp, stats=stats, actions=actions, **kwargs)
    return factory


@pytest.fixture
def hero(make_combatant):
    return make_combatant("Hero", hp=100, atk=20, defense=20, spd=14, actions=[Attack("Strike")])


@pytest.fixture
def enemy(make_combatant):
    return make_combatant("Goblin", hp=80, atk=18, defense=20, spd=10, actions=[Attack("Claw")])


@pytest.fixture
def scripted_rng():
    return ScriptedRandom


@pytest.fixture
def engine(hero, enemy):
    """Started engine with a quiet log and a deterministic random source."""
    battle = BattleEngine(hero, enemy, config=BattleConfig(echo_log=False), rng=ScriptedRandom())
    battle.start_battle()
    return battle

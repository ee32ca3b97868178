"""
Duel Engine

Low-level building blocks for the turn-based battle core: typed events,
one-shot signals, validated components, battle configuration and the
definition database.

Quick Start:
    from duel_engine.core import BattleConfig, EventBus

    config = BattleConfig(seed=42)
    bus = EventBus()
"""

__version__ = "0.1.0"

from duel_engine.core import (
    BattleConfig,
    MergePolicy,
    Side,
    Component,
    EventBus,
    Event,
    BattleEvent,
    OneShotSignal,
)

__all__ = [
    "BattleConfig",
    "MergePolicy",
    "Side",
    "Component",
    "EventBus",
    "Event",
    "BattleEvent",
    "OneShotSignal",
]

"""
Core engine module.

Exports:
- BattleConfig, MergePolicy, Side: Battle configuration
- Component: Validated data record base
- EventBus, Event, BattleEvent: Event system
- OneShotSignal: Single-fire notification
"""

from duel_engine.core.config import BattleConfig, MergePolicy, Side
from duel_engine.core.component import Component
from duel_engine.core.events import EventBus, Event, BattleEvent, OneShotSignal

__all__ = [
    # Config
    "BattleConfig",
    "MergePolicy",
    "Side",
    # Components
    "Component",
    # Events
    "EventBus",
    "Event",
    "BattleEvent",
    "OneShotSignal",
]

"""
Definition registry - builds fresh battle objects from loaded JSON data.

Every create_* call returns new instances, so two combatants built from the
same definition never share actions, items or stat dictionaries.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from duel_engine.resources.database import Database
from duel_framework.battle.actions import Action, Attack, Item, ItemData, ItemKind, PresentationHook
from duel_framework.battle.combatant import Combatant, Health
from duel_framework.battle.effects import status_type_from_name
from duel_framework.battle.errors import DefinitionError

DEFAULT_DATA_PATH = Path(__file__).parent / "data"


class DefinitionRegistry:
    """
    Factory for attacks, items and combatants defined in a Database.

    Presentation hooks are not part of the data; register them per
    attack/item id and they are attached to every created instance.
    """

    def __init__(
        self,
        database: Optional[Database] = None,
        presentations: Optional[dict[str, PresentationHook]] = None,
    ):
        if database is None:
            database = Database(DEFAULT_DATA_PATH)
            database.load_all()
        self.database = database
        self._presentations: dict[str, PresentationHook] = dict(presentations or {})

    def register_presentation(self, action_id: str, hook: PresentationHook) -> None:
        """Attach `hook` to every attack or item later created from `action_id`."""
        self._presentations[action_id] = hook

    def attack_ids(self) -> list[str]:
        return sorted(self.database.attacks)

    def item_ids(self) -> list[str]:
        return sorted(self.database.items)

    def combatant_ids(self) -> list[str]:
        return sorted(self.database.combatants)

    def create_attack(self, attack_id: str) -> Attack:
        definition = self._lookup(self.database.attacks, "attack", attack_id)

        status_type = None
        if definition.get("status_effect"):
            status_type = status_type_from_name(definition["status_effect"])

        return Attack(
            name=definition["name"],
            power=definition["power"],
            requires_target_selection=definition.get("requires_target_selection", False),
            presentation=self._presentations.get(attack_id),
            status_effect=status_type,
            status_chance=definition.get("status_chance", 0.0),
            status_duration=definition.get("status_duration"),
            lifesteal=definition.get("lifesteal", 0.0),
            description=definition.get("description", ""),
        )

    def create_item(self, item_id: str) -> Item:
        definition = self._lookup(self.database.items, "item", item_id)

        try:
            data = ItemData(
                heal=definition.get("heal"),
                damage=definition.get("damage"),
                stats=dict(definition.get("stats", {})),
            )
        except ValidationError as e:
            raise DefinitionError(f"Invalid payload for item '{item_id}': {e}") from e

        kind_name = definition.get("kind", "basic")
        try:
            kind = ItemKind[kind_name.upper()]
        except KeyError:
            raise DefinitionError(f"Unknown item kind '{kind_name}' for item '{item_id}'") from None

        return Item(
            name=definition["name"],
            data=data,
            kind=kind,
            is_consumable=definition.get("is_consumable", True),
            requires_target_selection=definition.get("requires_target_selection", False),
            presentation=self._presentations.get(item_id),
            status_duration=definition.get("status_duration"),
            description=definition.get("description", ""),
            sprite=definition.get("sprite", ""),
        )

    def create_combatant(self, combatant_id: str, is_player: bool = False) -> Combatant:
        """
        Build a combatant with its attacks and items.

        Item entries are ``{"id": ..., "quantity": n}``; each unit becomes a
        separate Item object so consuming one leaves the others available.
        """
        definition = self._lookup(self.database.combatants, "combatant", combatant_id)

        actions: list[Action] = [self.create_attack(attack_id) for attack_id in definition.get("attacks", [])]
        for entry in definition.get("items", []):
            for _ in range(entry.get("quantity", 1)):
                actions.append(self.create_item(entry["id"]))

        return Combatant(
            name=definition["name"],
            health=Health(current=definition["max_hp"], max_hp=definition["max_hp"]),
            stats=dict(definition["stats"]),
            actions=actions,
            sprite=definition.get("sprite", ""),
            is_player=is_player,
        )

    @staticmethod
    def _lookup(store: dict[str, dict[str, Any]], category: str, definition_id: str) -> dict[str, Any]:
        definition = store.get(definition_id)
        if definition is None:
            raise DefinitionError(f"Unknown {category} '{definition_id}'")
        return definition

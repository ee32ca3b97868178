"""
Definition Database.

Handles loading and validation of static battle data (attacks, items,
combatants).
"""

import json
import logging
from pathlib import Path
from typing import Any

import jsonschema


class Database:
    """
    Central storage for static battle definitions.

    Expected layout under ``data_path``::

        schemas/attack.schema.json
        schemas/item.schema.json
        schemas/combatant.schema.json
        database/attacks/*.json
        database/items/*.json
        database/combatants/*.json

    Each JSON file holds either a single definition object or a list of
    them; every definition needs an ``id``.
    """

    CATEGORIES: dict[str, tuple[str, str]] = {
        # attribute: (folder, schema file)
        "attacks": ("attacks", "attack.schema.json"),
        "items": ("items", "item.schema.json"),
        "combatants": ("combatants", "combatant.schema.json"),
    }

    def __init__(self, data_path: Path | str):
        self._data_path = Path(data_path)
        self._schemas: dict[str, Any] = {}

        # Data stores
        self.attacks: dict[str, dict[str, Any]] = {}
        self.items: dict[str, dict[str, Any]] = {}
        self.combatants: dict[str, dict[str, Any]] = {}

        self.logger = logging.getLogger(__name__)

    @property
    def data_path(self) -> Path:
        return self._data_path

    def load_all(self) -> None:
        """Load all data from disk."""
        self._load_schemas()

        for attribute, (folder, schema_name) in self.CATEGORIES.items():
            setattr(self, attribute, self._load_category(folder, schema_name))

        self.logger.info(
            f"Loaded {len(self.attacks)} attacks, "
            f"{len(self.items)} items, "
            f"{len(self.combatants)} combatants."
        )

    def _load_schemas(self) -> None:
        """Load JSON schemas."""
        schema_dir = self._data_path / "schemas"
        if not schema_dir.exists():
            self.logger.warning(f"Schema directory not found: {schema_dir}")
            return

        for schema_file in sorted(schema_dir.glob("*.schema.json")):
            try:
                with open(schema_file, 'r', encoding='utf-8') as f:
                    self._schemas[schema_file.name] = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                self.logger.error(f"Failed to load schema {schema_file}: {e}")

    def _load_category(self, folder: str, schema_name: str) -> dict[str, dict[str, Any]]:
        """Load all JSON files in a category folder."""
        category_dir = self._data_path / "database" / folder
        data_store: dict[str, dict[str, Any]] = {}

        if not category_dir.exists():
            self.logger.warning(f"Data directory not found: {category_dir}")
            return data_store

        schema = self._schemas.get(schema_name)
        if schema is None:
            self.logger.warning(f"No schema found for {folder} ({schema_name})")

        for file_path in sorted(category_dir.glob("*.json")):
            try:
                with open(file_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                self.logger.error(f"Failed to load {file_path}: {e}")
                continue

            entries = data if isinstance(data, list) else [data]
            for entry in entries:
                if schema:
                    try:
                        jsonschema.validate(instance=entry, schema=schema)
                    except jsonschema.ValidationError as e:
                        self.logger.error(f"Validation error in {file_path}: {e.message}")
                        continue
                if not isinstance(entry, dict) or 'id' not in entry:
                    self.logger.error(f"Definition without id in {file_path}")
                    continue
                if entry['id'] in data_store:
                    self.logger.warning(f"Duplicate {folder} id '{entry['id']}' in {file_path}")
                data_store[entry['id']] = entry

        return data_store

    def get_attack(self, attack_id: str) -> dict[str, Any] | None:
        return self.attacks.get(attack_id)

    def get_item(self, item_id: str) -> dict[str, Any] | None:
        return self.items.get(item_id)

    def get_combatant(self, combatant_id: str) -> dict[str, Any] | None:
        return self.combatants.get(combatant_id)

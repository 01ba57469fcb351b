import difflib
import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

from catchery import log_warning
from pydantic import BaseModel, ValidationError

from pitsim.character.combatant import CombatantBlueprint, is_ammo
from pitsim.character.definitions import (
    CreatureDefinition,
    EquipmentEntry,
    ItemDefinition,
    SkillDefinition,
    equipment_id,
    equipment_quantity,
)
from pitsim.core.error_handling import ContentLoadError, ContentNotFoundError
from pitsim.core.logging import log_debug
from pitsim.core.utils import Singleton

CREATURES_FILE = "creatures.json"
ITEMS_FILE = "items.json"
SKILLS_FILE = "skills.json"


class ContentRepository(metaclass=Singleton):
    """
    One-stop registry for the creatures, items and skills of the game.
    """

    creatures: dict[str, CreatureDefinition]
    items: dict[str, ItemDefinition]
    skills: dict[str, SkillDefinition]
    # Maps 'weapon_club' to 'club' and 'club' to 'weapon_club' style aliases.
    item_aliases: dict[str, str]

    def __init__(self, data_dir: Path | None = None) -> None:
        """
        Initialize the ContentRepository.

        Args:
            data_dir (Path | None):
                The directory containing data files to load.

        """
        if data_dir:
            self.reload(data_dir)
            self.loaded = True
        elif not hasattr(self, "loaded"):
            raise ValueError(
                "ContentRepository must be initialized with a valid data_dir on first use."
            )

    def reload(self, root: Path) -> None:
        """
        (Re)load all JSON assets from disk.

        Args:
            root (Path):
                The directory containing data files to load.
        """
        self.data_dir = root
        self.creatures = _load_json_file(
            root / CREATURES_FILE,
            _index_by_id(CreatureDefinition),
            "creatures",
        )
        self.items = _load_json_file(
            root / ITEMS_FILE,
            _index_by_id(ItemDefinition),
            "items",
        )
        self.skills = _load_json_file(
            root / SKILLS_FILE,
            _index_by_id(SkillDefinition),
            "skills",
        )
        self.item_aliases = _build_item_aliases(self.items)

    # ============================================================================
    # LOOKUPS
    # ============================================================================

    def _get_from_collection(self, collection_name: str, key: str) -> Any | None:
        """
        Generic helper to get an entry from any collection.

        Args:
            collection_name (str):
                Name of the collection attribute (e.g., 'creatures', 'items')
            key (str):
                Id of the entry to retrieve

        Returns:
            Any | None:
                The entry if found, None otherwise

        """
        collection = getattr(self, collection_name, None)
        if collection is None:
            log_warning(
                f"Collection '{collection_name}' not found in ContentRepository.",
                {"collection_name": collection_name, "key": key},
            )
            return None
        return collection.get(key)

    def _suggest(self, collection_name: str, key: str) -> list[str]:
        collection = getattr(self, collection_name, None) or {}
        return difflib.get_close_matches(key, list(collection), n=3)

    def get_creature(self, creature_id: str) -> CreatureDefinition:
        """Get a creature by id, raising ContentNotFoundError if unknown."""
        creature = self._get_from_collection("creatures", creature_id)
        if creature is None:
            raise ContentNotFoundError(
                "creature", creature_id, self._suggest("creatures", creature_id)
            )
        return creature

    def get_item(self, item_id: str) -> ItemDefinition:
        """Get an item by id or prefixed alias, raising ContentNotFoundError if unknown."""
        item = self._get_from_collection("items", item_id)
        if item is None and item_id in self.item_aliases:
            item = self._get_from_collection("items", self.item_aliases[item_id])
        if item is None:
            raise ContentNotFoundError("item", item_id, self._suggest("items", item_id))
        return item

    def get_skill(self, skill_id: str) -> SkillDefinition:
        """Get a skill by id, raising ContentNotFoundError if unknown."""
        skill = self._get_from_collection("skills", skill_id)
        if skill is None:
            raise ContentNotFoundError("skill", skill_id, self._suggest("skills", skill_id))
        return skill

    def find(self, content_id: str) -> BaseModel | None:
        """Look an id up among creatures, then items, then skills."""
        for getter in (self.get_creature, self.get_item, self.get_skill):
            try:
                return getter(content_id)
            except ContentNotFoundError:
                continue
        return None

    # ============================================================================
    # BLUEPRINTS
    # ============================================================================

    def build_blueprint(
        self,
        creature: CreatureDefinition | str,
        equipment: list[EquipmentEntry] | None = None,
    ) -> CombatantBlueprint:
        """
        Resolves the equipment and skills of a creature.

        Unknown equipment and skills are skipped with a warning.

        Args:
            creature (CreatureDefinition | str):
                The creature, or its id.
            equipment (list[EquipmentEntry] | None):
                Replaces the creature's own equipment when given.

        Returns:
            CombatantBlueprint:
                The resolved blueprint.

        """
        if isinstance(creature, str):
            creature = self.get_creature(creature)
        entries = creature.equipment if equipment is None else equipment

        items: list[ItemDefinition] = []
        ammo: dict[str, int] = {}
        for entry in entries:
            try:
                item = self.get_item(equipment_id(entry))
            except ContentNotFoundError as e:
                log_warning(
                    f"Equipment item not found: {equipment_id(entry)}",
                    {"creature": creature.id, "suggestions": e.suggestions},
                )
                continue
            items.append(item)
            if is_ammo(item):
                ammo[item.id] = ammo.get(item.id, 0) + equipment_quantity(entry)

        skills: list[SkillDefinition] = []
        for skill_id in creature.skills:
            try:
                skills.append(self.get_skill(skill_id))
            except ContentNotFoundError:
                log_warning(
                    f"Skill not found: {skill_id}",
                    {"creature": creature.id, "skill": skill_id},
                )

        return CombatantBlueprint(creature=creature, items=items, ammo=ammo, skills=skills)


def _index_by_id(model: type[BaseModel]) -> Callable[[list[dict]], dict[str, Any]]:
    """Builds a loader that validates every entry and indexes it by id."""

    def loader(data: list[dict]) -> dict[str, Any]:
        entries: dict[str, Any] = {}
        for raw in data:
            try:
                entry = model.model_validate(raw)
            except (ValidationError, ValueError) as e:
                raise ValueError(f"Invalid {model.__name__} {raw.get('id', '?')}: {e}") from e
            if entry.id in entries:
                log_warning(
                    f"Duplicate {model.__name__} id: {entry.id}",
                    {"id": entry.id},
                )
            entries[entry.id] = entry
        return entries

    loader.__name__ = f"load_{model.__name__}"
    return loader


def _build_item_aliases(items: dict[str, ItemDefinition]) -> dict[str, str]:
    aliases: dict[str, str] = {}
    for item_id, item in items.items():
        prefix = item.type.alias_prefix
        if item_id.startswith(prefix):
            aliases.setdefault(item_id[len(prefix):], item_id)
        else:
            aliases.setdefault(prefix + item_id, item_id)
    return aliases


def _load_json_file(
    filepath: Path,
    loader_func: Callable[[list[dict]], dict[str, Any]],
    description: str,
) -> dict[str, Any]:
    """Helper to load and validate JSON files"""
    try:
        log_debug(
            f"Loading {description} using {loader_func.__name__}",
            {"file": filepath},
        )
        if not filepath.exists():
            raise FileNotFoundError(f"File not found: {filepath}")
        if not filepath.is_file():
            raise ValueError(f"Not a file: {filepath}")
        with open(filepath, encoding="utf-8") as f:
            data = json.load(f)
        if not data:
            raise ValueError(f"Empty data list in {filepath}")
        if not isinstance(data, list):
            raise ValueError(f"Expected list in {filepath}, got {type(data).__name__}")
        return loader_func(data)
    except (json.JSONDecodeError, FileNotFoundError, ValueError) as e:
        raise ContentLoadError(f"File {filepath} raised an error: {e}", {"file": str(filepath)}) from e

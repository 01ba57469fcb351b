"""
Inline creature definitions given as JSON on the command line.

Two forms are accepted:

* layered on a known creature: ``{"base": "goblin", "strength": 4}``
* built from scratch: ``{"name": "brute", "health": 20, "attacks": [...]}``

Overrides of list fields (equipment, attacks, damage-type sets) replace the
base value rather than merging with it.
"""

import json
from typing import Any

from pydantic import ValidationError

from pitsim.core.constants import DamageType
from pitsim.core.error_handling import ContentNotFoundError, InlineCreatureError

from .definitions import CreatureDefinition

KNOWN_FIELDS = {
    "base",
    "name",
    "strength",
    "agility",
    "endurance",
    "will",
    "health",
    "speed",
    "equipment",
    "attacks",
    "skills",
    "resistances",
    "vulnerabilities",
    "immunities",
    "ai",
}

# Substring of a mistyped key -> the field it most likely meant.
_TYPO_HINTS = [
    ("str", "strength"),
    ("agi", "agility"),
    ("end", "endurance"),
    ("hp", "health"),
    ("heal", "health"),
    ("spd", "speed"),
    ("resist", "resistances"),
    ("vuln", "vulnerabilities"),
    ("immun", "immunities"),
    ("equip", "equipment"),
    ("gear", "equipment"),
    ("atk", "attacks"),
    ("attack", "attacks"),
]

_DAMAGE_TYPE_VALUES = {d.value for d in DamageType}


def looks_inline(text: str) -> bool:
    return text.lstrip().startswith(("{", "["))


def check_unknown_fields(data: dict[str, Any]) -> list[str]:
    """Returns a warning for every key that is not a known field."""
    warnings = []
    for key in data:
        if key in KNOWN_FIELDS:
            continue
        hint = next((field for part, field in _TYPO_HINTS if part in key.lower()), None)
        if hint:
            warnings.append(f"Unknown field '{key}' (did you mean '{hint}'?)")
        else:
            warnings.append(f"Unknown field '{key}' in inline creature")
    return warnings


def _validate_damage_types(field: str, values: Any) -> None:
    if not isinstance(values, list):
        raise InlineCreatureError(f"'{field}' must be a list of damage types")
    invalid = [str(v) for v in values if v not in _DAMAGE_TYPE_VALUES]
    if invalid:
        raise InlineCreatureError(
            f"Invalid damage type(s) in {field}: {', '.join(invalid)}"
        )


def parse_inline_creature(text: str, repository) -> tuple[CreatureDefinition, list[str]]:
    """
    Builds a creature definition from an inline JSON object.

    Args:
        text (str): The JSON text.
        repository (ContentRepository): Used to resolve the 'base' creature.

    Returns:
        tuple[CreatureDefinition, list[str]]: The creature and any warnings.

    Raises:
        InlineCreatureError: If the JSON or one of its fields is invalid.

    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise InlineCreatureError(f"Invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise InlineCreatureError("Inline creature must be a JSON object")
    return build_inline_creature(data, repository)


def build_inline_creature(data: dict[str, Any], repository) -> tuple[CreatureDefinition, list[str]]:
    """Same as parse_inline_creature, for an already decoded object."""
    warnings = check_unknown_fields(data)

    base: dict[str, Any]
    if data.get("base"):
        try:
            base = repository.get_creature(data["base"]).model_dump()
        except ContentNotFoundError as e:
            raise InlineCreatureError(f"Base creature '{data['base']}' not found", e.context) from e
    elif data.get("name"):
        base = {"type": "inline"}
    else:
        raise InlineCreatureError("Inline creature requires 'name' when no 'base' is specified")

    for field in ("resistances", "vulnerabilities", "immunities"):
        if field in data:
            _validate_damage_types(field, data[field])

    overrides = {k: v for k, v in data.items() if k in KNOWN_FIELDS and k != "base"}
    merged = {**base, **overrides}
    if "name" in data:
        merged["id"] = f"inline_{data['name']}"
    else:
        merged.setdefault("id", f"inline_{merged.get('name', 'creature')}")

    try:
        creature = CreatureDefinition.model_validate(merged)
    except (ValidationError, ValueError) as e:
        raise InlineCreatureError(f"Invalid inline creature: {e}") from e
    return creature, warnings


def parse_inline_creatures(text: str, repository) -> list[tuple[CreatureDefinition, list[str]]]:
    """Parses a JSON array of inline creatures."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise InlineCreatureError(f"Invalid JSON array: {e}") from e
    if not isinstance(data, list):
        raise InlineCreatureError("Expected a JSON array of inline creatures")

    results = []
    for index, entry in enumerate(data):
        if not isinstance(entry, dict):
            raise InlineCreatureError(f"Invalid inline creature at index {index}: not an object")
        try:
            results.append(build_inline_creature(entry, repository))
        except InlineCreatureError as e:
            raise InlineCreatureError(f"Invalid inline creature at index {index}: {e.message}") from e
    return results

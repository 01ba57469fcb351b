"""
Tests for inline creature definitions.
"""

import pytest

from pitsim.character.inline import (
    check_unknown_fields,
    looks_inline,
    parse_inline_creature,
    parse_inline_creatures,
)
from pitsim.core.constants import DamageType
from pitsim.core.error_handling import InlineCreatureError


def test_looks_inline():
    """Test that JSON objects and arrays are told apart from ids."""
    assert looks_inline('{"name": "x"}')
    assert looks_inline(' [{"name": "x"}]')
    assert not looks_inline("goblin")


def test_layered_on_a_base(repository):
    """Test that overrides replace the base values."""
    creature, warnings = parse_inline_creature('{"base": "goblin", "strength": 4}', repository)
    assert creature.strength == 4
    assert creature.name == "Goblin"
    assert creature.equipment == ["weapon_club"]
    assert warnings == []


def test_built_from_scratch(repository):
    """Test a creature with no base."""
    text = (
        '{"name": "brute", "health": 20, '
        '"attacks": [{"name": "Slam", "dice": "1d10"}], "resistances": ["Fire"]}'
    )
    creature, _ = parse_inline_creature(text, repository)
    assert creature.id == "inline_brute"
    assert creature.health == 20
    assert creature.attacks[0].dice == "1d10"
    assert creature.resistances == [DamageType.FIRE]


def test_list_overrides_replace(repository):
    """Test that an equipment override is not merged with the base list."""
    creature, _ = parse_inline_creature('{"base": "orc", "equipment": ["dagger"]}', repository)
    assert creature.equipment == ["dagger"]


def test_unknown_fields_warn_with_hints():
    """Test typo hints for unknown keys."""
    warnings = check_unknown_fields({"name": "x", "hp": 5, "colour": "red"})
    assert warnings == [
        "Unknown field 'hp' (did you mean 'health'?)",
        "Unknown field 'colour' in inline creature",
    ]


@pytest.mark.parametrize(
    "text",
    [
        "{not json",
        '["goblin"]',
        '{"strength": 3}',
        '{"base": "dragon"}',
        '{"name": "x", "resistances": ["Acid"]}',
        '{"name": "x", "health": -1}',
    ],
)
def test_invalid_inline_creatures(repository, text):
    """Test that broken definitions raise InlineCreatureError."""
    with pytest.raises(InlineCreatureError):
        parse_inline_creature(text, repository)


def test_array_of_creatures(repository):
    """Test a team given as a JSON array."""
    parsed = parse_inline_creatures('[{"base": "rat"}, {"name": "blob", "speed": 5}]', repository)
    assert [creature.id for creature, _ in parsed] == ["rat", "inline_blob"]


def test_array_error_names_the_index(repository):
    """Test that errors inside an array point at the entry."""
    with pytest.raises(InlineCreatureError, match="index 1"):
        parse_inline_creatures('[{"base": "rat"}, {"speed": 5}]', repository)

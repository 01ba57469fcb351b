"""
Tests for the content repository and the bundled data files.
"""

import json

import pytest

from pitsim.character.definitions import CreatureDefinition, ItemDefinition, SkillDefinition
from pitsim.core.constants import ItemType
from pitsim.core.content import ContentRepository
from pitsim.core.error_handling import ContentLoadError, ContentNotFoundError


def test_bundled_data_loads(repository):
    """Test that every bundled file is parsed."""
    assert "goblin" in repository.creatures
    assert "club" in repository.items
    assert "magic_missile" in repository.skills


def test_repository_is_a_singleton(repository):
    """Test that later calls without a directory return the same instance."""
    assert ContentRepository() is repository


def test_item_aliases(repository):
    """Test that 'weapon_club' and 'club' name the same item."""
    assert repository.get_item("weapon_club") is repository.get_item("club")
    assert repository.get_item("armor_leather_armor").type == ItemType.ARMOR


def test_unknown_creature_suggests_a_close_id(repository):
    """Test that a typo raises with a suggestion."""
    with pytest.raises(ContentNotFoundError) as info:
        repository.get_creature("gobln")
    assert "goblin" in info.value.suggestions
    assert "did you mean" in info.value.message


def test_find_dispatches_on_kind(repository):
    """Test lookups across creatures, items and skills."""
    assert isinstance(repository.find("goblin"), CreatureDefinition)
    assert isinstance(repository.find("shortbow"), ItemDefinition)
    assert isinstance(repository.find("magic_missile"), SkillDefinition)
    assert repository.find("nope") is None


def test_blueprint_resolves_equipment_and_ammo(repository):
    """Test that ammunition stacks become counts."""
    blueprint = repository.build_blueprint("goblin_archer")
    assert [item.id for item in blueprint.items] == ["shortbow", "arrow"]
    assert blueprint.ammo == {"arrow": 20}


def test_blueprint_equipment_override(repository):
    """Test that explicit equipment replaces the creature's own."""
    blueprint = repository.build_blueprint("goblin", ["spear", "leather_armor"])
    assert [item.id for item in blueprint.items] == ["spear", "leather_armor"]
    assert blueprint.label == "goblin+spear+leather_armor"


def test_blueprint_skips_unknown_equipment(repository):
    """Test that a missing item is dropped instead of failing."""
    blueprint = repository.build_blueprint("goblin", ["club", "excalibur"])
    assert [item.id for item in blueprint.items] == ["club"]


def test_blueprint_resolves_skills(repository):
    """Test that skill ids become definitions."""
    blueprint = repository.build_blueprint("goblin_shaman")
    assert [skill.id for skill in blueprint.skills] == ["magic_missile", "drain_touch"]


def test_missing_data_dir_raises(tmp_path):
    """Test that a directory without data files cannot be loaded."""
    ContentRepository.reset()
    try:
        with pytest.raises(ContentLoadError):
            ContentRepository(tmp_path)
    finally:
        ContentRepository.reset()


def test_invalid_entry_raises(tmp_path):
    """Test that a creature with invalid stats stops the load."""
    (tmp_path / "creatures.json").write_text(
        json.dumps([{"id": "bad", "name": "Bad", "health": 0}]), encoding="utf-8"
    )
    (tmp_path / "items.json").write_text(
        json.dumps([{"id": "club", "name": "Club", "type": "weapon"}]), encoding="utf-8"
    )
    (tmp_path / "skills.json").write_text(
        json.dumps([{"id": "zap", "name": "Zap"}]), encoding="utf-8"
    )
    ContentRepository.reset()
    try:
        with pytest.raises(ContentLoadError):
            ContentRepository(tmp_path)
    finally:
        ContentRepository.reset()

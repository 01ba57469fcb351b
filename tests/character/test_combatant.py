"""
Tests for combatants and their derived stats.
"""

import pytest

from pitsim.character.combatant import calculate_health_bonus, calculate_max_health, calculate_max_willpower
from pitsim.character.definitions import AttackDefinition, CreatureDefinition, ItemDefinition
from pitsim.core.constants import AttackType, DamageModifier, DamageType, ItemType, Team


@pytest.fixture
def sword():
    return ItemDefinition(
        id="sword",
        name="Sword",
        type=ItemType.WEAPON,
        attack=AttackDefinition(dice="1d8", damage_type=DamageType.SLASHING),
        strength=1,
    )


@pytest.fixture
def bow():
    return ItemDefinition(
        id="bow",
        name="Bow",
        type=ItemType.WEAPON,
        attack=AttackDefinition(dice="1d6", type=AttackType.RANGED, ammo_type="arrow"),
    )


def test_health_bonus_formula():
    """Test the quadratic endurance bonus."""
    assert calculate_health_bonus(0) == 0
    assert calculate_health_bonus(-2) == 0
    assert calculate_health_bonus(1) == 5
    assert calculate_health_bonus(3) == 18
    assert calculate_max_health(10, 3) == 28
    assert calculate_max_health(10, -3) == 10


def test_willpower_formula():
    """Test that every point of will adds five willpower."""
    assert calculate_max_willpower(0) == 10
    assert calculate_max_willpower(3) == 25
    assert calculate_max_willpower(-1) == 10


def test_invalid_creature_stats():
    """Test that health and speed must be positive."""
    with pytest.raises(ValueError):
        CreatureDefinition(id="x", name="X", health=0)
    with pytest.raises(ValueError):
        CreatureDefinition(id="x", name="X", speed=0)


def test_weapon_name_defaults_to_item(sword):
    """Test that an unnamed weapon attack takes the item name."""
    assert sword.attack.name == "Sword"
    assert sword.attack.reach == 1


def test_ranged_attack_default_range(bow):
    """Test that ranged attacks default to six tiles."""
    assert bow.attack.reach == 6


def test_equipment_bonuses_and_weapon_attacks(make_combatant, sword):
    """Test that items add to stats and weapon attacks replace natural ones."""
    claw = AttackDefinition(name="Claw", dice="1d3")
    combatant = make_combatant(strength=2, items=[sword], attacks=[claw])
    assert combatant.strength == 3
    assert [a.name for a in combatant.attacks] == ["Sword"]
    assert combatant.melee_attack.name == "Sword"


def test_unarmed_combatant_punches(make_combatant):
    """Test the fallback melee attack."""
    combatant = make_combatant()
    assert combatant.melee_attack.name == "punch"
    assert combatant.ranged_attack is None


def test_ranged_attack_needs_ammo(make_combatant, bow):
    """Test that a bow without arrows is not a ranged attack."""
    armed = make_combatant(items=[bow], ammo={"arrow": 1})
    empty = make_combatant(items=[bow])
    assert armed.ranged_attack is not None
    assert empty.ranged_attack is None
    armed.consume_ammo(bow.attack)
    assert armed.ammo["arrow"] == 0
    assert armed.ranged_attack is None


def test_health_stays_in_bounds(make_combatant):
    """Test that damage and healing clamp to [0, max]."""
    combatant = make_combatant(health=10)
    assert combatant.take_damage(4) == 4
    assert combatant.heal(10) == 4
    assert combatant.take_damage(25) == 10
    assert combatant.current_health == 0
    assert not combatant.is_alive
    assert combatant.heal(5) == 0


def test_damage_modifier_precedence(make_combatant):
    """Test that immunity beats vulnerability, which beats resistance."""
    combatant = make_combatant(
        immunities=["Fire"],
        vulnerabilities=["Fire", "Cold"],
        resistances=["Cold", "Piercing"],
    )
    assert combatant.damage_modifier_for(DamageType.FIRE) == DamageModifier.IMMUNE
    assert combatant.damage_modifier_for(DamageType.COLD) == DamageModifier.VULNERABLE
    assert combatant.damage_modifier_for(DamageType.PIERCING) == DamageModifier.RESISTANT
    assert combatant.damage_modifier_for(DamageType.SLASHING) == DamageModifier.NONE


def test_chebyshev_distance_and_teams(make_combatant):
    """Test distances and the enemy relation."""
    a = make_combatant(team=Team.A, position=(0, 0))
    b = make_combatant(team=Team.B, position=(3, -2))
    assert a.distance_to(b) == 3
    assert a.is_enemy_of(b)
    assert not a.is_enemy_of(a)
    assert a.uid != b.uid

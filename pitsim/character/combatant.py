"""
Runtime combatants.

A Combatant is built from a creature definition plus its resolved equipment
and skills at the start of a trial and thrown away when the trial ends.
"""

from __future__ import annotations

import itertools

from pydantic import BaseModel, Field

from pitsim.core.constants import DamageModifier, DamageType, ItemType, Team
from pitsim.core.utils import Cell, chebyshev_distance, make_bar

from .definitions import (
    DEFAULT_PUNCH,
    AttackDefinition,
    CreatureDefinition,
    ItemDefinition,
    SkillDefinition,
)

_combatant_ids = itertools.count(1)


# ============================================================================
# DERIVED STAT FORMULAS
# ============================================================================


def calculate_health_bonus(endurance: int) -> int:
    """Quadratic END bonus: (END^2 + 9*END) / 2, zero for END <= 0."""
    if endurance <= 0:
        return 0
    return (endurance * endurance + 9 * endurance) // 2


def calculate_max_health(base_health: int, endurance: int) -> int:
    """Max health never drops below the base health."""
    return max(base_health, base_health + calculate_health_bonus(endurance))


def calculate_max_willpower(will: int) -> int:
    return 10 + max(0, will * 5)


# ============================================================================
# BLUEPRINT
# ============================================================================


class CombatantBlueprint(BaseModel):
    """
    A creature together with its resolved equipment and skills.

    Blueprints are built once per scenario from the content repository and
    spawn a fresh combatant for every trial. They carry no repository
    reference, so they can be shipped to worker processes.
    """

    creature: CreatureDefinition = Field(description="The creature definition")
    items: list[ItemDefinition] = Field(
        default_factory=list,
        description="Resolved equipment",
    )
    ammo: dict[str, int] = Field(
        default_factory=dict,
        description="Ammunition count per ammo item id",
    )
    skills: list[SkillDefinition] = Field(
        default_factory=list,
        description="Resolved skills",
    )

    @property
    def name(self) -> str:
        return self.creature.name

    @property
    def label(self) -> str:
        """Creature id followed by the equipment ids, used in scenario names."""
        if not self.items:
            return self.creature.id
        return f"{self.creature.id}+{'+'.join(item.id for item in self.items)}"

    def spawn(self, team: Team, position: Cell = (0, 0)) -> Combatant:
        """
        Builds a fresh combatant at full health.

        Args:
            team (Team): The side the combatant fights for.
            position (Cell): Its starting cell.

        Returns:
            Combatant: The new combatant.

        """
        return Combatant(self, team, position)


# ============================================================================
# COMBATANT
# ============================================================================


class Combatant:
    """
    A creature taking part in an encounter.

    Attributes:
        uid (str):
            Unique id made of the creature id and a counter.
        name (str):
            Display name.
        team (Team):
            The side it fights for.
        strength, agility, endurance, will (int):
            Effective attributes, creature stats plus equipment bonuses.
        armor (int):
            Flat damage reduction from equipment.
        evasion (int):
            Defense roll bonus from equipment.
        speed (int):
            Effective speed, at least 1.
        regen_bonus (int):
            Extra regeneration points per action.
        current_health (int):
            Always in [0, max_health].
        position (Cell):
            Integer grid position.
        attacks (list[AttackDefinition]):
            Weapon attacks if any weapon is equipped, natural attacks otherwise.
        ammo (dict[str, int]):
            Remaining ammunition per ammo id.

    """

    def __init__(self, blueprint: CombatantBlueprint, team: Team, position: Cell = (0, 0)) -> None:
        creature = blueprint.creature
        items = blueprint.items

        self.uid: str = f"{creature.id}_{next(_combatant_ids)}"
        self.creature_id: str = creature.id
        self.name: str = creature.name
        self.team: Team = team

        self.strength: int = creature.strength + sum(i.strength for i in items)
        self.agility: int = creature.agility + sum(i.agility for i in items)
        self.endurance: int = creature.endurance + sum(i.endurance for i in items)
        self.will: int = creature.will + sum(i.will for i in items)
        self.armor: int = sum(i.armor for i in items)
        self.evasion: int = sum(i.evasion for i in items)
        self.speed: int = max(1, creature.speed + sum(i.speed for i in items))
        self.regen_bonus: int = sum(i.regen for i in items)

        self.max_health: int = calculate_max_health(creature.health, self.endurance)
        self.current_health: int = self.max_health
        self.max_willpower: int = calculate_max_willpower(self.will)
        self.current_willpower: int = self.max_willpower

        weapon_attacks = [i.attack for i in items if i.attack is not None]
        self.attacks: list[AttackDefinition] = weapon_attacks or list(creature.attacks)
        self.skills: list[SkillDefinition] = list(blueprint.skills)

        self.immunities: set[DamageType] = set(creature.immunities)
        self.resistances: set[DamageType] = set(creature.resistances)
        self.vulnerabilities: set[DamageType] = set(creature.vulnerabilities)

        self.ammo: dict[str, int] = dict(blueprint.ammo)
        self.position: Cell = position
        self.ai_tags: list[str] = list(creature.ai)
        self.vision_range: int = creature.vision_range

        self.regen_points: int = 0
        self.wp_regen_points: int = 0

    # ============================================================================
    # STATE
    # ============================================================================

    @property
    def is_alive(self) -> bool:
        return self.current_health > 0

    @property
    def health_fraction(self) -> float:
        return self.current_health / self.max_health if self.max_health > 0 else 0.0

    @property
    def colored_name(self) -> str:
        return self.team.colorize(self.name)

    def health_bar(self, length: int = 10) -> str:
        color = "green" if self.health_fraction > 0.5 else "yellow" if self.health_fraction > 0.25 else "red"
        return make_bar(self.current_health, self.max_health, length, color)

    def distance_to(self, other: Combatant | Cell) -> int:
        cell = other.position if isinstance(other, Combatant) else other
        return chebyshev_distance(self.position, cell)

    def is_enemy_of(self, other: Combatant) -> bool:
        return self.team != other.team

    def take_damage(self, amount: int) -> int:
        """
        Removes health, never dropping below zero.

        Args:
            amount (int): The damage to apply.

        Returns:
            int: The damage actually applied.

        """
        applied = max(0, min(amount, self.current_health))
        self.current_health -= applied
        return applied

    def heal(self, amount: int) -> int:
        """Restores health up to the maximum, returns the amount healed."""
        if not self.is_alive:
            return 0
        healed = max(0, min(amount, self.max_health - self.current_health))
        self.current_health += healed
        return healed

    def damage_modifier_for(self, damage_type: DamageType) -> DamageModifier:
        """Immunity wins over vulnerability, which wins over resistance."""
        if damage_type in self.immunities:
            return DamageModifier.IMMUNE
        if damage_type in self.vulnerabilities:
            return DamageModifier.VULNERABLE
        if damage_type in self.resistances:
            return DamageModifier.RESISTANT
        return DamageModifier.NONE

    # ============================================================================
    # ATTACK CAPABILITIES
    # ============================================================================

    def has_ammo_for(self, attack: AttackDefinition) -> bool:
        if not attack.ammo_type:
            return True
        return self.ammo.get(attack.ammo_type, 0) > 0

    def consume_ammo(self, attack: AttackDefinition) -> None:
        if attack.ammo_type and self.ammo.get(attack.ammo_type, 0) > 0:
            self.ammo[attack.ammo_type] -= 1

    @property
    def melee_attack(self) -> AttackDefinition:
        """First melee attack, or a punch."""
        return next((a for a in self.attacks if a.is_melee), DEFAULT_PUNCH)

    @property
    def ranged_attack(self) -> AttackDefinition | None:
        """First ranged attack that still has ammunition."""
        return next(
            (a for a in self.attacks if a.is_ranged and self.has_ammo_for(a)),
            None,
        )

    def can_attack(self, target: Combatant, attack: AttackDefinition) -> bool:
        if self.distance_to(target) > attack.reach:
            return False
        return attack.is_melee or self.has_ammo_for(attack)

    # ============================================================================
    # SKILL CAPABILITIES
    # ============================================================================

    def can_use_skill(self, skill: SkillDefinition) -> bool:
        return skill.category == "active" and self.current_willpower >= skill.willpower_cost

    def can_use_skill_on(self, target: Combatant, skill: SkillDefinition) -> bool:
        return self.can_use_skill(skill) and self.distance_to(target) <= skill.range

    def consume_willpower(self, skill: SkillDefinition) -> None:
        self.current_willpower = max(0, self.current_willpower - skill.willpower_cost)

    @property
    def usable_ranged_skills(self) -> list[SkillDefinition]:
        return [s for s in self.skills if s.is_ranged and self.can_use_skill(s)]

    @property
    def usable_melee_skills(self) -> list[SkillDefinition]:
        return [s for s in self.skills if s.is_melee and self.can_use_skill(s)]

    def __repr__(self) -> str:
        return (
            f"Combatant({self.uid}, team={self.team.value}, "
            f"hp={self.current_health}/{self.max_health}, pos={self.position})"
        )


def is_ammo(item: ItemDefinition) -> bool:
    return item.type == ItemType.AMMO

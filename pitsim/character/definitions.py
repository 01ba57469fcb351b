"""
Static definitions loaded from the data files.

Creatures, items, attacks and skills are immutable descriptions; combatants
are built from them at the start of every trial.
"""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from pitsim.core.constants import AttackType, DamageType, ItemType, StatType
from pitsim.core.dice_parser import parse_dice

# Range given to ranged attacks that do not state one.
DEFAULT_RANGED_RANGE = 6


class AttackDefinition(BaseModel):
    """A natural attack or the attack granted by a weapon."""

    name: str = Field(
        default="",
        description="Name of the attack, weapons default to the item name",
    )
    type: AttackType = Field(
        default=AttackType.MELEE,
        description="Melee attacks add STR to hit and damage, ranged add AGI to hit",
    )
    dice: str = Field(
        description="Damage dice in NdS+M notation",
    )
    damage_type: DamageType = Field(
        default=DamageType.BLUDGEONING,
        description="Type of the damage dealt",
    )
    range: int | None = Field(
        default=None,
        description="Reach in Chebyshev tiles, 1 for melee and 6 for ranged if omitted",
    )
    ammo_type: str | None = Field(
        default=None,
        description="Id of the ammunition consumed by the attack",
    )
    delay: float = Field(
        default=1.0,
        description="Multiplier applied to the standard action cost",
    )

    def model_post_init(self, _) -> None:
        """Validates fields after model initialization."""
        parse_dice(self.dice)
        if self.range is None:
            self.range = DEFAULT_RANGED_RANGE if self.is_ranged else 1
        if self.range < 1:
            raise ValueError(f"Attack '{self.name}' must have a range of at least 1")
        if self.delay <= 0:
            raise ValueError(f"Attack '{self.name}' must have a positive delay")

    @property
    def is_melee(self) -> bool:
        return self.type == AttackType.MELEE

    @property
    def is_ranged(self) -> bool:
        return self.type == AttackType.RANGED

    @property
    def reach(self) -> int:
        return self.range or 1


# Used by creatures that have no melee attack of their own.
DEFAULT_PUNCH = AttackDefinition(
    name="punch",
    type=AttackType.MELEE,
    dice="1d2",
    damage_type=DamageType.BLUDGEONING,
    range=1,
)


class EffectStep(BaseModel):
    """A single step of a skill effect."""

    type: Literal["damage", "attack_roll", "heal"] = Field(
        description="What the step does",
    )
    dice: str | None = Field(
        default=None,
        description="Dice rolled by damage and heal steps",
    )
    damage_type: DamageType | None = Field(
        default=None,
        description="Damage type of a damage step",
    )
    scaling_stat: StatType | None = Field(
        default=None,
        description="Stat added to the rolled amount",
    )
    scaling_multiplier: float = Field(
        default=1.0,
        description="Multiplier applied to the scaling stat before flooring",
    )
    attack_stat: StatType | None = Field(
        default=None,
        description="Stat added to the 2d6 roll of an attack_roll step",
    )
    stop_on_miss: bool = Field(
        default=True,
        description="Whether a failed attack_roll step ends the skill",
    )

    @field_validator("scaling_stat", "attack_stat", mode="before")
    @classmethod
    def _parse_stat(cls, value):
        if isinstance(value, str):
            stat = StatType.parse(value)
            if stat is None:
                raise ValueError(f"Unknown stat '{value}'")
            return stat
        return value

    def model_post_init(self, _) -> None:
        """Validates fields after model initialization."""
        if self.dice is not None:
            parse_dice(self.dice)


class SkillEffect(BaseModel):
    steps: list[EffectStep] = Field(default_factory=list)


class SkillDefinition(BaseModel):
    """An active, passive or reactive willpower skill."""

    id: str = Field(description="Unique identifier of the skill")
    name: str = Field(description="Display name of the skill")
    description: str = Field(default="", description="Flavour text")
    category: Literal["active", "passive", "reactive"] = Field(
        default="active",
        description="Only active skills are chosen by the AI",
    )
    targeting: str = Field(
        default="enemy",
        description="Who the skill can target: enemy, creature, self, ally...",
    )
    range: int = Field(default=1, description="Reach in Chebyshev tiles")
    willpower_cost: int = Field(default=0, description="Willpower spent on use")
    effects: list[SkillEffect] = Field(default_factory=list)

    @property
    def is_offensive(self) -> bool:
        return self.targeting.lower() in ("enemy", "creature")

    @property
    def is_ranged(self) -> bool:
        return self.is_offensive and self.range > 1

    @property
    def is_melee(self) -> bool:
        return self.is_offensive and self.range <= 1

    @property
    def steps(self) -> list[EffectStep]:
        return [step for effect in self.effects for step in effect.steps]


class EquipmentStack(BaseModel):
    """An equipment entry that carries a quantity (ammunition)."""

    id: str
    quantity: int = 1


EquipmentEntry = str | EquipmentStack


def equipment_id(entry: EquipmentEntry) -> str:
    return entry if isinstance(entry, str) else entry.id


def equipment_quantity(entry: EquipmentEntry) -> int:
    return 1 if isinstance(entry, str) else entry.quantity


class ItemDefinition(BaseModel):
    """A piece of equipment."""

    id: str = Field(description="Unique identifier of the item")
    name: str = Field(description="Display name of the item")
    description: str = Field(default="", description="Flavour text")
    type: ItemType = Field(description="Item category")
    attack: AttackDefinition | None = Field(
        default=None,
        description="Attack granted by a weapon",
    )
    armor: int = Field(default=0, description="Flat damage reduction")
    evasion: int = Field(default=0, description="Bonus to defense rolls")
    strength: int = Field(default=0)
    agility: int = Field(default=0)
    endurance: int = Field(default=0)
    will: int = Field(default=0)
    regen: int = Field(default=0, description="Bonus regeneration points per action")
    speed: int = Field(default=0, description="Bonus to speed")

    def model_post_init(self, _) -> None:
        """Validates fields after model initialization."""
        if self.attack is not None and not self.attack.name:
            self.attack.name = self.name


class CreatureDefinition(BaseModel):
    """A creature as described in the data files."""

    id: str = Field(description="Unique identifier of the creature")
    name: str = Field(description="Display name of the creature")
    description: str = Field(default="")
    type: str = Field(default="creature", description="Category such as goblinoid or undead")
    threat: int = Field(default=1, description="Rough power level")
    strength: int = Field(default=0)
    agility: int = Field(default=0)
    endurance: int = Field(default=0)
    will: int = Field(default=0)
    health: int = Field(default=10, description="Base health before the END bonus")
    speed: int = Field(default=10, description="Speed, 10 is average")
    equipment: list[EquipmentEntry] = Field(default_factory=list)
    attacks: list[AttackDefinition] = Field(
        default_factory=list,
        description="Natural attacks, replaced by weapon attacks when armed",
    )
    skills: list[str] = Field(default_factory=list, description="Skill ids")
    immunities: list[DamageType] = Field(default_factory=list)
    resistances: list[DamageType] = Field(default_factory=list)
    vulnerabilities: list[DamageType] = Field(default_factory=list)
    ai: list[str] = Field(
        default_factory=list,
        description="Behaviour tags, e.g. 'cowardly' adds a flee goal",
    )
    vision_range: int = Field(default=8, description="Sight radius in tiles")

    def model_post_init(self, _) -> None:
        """Validates fields after model initialization."""
        if self.health <= 0:
            raise ValueError(f"Invalid health value: {self.health} (must be > 0)")
        if self.speed <= 0:
            raise ValueError(f"Invalid speed value: {self.speed} (must be > 0)")

"""
Attack resolution.

An attack goes through three phases:

1. opposed rolls, 2d6 + attack modifier against 2d6 + defense modifier,
   where ties favour the attacker;
2. raw damage, the weapon dice plus the damage bonus minus the defender's
   armor, never below zero;
3. the defender's damage-type modifier (immune, vulnerable, resistant).

A hit whose final damage is zero is blocked, which is not the same as a miss.
"""

import random

from pydantic import BaseModel, ConfigDict, Field

from pitsim.character.combatant import Combatant
from pitsim.character.definitions import AttackDefinition
from pitsim.core.constants import DamageModifier, DamageType
from pitsim.core.dice_parser import roll_2d6, roll_and_describe

from .events import AttackEvent, DeathEvent, EventDispatcher


class AttackResult(BaseModel):
    """Everything that happened during one attack."""

    model_config = ConfigDict(frozen=True)

    attacker: str = Field(description="Name of the attacker")
    defender: str = Field(description="Name of the defender")
    attack_name: str = Field(description="Name of the attack used")
    hit: bool = Field(description="Whether the attack roll met the defense roll")
    attack_roll: int = Field(description="2d6 plus the attack modifier")
    defense_roll: int = Field(description="2d6 plus the defense modifier")
    attack_modifier: int = 0
    defense_modifier: int = 0
    damage_rolled: int = Field(default=0, description="Result of the damage dice")
    damage_dice: str = Field(default="", description="The damage dice with each die, e.g. 1d8(5)")
    damage_bonus: int = Field(default=0, description="STR for melee, zero for ranged")
    armor: int = Field(default=0, description="Armor of the defender")
    raw_damage: int = Field(default=0, description="Rolled + bonus - armor, floored at zero")
    final_damage: int = Field(default=0, description="Raw damage after the type modifier")
    applied_damage: int = Field(default=0, description="Health actually removed")
    damage_type: DamageType = DamageType.BLUDGEONING
    modifier: DamageModifier = DamageModifier.NONE
    killed: bool = False

    @property
    def blocked(self) -> bool:
        return self.hit and self.final_damage == 0

    @property
    def outcome(self) -> str:
        if not self.hit:
            return "miss"
        return "blocked" if self.blocked else "hit"


# ============================================================================
# MODIFIERS
# ============================================================================


def get_attack_modifier(attacker: Combatant, attack: AttackDefinition) -> int:
    """STR for melee attacks, AGI for ranged ones."""
    return attacker.strength if attack.is_melee else attacker.agility


def get_defense_modifier(defender: Combatant) -> int:
    return defender.agility + defender.evasion


def get_damage_bonus(attacker: Combatant, attack: AttackDefinition) -> int:
    """STR for melee attacks, nothing for ranged ones."""
    return attacker.strength if attack.is_melee else 0


def calculate_raw_damage(rolled: int, bonus: int, armor: int) -> int:
    return max(0, rolled + bonus - armor)


# ============================================================================
# RESOLVER
# ============================================================================


class CombatResolver:
    """
    Resolves attacks between combatants.

    The resolver draws every random number from the generator it was built
    with, in a fixed order (attack 2d6, defense 2d6, damage dice), so a
    seeded generator replays the same fight.
    """

    def __init__(self, rng: random.Random, events: EventDispatcher | None = None) -> None:
        self.rng = rng
        self.events = events or EventDispatcher()

    def roll_to_hit(
        self,
        attacker: Combatant,
        defender: Combatant,
        attack: AttackDefinition,
    ) -> tuple[bool, int, int]:
        """
        Performs the opposed attack and defense rolls.

        Returns:
            tuple[bool, int, int]: hit, attack roll, defense roll.

        """
        attack_roll = roll_2d6(get_attack_modifier(attacker, attack), self.rng)
        defense_roll = roll_2d6(get_defense_modifier(defender), self.rng)
        return attack_roll >= defense_roll, attack_roll, defense_roll

    def resolve(
        self,
        attacker: Combatant,
        defender: Combatant,
        attack: AttackDefinition,
        turn: int = 0,
    ) -> AttackResult:
        """
        Resolves an attack and applies its damage.

        Ranged attacks that hit consume one unit of their ammunition.

        Args:
            attacker (Combatant): The attacker.
            defender (Combatant): The defender.
            attack (AttackDefinition): The attack used.
            turn (int): Current turn, only used for the emitted events.

        Returns:
            AttackResult: The outcome, including the damage applied.

        """
        hit, attack_roll, defense_roll = self.roll_to_hit(attacker, defender, attack)
        details = dict(
            attacker=attacker.name,
            defender=defender.name,
            attack_name=attack.name,
            attack_roll=attack_roll,
            defense_roll=defense_roll,
            attack_modifier=get_attack_modifier(attacker, attack),
            defense_modifier=get_defense_modifier(defender),
            damage_type=attack.damage_type,
            armor=defender.armor,
        )

        if not hit:
            result = AttackResult(hit=False, **details)
            self._emit(attacker, defender, result, turn)
            return result

        if attack.is_ranged:
            attacker.consume_ammo(attack)

        damage_roll = roll_and_describe(attack.dice, self.rng)
        rolled = damage_roll.value
        bonus = get_damage_bonus(attacker, attack)
        raw = calculate_raw_damage(rolled, bonus, defender.armor)
        modifier = defender.damage_modifier_for(attack.damage_type)
        final = modifier.apply(raw)
        was_alive = defender.is_alive
        applied = defender.take_damage(final)

        result = AttackResult(
            hit=True,
            damage_rolled=rolled,
            damage_dice=damage_roll.notation,
            damage_bonus=bonus,
            raw_damage=raw,
            final_damage=final,
            applied_damage=applied,
            modifier=modifier,
            killed=was_alive and not defender.is_alive,
            **details,
        )
        self._emit(attacker, defender, result, turn)
        return result

    def _emit(self, attacker: Combatant, defender: Combatant, result: AttackResult, turn: int) -> None:
        if not self.events.active:
            return
        self.events.emit(AttackEvent(turn=turn, actor=attacker, target=defender, result=result))
        if result.killed:
            self.events.emit(DeathEvent(turn=turn, actor=defender, killer=attacker))

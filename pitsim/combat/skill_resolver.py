"""
Skill resolution.

A skill is a list of effects made of steps. Damage steps roll their dice
and add the scaled stat; attack_roll steps make an opposed 2d6 roll and may
end the skill on a miss; heal steps restore health to the caster. The total
damage goes through the target's damage-type modifier first and armor
second.
"""

import math
import random

from pydantic import BaseModel, ConfigDict, Field

from pitsim.character.combatant import Combatant
from pitsim.character.definitions import EffectStep, SkillDefinition
from pitsim.core.constants import DamageModifier, DamageType, StatType
from pitsim.core.dice_parser import roll_2d6, roll_expression

from .combat_resolver import get_defense_modifier
from .events import DeathEvent, EventDispatcher, SkillEvent


class SkillResult(BaseModel):
    """Outcome of one skill use."""

    model_config = ConfigDict(frozen=True)

    skill_name: str
    caster: str
    target: str
    success: bool = Field(description="False when an attack_roll step missed")
    willpower_cost: int = 0
    willpower_remaining: int = 0
    damage_before_modifiers: int = 0
    final_damage: int = 0
    applied_damage: int = 0
    healed: int = 0
    damage_type: DamageType = DamageType.BLUDGEONING
    modifier: DamageModifier = DamageModifier.NONE
    killed: bool = False


def get_stat_value(combatant: Combatant, stat: StatType | None) -> int:
    if stat is None:
        return 0
    return {
        StatType.STRENGTH: combatant.strength,
        StatType.AGILITY: combatant.agility,
        StatType.ENDURANCE: combatant.endurance,
        StatType.WILL: combatant.will,
    }[stat]


def roll_step_amount(step: EffectStep, caster: Combatant, rng: random.Random) -> int:
    """Dice of the step plus floor(stat * multiplier)."""
    amount = roll_expression(step.dice, rng) if step.dice else 0
    if step.scaling_stat is not None:
        amount += math.floor(get_stat_value(caster, step.scaling_stat) * step.scaling_multiplier)
    return amount


class SkillResolver:
    """Resolves skills using the same generator as the combat resolver."""

    def __init__(self, rng: random.Random, events: EventDispatcher | None = None) -> None:
        self.rng = rng
        self.events = events or EventDispatcher()

    def resolve(
        self,
        caster: Combatant,
        target: Combatant,
        skill: SkillDefinition,
        turn: int = 0,
    ) -> SkillResult:
        """
        Spends the willpower of a skill and applies its effects.

        Args:
            caster (Combatant): Who uses the skill.
            target (Combatant): Who the skill is aimed at.
            skill (SkillDefinition): The skill.
            turn (int): Current turn, only used for the emitted events.

        Returns:
            SkillResult: What the skill did.

        """
        caster.consume_willpower(skill)

        total = 0
        healed = 0
        damage_type = DamageType.BLUDGEONING
        success = True
        stopped = False
        for step in skill.steps:
            if step.type == "attack_roll":
                attack_roll = roll_2d6(get_stat_value(caster, step.attack_stat), self.rng)
                defense_roll = roll_2d6(get_defense_modifier(target), self.rng)
                if attack_roll < defense_roll:
                    success = False
                    if step.stop_on_miss:
                        stopped = True
                        break
            elif step.type == "damage":
                total += roll_step_amount(step, caster, self.rng)
                if step.damage_type is not None:
                    damage_type = step.damage_type
            elif step.type == "heal":
                healed += caster.heal(roll_step_amount(step, caster, self.rng))

        modifier = DamageModifier.NONE
        final = 0
        applied = 0
        was_alive = target.is_alive
        if total > 0 and not stopped:
            modifier = target.damage_modifier_for(damage_type)
            final = max(0, modifier.apply(total) - target.armor)
            applied = target.take_damage(final)

        result = SkillResult(
            skill_name=skill.name,
            caster=caster.name,
            target=target.name,
            success=success,
            willpower_cost=skill.willpower_cost,
            willpower_remaining=caster.current_willpower,
            damage_before_modifiers=total,
            final_damage=final,
            applied_damage=applied,
            healed=healed,
            damage_type=damage_type,
            modifier=modifier,
            killed=was_alive and not target.is_alive,
        )
        if self.events.active:
            self.events.emit(SkillEvent(turn=turn, actor=caster, target=target, result=result))
            if result.killed:
                self.events.emit(DeathEvent(turn=turn, actor=target, killer=caster))
        return result


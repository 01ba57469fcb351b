"""
Module for printing creature, item and skill sheets in a formatted way.
"""

from rich.markup import escape
from rich.padding import Padding

from pitsim.character.combatant import calculate_max_health, calculate_max_willpower
from pitsim.character.definitions import (
    AttackDefinition,
    CreatureDefinition,
    ItemDefinition,
    SkillDefinition,
    equipment_id,
    equipment_quantity,
)
from pitsim.core.content import ContentRepository
from pitsim.core.utils import cprint, crule


def attack_to_string(attack: AttackDefinition) -> str:
    """
    Converts an attack to a one-line description.

    Args:
        attack (AttackDefinition): The attack to format.

    Returns:
        str: Name, dice, damage type, kind and range with colors.

    """
    text = (
        f"[bold]{escape(attack.name)}[/]: {attack.dice} "
        f"{attack.damage_type.colored_name} ({attack.type.value.lower()}, range {attack.reach})"
    )
    if attack.ammo_type:
        text += f", ammo [blue]{attack.ammo_type}[/]"
    if attack.delay != 1.0:
        text += f", delay x{attack.delay:g}"
    return text


def print_creature_sheet(creature: CreatureDefinition, padding: int = 2) -> None:
    """Prints the stats, attacks, equipment and traits of a creature."""
    crule(f"Creature: {escape(creature.name)}", style="bold")
    max_health = calculate_max_health(creature.health, creature.endurance)
    lines = [
        f"ID: [cyan]{creature.id}[/]",
        f"Type: {creature.type}, Threat: {creature.threat}",
        f"STR: {creature.strength}, AGI: {creature.agility}, END: {creature.endurance}, WIL: {creature.will}",
        f"HP: [green]{max_health}[/] (base {creature.health}), WP: {calculate_max_willpower(creature.will)}",
        f"Speed: {creature.speed}, Vision: {creature.vision_range}",
    ]
    if creature.description:
        lines.insert(1, f'[italic]"{escape(creature.description)}"[/]')
    for line in lines:
        cprint(Padding(line, (0, padding)))

    if creature.attacks:
        cprint(Padding("Natural attacks:", (0, padding)))
        for attack in creature.attacks:
            cprint(Padding(attack_to_string(attack), (0, padding + 2)))
    if creature.equipment:
        cprint(Padding("Equipment:", (0, padding)))
        for entry in creature.equipment:
            quantity = equipment_quantity(entry)
            suffix = f" x{quantity}" if quantity > 1 else ""
            cprint(Padding(f"- {equipment_id(entry)}{suffix}", (0, padding + 2)))
    if creature.skills:
        cprint(Padding(f"Skills: {', '.join(creature.skills)}", (0, padding)))
    for label, values in (
        ("Immunities", creature.immunities),
        ("Resistances", creature.resistances),
        ("Vulnerabilities", creature.vulnerabilities),
    ):
        if values:
            names = ", ".join(v.colored_name for v in values)
            cprint(Padding(f"{label}: {names}", (0, padding)))
    if creature.ai:
        cprint(Padding(f"AI: {', '.join(creature.ai)}", (0, padding)))


def print_item_sheet(item: ItemDefinition, padding: int = 2) -> None:
    """Prints the attack and bonuses of an item."""
    crule(f"Item: {escape(item.name)}", style="bold")
    cprint(Padding(f"ID: [cyan]{item.id}[/]", (0, padding)))
    cprint(Padding(f"Type: {item.type.value}", (0, padding)))
    if item.description:
        cprint(Padding(f'[italic]"{escape(item.description)}"[/]', (0, padding)))
    if item.attack is not None:
        cprint(Padding(f"Attack: {attack_to_string(item.attack)}", (0, padding)))

    stats = []
    if item.armor:
        stats.append(f"Armor: {item.armor}")
    if item.evasion:
        stats.append(f"Evasion: {item.evasion}")
    for label, value in (
        ("STR", item.strength),
        ("AGI", item.agility),
        ("END", item.endurance),
        ("WIL", item.will),
        ("Speed", item.speed),
    ):
        if value:
            stats.append(f"{label}: {value:+d}")
    if item.regen:
        stats.append(f"Regen: +{item.regen}")
    if stats:
        cprint(Padding(f"Stats: {', '.join(stats)}", (0, padding)))


def print_skill_sheet(skill: SkillDefinition, padding: int = 2) -> None:
    crule(f"Skill: {escape(skill.name)}", style="bold")
    cprint(Padding(f"ID: [cyan]{skill.id}[/]", (0, padding)))
    if skill.description:
        cprint(Padding(f'[italic]"{escape(skill.description)}"[/]', (0, padding)))
    cprint(
        Padding(
            f"{skill.category}, targets {skill.targeting}, range {skill.range}, "
            f"[blue]{skill.willpower_cost} WP[/]",
            (0, padding),
        )
    )
    for step in skill.steps:
        text = step.type
        if step.dice:
            text += f" {step.dice}"
        if step.damage_type is not None:
            text += f" {step.damage_type.colored_name}"
        if step.scaling_stat is not None:
            text += f" + {step.scaling_multiplier:g} x {step.scaling_stat.short_name}"
        cprint(Padding(f"- {text}", (0, padding + 2)))


def print_creature_list(repository: ContentRepository) -> None:
    cprint("\nAvailable creatures:")
    for creature_id in sorted(repository.creatures):
        creature = repository.creatures[creature_id]
        cprint(f"  [cyan]{creature_id}[/]: {escape(creature.name)} (threat {creature.threat})")
    cprint(f"\nTotal: {len(repository.creatures)} creatures")


def print_item_list(repository: ContentRepository) -> None:
    cprint("\nAvailable items:")
    for item_id in sorted(repository.items):
        item = repository.items[item_id]
        cprint(f"  [cyan]{item_id}[/]: {escape(item.name)} ({item.type.value})")
    cprint(f"\nTotal: {len(repository.items)} items")

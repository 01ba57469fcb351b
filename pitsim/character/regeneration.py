"""
Health and willpower regeneration.

Every action grants regeneration points; each full threshold of points
restores one point of health (or willpower).
"""

from pitsim.core.constants import BASE_REGEN_RATE, BASE_WP_REGEN_RATE, REGEN_THRESHOLD

from .combatant import Combatant


def calculate_regen_rate(combatant: Combatant) -> int:
    """20 + max_health // 6 + equipment regen bonus."""
    return BASE_REGEN_RATE + combatant.max_health // 6 + combatant.regen_bonus


def calculate_wp_regen_rate(combatant: Combatant) -> int:
    """10 + max_willpower // 5."""
    return BASE_WP_REGEN_RATE + combatant.max_willpower // 5


def process_regeneration(combatant: Combatant) -> int:
    """
    Accumulates health regeneration points after an action.

    Points are discarded while the combatant is at full health so that they
    cannot be stockpiled.

    Args:
        combatant (Combatant): The combatant that just acted.

    Returns:
        int: The health restored.

    """
    if not combatant.is_alive or combatant.current_health >= combatant.max_health:
        combatant.regen_points = 0
        return 0

    combatant.regen_points += calculate_regen_rate(combatant)
    healed = 0
    while combatant.regen_points >= REGEN_THRESHOLD and combatant.current_health < combatant.max_health:
        combatant.current_health += 1
        combatant.regen_points -= REGEN_THRESHOLD
        healed += 1
    return healed


def process_willpower_regeneration(combatant: Combatant) -> int:
    """Same as process_regeneration, for willpower."""
    if not combatant.is_alive or combatant.current_willpower >= combatant.max_willpower:
        combatant.wp_regen_points = 0
        return 0

    combatant.wp_regen_points += calculate_wp_regen_rate(combatant)
    restored = 0
    while (
        combatant.wp_regen_points >= REGEN_THRESHOLD
        and combatant.current_willpower < combatant.max_willpower
    ):
        combatant.current_willpower += 1
        combatant.wp_regen_points -= REGEN_THRESHOLD
        restored += 1
    return restored


def turns_to_heal_one(combatant: Combatant) -> float:
    rate = calculate_regen_rate(combatant)
    if rate <= 0:
        return float("inf")
    return -(-REGEN_THRESHOLD // rate)

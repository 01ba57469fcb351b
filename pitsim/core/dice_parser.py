"""
Dice parser module for the simulator.

Parses dice expressions in the NdS+M notation ("2d6+3", "1d8", "3d4-1"),
rolls them against an explicit random generator so that every trial can be
replayed from its seed, and computes the minimum, maximum and average of an
expression.
"""

import math
import random
import re
from functools import lru_cache

from catchery import log_warning
from pydantic import BaseModel, Field

from pitsim.core.error_handling import InvalidDiceExpressionError

DICE_PATTERN = re.compile(r"^(\d+)d(\d+)([+-]\d+)?$", re.IGNORECASE)

# Reasonable limits, anything above is almost certainly a typo in a data file.
MAX_DICE = 100
MAX_SIDES = 1000


class ParsedDice(BaseModel):
    """Components of a dice expression."""

    count: int = Field(description="Number of dice")
    sides: int = Field(description="Sides per die")
    modifier: int = Field(default=0, description="Flat modifier added to the sum")

    def model_post_init(self, _) -> None:
        """Validates fields after model initialization."""
        if self.count < 1:
            raise ValueError(f"Dice count must be at least 1, got {self.count}")
        if self.sides < 1:
            raise ValueError(f"Dice sides must be at least 1, got {self.sides}")

    @property
    def minimum(self) -> int:
        return self.count + self.modifier

    @property
    def maximum(self) -> int:
        return self.count * self.sides + self.modifier

    @property
    def average(self) -> float:
        return self.count * (1 + self.sides) / 2 + self.modifier

    def __str__(self) -> str:
        text = f"{self.count}d{self.sides}"
        if self.modifier:
            text += f"{self.modifier:+d}"
        return text


class RollBreakdown(BaseModel):
    """Class to hold roll breakdown information."""

    value: int = Field(
        description="Total roll result",
    )
    notation: str = Field(
        description="The dice with their individual results, e.g. 2d6(4+2)+1",
    )
    description: str = Field(
        description="Description of the roll",
    )
    rolls: list[int] = Field(
        description="List of individual dice rolls",
        default_factory=list,
    )
    modifier: int = Field(
        default=0,
        description="Flat modifier included in the total",
    )


@lru_cache(maxsize=256)
def parse_dice(expression: str) -> ParsedDice:
    """
    Parses a dice expression into its components.

    Args:
        expression (str): Dice notation such as '2d6+3'.

    Returns:
        ParsedDice: The parsed count, sides and modifier.

    Raises:
        InvalidDiceExpressionError: If the notation is invalid.

    """
    if not expression or not expression.strip():
        raise InvalidDiceExpressionError(
            "Invalid dice notation: empty expression", {"expression": expression}
        )
    match = DICE_PATTERN.match(expression.strip())
    if not match:
        raise InvalidDiceExpressionError(
            f"Invalid dice notation: '{expression}'", {"expression": expression}
        )
    count_str, sides_str, modifier_str = match.groups()
    count = int(count_str)
    sides = int(sides_str)
    modifier = int(modifier_str) if modifier_str else 0

    if count > MAX_DICE:
        log_warning(
            f"Too many dice requested: {count} (limit: {MAX_DICE})",
            {"expression": expression, "count": count, "sides": sides},
        )
        raise InvalidDiceExpressionError(f"Too many dice: {count}", {"expression": expression})
    if sides > MAX_SIDES:
        log_warning(
            f"Too many sides on dice: {sides} (limit: {MAX_SIDES})",
            {"expression": expression, "count": count, "sides": sides},
        )
        raise InvalidDiceExpressionError(f"Too many sides: {sides}", {"expression": expression})

    try:
        return ParsedDice(count=count, sides=sides, modifier=modifier)
    except ValueError as e:
        raise InvalidDiceExpressionError(
            f"Invalid dice notation: '{expression}': {e}", {"expression": expression}
        ) from e


def is_valid_dice(expression: str) -> bool:
    """Whether the expression parses as dice notation."""
    try:
        parse_dice(expression)
    except InvalidDiceExpressionError:
        return False
    return True


def roll_dice(count: int, sides: int, modifier: int, rng: random.Random) -> int:
    """
    Rolls count dice of the given sides and adds a modifier.

    Args:
        count (int): Number of dice.
        sides (int): Sides per die.
        modifier (int): Flat modifier.
        rng (random.Random): The random generator to draw from.

    Returns:
        int: The total.

    """
    total = modifier
    for _ in range(count):
        total += rng.randint(1, sides)
    return total


def roll_and_describe(expression: str, rng: random.Random) -> RollBreakdown:
    """
    Rolls a dice expression and keeps the individual dice.

    Args:
        expression (str): The dice expression to roll.
        rng (random.Random): The random generator to draw from.

    Returns:
        RollBreakdown: The total, a readable description and the rolls.

    """
    dice = parse_dice(expression)
    rolls = [rng.randint(1, dice.sides) for _ in range(dice.count)]
    total = sum(rolls) + dice.modifier
    notation = f"{dice.count}d{dice.sides}({'+'.join(map(str, rolls))})"
    if dice.modifier:
        notation += f"{dice.modifier:+d}"
    return RollBreakdown(
        value=total,
        notation=notation,
        description=f"{notation} = {total}",
        rolls=rolls,
        modifier=dice.modifier,
    )


def roll_expression(expression: str, rng: random.Random) -> int:
    """
    Rolls a dice expression and returns the total.

    Args:
        expression (str): The dice expression to roll.
        rng (random.Random): The random generator to draw from.

    Returns:
        int: The total result of the roll.

    """
    dice = parse_dice(expression)
    return roll_dice(dice.count, dice.sides, dice.modifier, rng)


def roll_2d6(modifier: int, rng: random.Random) -> int:
    """The opposed check used by attack and defense rolls."""
    return roll_dice(2, 6, modifier, rng)


def get_min_roll(expression: str) -> int:
    return parse_dice(expression).minimum


def get_max_roll(expression: str) -> int:
    return parse_dice(expression).maximum


def get_average_roll(expression: str) -> float:
    return parse_dice(expression).average


def weighted_round(value: float, rng: random.Random) -> int:
    """
    Rounds a value up with probability equal to its fractional part.

    A value of 6.4 becomes 7 with probability 0.4 and 6 otherwise.

    Args:
        value (float): The value to round.
        rng (random.Random): The random generator to draw from.

    Returns:
        int: The rounded value.

    """
    floor = math.floor(value)
    fraction = value - floor
    if fraction == 0:
        return int(floor)
    return int(floor) + 1 if rng.random() < fraction else int(floor)


def round_half_up(value: float) -> int:
    """Deterministic rounding, .5 always goes up."""
    return int(math.floor(value + 0.5))

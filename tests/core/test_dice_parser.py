"""
Tests for dice expression parsing and rolling.
"""

import random

import pytest

from pitsim.core.dice_parser import (
    get_average_roll,
    get_max_roll,
    get_min_roll,
    is_valid_dice,
    parse_dice,
    roll_2d6,
    roll_and_describe,
    roll_expression,
    round_half_up,
    weighted_round,
)
from pitsim.core.error_handling import InvalidDiceExpressionError


def test_parse_dice_with_modifier():
    """Test that count, sides and modifier are extracted."""
    dice = parse_dice("2d6+3")
    assert (dice.count, dice.sides, dice.modifier) == (2, 6, 3)
    assert str(dice) == "2d6+3"


def test_parse_dice_negative_modifier_and_case():
    """Test negative modifiers and an uppercase D."""
    dice = parse_dice("3D4-1")
    assert (dice.count, dice.sides, dice.modifier) == (3, 4, -1)


@pytest.mark.parametrize("expression", ["", "   ", "3", "d6", "2x6", "2d", "0d6", "2d0", "101d6"])
def test_parse_dice_rejects_invalid_notation(expression):
    """Test that malformed expressions raise."""
    with pytest.raises(InvalidDiceExpressionError):
        parse_dice(expression)
    assert not is_valid_dice(expression)


def test_min_max_average():
    """Test the statistics of an expression."""
    assert get_min_roll("2d6+1") == 3
    assert get_max_roll("2d6+1") == 13
    assert get_average_roll("1d8") == 4.5


def test_roll_expression_stays_in_bounds():
    """Test that every roll falls between the minimum and the maximum."""
    rng = random.Random(7)
    for _ in range(200):
        assert 2 <= roll_expression("1d6+1", rng) <= 7


def test_rolls_replay_from_the_same_seed():
    """Test that two generators with the same seed roll the same values."""
    first = [roll_2d6(0, random.Random(3)) for _ in range(5)]
    second = [roll_2d6(0, random.Random(3)) for _ in range(5)]
    assert first == second


def test_roll_and_describe_keeps_the_dice(scripted_rng):
    """Test that the breakdown lists the individual dice."""
    breakdown = roll_and_describe("2d6+1", scripted_rng(ints=[4, 2]))
    assert breakdown.rolls == [4, 2]
    assert breakdown.value == 7
    assert breakdown.description == "2d6(4+2)+1 = 7"


def test_weighted_round(scripted_rng):
    """Test that the fraction is the probability of rounding up."""
    assert weighted_round(6.4, scripted_rng(floats=[0.3])) == 7
    assert weighted_round(6.4, scripted_rng(floats=[0.5])) == 6
    assert weighted_round(6.0, scripted_rng()) == 6


def test_round_half_up():
    """Test that .5 always rounds up."""
    assert round_half_up(2.5) == 3
    assert round_half_up(2.49) == 2
    assert round_half_up(6.6666) == 7

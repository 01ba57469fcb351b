"""
Tests for the energy-based turn scheduler.
"""

import pytest

from pitsim.combat.turn_scheduler import (
    ScheduledActor,
    TurnScheduler,
    attack_action_cost,
    calculate_delay,
)


def test_delay_scales_with_speed():
    """Test base * 10 / speed with half-up rounding and the minimum."""
    assert calculate_delay(10, 10) == 10
    assert calculate_delay(10, 5) == 20
    assert calculate_delay(10, 15) == 7
    assert calculate_delay(10, 3) == 33
    assert calculate_delay(10, 100) == 6
    assert calculate_delay(10, 0) == 100


def test_weighted_delay(scripted_rng):
    """Test that a generator rounds by the fractional part."""
    assert calculate_delay(10, 3, scripted_rng(floats=[0.1])) == 34
    assert calculate_delay(10, 3, scripted_rng(floats=[0.9])) == 33


def test_attack_cost():
    """Test the cost of slow and fast weapons."""
    assert attack_action_cost(1.0) == 10
    assert attack_action_cost(1.5) == 15
    assert attack_action_cost(0.8) == 8


def test_ties_go_to_registration_order(make_combatant):
    """Test that equal speeds act in the order they were registered."""
    scheduler = TurnScheduler()
    first = scheduler.register(make_combatant(name="First"))
    scheduler.register(make_combatant(name="Second"))
    scheduler.advance(10)
    assert scheduler.next_ready() is first


def test_faster_actor_goes_first(make_combatant):
    """Test that the fastest ready actor is picked."""
    scheduler = TurnScheduler()
    scheduler.register(make_combatant(speed=10))
    fast = scheduler.register(make_combatant(speed=14))
    scheduler.advance(10)
    assert scheduler.next_ready() is fast


def test_slow_actor_waits(make_combatant):
    """Test that speed 5 needs two advances to act."""
    scheduler = TurnScheduler()
    slow = scheduler.register(make_combatant(speed=5))
    scheduler.advance(10)
    assert scheduler.next_ready() is None
    scheduler.advance(10)
    assert scheduler.next_ready() is slow


def test_energy_carries_over_and_can_go_negative(make_combatant):
    """Test that an expensive action leaves a debt for the next round."""
    scheduler = TurnScheduler()
    actor = scheduler.register(make_combatant())
    scheduler.advance(10)
    report = scheduler.run_round(lambda a: 15)
    assert report.count == 1
    assert actor.accumulated_energy == -5
    scheduler.advance(10)
    assert scheduler.run_round(lambda a: 10).count == 0
    assert actor.accumulated_energy == 5


def test_round_lets_everyone_act(make_combatant):
    """Test a full round with a fast and a normal actor."""
    scheduler = TurnScheduler()
    normal = scheduler.register(make_combatant(speed=10))
    fast = scheduler.register(make_combatant(speed=20), accumulated_energy=2)
    scheduler.advance(10)
    report = scheduler.run_round(lambda a: a.delay_cost())
    # The fast actor needs 6 energy per action: 12 energy buys two actions.
    assert report.actions == [fast, fast, normal]
    assert fast.accumulated_energy == 0
    assert normal.accumulated_energy == 0


def test_round_cap(make_combatant):
    """Test that free actions cannot loop forever."""
    scheduler = TurnScheduler(max_iterations=5)
    scheduler.register(make_combatant())
    scheduler.advance(10)
    report = scheduler.run_round(lambda a: 0)
    assert report.capped
    assert report.count == 5


def test_should_stop_ends_the_round(make_combatant):
    """Test that the stop condition is checked before every action."""
    scheduler = TurnScheduler()
    scheduler.register(make_combatant())
    scheduler.register(make_combatant())
    scheduler.advance(10)
    acted = []

    def act(actor):
        acted.append(actor)
        return 10

    report = scheduler.run_round(act, should_stop=lambda: len(acted) == 1)
    assert report.count == 1
    assert not report.capped


def test_dead_actors_are_skipped_and_pruned(make_combatant):
    """Test that the dead neither gain energy nor act."""
    scheduler = TurnScheduler()
    dead = scheduler.register(make_combatant(name="Dead"))
    alive = scheduler.register(make_combatant(name="Alive"))
    dead.combatant.take_damage(100)
    scheduler.advance(10)
    assert dead.accumulated_energy == 0
    assert scheduler.next_ready() is alive
    assert scheduler.prune() == [dead]
    assert scheduler.actors == [alive]


def test_invalid_energy():
    """Test that time cannot go backwards and energy starts non-negative."""
    scheduler = TurnScheduler()
    with pytest.raises(ValueError):
        scheduler.advance(-1)
    with pytest.raises(ValueError):
        ScheduledActor(None, accumulated_energy=-1)


def test_advance_skips_the_excluded_actor(make_combatant):
    """Test that the actor who just acted gains nothing while the others gain exactly amount."""
    scheduler = TurnScheduler()
    acted = scheduler.register(make_combatant(name="Acted"))
    other = scheduler.register(make_combatant(name="Other"), accumulated_energy=3)
    third = scheduler.register(make_combatant(name="Third", speed=14), accumulated_energy=1)

    scheduler.advance(7, exclude=acted)

    assert acted.accumulated_energy == 0
    assert other.accumulated_energy == 10
    assert third.accumulated_energy == 8

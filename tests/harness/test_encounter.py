"""
Tests for single trials.
"""

import random

import pytest

from pitsim.combat.events import CombatListener
from pitsim.core.config import SimulationConfig
from pitsim.core.constants import Team, Winner
from pitsim.harness.encounter import Encounter, run_trial, starting_position
from pitsim.harness.verbose_logger import VerboseLogger


class Recorder(CombatListener):
    def __init__(self):
        self.events = []

    def on_event(self, event):
        self.events.append(event)


def blueprints(repository, *ids):
    return [repository.build_blueprint(creature_id) for creature_id in ids]


def test_starting_positions():
    """Test that teams line up on opposite columns."""
    config = SimulationConfig(starting_distance=4)
    assert starting_position(Team.A, 2, config) == (0, 2)
    assert starting_position(Team.B, 0, config) == (4, 0)


def test_same_seed_replays_the_same_fight(repository):
    """Test determinism of a trial."""
    a, b = blueprints(repository, "goblin"), blueprints(repository, "skeleton")
    assert run_trial(a, b, seed=11) == run_trial(a, b, seed=11)


def test_narration_does_not_change_the_outcome(repository, capsys):
    """Test that listeners never consume random numbers."""
    a, b = blueprints(repository, "goblin_archer"), blueprints(repository, "orc")
    quiet = run_trial(a, b, seed=3)
    logger = VerboseLogger()
    logger.start_trial(1, 3)
    loud = run_trial(a, b, seed=3, listeners=[logger])
    assert quiet == loud
    assert "Fight 1" in capsys.readouterr().out


def test_outcome_is_consistent(repository):
    """Test that the winner matches the survivors."""
    for seed in range(10):
        outcome = run_trial(
            blueprints(repository, "goblin", "goblin"),
            blueprints(repository, "wolf"),
            seed=seed,
        )
        if outcome.winner == Winner.A:
            assert outcome.team_b_survivors == 0
            assert outcome.team_a_survivors > 0
            assert outcome.team_a_survivor_health > 0
        elif outcome.winner == Winner.B:
            assert outcome.team_a_survivors == 0
            assert outcome.team_b_survivors == 1
        assert outcome.turns >= 1


def test_turn_cap_is_a_draw(repository):
    """Test that a fight cut short is a draw with everyone alive."""
    config = SimulationConfig(max_turns=1)
    outcome = run_trial(
        blueprints(repository, "goblin"), blueprints(repository, "goblin"), seed=1, config=config
    )
    assert outcome.winner == Winner.DRAW
    assert outcome.turns == 1
    assert outcome.team_a_survivors == outcome.team_b_survivors == 1


def test_event_stream(repository):
    """Test that a trial starts and ends with the combat events."""
    recorder = Recorder()
    run_trial(blueprints(repository, "rat"), blueprints(repository, "wolf"), seed=2, listeners=[recorder])
    kinds = [event.event_type.value for event in recorder.events]
    assert kinds[0] == "combat_start"
    assert kinds[-1] == "combat_end"
    assert "turn_start" in kinds
    assert "decision" in kinds


def test_moves_only_into_free_cells(repository):
    """Test that a step onto an occupied cell is refused."""
    encounter = Encounter(
        blueprints(repository, "goblin", "goblin"), blueprints(repository, "rat"), random.Random(0)
    )
    first, second = encounter.combatants[0], encounter.combatants[1]
    assert not encounter.move(first, second.position)
    assert first.position == (0, 0)
    assert not encounter.move(first, (3, 3))
    assert encounter.move(first, (1, 0))
    assert first.position == (1, 0)


def test_invalid_teams(repository):
    """Test that empty and oversized teams are rejected."""
    with pytest.raises(ValueError):
        Encounter([], blueprints(repository, "rat"), random.Random(0))
    config = SimulationConfig(arena_size=5, starting_distance=5)
    with pytest.raises(ValueError):
        Encounter(blueprints(repository, *["rat"] * 7), blueprints(repository, "rat"), random.Random(0), config)

"""
Tests for goal selection in the decision engine.
"""

import logging
import random

import pytest

from pitsim.ai.context import ActionKind, AIAction, build_context
from pitsim.ai.decision_engine import HISTORY_LENGTH, AIDecisionEngine, build_goals
from pitsim.ai.goals import BaseGoal, FleeGoal, Goal
from pitsim.core.constants import Team
from pitsim.pathfinding.grid import ArenaGrid


class FixedGoal(BaseGoal):
    """A goal with a settable score that counts its hooks."""

    def __init__(self, name, value):
        self.name = name
        self.value = value
        self.activated = 0
        self.deactivated = 0

    def score(self, context):
        return self.value

    def execute(self, context):
        return AIAction.wait(self.name)

    def on_activated(self, context):
        self.activated += 1

    def on_deactivated(self, context):
        self.deactivated += 1


@pytest.fixture
def duel(make_combatant):
    actor = make_combatant(team=Team.A, position=(0, 0), name="Actor")
    enemy = make_combatant(team=Team.B, position=(3, 0), name="Enemy")
    return actor, enemy


def context_for(engine, actor, combatants, can_see=None):
    grid = ArenaGrid(10)
    kwargs = {"can_see": can_see} if can_see is not None else {}
    return build_context(actor, combatants, engine.memory, grid.is_walkable, random.Random(1), 1, **kwargs)


def test_goals_satisfy_the_protocol(make_combatant):
    """Test that the built-in goals implement Goal."""
    for goal in build_goals(make_combatant()):
        assert isinstance(goal, Goal)


def test_cowardly_adds_flee_first(make_combatant):
    """Test that the 'cowardly' tag puts a flee goal in front."""
    goals = build_goals(make_combatant(ai=["cowardly"]))
    assert isinstance(goals[0], FleeGoal)
    assert not any(isinstance(g, FleeGoal) for g in build_goals(make_combatant()))


def test_ties_go_to_declaration_order(duel):
    """Test that the first of two equal scores wins."""
    actor, enemy = duel
    first, second = FixedGoal("first", 50), FixedGoal("second", 50)
    engine = AIDecisionEngine([first, second])
    decision = engine.decide(context_for(engine, actor, [actor, enemy]))
    assert decision.goal is first
    assert decision.scores == {"first": 50, "second": 50}


def test_highest_score_wins(duel):
    """Test that a later goal with a higher score is chosen."""
    actor, enemy = duel
    engine = AIDecisionEngine([FixedGoal("low", 10), FixedGoal("high", 20)])
    assert engine.decide(context_for(engine, actor, [actor, enemy])).goal_name == "high"


def test_no_positive_score_waits(duel):
    """Test that zero scores leave no goal and a wait."""
    actor, enemy = duel
    engine = AIDecisionEngine([FixedGoal("idle", 0)])
    decision = engine.decide(context_for(engine, actor, [actor, enemy]))
    assert decision.goal is None
    assert decision.goal_name == "none"
    assert decision.action.kind == ActionKind.WAIT
    assert decision.action.reasoning == "Nothing to do"


def test_activation_hooks_on_switch(duel):
    """Test that hooks fire only when the winning goal changes."""
    actor, enemy = duel
    a, b = FixedGoal("a", 50), FixedGoal("b", 10)
    engine = AIDecisionEngine([a, b])
    combatants = [actor, enemy]

    engine.decide(context_for(engine, actor, combatants))
    engine.decide(context_for(engine, actor, combatants))
    assert (a.activated, a.deactivated) == (1, 0)

    a.value = 0
    engine.decide(context_for(engine, actor, combatants))
    assert (a.activated, a.deactivated) == (1, 1)
    assert (b.activated, b.deactivated) == (1, 0)
    assert engine.current_goal is b


def test_memory_tracks_the_target(duel):
    """Test last known position and the count of unseen turns."""
    actor, enemy = duel
    engine = AIDecisionEngine([FixedGoal("idle", 1)])
    engine.decide(context_for(engine, actor, [actor, enemy]))
    assert engine.memory.last_known_position == (3, 0)
    assert engine.memory.turns_since_seen == 0

    def blind(observer, target):
        return False

    engine.decide(context_for(engine, actor, [actor, enemy], blind))
    engine.decide(context_for(engine, actor, [actor, enemy], blind))
    assert engine.memory.last_known_position == (3, 0)
    assert engine.memory.turns_since_seen == 2


def test_history_is_bounded(duel):
    """Test that only the latest reasons are kept."""
    actor, enemy = duel
    engine = AIDecisionEngine([FixedGoal("idle", 1)])
    for _ in range(HISTORY_LENGTH + 5):
        engine.decide(context_for(engine, actor, [actor, enemy]))
    assert len(engine.memory.history) == HISTORY_LENGTH


def test_decision_trace_carries_the_turn(duel, caplog):
    """Test that the debug trace of a decision names the turn it was taken on."""
    actor, enemy = duel
    engine = AIDecisionEngine([FixedGoal("idle", 5)])
    grid = ArenaGrid(10)
    context = build_context(actor, [actor, enemy], engine.memory, grid.is_walkable, random.Random(1), turn=7)

    with caplog.at_level(logging.DEBUG, logger="pitsim"):
        engine.decide(context)

    assert "chose idle [turn=7 action=wait reason=idle]" in caplog.text

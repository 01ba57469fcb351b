"""
Tests for the built-in goals, through the decision engine.
"""

import random

from pitsim.ai.context import ActionKind, build_context, within_vision_range
from pitsim.ai.decision_engine import AIDecisionEngine
from pitsim.ai.goals import FINISH_SCORE, SCOOT_TURNS_AFTER_SHOT
from pitsim.core.constants import Team
from pitsim.pathfinding.grid import ArenaGrid

GRID = ArenaGrid(20)


def spawn(repository, creature_id, team, position):
    return repository.build_blueprint(creature_id).spawn(team, position)


def decide(engine, actor, combatants, can_see=None):
    kwargs = {"can_see": can_see} if can_see is not None else {}
    context = build_context(
        actor, combatants, engine.memory, GRID.is_walkable, random.Random(5), 1, **kwargs
    )
    return engine.decide(context)


def test_melee_attack_when_adjacent(repository):
    """Test that an adjacent enemy gets hit."""
    goblin = spawn(repository, "goblin", Team.A, (0, 0))
    rat = spawn(repository, "rat", Team.B, (1, 1))
    decision = decide(AIDecisionEngine.for_combatant(goblin), goblin, [goblin, rat])
    assert decision.goal_name == "melee_attack"
    assert decision.action.kind == ActionKind.ATTACK
    assert decision.action.target is rat
    assert decision.action.attack.name == "Club"


def test_spear_reaches_two_tiles(repository):
    """Test that a reach weapon attacks from two tiles away."""
    kobold = spawn(repository, "kobold", Team.A, (0, 0))
    rat = spawn(repository, "rat", Team.B, (2, 0))
    decision = decide(AIDecisionEngine.for_combatant(kobold), kobold, [kobold, rat])
    assert decision.goal_name == "melee_attack"


def test_pursue_closes_the_distance(repository):
    """Test that a distant enemy is approached."""
    goblin = spawn(repository, "goblin", Team.A, (0, 0))
    rat = spawn(repository, "rat", Team.B, (5, 0))
    decision = decide(AIDecisionEngine.for_combatant(goblin), goblin, [goblin, rat])
    assert decision.goal_name == "pursue"
    assert decision.action.kind == ActionKind.MOVE
    assert rat.distance_to(decision.action.destination) == 4


def test_archer_kites_an_adjacent_enemy(repository):
    """Test that a ranged fighter steps away from melee."""
    archer = spawn(repository, "goblin_archer", Team.A, (0, 0))
    goblin = spawn(repository, "goblin", Team.B, (1, 0))
    decision = decide(AIDecisionEngine.for_combatant(archer), archer, [archer, goblin])
    assert decision.goal_name == "kite"
    assert goblin.distance_to(decision.action.destination) == 2


def test_finishing_shot(repository):
    """Test that a wounded enemy in range is finished off."""
    archer = spawn(repository, "goblin_archer", Team.A, (0, 0))
    goblin = spawn(repository, "goblin", Team.B, (3, 0))
    goblin.current_health = 3
    engine = AIDecisionEngine.for_combatant(archer)
    decision = decide(engine, archer, [archer, goblin])
    assert decision.goal_name == "ranged_attack"
    assert decision.scores["ranged_attack"] == FINISH_SCORE
    assert decision.action.attack.name == "Shortbow"
    assert decision.action.target is goblin


def test_shoot_then_scoot(repository):
    """Test that a close shot is followed by backing off."""
    archer = spawn(repository, "goblin_archer", Team.A, (0, 0))
    goblin = spawn(repository, "goblin", Team.B, (2, 0))
    engine = AIDecisionEngine.for_combatant(archer)

    shot = decide(engine, archer, [archer, goblin])
    assert shot.goal_name == "ranged_attack"
    assert engine.memory.scoot_turns_remaining == SCOOT_TURNS_AFTER_SHOT

    retreat = decide(engine, archer, [archer, goblin])
    assert retreat.goal_name == "scoot"
    assert retreat.action.kind == ActionKind.MOVE
    assert goblin.distance_to(retreat.action.destination) == 3


def test_scoot_ends_at_a_safe_distance(repository):
    """Test that the countdown stops once the enemy is far enough."""
    archer = spawn(repository, "goblin_archer", Team.A, (0, 0))
    goblin = spawn(repository, "goblin", Team.B, (2, 0))
    engine = AIDecisionEngine.for_combatant(archer)
    decide(engine, archer, [archer, goblin])
    goblin.position = (5, 0)
    decision = decide(engine, archer, [archer, goblin])
    assert decision.goal_name == "ranged_attack"


def test_cowardly_flee_when_hurt(repository):
    """Test that a badly hurt coward runs."""
    kobold = spawn(repository, "kobold", Team.A, (0, 0))
    orc = spawn(repository, "orc", Team.B, (1, 0))
    kobold.current_health = 1
    decision = decide(AIDecisionEngine.for_combatant(kobold), kobold, [kobold, orc])
    assert decision.goal_name == "flee"
    assert orc.distance_to(decision.action.destination) == 2


def test_flee_toward_an_ally(repository):
    """Test that a fleeing coward heads for a friend when it can."""
    kobold = spawn(repository, "kobold", Team.A, (0, 0))
    friend = spawn(repository, "goblin", Team.A, (0, 4))
    orc = spawn(repository, "orc", Team.B, (1, -1))
    kobold.current_health = 1
    decision = decide(AIDecisionEngine.for_combatant(kobold), kobold, [kobold, friend, orc])
    assert decision.goal_name == "flee"
    assert decision.action.destination[1] == 1


def test_search_last_known_position(repository):
    """Test that a lost enemy is searched for where it was last seen."""
    goblin = spawn(repository, "goblin", Team.A, (0, 0))
    rat = spawn(repository, "rat", Team.B, (10, 0))
    engine = AIDecisionEngine.for_combatant(goblin)
    engine.memory.last_known_position = (5, 0)

    decision = decide(engine, goblin, [goblin, rat], within_vision_range)

    assert decision.goal_name == "search"
    assert decision.scores["search"] == 60
    assert decision.action.kind == ActionKind.MOVE
    assert decision.action.destination == (1, 0)
    assert engine.memory.search_turns_remaining == 5


def test_wander_without_anything_to_do(repository):
    """Test the fallback with nobody in sight and no memory."""
    goblin = spawn(repository, "goblin", Team.A, (0, 0))
    rat = spawn(repository, "rat", Team.B, (15, 0))
    decision = decide(AIDecisionEngine.for_combatant(goblin), goblin, [goblin, rat], within_vision_range)
    assert decision.goal_name == "wander"
    assert decision.action.kind == ActionKind.MOVE


def test_shaman_casts_at_range(repository):
    """Test that a ranged skill counts as a ranged option."""
    shaman = spawn(repository, "goblin_shaman", Team.A, (0, 0))
    zombie = spawn(repository, "zombie", Team.B, (5, 0))
    decision = decide(AIDecisionEngine.for_combatant(shaman), shaman, [shaman, zombie])
    assert decision.goal_name == "ranged_attack"
    assert decision.action.kind == ActionKind.SKILL
    assert decision.action.skill.id == "magic_missile"

"""
Built-in AI goals.

Each goal scores how much it wants to act in the current situation and, when
it wins, produces the action. Scores only read the context; bookkeeping in
the actor's memory happens in execute and in the activation hooks. A goal
that lacks what it needs scores zero and never raises.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pitsim.core.utils import chebyshev_distance, step_toward
from pitsim.pathfinding.distance_field import build_distance_field

from .context import AIAction, AIContext, CombatOption

# =============================================================================
# Tuning
# =============================================================================

# Shoot-and-scoot: after firing at a close enemy, back off for a few turns.
SCOOT_TURNS_AFTER_SHOT = 3
SCOOT_SAFE_DISTANCE = 4
SCOOT_TRIGGER_DISTANCE = 3
# Enemies at or below this health are worth a finishing shot.
FINISH_THRESHOLD = 8
FINISH_MARGIN = 1.5

FLEE_SCORE = 95
SCOOT_SCORE = 90
FINISH_SCORE = 85
KITE_SCORE = 75
SEARCH_BASE_SCORE = 70
SEARCH_DECAY = 10
ATTACK_SCORE = 60
PURSUE_SCORE = 40
WANDER_SCORE = 1


@runtime_checkable
class Goal(Protocol):
    """What the decision engine expects from a goal."""

    name: str

    def score(self, context: AIContext) -> float: ...

    def execute(self, context: AIContext) -> AIAction: ...

    def on_activated(self, context: AIContext) -> None: ...

    def on_deactivated(self, context: AIContext) -> None: ...


class BaseGoal:
    """Default no-op activation hooks."""

    name = "goal"

    def on_activated(self, context: AIContext) -> None:
        pass

    def on_deactivated(self, context: AIContext) -> None:
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


# =============================================================================
# Retreat
# =============================================================================


class FleeGoal(BaseGoal):
    """
    Run when badly hurt.

    Heads for the nearest ally along a distance field when there is one,
    otherwise steps directly away from the nearest enemy.
    """

    name = "flee"

    def __init__(self, health_threshold: float = 0.25) -> None:
        self.health_threshold = health_threshold

    def _step(self, context: AIContext):
        if context.allies:
            field = build_distance_field(
                [ally.position for ally in context.allies],
                context.is_walkable,
            )
            step = field.step_toward(context.actor.position)
            if (
                step is not None
                and context.is_free(step)
                and chebyshev_distance(step, context.target.position) >= context.distance_to_target
            ):
                return step
        return context.flee_step(context.target.position)

    def score(self, context: AIContext) -> float:
        if context.target is None or context.health_fraction >= self.health_threshold:
            return 0
        return FLEE_SCORE if self._step(context) is not None else 0

    def execute(self, context: AIContext) -> AIAction:
        step = self._step(context)
        if step is None:
            return AIAction.wait("Cornered while fleeing")
        return AIAction.move(
            step,
            f"Flee from {context.target.name} at {context.actor.current_health} HP",
        )


class ScootGoal(BaseGoal):
    """Keep backing off for a few turns after a close-range shot."""

    name = "scoot"

    def score(self, context: AIContext) -> float:
        if not context.memory.scooting or context.target is None:
            return 0
        return SCOOT_SCORE if context.flee_step(context.target.position) is not None else 0

    def execute(self, context: AIContext) -> AIAction:
        step = context.flee_step(context.target.position)
        if step is None:
            return AIAction.wait("Cornered while scooting")
        return AIAction.move(
            step,
            f"Flee from {context.target.name} "
            f"({context.memory.scoot_turns_remaining + 1} turns left, "
            f"distance {context.distance_to_target})",
        )


class KiteGoal(BaseGoal):
    """A ranged fighter with an enemy adjacent steps away."""

    name = "kite"

    def score(self, context: AIContext) -> float:
        if not context.has_ranged_capability or context.target is None:
            return 0
        if context.distance_to_target > 1:
            return 0
        return KITE_SCORE if context.flee_step(context.target.position) is not None else 0

    def execute(self, context: AIContext) -> AIAction:
        step = context.flee_step(context.target.position)
        if step is None:
            return AIAction.wait("Cornered while kiting")
        return AIAction.move(
            step,
            f"Kite away from {context.target.name} (distance {context.distance_to_target})",
        )


# =============================================================================
# Attacks
# =============================================================================


class RangedAttackGoal(BaseGoal):
    """Shoot the weakest enemy in range, with priority on finishing shots."""

    name = "ranged_attack"

    def _finishing_options(self, context: AIContext) -> list[CombatOption]:
        victim = context.lowest_health_enemy
        if victim is None or victim.current_health > FINISH_THRESHOLD:
            return []
        return [
            option
            for option in context.viable_options(context.ranged_options, victim)
            if victim.current_health <= option.estimate_damage(context.actor) * FINISH_MARGIN
        ]

    def score(self, context: AIContext) -> float:
        if not context.ranged_options:
            return 0
        if self._finishing_options(context):
            return FINISH_SCORE
        for enemy in context.enemies:
            if context.viable_options(context.ranged_options, enemy):
                return ATTACK_SCORE
        return 0

    def execute(self, context: AIContext) -> AIAction:
        finishing = self._finishing_options(context)
        victim = context.lowest_health_enemy
        if finishing and victim is not None:
            option = context.pick(finishing)
            return option.to_action(
                victim,
                f"{option.name} to finish {victim.name} ({victim.current_health} HP)",
            )
        if victim is None:
            return AIAction.wait("Wait (no enemies)")

        candidates = [victim] + [e for e in context.enemies if e is not victim]
        for index, enemy in enumerate(candidates):
            viable = context.viable_options(context.ranged_options, enemy)
            if not viable:
                continue
            option = context.pick(viable)
            if index == 0:
                reason = f"{option.name} lowest HP target {enemy.name} ({enemy.current_health} HP)"
            else:
                reason = f"{option.name} {enemy.name} (in range)"
            if context.actor.distance_to(enemy) <= SCOOT_TRIGGER_DISTANCE:
                context.memory.scoot_turns_remaining = SCOOT_TURNS_AFTER_SHOT
                context.memory.scoot_safe_distance = SCOOT_SAFE_DISTANCE
                reason += ", then scoot"
            return option.to_action(enemy, reason)
        return AIAction.wait("No enemy in range")


class MeleeAttackGoal(BaseGoal):
    """Hit a visible enemy within reach, weakest first."""

    name = "melee_attack"

    def score(self, context: AIContext) -> float:
        for enemy in context.enemies:
            if context.viable_options(context.melee_options, enemy):
                return ATTACK_SCORE
        return 0

    def execute(self, context: AIContext) -> AIAction:
        victim = context.lowest_health_enemy
        if victim is None:
            return AIAction.wait("Wait (no enemies)")
        candidates = [victim] + [e for e in context.enemies if e is not victim]
        for index, enemy in enumerate(candidates):
            viable = context.viable_options(context.melee_options, enemy)
            if not viable:
                continue
            option = context.pick(viable)
            if index == 0:
                reason = f"{option.name} lowest HP target {enemy.name} ({enemy.current_health} HP)"
            else:
                reason = f"{option.name} {enemy.name} (adjacent)"
            return option.to_action(enemy, reason)
        return AIAction.wait("No enemy within reach")


# =============================================================================
# Movement
# =============================================================================


class PursueGoal(BaseGoal):
    """Close in on the nearest visible enemy."""

    name = "pursue"

    def score(self, context: AIContext) -> float:
        return PURSUE_SCORE if context.target is not None else 0

    def execute(self, context: AIContext) -> AIAction:
        target = context.target
        step = context.path_step(target.position)
        if step is None or step == target.position:
            dx, dy = step_toward(context.actor.position, target.position)
            straight = (context.actor.position[0] + dx, context.actor.position[1] + dy)
            step = straight if context.is_free(straight) else None
        if step is None:
            return AIAction.wait(f"No way to reach {target.name}")
        return AIAction.move(
            step,
            f"Move toward {target.name} (distance {context.distance_to_target})",
        )


class SearchLastKnownPositionGoal(BaseGoal):
    """
    After losing sight of every enemy, walk to where one was last seen and
    look around there for a while. Interest fades with every unseen turn.
    """

    name = "search"

    def __init__(self, search_turns: int = 5) -> None:
        self.search_turns = search_turns

    def score(self, context: AIContext) -> float:
        if context.target_visible or context.last_known_position is None:
            return 0
        return max(0, SEARCH_BASE_SCORE - SEARCH_DECAY * context.turns_since_seen)

    def on_activated(self, context: AIContext) -> None:
        context.memory.search_turns_remaining = self.search_turns

    def on_deactivated(self, context: AIContext) -> None:
        context.memory.search_turns_remaining = 0

    def execute(self, context: AIContext) -> AIAction:
        memory = context.memory
        destination = memory.last_known_position
        if context.actor.position != destination:
            step = context.path_step(destination)
            if step is not None:
                return AIAction.move(step, f"Search last known position {destination}")

        memory.search_turns_remaining -= 1
        if memory.search_turns_remaining <= 0:
            memory.last_known_position = None
            return AIAction.wait("Give up the search")
        neighbors = context.free_neighbors()
        if not neighbors:
            return AIAction.wait("Look around")
        step = neighbors[context.rng.randrange(len(neighbors))]
        return AIAction.move(step, f"Look around {destination}")


class WanderGoal(BaseGoal):
    """Fallback: drift to a random free neighbour or stay put."""

    name = "wander"

    def score(self, context: AIContext) -> float:
        return WANDER_SCORE

    def execute(self, context: AIContext) -> AIAction:
        neighbors = context.free_neighbors()
        if not neighbors:
            return AIAction.wait("Wait (nowhere to go)")
        step = neighbors[context.rng.randrange(len(neighbors))]
        return AIAction.move(step, "Wander")

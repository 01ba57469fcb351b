"""
Goal-driven decision making.

Every AI-controlled combatant owns an AIDecisionEngine: its goals in
declaration order, the goal currently active and its memory. A decision
scores every goal, switches goal when another one wins and executes the
winner.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from pitsim.character.combatant import Combatant
from pitsim.core.logging import log_debug

from .context import AIAction, AIContext, AIMemory
from .goals import (
    FleeGoal,
    Goal,
    KiteGoal,
    MeleeAttackGoal,
    PursueGoal,
    RangedAttackGoal,
    ScootGoal,
    SearchLastKnownPositionGoal,
    WanderGoal,
)

# Number of reasons kept in the memory history.
HISTORY_LENGTH = 20


@dataclass
class Decision:
    """The goal that won, what it decided and every score."""

    goal: Goal | None
    action: AIAction
    scores: dict[str, float] = field(default_factory=dict)

    @property
    def goal_name(self) -> str:
        return self.goal.name if self.goal is not None else "none"


def build_goals(actor: Combatant) -> list[Goal]:
    """
    Goals of a combatant, most urgent first.

    The 'cowardly' tag adds a FleeGoal in front of the others.

    Args:
        actor (Combatant): The combatant.

    Returns:
        list[Goal]: The goals in declaration order.

    """
    goals: list[Goal] = []
    if "cowardly" in actor.ai_tags:
        goals.append(FleeGoal())
    goals += [
        ScootGoal(),
        KiteGoal(),
        RangedAttackGoal(),
        MeleeAttackGoal(),
        SearchLastKnownPositionGoal(),
        PursueGoal(),
        WanderGoal(),
    ]
    return goals


class AIDecisionEngine:
    """
    Chooses the actions of one combatant.

    Args:
        goals (Sequence[Goal]): Goals in declaration order, which breaks ties
            between equal scores.
        memory (AIMemory | None): Starting memory, a blank one by default.
    """

    def __init__(self, goals: Sequence[Goal], memory: AIMemory | None = None) -> None:
        self.goals: list[Goal] = list(goals)
        self.memory: AIMemory = memory or AIMemory()
        self.current_goal: Goal | None = None

    @classmethod
    def for_combatant(cls, actor: Combatant) -> AIDecisionEngine:
        return cls(build_goals(actor))

    def observe(self, context: AIContext) -> None:
        """
        Updates the memory with what the actor sees before scoring.

        A visible target refreshes the last known position. Otherwise the
        count of unseen turns grows while a position is remembered. The
        shoot-and-scoot countdown also ticks here, and ends early once the
        nearest enemy is far enough.
        """
        memory = self.memory
        if context.target_visible:
            memory.last_known_position = context.target.position
            memory.turns_since_seen = 0
        elif memory.last_known_position is not None:
            memory.turns_since_seen += 1

        memory.scooting = False
        if memory.scoot_turns_remaining > 0:
            memory.scoot_turns_remaining -= 1
            if context.distance_to_target >= memory.scoot_safe_distance:
                memory.scoot_turns_remaining = 0
            else:
                memory.scooting = True

    def select(self, context: AIContext) -> tuple[Goal | None, dict[str, float]]:
        """
        The goal with the highest positive score.

        Returns:
            tuple[Goal | None, dict[str, float]]: The winner, None when no
            goal scores above zero, and all the scores.

        """
        scores: dict[str, float] = {}
        best: Goal | None = None
        best_score = 0.0
        for goal in self.goals:
            score = goal.score(context)
            scores[goal.name] = score
            if score > best_score:
                best, best_score = goal, score
        return best, scores

    def switch_to(self, goal: Goal | None, context: AIContext) -> None:
        if goal is self.current_goal:
            return
        if self.current_goal is not None:
            self.current_goal.on_deactivated(context)
        self.current_goal = goal
        if goal is not None:
            goal.on_activated(context)

    def decide(self, context: AIContext) -> Decision:
        """
        Picks and executes the goal for this decision.

        Args:
            context (AIContext): The snapshot of the battlefield.

        Returns:
            Decision: The winning goal, its action and all the scores.

        """
        self.observe(context)
        goal, scores = self.select(context)
        self.switch_to(goal, context)
        if goal is None:
            action = AIAction.wait("Nothing to do")
        else:
            action = goal.execute(context)
        self.memory.history.append(action.reasoning)
        del self.memory.history[:-HISTORY_LENGTH]
        decision = Decision(goal, action, scores)
        log_debug(
            f"{context.actor.uid} chose {decision.goal_name}",
            {"turn": context.turn, "action": action.kind.value, "reason": action.reasoning},
        )
        return decision

"""
One fight between two teams, from spawn to the last blow.

The encounter wires the scheduler, one decision engine per combatant and
the resolvers around a single random generator. Everything random in a
trial is drawn from that generator, so the same seed replays the same
fight.
"""

from __future__ import annotations

import random
from collections.abc import Sequence

from pitsim.ai.context import (
    ActionKind,
    AIAction,
    always_visible,
    build_context,
    within_vision_range,
)
from pitsim.ai.decision_engine import AIDecisionEngine
from pitsim.character.combatant import Combatant, CombatantBlueprint
from pitsim.character.regeneration import process_regeneration, process_willpower_regeneration
from pitsim.combat.combat_resolver import CombatResolver
from pitsim.combat.events import (
    ActorReadyEvent,
    CombatEndEvent,
    CombatListener,
    CombatStartEvent,
    DecisionEvent,
    EventDispatcher,
    MoveEvent,
    RegenerationEvent,
    RoundCappedEvent,
    TurnStartEvent,
    WaitEvent,
)
from pitsim.combat.skill_resolver import SkillResolver
from pitsim.combat.turn_scheduler import ScheduledActor, TurnScheduler, attack_action_cost
from pitsim.core.config import SimulationConfig
from pitsim.core.constants import STANDARD_ACTION_DELAY, Team, Winner
from pitsim.core.utils import Cell, chebyshev_distance
from pitsim.pathfinding.grid import ArenaGrid

from .statistics import TrialOutcome


def starting_position(team: Team, index: int, config: SimulationConfig) -> Cell:
    """Team A lines up on column 0, team B on column starting_distance, one row each."""
    column = 0 if team == Team.A else config.starting_distance
    return (column, index)


class Encounter:
    """
    A single trial.

    Args:
        team_a (Sequence[CombatantBlueprint]): Blueprints of team A.
        team_b (Sequence[CombatantBlueprint]): Blueprints of team B.
        rng (random.Random): The trial generator.
        config (SimulationConfig | None): Arena and turn cap settings.
        listeners (list[CombatListener] | None): Receivers of the combat
            events, e.g. the verbose narrator.

    Raises:
        ValueError: If a team is empty or does not fit in the arena.
    """

    def __init__(
        self,
        team_a: Sequence[CombatantBlueprint],
        team_b: Sequence[CombatantBlueprint],
        rng: random.Random,
        config: SimulationConfig | None = None,
        listeners: list[CombatListener] | None = None,
    ) -> None:
        self.config = config or SimulationConfig()
        if not team_a or not team_b:
            raise ValueError("Both teams need at least one combatant")
        rows = self.config.arena_size + 1
        if len(team_a) > rows or len(team_b) > rows:
            raise ValueError(f"A team cannot have more than {rows} members in this arena")

        self.rng = rng
        self.events = EventDispatcher(listeners)
        self.grid = ArenaGrid(self.config.arena_size)
        self.can_see = within_vision_range if self.config.use_vision else always_visible

        self.combatants: list[Combatant] = []
        for team, blueprints in ((Team.A, team_a), (Team.B, team_b)):
            for index, blueprint in enumerate(blueprints):
                position = starting_position(team, index, self.config)
                self.combatants.append(blueprint.spawn(team, position))

        self.scheduler = TurnScheduler(rng)
        for combatant in self.combatants:
            self.scheduler.register(combatant)
        self.brains: dict[str, AIDecisionEngine] = {
            c.uid: AIDecisionEngine.for_combatant(c) for c in self.combatants
        }
        self.resolver = CombatResolver(rng, self.events)
        self.skill_resolver = SkillResolver(rng, self.events)

        self.turn = 0
        self.damage_dealt: dict[Team, int] = {Team.A: 0, Team.B: 0}

    # ============================================================================
    # STATE
    # ============================================================================

    def living(self, team: Team) -> list[Combatant]:
        return [c for c in self.combatants if c.team == team and c.is_alive]

    def is_over(self) -> bool:
        return not self.living(Team.A) or not self.living(Team.B)

    def winner(self) -> Winner:
        a_alive = bool(self.living(Team.A))
        b_alive = bool(self.living(Team.B))
        if a_alive and not b_alive:
            return Winner.A
        if b_alive and not a_alive:
            return Winner.B
        return Winner.DRAW

    def is_occupied(self, cell: Cell) -> bool:
        return any(c.is_alive and c.position == cell for c in self.combatants)

    # ============================================================================
    # MAIN LOOP
    # ============================================================================

    def run(self) -> TrialOutcome:
        """
        Fights until one team is wiped out or the turn cap is reached.

        Every turn advances all living actors by a standard action's worth of
        energy, then lets them act until nobody is ready.

        Returns:
            TrialOutcome: The outcome; a capped fight is a draw.

        """
        self._emit(CombatStartEvent, combatants=list(self.combatants))
        while not self.is_over() and self.turn < self.config.max_turns:
            self.turn += 1
            self._emit(TurnStartEvent)
            self.scheduler.advance(STANDARD_ACTION_DELAY)
            report = self.scheduler.run_round(self.take_action, should_stop=self.is_over)
            if report.capped:
                self._emit(RoundCappedEvent, iterations=report.count)
            self.scheduler.prune()

        winner = self.winner()
        self._emit(CombatEndEvent, winner=winner.value, combatants=list(self.combatants))
        survivors_a = self.living(Team.A)
        survivors_b = self.living(Team.B)
        return TrialOutcome(
            winner=winner,
            turns=self.turn,
            team_a_damage=self.damage_dealt[Team.A],
            team_b_damage=self.damage_dealt[Team.B],
            team_a_survivors=len(survivors_a),
            team_b_survivors=len(survivors_b),
            team_a_survivor_health=sum(c.current_health for c in survivors_a),
            team_b_survivor_health=sum(c.current_health for c in survivors_b),
        )

    def take_action(self, actor: ScheduledActor) -> int:
        """
        Lets the AI of a ready actor decide and applies the action.

        Returns:
            int: The energy the action costs at the actor's speed.

        """
        combatant = actor.combatant
        if self.events.active:
            self._emit(
                ActorReadyEvent,
                actor=combatant,
                energy=actor.accumulated_energy,
                delay=actor.delay_cost(),
            )

        brain = self.brains[combatant.uid]
        context = build_context(
            combatant,
            self.combatants,
            brain.memory,
            self.grid.is_walkable,
            self.rng,
            self.turn,
            self.can_see,
        )
        decision = brain.decide(context)
        if self.events.active:
            self._emit(
                DecisionEvent,
                actor=combatant,
                goal=decision.goal_name,
                action=decision.action.kind.value,
                reasoning=decision.action.reasoning,
                scores=decision.scores,
            )

        cost = self.apply(combatant, decision.action)
        self.regenerate(combatant)
        return actor.delay_cost(cost, self.rng)

    # ============================================================================
    # ACTIONS
    # ============================================================================

    def apply(self, combatant: Combatant, action: AIAction) -> int:
        """
        Carries out an action.

        Returns:
            int: The base delay of the action.

        """
        if action.kind == ActionKind.ATTACK and action.attack is not None and action.target is not None:
            result = self.resolver.resolve(combatant, action.target, action.attack, self.turn)
            self.damage_dealt[combatant.team] += result.applied_damage
            return attack_action_cost(action.attack.delay)

        if action.kind == ActionKind.SKILL and action.skill is not None and action.target is not None:
            result = self.skill_resolver.resolve(combatant, action.target, action.skill, self.turn)
            self.damage_dealt[combatant.team] += result.applied_damage
            return STANDARD_ACTION_DELAY

        if action.kind == ActionKind.MOVE and action.destination is not None:
            self.move(combatant, action.destination)
            return STANDARD_ACTION_DELAY

        self._emit(WaitEvent, actor=combatant, reason=action.reasoning)
        return STANDARD_ACTION_DELAY

    def move(self, combatant: Combatant, destination: Cell) -> bool:
        """Steps to an adjacent free cell; a blocked step leaves the combatant in place."""
        origin = combatant.position
        moved = (
            chebyshev_distance(origin, destination) == 1
            and self.grid.is_walkable(destination)
            and not self.is_occupied(destination)
        )
        if moved:
            combatant.position = destination
        self._emit(MoveEvent, actor=combatant, origin=origin, destination=destination, moved=moved)
        return moved

    def regenerate(self, combatant: Combatant) -> None:
        health = process_regeneration(combatant)
        willpower = process_willpower_regeneration(combatant)
        if health or willpower:
            self._emit(RegenerationEvent, actor=combatant, health=health, willpower=willpower)

    def _emit(self, event_class: type, **kwargs) -> None:
        if not self.events.active:
            return
        kwargs.setdefault("turn", self.turn)
        self.events.emit(event_class(**kwargs))


def run_trial(
    team_a: Sequence[CombatantBlueprint],
    team_b: Sequence[CombatantBlueprint],
    seed: int,
    config: SimulationConfig | None = None,
    listeners: list[CombatListener] | None = None,
) -> TrialOutcome:
    """Runs one encounter with a generator seeded from seed."""
    return Encounter(team_a, team_b, random.Random(seed), config, listeners).run()

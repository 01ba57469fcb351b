"""
Energy-based turn scheduler.

Every actor accumulates energy when time advances. An actor is ready once
its energy covers the delay of a standard action at its speed; acting
deducts the delay of the action it took. Energy is carried over from one
round to the next and may go negative after an expensive action.
"""

from __future__ import annotations

import random
from collections.abc import Callable
from dataclasses import dataclass, field

from catchery import log_warning

from pitsim.character.combatant import Combatant
from pitsim.core.constants import (
    AVERAGE_SPEED,
    MAX_ROUND_ITERATIONS,
    MIN_DELAY,
    MIN_SPEED,
    STANDARD_ACTION_DELAY,
)
from pitsim.core.dice_parser import round_half_up, weighted_round

# (base_delay, speed, rng) -> delay in energy units.
DelayFunction = Callable[[int, int, "random.Random | None"], int]


def calculate_delay(base_delay: int, speed: int, rng: random.Random | None = None) -> int:
    """
    Delay of an action at the given speed.

    base_delay * AVERAGE_SPEED / speed, rounded (randomly weighted by the
    fraction when a generator is given, half up otherwise) and never below
    MIN_DELAY.

    Args:
        base_delay (int): Cost of the action at average speed.
        speed (int): Effective speed of the actor.
        rng (random.Random | None): Generator for weighted rounding.

    Returns:
        int: The delay.

    """
    effective_speed = max(MIN_SPEED, speed)
    raw = base_delay * AVERAGE_SPEED / effective_speed
    delay = weighted_round(raw, rng) if rng is not None else round_half_up(raw)
    return max(MIN_DELAY, delay)


def attack_action_cost(weapon_delay: float) -> int:
    """Base delay of an attack made with a weapon of the given delay."""
    return round_half_up(STANDARD_ACTION_DELAY * weapon_delay)


class ScheduledActor:
    """A combatant wrapped with its energy bookkeeping."""

    def __init__(
        self,
        combatant: Combatant,
        accumulated_energy: int = 0,
        delay_function: DelayFunction = calculate_delay,
    ) -> None:
        if accumulated_energy < 0:
            raise ValueError("accumulated_energy must not be negative at registration")
        self.combatant = combatant
        self.accumulated_energy = accumulated_energy
        self.delay_function = delay_function

    @property
    def speed(self) -> int:
        return self.combatant.speed

    @property
    def is_alive(self) -> bool:
        return self.combatant.is_alive

    def delay_cost(self, base_delay: int = STANDARD_ACTION_DELAY, rng: random.Random | None = None) -> int:
        return self.delay_function(base_delay, self.speed, rng)

    def is_ready(self, base_delay: int = STANDARD_ACTION_DELAY, rng: random.Random | None = None) -> bool:
        return self.accumulated_energy >= self.delay_cost(base_delay, rng)

    def __repr__(self) -> str:
        return f"ScheduledActor({self.combatant.uid}, energy={self.accumulated_energy})"


@dataclass
class RoundReport:
    """What happened during run_round."""

    actions: list[ScheduledActor] = field(default_factory=list)
    capped: bool = False

    @property
    def count(self) -> int:
        return len(self.actions)


class TurnScheduler:
    """
    Orders actors by accumulated energy.

    Args:
        rng (random.Random | None): Generator used for weighted rounding of
            delays. Without one, delays are rounded half up.
        max_iterations (int): Maximum actions processed by run_round.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        max_iterations: int = MAX_ROUND_ITERATIONS,
    ) -> None:
        self.rng = rng
        self.max_iterations = max_iterations
        self.actors: list[ScheduledActor] = []

    def register(
        self,
        entry: Combatant | ScheduledActor,
        accumulated_energy: int = 0,
    ) -> ScheduledActor:
        """
        Adds an actor; registration order breaks ties between equal speeds.

        Args:
            entry (Combatant | ScheduledActor): The combatant, or an already
                wrapped actor.
            accumulated_energy (int): Starting energy of a bare combatant.

        Returns:
            ScheduledActor: The registered actor.

        """
        actor = entry if isinstance(entry, ScheduledActor) else ScheduledActor(entry, accumulated_energy)
        self.actors.append(actor)
        return actor

    def actor_for(self, combatant: Combatant) -> ScheduledActor | None:
        return next((a for a in self.actors if a.combatant is combatant), None)

    @property
    def living(self) -> list[ScheduledActor]:
        return [a for a in self.actors if a.is_alive]

    def advance(self, amount: int, exclude: ScheduledActor | None = None) -> None:
        """
        Gives every living actor, except exclude, amount energy.

        Raises:
            ValueError: If amount is negative.

        """
        if amount < 0:
            raise ValueError("Time only moves forward")
        for actor in list(self.actors):
            if actor is exclude or not actor.is_alive:
                continue
            actor.accumulated_energy += amount

    def next_ready(self, base_delay: int = STANDARD_ACTION_DELAY) -> ScheduledActor | None:
        """
        The ready actor with the highest speed, first registered on ties.

        Returns:
            ScheduledActor | None: None when nobody can act.

        """
        best: ScheduledActor | None = None
        for actor in list(self.actors):
            if not actor.is_alive:
                continue
            if not actor.is_ready(base_delay, self.rng):
                continue
            if best is None or actor.speed > best.speed:
                best = actor
        return best

    def deduct(self, actor: ScheduledActor, delay: int) -> None:
        """Subtracts exactly delay; the result may be negative."""
        actor.accumulated_energy -= delay

    def prune(self) -> list[ScheduledActor]:
        """Drops dead actors, keeping the order of the others, and returns them."""
        dead = [a for a in self.actors if not a.is_alive]
        self.actors = [a for a in self.actors if a.is_alive]
        return dead

    def run_round(
        self,
        act: Callable[[ScheduledActor], int],
        base_delay: int = STANDARD_ACTION_DELAY,
        should_stop: Callable[[], bool] | None = None,
    ) -> RoundReport:
        """
        Lets every ready actor act until nobody is ready.

        Args:
            act (Callable[[ScheduledActor], int]): Performs the actor's action
                and returns the energy to deduct.
            base_delay (int): Base delay used to decide readiness.
            should_stop (Callable[[], bool] | None): Checked before every
                action, e.g. to end the round once a team is wiped out.

        Returns:
            RoundReport: The actors that acted, in order, and whether the
            iteration cap ended the round.

        """
        report = RoundReport()
        while True:
            if should_stop is not None and should_stop():
                return report
            actor = self.next_ready(base_delay)
            if actor is None:
                return report
            if len(report.actions) >= self.max_iterations:
                log_warning(
                    f"Scheduler round stopped after {self.max_iterations} actions",
                    {
                        "actor": actor.combatant.uid,
                        "energy": actor.accumulated_energy,
                        "speed": actor.speed,
                    },
                )
                report.capped = True
                return report
            delay = act(actor)
            self.deduct(actor, delay)
            report.actions.append(actor)

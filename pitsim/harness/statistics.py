"""
Trial outcomes and their aggregation.

Workers fold their trials into a TrialTally of integer sums. Tallies merge
by addition, so the final AggregateResult does not depend on how the trials
were split between workers.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass, fields

from pydantic import BaseModel, ConfigDict, Field

from pitsim.core.constants import Team, Winner

# Two-sided 95% normal quantile.
Z_95 = 1.96


@dataclass(frozen=True)
class TrialOutcome:
    """Result of one trial."""

    winner: Winner
    turns: int
    team_a_damage: int = 0
    team_b_damage: int = 0
    team_a_survivors: int = 0
    team_b_survivors: int = 0
    team_a_survivor_health: int = 0
    team_b_survivor_health: int = 0


@dataclass
class TrialTally:
    """Running integer sums over a batch of trials."""

    iterations: int = 0
    team_a_wins: int = 0
    team_b_wins: int = 0
    draws: int = 0
    turns: int = 0
    team_a_damage: int = 0
    team_b_damage: int = 0
    team_a_survivors: int = 0
    team_b_survivors: int = 0
    team_a_survivor_health: int = 0
    team_b_survivor_health: int = 0

    def add(self, outcome: TrialOutcome) -> None:
        self.iterations += 1
        if outcome.winner == Winner.A:
            self.team_a_wins += 1
        elif outcome.winner == Winner.B:
            self.team_b_wins += 1
        else:
            self.draws += 1
        self.turns += outcome.turns
        self.team_a_damage += outcome.team_a_damage
        self.team_b_damage += outcome.team_b_damage
        self.team_a_survivors += outcome.team_a_survivors
        self.team_b_survivors += outcome.team_b_survivors
        self.team_a_survivor_health += outcome.team_a_survivor_health
        self.team_b_survivor_health += outcome.team_b_survivor_health

    def merge(self, other: TrialTally) -> TrialTally:
        """Adds the sums of other into this tally and returns it."""
        for f in fields(self):
            setattr(self, f.name, getattr(self, f.name) + getattr(other, f.name))
        return self

    @classmethod
    def of(cls, outcomes: Iterable[TrialOutcome]) -> TrialTally:
        tally = cls()
        for outcome in outcomes:
            tally.add(outcome)
        return tally


def confidence_interval_95(wins: int, iterations: int) -> float:
    """Half-width of the normal-approximation interval on wins / iterations."""
    if iterations <= 0:
        return 0.0
    p = wins / iterations
    return Z_95 * math.sqrt(p * (1 - p) / iterations)


class AggregateResult(BaseModel):
    """Statistics of a scenario, immutable once built."""

    model_config = ConfigDict(frozen=True)

    scenario: str = Field(description="Label of the scenario, e.g. 'goblin vs rat'")
    iterations: int = Field(description="Number of trials")
    team_a_wins: int
    team_b_wins: int
    draws: int
    team_a_win_rate: float
    team_b_win_rate: float
    draw_rate: float
    confidence_interval_95: float = Field(
        description="Half-width of the 95% interval on team A's win rate"
    )
    avg_turns: float
    avg_team_a_damage: float
    avg_team_b_damage: float
    avg_team_a_survivors: float
    avg_team_b_survivors: float
    avg_team_a_survivor_health: float
    avg_team_b_survivor_health: float

    @property
    def ci_low(self) -> float:
        return max(0.0, self.team_a_win_rate - self.confidence_interval_95)

    @property
    def ci_high(self) -> float:
        return min(1.0, self.team_a_win_rate + self.confidence_interval_95)

    def win_rate(self, team: Team) -> float:
        return self.team_a_win_rate if team == Team.A else self.team_b_win_rate

    def remaining_health_when_winning(self, team: Team) -> float:
        """Average health left to the survivors of team in the trials it won."""
        rate = self.win_rate(team)
        if rate <= 0:
            return 0.0
        health = self.avg_team_a_survivor_health if team == Team.A else self.avg_team_b_survivor_health
        return health / rate


def aggregate(scenario: str, tally: TrialTally) -> AggregateResult:
    """
    Builds the statistics of a scenario from its tally.

    Args:
        scenario (str): Label of the scenario.
        tally (TrialTally): Sums over every trial.

    Returns:
        AggregateResult: The statistics.

    Raises:
        ValueError: If the tally holds no trial.

    """
    n = tally.iterations
    if n <= 0:
        raise ValueError(f"No trials to aggregate for {scenario}")
    return AggregateResult(
        scenario=scenario,
        iterations=n,
        team_a_wins=tally.team_a_wins,
        team_b_wins=tally.team_b_wins,
        draws=tally.draws,
        team_a_win_rate=tally.team_a_wins / n,
        team_b_win_rate=tally.team_b_wins / n,
        draw_rate=tally.draws / n,
        confidence_interval_95=confidence_interval_95(tally.team_a_wins, n),
        avg_turns=tally.turns / n,
        avg_team_a_damage=tally.team_a_damage / n,
        avg_team_b_damage=tally.team_b_damage / n,
        avg_team_a_survivors=tally.team_a_survivors / n,
        avg_team_b_survivors=tally.team_b_survivors / n,
        avg_team_a_survivor_health=tally.team_a_survivor_health / n,
        avg_team_b_survivor_health=tally.team_b_survivor_health / n,
    )

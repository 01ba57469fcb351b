"""
Monte Carlo scenarios.

A scenario is two teams of blueprints. Running it plays many independent
trials; trial i uses a generator seeded with seed + i, so the statistics
only depend on the seed and the number of iterations, never on how the
trials are spread over worker processes.
"""

from __future__ import annotations

import random
from collections.abc import Sequence
from concurrent.futures import ProcessPoolExecutor

from pydantic import BaseModel, Field

from pitsim.character.combatant import CombatantBlueprint
from pitsim.character.definitions import CreatureDefinition
from pitsim.core.config import SimulationConfig
from pitsim.core.content import ContentRepository
from pitsim.core.logging import log_info

from .encounter import Encounter
from .statistics import AggregateResult, TrialTally, aggregate
from .verbose_logger import VerboseLogger

DEFAULT_ITERATIONS = 1000
DEFAULT_SEED = 42

# (creature, count) pairs making up a team; creatures are ids or definitions.
TeamSpec = list[tuple[CreatureDefinition | str, int]]


class Scenario(BaseModel):
    """Two teams and a name."""

    name: str = Field(description="Label used in reports")
    team_a: list[CombatantBlueprint] = Field(description="Blueprints of team A, one per member")
    team_b: list[CombatantBlueprint] = Field(description="Blueprints of team B, one per member")


class VariationResult(BaseModel):
    """A loadout of the variation test and how it fared."""

    variation: str
    equipment: list[str] = Field(default_factory=list)
    result: AggregateResult


# ============================================================================
# RUNNING TRIALS
# ============================================================================


def run_trials(
    scenario: Scenario,
    start: int,
    stop: int,
    seed: int,
    config: SimulationConfig,
) -> TrialTally:
    """
    Plays trials start to stop - 1 of a scenario.

    This is the unit of work shipped to a worker process, so it only takes
    picklable arguments.

    Returns:
        TrialTally: The sums over the trials.

    """
    tally = TrialTally()
    listener = VerboseLogger() if config.verbose else None
    for index in range(start, stop):
        if listener is not None:
            listener.start_trial(index + 1, seed + index)
        encounter = Encounter(
            scenario.team_a,
            scenario.team_b,
            random.Random(seed + index),
            config,
            [listener] if listener is not None else None,
        )
        tally.add(encounter.run())
    return tally


def _chunks(iterations: int, chunk_size: int) -> list[tuple[int, int]]:
    return [(start, min(start + chunk_size, iterations)) for start in range(0, iterations, chunk_size)]


def run_scenario(
    scenario: Scenario,
    iterations: int = DEFAULT_ITERATIONS,
    seed: int = DEFAULT_SEED,
    config: SimulationConfig | None = None,
) -> AggregateResult:
    """
    Runs every trial of a scenario and aggregates the outcomes.

    Verbose runs always stay in the calling process so that the narration
    comes out in order.

    Args:
        scenario (Scenario): The teams.
        iterations (int): Number of trials.
        seed (int): Base seed.
        config (SimulationConfig | None): Settings, defaults otherwise.

    Returns:
        AggregateResult: The statistics.

    Raises:
        ValueError: If iterations is not positive.

    """
    if iterations < 1:
        raise ValueError("iterations must be at least 1")
    config = config or SimulationConfig()
    chunks = _chunks(iterations, config.chunk_size)
    workers = 1 if config.verbose else min(config.workers, len(chunks))

    log_info(
        f"Running {scenario.name}",
        {"iterations": iterations, "seed": seed, "workers": workers},
    )
    tally = TrialTally()
    if workers == 1:
        for start, stop in chunks:
            tally.merge(run_trials(scenario, start, stop, seed, config))
    else:
        with ProcessPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(run_trials, scenario, start, stop, seed, config)
                for start, stop in chunks
            ]
            for future in futures:
                tally.merge(future.result())
    return aggregate(scenario.name, tally)


# ============================================================================
# SCENARIO BUILDERS
# ============================================================================


def parse_team_string(text: str) -> TeamSpec:
    """
    Parses a team such as 'goblin:3,rat'.

    A missing count means one.

    Raises:
        ValueError: On an empty team, an empty id or a count below one.

    """
    team: TeamSpec = []
    for part in text.split(","):
        part = part.strip()
        if not part:
            continue
        creature_id, _, count_text = part.partition(":")
        creature_id = creature_id.strip()
        if not creature_id:
            raise ValueError(f"Missing creature id in team '{text}'")
        try:
            count = int(count_text) if count_text.strip() else 1
        except ValueError as e:
            raise ValueError(f"Invalid count '{count_text}' for {creature_id}") from e
        if count < 1:
            raise ValueError(f"Count for {creature_id} must be at least 1")
        team.append((creature_id, count))
    if not team:
        raise ValueError(f"Empty team: '{text}'")
    return team


def format_team(team: TeamSpec) -> str:
    """'3x goblin, rat' style description."""
    parts = []
    for creature, count in team:
        creature_id = creature if isinstance(creature, str) else creature.id
        parts.append(f"{count}x {creature_id}" if count > 1 else creature_id)
    return ", ".join(parts)


def duel_scenario(
    repository: ContentRepository,
    creature_a: CreatureDefinition | str,
    creature_b: CreatureDefinition | str,
    equipment_a: list[str] | None = None,
    equipment_b: list[str] | None = None,
) -> Scenario:
    a = repository.build_blueprint(creature_a, equipment_a)
    b = repository.build_blueprint(creature_b, equipment_b)
    return Scenario(name=f"{a.name} vs {b.name}", team_a=[a], team_b=[b])


def group_scenario(
    repository: ContentRepository,
    team_a: TeamSpec,
    team_b: TeamSpec,
) -> Scenario:
    def expand(team: TeamSpec) -> list[CombatantBlueprint]:
        members = []
        for creature, count in team:
            blueprint = repository.build_blueprint(creature)
            members.extend([blueprint] * count)
        return members

    return Scenario(
        name=f"[{format_team(team_a)}] vs [{format_team(team_b)}]",
        team_a=expand(team_a),
        team_b=expand(team_b),
    )


def run_duel(
    repository: ContentRepository,
    creature_a: CreatureDefinition | str,
    creature_b: CreatureDefinition | str,
    iterations: int = DEFAULT_ITERATIONS,
    seed: int = DEFAULT_SEED,
    config: SimulationConfig | None = None,
    equipment_a: list[str] | None = None,
    equipment_b: list[str] | None = None,
) -> AggregateResult:
    """
    One creature against another.

    Args:
        repository (ContentRepository): Where creatures and items come from.
        creature_a (CreatureDefinition | str): Team A, by definition or id.
        creature_b (CreatureDefinition | str): Team B, by definition or id.
        iterations (int): Number of trials.
        seed (int): Base seed.
        config (SimulationConfig | None): Settings.
        equipment_a (list[str] | None): Replaces the equipment of A.
        equipment_b (list[str] | None): Replaces the equipment of B.

    Returns:
        AggregateResult: The statistics, labelled 'A vs B'.

    """
    scenario = duel_scenario(repository, creature_a, creature_b, equipment_a, equipment_b)
    return run_scenario(scenario, iterations, seed, config)


def run_group_battle(
    repository: ContentRepository,
    team_a: TeamSpec | str,
    team_b: TeamSpec | str,
    iterations: int = DEFAULT_ITERATIONS,
    seed: int = DEFAULT_SEED,
    config: SimulationConfig | None = None,
) -> AggregateResult:
    """Team against team, each given as (id, count) pairs or as 'id:count,...'."""
    if isinstance(team_a, str):
        team_a = parse_team_string(team_a)
    if isinstance(team_b, str):
        team_b = parse_team_string(team_b)
    scenario = group_scenario(repository, team_a, team_b)
    return run_scenario(scenario, iterations, seed, config)


def run_variations(
    repository: ContentRepository,
    creature: CreatureDefinition | str,
    opponent: CreatureDefinition | str,
    variations: Sequence[tuple[str, list[str]]],
    iterations: int = DEFAULT_ITERATIONS,
    seed: int = DEFAULT_SEED,
    config: SimulationConfig | None = None,
) -> list[VariationResult]:
    """
    Tries several loadouts of the same creature against one opponent.

    Args:
        variations (Sequence[tuple[str, list[str]]]): Name and equipment of
            each loadout.

    Returns:
        list[VariationResult]: Best loadout first, by team A win rate.

    """
    creature_id = creature if isinstance(creature, str) else creature.id
    opponent_id = opponent if isinstance(opponent, str) else opponent.id
    results = []
    for name, equipment in variations:
        scenario = duel_scenario(repository, creature, opponent, equipment_a=list(equipment))
        scenario.name = f"{creature_id} ({name}) vs {opponent_id}"
        result = run_scenario(scenario, iterations, seed, config)
        results.append(VariationResult(variation=name, equipment=list(equipment), result=result))
    results.sort(key=lambda r: r.result.team_a_win_rate, reverse=True)
    return results


def run_matrix(
    repository: ContentRepository,
    creature_ids: Sequence[str] | None = None,
    iterations: int = DEFAULT_ITERATIONS,
    seed: int = DEFAULT_SEED,
    config: SimulationConfig | None = None,
) -> list[AggregateResult]:
    """
    Every creature against every creature, mirror matches included.

    Args:
        creature_ids (Sequence[str] | None): The creatures, all of them when
            None.

    Returns:
        list[AggregateResult]: One result per ordered pair, row by row.

    """
    ids = list(creature_ids) if creature_ids is not None else sorted(repository.creatures)
    return [
        run_duel(repository, a, b, iterations, seed, config)
        for a in ids
        for b in ids
    ]

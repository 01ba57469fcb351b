"""
Report formats for aggregate results: console, compact, JSON and CSV.
"""

import json
from collections.abc import Sequence
from typing import Any

from rich.markup import escape
from rich.table import Table

from pitsim.core.config import SimulationConfig
from pitsim.core.constants import Team
from pitsim.core.utils import cprint, crule

from .scenarios import VariationResult
from .statistics import AggregateResult

CSV_HEADERS = [
    "scenario",
    "iterations",
    "teamAWins",
    "teamBWins",
    "draws",
    "teamAWinRate",
    "teamBWinRate",
    "confidenceInterval95",
    "avgTurns",
    "avgTeamADamage",
    "avgTeamBDamage",
    "avgTeamASurvivors",
    "avgTeamBSurvivors",
    "avgTeamASurvivorHealth",
    "avgTeamBSurvivorHealth",
]


def format_percent(value: float, decimals: int = 1) -> str:
    return f"{value * 100:.{decimals}f}%"


def team_names(scenario: str) -> tuple[str, str]:
    """Splits 'A vs B' (or '[...] vs [...]') into the two side names."""
    left, sep, right = scenario.partition(" vs ")
    if not sep:
        return "Team A", "Team B"
    return _unbracket(left), _unbracket(right)


def _unbracket(side: str) -> str:
    side = side.strip()
    if side.startswith("[") and side.endswith("]"):
        side = side[1:-1]
    return side.strip()


# ============================================================================
# CONSOLE
# ============================================================================


def print_results(result: AggregateResult) -> None:
    """
    Prints the full report of a scenario.

    Args:
        result (AggregateResult): The statistics to print.

    """
    name_a, name_b = team_names(result.scenario)
    crule(f"{escape(result.scenario)} (n={result.iterations})", style="bold")

    table = Table(pad_edge=False)
    table.add_column("", style="bold")
    table.add_column(Team.A.colorize(escape(name_a)), justify="right")
    table.add_column(Team.B.colorize(escape(name_b)), justify="right")
    ci = format_percent(result.confidence_interval_95)
    table.add_row(
        "Win rate",
        f"{format_percent(result.team_a_win_rate)} ± {ci}",
        f"{format_percent(result.team_b_win_rate)} ± {ci}",
    )
    table.add_row(
        "Avg damage",
        f"{result.avg_team_a_damage:.1f}",
        f"{result.avg_team_b_damage:.1f}",
    )
    if result.avg_team_a_survivors > 1 or result.avg_team_b_survivors > 1:
        table.add_row(
            "Avg survivors",
            f"{result.avg_team_a_survivors:.1f}",
            f"{result.avg_team_b_survivors:.1f}",
        )
    table.add_row(
        "Remaining HP (when winning)",
        f"{result.remaining_health_when_winning(Team.A):.1f}",
        f"{result.remaining_health_when_winning(Team.B):.1f}",
    )
    cprint(table)

    cprint(f"  Average turns: {result.avg_turns:.1f}")
    if result.draws > 0:
        cprint(f"  Draws: {format_percent(result.draw_rate)}")


def compact_line(result: AggregateResult) -> str:
    """'goblin vs rat: 60.0% vs 39.0% (±3.0%, n=1000)'."""
    return (
        f"{result.scenario}: "
        f"{format_percent(result.team_a_win_rate)} vs {format_percent(result.team_b_win_rate)} "
        f"(±{format_percent(result.confidence_interval_95)}, n={result.iterations})"
    )


def print_compact(result: AggregateResult) -> None:
    cprint(compact_line(result), markup=False, highlight=False)


def print_comparison(results: Sequence[AggregateResult], title: str = "Comparison Results") -> None:
    """One row per scenario."""
    table = Table(title=title, pad_edge=False)
    table.add_column("Scenario")
    table.add_column("Win A", justify="right")
    table.add_column("Win B", justify="right")
    table.add_column("± CI", justify="right")
    table.add_column("Turns", justify="right")
    for result in results:
        table.add_row(
            escape(result.scenario),
            format_percent(result.team_a_win_rate),
            format_percent(result.team_b_win_rate),
            format_percent(result.confidence_interval_95),
            f"{result.avg_turns:.1f}",
        )
    cprint(table)


def print_variation_results(results: Sequence[VariationResult]) -> None:
    """Loadouts in the order given, which run_variations sorts best first."""
    table = Table(title="Variation Comparison", pad_edge=False)
    table.add_column("Variation")
    table.add_column("Equipment")
    table.add_column("Win Rate", justify="right")
    table.add_column("± CI", justify="right")
    table.add_column("Turns", justify="right")
    for entry in results:
        table.add_row(
            escape(entry.variation),
            ", ".join(entry.equipment) or "-",
            format_percent(entry.result.team_a_win_rate),
            format_percent(entry.result.confidence_interval_95),
            f"{entry.result.avg_turns:.1f}",
        )
    cprint(table)


# ============================================================================
# CSV
# ============================================================================


def escape_field(value: Any) -> str:
    """Quotes fields holding a comma, a quote or a line break, doubling the quotes."""
    text = str(value)
    if any(c in text for c in (",", '"', "\n", "\r")):
        return '"' + text.replace('"', '""') + '"'
    return text


def to_csv_row(result: AggregateResult) -> str:
    values = [
        result.scenario,
        result.iterations,
        result.team_a_wins,
        result.team_b_wins,
        result.draws,
        f"{result.team_a_win_rate:.4f}",
        f"{result.team_b_win_rate:.4f}",
        f"{result.confidence_interval_95:.4f}",
        f"{result.avg_turns:.2f}",
        f"{result.avg_team_a_damage:.2f}",
        f"{result.avg_team_b_damage:.2f}",
        f"{result.avg_team_a_survivors:.2f}",
        f"{result.avg_team_b_survivors:.2f}",
        f"{result.avg_team_a_survivor_health:.2f}",
        f"{result.avg_team_b_survivor_health:.2f}",
    ]
    return ",".join(escape_field(v) for v in values)


def to_csv(results: Sequence[AggregateResult]) -> str:
    return "\n".join([",".join(CSV_HEADERS)] + [to_csv_row(r) for r in results])


# ============================================================================
# JSON
# ============================================================================


def to_json_object(
    result: AggregateResult,
    iterations: int,
    seed: int,
    config: SimulationConfig | None = None,
) -> dict[str, Any]:
    """
    Nests a result as scenario, config, results and statistics.

    Returns:
        dict[str, Any]: The object, ready for json.dumps.

    """
    config = config or SimulationConfig()
    return {
        "scenario": result.scenario,
        "config": {
            "iterations": iterations,
            "seed": seed,
            "maxTurns": config.max_turns,
            "startingDistance": config.starting_distance,
            "arenaSize": config.arena_size,
            "workers": config.workers,
        },
        "results": {
            "teamAWins": result.team_a_wins,
            "teamBWins": result.team_b_wins,
            "draws": result.draws,
        },
        "statistics": {
            "teamAWinRate": result.team_a_win_rate,
            "teamBWinRate": result.team_b_win_rate,
            "drawRate": result.draw_rate,
            "confidenceInterval95": result.confidence_interval_95,
            "avgTurns": result.avg_turns,
            "avgTeamADamage": result.avg_team_a_damage,
            "avgTeamBDamage": result.avg_team_b_damage,
            "avgTeamASurvivors": result.avg_team_a_survivors,
            "avgTeamBSurvivors": result.avg_team_b_survivors,
            "avgTeamASurvivorHealth": result.avg_team_a_survivor_health,
            "avgTeamBSurvivorHealth": result.avg_team_b_survivor_health,
        },
    }


def to_json(
    results: Sequence[AggregateResult],
    iterations: int,
    seed: int,
    config: SimulationConfig | None = None,
) -> str:
    """A single object for one result, a list of objects otherwise."""
    objects = [to_json_object(r, iterations, seed, config) for r in results]
    payload: Any = objects[0] if len(objects) == 1 else objects
    return json.dumps(payload, indent=2)

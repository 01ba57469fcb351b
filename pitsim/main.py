"""
Command line entry point of the balance harness.

Runs Monte Carlo scenarios between the creatures of the data files and
prints the statistics, or shows what the data files contain:

    pitsim duel goblin rat --iterations 5000 --seed 7
    pitsim group "goblin:3" "skeleton:2" --output csv
    pitsim variation goblin rat --var "club:club" --var "spear:spear,leather_armor"
    pitsim matrix --iterations 200 --compact
    pitsim list creatures
    pitsim info goblin
"""

import argparse
import sys
from collections.abc import Sequence
from pathlib import Path

from catchery import log_warning

from pitsim.character.definitions import CreatureDefinition, ItemDefinition, SkillDefinition
from pitsim.character.inline import looks_inline, parse_inline_creature, parse_inline_creatures
from pitsim.core.config import SimulationConfig, resolve_data_dir
from pitsim.core.content import ContentRepository
from pitsim.core.error_handling import ERROR_HANDLER, ErrorSeverity, SimulatorError
from pitsim.core.logging import log_info, parse_level, setup_logging
from pitsim.core.sheets import (
    print_creature_list,
    print_creature_sheet,
    print_item_list,
    print_item_sheet,
    print_skill_sheet,
)
from pitsim.harness.reporters import (
    print_comparison,
    print_compact,
    print_results,
    print_variation_results,
    to_csv,
    to_json,
)
from pitsim.harness.scenarios import (
    DEFAULT_ITERATIONS,
    DEFAULT_SEED,
    TeamSpec,
    parse_team_string,
    run_duel,
    run_group_battle,
    run_matrix,
    run_variations,
)
from pitsim.harness.statistics import AggregateResult

OUTPUT_FORMATS = ("console", "json", "csv")


# ============================================================================
# ARGUMENT HELPERS
# ============================================================================


def split_items(text: str | None) -> list[str] | None:
    """'club, leather_armor' -> ['club', 'leather_armor']; None stays None."""
    if text is None:
        return None
    return [item.strip() for item in text.split(",") if item.strip()]


def parse_variation(text: str) -> tuple[str, list[str]]:
    """
    Parses 'name:item1,item2'. An empty item list means no equipment.

    Raises:
        ValueError: If the name is missing.

    """
    name, _, items = text.partition(":")
    name = name.strip()
    if not name:
        raise ValueError(f"Invalid variation '{text}', expected 'name:item1,item2'")
    return name, split_items(items) or []


def resolve_creature(text: str, repository: ContentRepository) -> CreatureDefinition | str:
    """An id stays an id; inline JSON becomes a definition."""
    if not looks_inline(text):
        return text
    creature, warnings = parse_inline_creature(text, repository)
    for warning in warnings:
        log_warning(warning, {"creature": creature.id})
    return creature


def resolve_team(text: str, repository: ContentRepository) -> TeamSpec:
    """'id:count,...' or a JSON array of inline creatures."""
    if not looks_inline(text):
        return parse_team_string(text)
    if text.lstrip().startswith("{"):
        return [(resolve_creature(text, repository), 1)]
    team: TeamSpec = []
    for creature, warnings in parse_inline_creatures(text, repository):
        for warning in warnings:
            log_warning(warning, {"creature": creature.id})
        team.append((creature, 1))
    return team


def build_config(args: argparse.Namespace) -> SimulationConfig:
    return SimulationConfig(
        max_turns=args.max_turns,
        use_vision=args.vision,
        verbose=args.verbose,
        workers=args.workers,
    )


# ============================================================================
# OUTPUT
# ============================================================================


def emit_results(
    results: Sequence[AggregateResult],
    args: argparse.Namespace,
    config: SimulationConfig,
) -> None:
    """
    Prints or writes results in the format asked for.

    With --outfile, json and csv reports go to the file; a console report
    still goes to the terminal and the file receives the csv.
    """
    if args.output == "json":
        text = to_json(results, args.iterations, args.seed, config)
    elif args.output == "csv" or args.outfile:
        text = to_csv(results)
    else:
        text = None

    if args.outfile:
        Path(args.outfile).write_text(text + "\n", encoding="utf-8")
        log_info(f"Results written to: {args.outfile}")
    elif text is not None:
        sys.stdout.write(text + "\n")

    if args.output != "console":
        return
    if args.compact:
        for result in results:
            print_compact(result)
    elif len(results) == 1:
        print_results(results[0])
    else:
        print_comparison(results)


# ============================================================================
# COMMANDS
# ============================================================================


def command_duel(args: argparse.Namespace, repository: ContentRepository) -> int:
    config = build_config(args)
    result = run_duel(
        repository,
        resolve_creature(args.creature_a, repository),
        resolve_creature(args.creature_b, repository),
        iterations=args.iterations,
        seed=args.seed,
        config=config,
        equipment_a=split_items(args.equip_a),
        equipment_b=split_items(args.equip_b),
    )
    emit_results([result], args, config)
    return 0


def command_group(args: argparse.Namespace, repository: ContentRepository) -> int:
    config = build_config(args)
    result = run_group_battle(
        repository,
        resolve_team(args.team_a, repository),
        resolve_team(args.team_b, repository),
        iterations=args.iterations,
        seed=args.seed,
        config=config,
    )
    emit_results([result], args, config)
    return 0


def command_variation(args: argparse.Namespace, repository: ContentRepository) -> int:
    if not args.var:
        raise ValueError("At least one --var 'name:item1,item2' is required")
    config = build_config(args)
    variations = [parse_variation(text) for text in args.var]
    results = run_variations(
        repository,
        resolve_creature(args.creature, repository),
        resolve_creature(args.opponent, repository),
        variations,
        iterations=args.iterations,
        seed=args.seed,
        config=config,
    )
    if args.output == "console" and not args.compact and not args.outfile:
        print_variation_results(results)
        return 0
    emit_results([entry.result for entry in results], args, config)
    return 0


def command_matrix(args: argparse.Namespace, repository: ContentRepository) -> int:
    config = build_config(args)
    results = run_matrix(
        repository,
        split_items(args.creatures),
        iterations=args.iterations,
        seed=args.seed,
        config=config,
    )
    emit_results(results, args, config)
    return 0


def command_list(args: argparse.Namespace, repository: ContentRepository) -> int:
    if args.kind in ("creatures", "creature"):
        print_creature_list(repository)
    else:
        print_item_list(repository)
    return 0


def command_info(args: argparse.Namespace, repository: ContentRepository) -> int:
    entry = repository.find(args.id)
    if isinstance(entry, CreatureDefinition):
        print_creature_sheet(entry)
    elif isinstance(entry, ItemDefinition):
        print_item_sheet(entry)
    elif isinstance(entry, SkillDefinition):
        print_skill_sheet(entry)
    else:
        ERROR_HANDLER.handle(f"Not found: {args.id}", ErrorSeverity.HIGH, {"id": args.id})
        return 1
    return 0


# ============================================================================
# PARSER
# ============================================================================


def _add_run_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-n",
        "--iterations",
        type=int,
        default=DEFAULT_ITERATIONS,
        help=f"Number of trials (default: {DEFAULT_ITERATIONS})",
    )
    parser.add_argument(
        "-s",
        "--seed",
        type=int,
        default=DEFAULT_SEED,
        help=f"Base seed; trial i uses seed + i (default: {DEFAULT_SEED})",
    )
    parser.add_argument("-o", "--output", choices=OUTPUT_FORMATS, default="console")
    parser.add_argument("--outfile", help="Write the json/csv report to this file")
    parser.add_argument("-c", "--compact", action="store_true", help="One line per scenario")
    parser.add_argument("-v", "--verbose", action="store_true", help="Narrate every trial")
    parser.add_argument("-w", "--workers", type=int, default=1, help="Worker processes")
    parser.add_argument("--max-turns", type=int, default=1000, help="Turns before a draw")
    parser.add_argument("--vision", action="store_true", help="Limit sight to vision range")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pitsim",
        description="Monte Carlo combat simulator for roguelike balance testing",
    )
    parser.add_argument("--data-dir", help="Directory holding creatures/items/skills JSON")
    parser.add_argument("--log-level", default="warning", help="debug, info, warning or error")
    subparsers = parser.add_subparsers(dest="command", required=True)

    duel = subparsers.add_parser("duel", help="Run a 1v1 duel simulation")
    duel.add_argument("creature_a", help="Creature id or inline JSON")
    duel.add_argument("creature_b", help="Creature id or inline JSON")
    duel.add_argument("--equip-a", help="Equipment overrides for creature A (comma-separated)")
    duel.add_argument("--equip-b", help="Equipment overrides for creature B (comma-separated)")
    _add_run_options(duel)
    duel.set_defaults(handler=command_duel)

    group = subparsers.add_parser("group", help='Run a group battle (e.g. "goblin:3" "skeleton:2")')
    group.add_argument("team_a")
    group.add_argument("team_b")
    _add_run_options(group)
    group.set_defaults(handler=command_group)

    variation = subparsers.add_parser("variation", help="Compare loadouts of one creature")
    variation.add_argument("creature")
    variation.add_argument("opponent")
    variation.add_argument(
        "--var",
        action="append",
        default=[],
        help="Loadout as 'name:item1,item2' (repeatable)",
    )
    _add_run_options(variation)
    variation.set_defaults(handler=command_variation)

    matrix = subparsers.add_parser("matrix", help="Every creature against every creature")
    matrix.add_argument("--creatures", help="Restrict to these ids (comma-separated)")
    _add_run_options(matrix)
    matrix.set_defaults(handler=command_matrix)

    listing = subparsers.add_parser("list", help="List available creatures or items")
    listing.add_argument("kind", choices=("creatures", "creature", "items", "item"))
    listing.set_defaults(handler=command_list)

    info = subparsers.add_parser("info", help="Show details about a creature, item or skill")
    info.add_argument("id")
    info.set_defaults(handler=command_info)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """
    Runs the command line.

    Args:
        argv (Sequence[str] | None): Arguments, sys.argv[1:] by default.

    Returns:
        int: The exit code, 0 on success and 1 on error.

    """
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(parse_level(args.log_level))

    try:
        repository = ContentRepository(resolve_data_dir(args.data_dir))
        return args.handler(args, repository)
    except SimulatorError as e:
        ERROR_HANDLER.handle_exception(e, ErrorSeverity.HIGH)
        return 1
    except ValueError as e:
        ERROR_HANDLER.handle(str(e), ErrorSeverity.HIGH, {"command": args.command})
        return 1


if __name__ == "__main__":
    sys.exit(main())

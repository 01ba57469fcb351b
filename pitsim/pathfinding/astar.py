"""
A* search over the 8-connected grid.

Every step, orthogonal or diagonal, costs 1, so the Chebyshev distance is
an admissible and consistent heuristic and the returned paths are optimal.
"""

from __future__ import annotations

import heapq
import itertools
import math
from dataclasses import dataclass, field

from pitsim.core.utils import Cell, chebyshev_distance

from .grid import BlockedFn, WalkableFn, neighbors

# Upper bound on expanded nodes, for walkability oracles with no bounds.
MAX_EXPANSIONS = 20_000


@dataclass(frozen=True)
class PathResult:
    """Outcome of a path request."""

    start: Cell
    goal: Cell
    # Cells after the start, up to and including the goal.
    cells: tuple[Cell, ...] = field(default_factory=tuple)
    cost: float = math.inf
    reachable: bool = False

    @property
    def first_step(self) -> Cell | None:
        return self.cells[0] if self.cells else None

    def __len__(self) -> int:
        return len(self.cells)


def find_path(
    start: Cell,
    goal: Cell,
    is_walkable: WalkableFn,
    is_blocked: BlockedFn | None = None,
    max_expansions: int = MAX_EXPANSIONS,
) -> PathResult:
    """
    Finds a shortest path from start to goal.

    Args:
        start (Cell): The starting cell, never checked against the oracles.
        goal (Cell): The destination, must be walkable. It may be occupied.
        is_walkable (WalkableFn): Terrain oracle.
        is_blocked (BlockedFn | None): Occupancy oracle; blocked cells other
            than the goal are never entered.
        max_expansions (int): Search budget.

    Returns:
        PathResult: cells is empty and cost infinite when the goal cannot be
        reached; when start == goal cells is empty and cost 0.

    """
    if start == goal:
        return PathResult(start, goal, (), 0.0, True)
    if not is_walkable(goal):
        return PathResult(start, goal)

    # Heap entries are (f, g, order, cell); order keeps ties deterministic.
    order = itertools.count()
    open_set: list[tuple[int, int, int, Cell]] = [
        (chebyshev_distance(start, goal), 0, next(order), start)
    ]
    came_from: dict[Cell, Cell] = {}
    g_score: dict[Cell, int] = {start: 0}
    closed: set[Cell] = set()
    expansions = 0

    while open_set:
        _, g, _, current = heapq.heappop(open_set)
        if current in closed:
            continue
        if current == goal:
            return PathResult(start, goal, _reconstruct(came_from, start, goal), float(g), True)
        closed.add(current)

        expansions += 1
        if expansions > max_expansions:
            break

        for nxt in neighbors(current):
            if nxt in closed or not is_walkable(nxt):
                continue
            if is_blocked is not None and nxt != goal and is_blocked(nxt):
                continue
            tentative = g + 1
            if tentative < g_score.get(nxt, math.inf):
                g_score[nxt] = tentative
                came_from[nxt] = current
                heapq.heappush(
                    open_set,
                    (tentative + chebyshev_distance(nxt, goal), tentative, next(order), nxt),
                )

    return PathResult(start, goal)


def _reconstruct(came_from: dict[Cell, Cell], start: Cell, goal: Cell) -> tuple[Cell, ...]:
    cells = [goal]
    while cells[-1] in came_from and came_from[cells[-1]] != start:
        cells.append(came_from[cells[-1]])
    cells.reverse()
    return tuple(cells)

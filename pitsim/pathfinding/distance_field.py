"""
Multi-source distance fields (Dijkstra maps).

With unit step costs Dijkstra reduces to a breadth-first flood fill from all
sources at once. Unreached cells read as +inf.
"""

from __future__ import annotations

import math
from collections import deque
from collections.abc import Callable, Iterable

from pitsim.core.utils import Cell, chebyshev_distance

from .grid import BlockedFn, WalkableFn, neighbors

# Walking distance may exceed the straight-line distance by this factor and
# still let a sound through.
SOUND_DISTANCE_RATIO = 1.5

# Flood fills stop after this many steps unless told otherwise.
DEFAULT_MAX_DISTANCE = 64


class DistanceField:
    """Walking distance from the nearest source to every reached cell."""

    def __init__(self, distances: dict[Cell, int], sources: tuple[Cell, ...]) -> None:
        self._distances = distances
        self.sources = sources

    def __getitem__(self, cell: Cell) -> float:
        return self._distances.get(cell, math.inf)

    def __contains__(self, cell: Cell) -> bool:
        return cell in self._distances

    def __len__(self) -> int:
        return len(self._distances)

    def step_toward(self, cell: Cell) -> Cell | None:
        """
        Picks the neighbour that is strictly closer to a source.

        Args:
            cell (Cell): The current cell.

        Returns:
            Cell | None: The downhill neighbour, or None at a source or when
            the cell was never reached.

        """
        best, best_distance = None, self[cell]
        for nxt in neighbors(cell):
            distance = self[nxt]
            if distance < best_distance:
                best, best_distance = nxt, distance
        return best

    def step_away(self, cell: Cell, is_free: Callable[[Cell], bool] | None = None) -> Cell | None:
        """Picks the reached neighbour that is strictly farther from every source."""
        best, best_distance = None, self[cell]
        for nxt in neighbors(cell):
            distance = self[nxt]
            if math.isinf(distance) or (is_free is not None and not is_free(nxt)):
                continue
            if distance > best_distance:
                best, best_distance = nxt, distance
        return best


def build_distance_field(
    sources: Iterable[Cell],
    is_walkable: WalkableFn,
    is_blocked: BlockedFn | None = None,
    max_distance: int = DEFAULT_MAX_DISTANCE,
) -> DistanceField:
    """
    Flood fills walking distances from several sources at once.

    Args:
        sources (Iterable[Cell]): Cells at distance 0.
        is_walkable (WalkableFn): Terrain oracle.
        is_blocked (BlockedFn | None): Cells that are never entered.
        max_distance (int): Cells farther than this stay unreached.

    Returns:
        DistanceField: The resulting field.

    """
    source_cells = tuple(dict.fromkeys(sources))
    distances: dict[Cell, int] = {cell: 0 for cell in source_cells}
    frontier = deque(source_cells)
    while frontier:
        current = frontier.popleft()
        distance = distances[current] + 1
        if distance > max_distance:
            continue
        for nxt in neighbors(current):
            if nxt in distances or not is_walkable(nxt):
                continue
            if is_blocked is not None and is_blocked(nxt):
                continue
            distances[nxt] = distance
            frontier.append(nxt)
    return DistanceField(distances, source_cells)


def find_nearest(
    start: Cell,
    predicate: Callable[[Cell], bool],
    is_walkable: WalkableFn,
    max_distance: int = DEFAULT_MAX_DISTANCE,
) -> tuple[Cell, int] | None:
    """
    Finds the closest cell, by walking distance, that satisfies predicate.

    Args:
        start (Cell): Where the search begins.
        predicate (Callable[[Cell], bool]): The condition a cell must meet.
        is_walkable (WalkableFn): Terrain oracle.
        max_distance (int): Search radius.

    Returns:
        tuple[Cell, int] | None: The cell and its distance, or None.

    """
    if predicate(start):
        return start, 0
    seen = {start}
    frontier = deque([(start, 0)])
    while frontier:
        current, distance = frontier.popleft()
        if distance >= max_distance:
            continue
        for nxt in neighbors(current):
            if nxt in seen or not is_walkable(nxt):
                continue
            if predicate(nxt):
                return nxt, distance + 1
            seen.add(nxt)
            frontier.append((nxt, distance + 1))
    return None


def can_hear(
    listener: Cell,
    source: Cell,
    is_walkable: WalkableFn,
    max_ratio: float = SOUND_DISTANCE_RATIO,
) -> bool:
    """
    Whether a sound at source carries to listener.

    A sound is heard when the walking distance around walls is at most
    max_ratio times the straight-line (Chebyshev) distance.
    """
    straight = chebyshev_distance(listener, source)
    if straight == 0:
        return True
    budget = int(math.floor(straight * max_ratio))
    field = build_distance_field([source], is_walkable, max_distance=budget)
    return field[listener] <= budget

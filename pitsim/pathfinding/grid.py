"""
Arena grid and the oracles handed to the search routines.
"""

from collections.abc import Callable, Iterable, Iterator

from pitsim.core.utils import Cell

# 8-connected neighbourhood, orthogonal moves first.
DIRECTIONS: tuple[Cell, ...] = (
    (1, 0),
    (-1, 0),
    (0, 1),
    (0, -1),
    (1, 1),
    (1, -1),
    (-1, 1),
    (-1, -1),
)

WalkableFn = Callable[[Cell], bool]
BlockedFn = Callable[[Cell], bool]


def neighbors(cell: Cell) -> Iterator[Cell]:
    x, y = cell
    for dx, dy in DIRECTIONS:
        yield x + dx, y + dy


class ArenaGrid:
    """
    A square arena spanning [-half_size, half_size] on both axes.

    Cells outside the bounds and cells listed as walls are not walkable.
    """

    def __init__(self, half_size: int, walls: Iterable[Cell] = ()) -> None:
        if half_size < 0:
            raise ValueError("half_size must not be negative")
        self.half_size = half_size
        self.walls: frozenset[Cell] = frozenset(walls)

    def in_bounds(self, cell: Cell) -> bool:
        return abs(cell[0]) <= self.half_size and abs(cell[1]) <= self.half_size

    def is_walkable(self, cell: Cell) -> bool:
        return self.in_bounds(cell) and cell not in self.walls

    def clamp(self, cell: Cell) -> Cell:
        limit = self.half_size
        return (
            max(-limit, min(limit, cell[0])),
            max(-limit, min(limit, cell[1])),
        )

    def with_walls(self, walls: Iterable[Cell]) -> "ArenaGrid":
        return ArenaGrid(self.half_size, self.walls | frozenset(walls))


def occupancy_oracle(occupied: Iterable[Cell]) -> BlockedFn:
    """Builds an is_blocked oracle from a snapshot of occupied cells."""
    cells = frozenset(occupied)
    return cells.__contains__

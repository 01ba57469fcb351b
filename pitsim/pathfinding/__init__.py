"""
Grid search: A* shortest paths and multi-source distance fields.

Both routines only consult the walkability and occupancy oracles they are
given and never mutate shared state.
"""

from .astar import PathResult, find_path
from .distance_field import DistanceField, build_distance_field, can_hear, find_nearest
from .grid import DIRECTIONS, ArenaGrid, neighbors, occupancy_oracle

__all__ = [
    "DIRECTIONS",
    "ArenaGrid",
    "DistanceField",
    "PathResult",
    "build_distance_field",
    "can_hear",
    "find_nearest",
    "find_path",
    "neighbors",
    "occupancy_oracle",
]

"""
Simulation settings shared by the harness and the command line.
"""

import os
from pathlib import Path

from pydantic import BaseModel, Field

DATA_DIR_ENV = "PITSIM_DATA_DIR"
BUNDLED_DATA_DIR = Path(__file__).resolve().parent.parent / "data"


class SimulationConfig(BaseModel):
    """Knobs for a batch of trials."""

    max_turns: int = Field(
        default=1000,
        description="Turns before a trial is declared a draw",
    )
    starting_distance: int = Field(
        default=5,
        description="Column of team B; team A starts at column 0",
    )
    arena_size: int = Field(
        default=20,
        description="Half-size of the square arena, cells beyond it are walls",
    )
    use_vision: bool = Field(
        default=False,
        description="Limit what each creature sees to its vision range",
    )
    verbose: bool = Field(
        default=False,
        description="Narrate every roll and decision of each trial",
    )
    workers: int = Field(
        default=1,
        description="Worker processes used to run trials",
    )
    chunk_size: int = Field(
        default=250,
        description="Trials handed to a worker at a time",
    )

    def model_post_init(self, _) -> None:
        """Validates fields after model initialization."""
        if self.max_turns < 1:
            raise ValueError("max_turns must be at least 1")
        if self.starting_distance < 1:
            raise ValueError("starting_distance must be at least 1")
        if self.arena_size < self.starting_distance:
            raise ValueError("arena_size must fit the starting distance")
        if self.workers < 1:
            raise ValueError("workers must be at least 1")
        if self.chunk_size < 1:
            raise ValueError("chunk_size must be at least 1")


def resolve_data_dir(explicit: str | Path | None = None) -> Path:
    """
    Picks the directory holding the creature, item and skill files.

    Args:
        explicit (str | Path | None): A directory given on the command line.

    Returns:
        Path: The explicit directory, else the one named by the
        PITSIM_DATA_DIR environment variable, else the bundled data.

    """
    if explicit:
        return Path(explicit)
    from_env = os.environ.get(DATA_DIR_ENV)
    if from_env:
        return Path(from_env)
    return BUNDLED_DATA_DIR

"""
Utilities module for the simulator.

Provides common helpers: console printing with rich formatting, the
singleton metaclass, grid distance and progress bars.
"""

from __future__ import annotations

from typing import Any, Generic

from rich.console import Console
from rich.rule import Rule
from typing_extensions import TypeVar

# Initialize the rich console.
_console = Console(markup=True, width=120, force_jupyter=False)

# A grid cell as (x, y).
Cell = tuple[int, int]


def cprint(*args: Any, **kwargs: Any) -> None:
    """
    Custom print function to handle colored output.

    Args:
        *args: Arguments to pass to the console print function.
        **kwargs: Keyword arguments to pass to the console print function.

    """
    _console.print(*args, **kwargs)


def crule(*args: Any, **kwargs: Any) -> None:
    """
    Custom print function to handle colored output with a rule.

    Args:
        *args: Arguments to pass to the Rule constructor.
        **kwargs: Keyword arguments to pass to the Rule constructor.

    """
    _console.print(Rule(*args, **kwargs))


# ---- Singleton Metaclass ----


_T = TypeVar("_T")


class Singleton(type, Generic[_T]):
    """Metaclass that returns the same instance every time."""

    _instances: dict[Singleton[_T], _T] = {}

    def __call__(cls, *args: Any, **kwargs: Any) -> _T:
        if cls not in cls._instances:
            cls._instances[cls] = super().__call__(*args, **kwargs)
        return cls._instances[cls]

    def reset(cls) -> None:
        """Forget the stored instance so the next call builds a new one."""
        cls._instances.pop(cls, None)


# ---- Grid Geometry ----


def chebyshev_distance(a: Cell, b: Cell) -> int:
    """
    Number of king moves between two cells.

    Args:
        a (Cell): The first cell.
        b (Cell): The second cell.

    Returns:
        int: max(|dx|, |dy|).

    """
    return max(abs(a[0] - b[0]), abs(a[1] - b[1]))


def sign(value: int) -> int:
    return (value > 0) - (value < 0)


def step_toward(origin: Cell, target: Cell) -> Cell:
    """Unit direction (dx, dy) that brings origin closer to target."""
    return sign(target[0] - origin[0]), sign(target[1] - origin[1])


def step_away(origin: Cell, threat: Cell) -> Cell:
    """Unit direction (dx, dy) that takes origin away from threat."""
    return sign(origin[0] - threat[0]), sign(origin[1] - threat[1])


def make_bar(current: int, maximum: int, length: int = 10, color: str = "white") -> str:
    """
    Creates a visual progress bar representation.

    Args:
        current (int): The current value.
        maximum (int): The maximum value.
        length (int): The length of the bar in characters. Defaults to 10.
        color (str): The color for the filled portion. Defaults to "white".

    Returns:
        str: A formatted progress bar string.

    """
    if maximum <= 0:
        return ""
    # Compute the filled part of the bar.
    filled = max(0, min(length, int((current / maximum) * length)))
    # Compute the empty part of the bar.
    empty = length - filled
    bar = f"[{color}]" + "▮" * filled
    if empty > 0:
        bar += "[dim white]" + "▯" * empty + "[/]"
    bar += "[/]"
    return bar

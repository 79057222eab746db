"""
Console helpers for the resolver.

Thin wrappers around a shared rich console, used by the configuration loader
and by the demonstration script to show battle documents between calls.
"""

from __future__ import annotations

from typing import Any

from rich.console import Console
from rich.rule import Rule

_console = Console(markup=True, width=120, force_terminal=True, force_jupyter=False)


def cprint(*args: Any, **kwargs: Any) -> None:
    """Prints rich markup through the shared console."""
    _console.print(*args, **kwargs)


def crule(title: str = "", **kwargs: Any) -> None:
    """
    Prints a horizontal separator, optionally titled.

    Args:
        title (str): Text shown in the middle of the rule.
        **kwargs: Passed to ``rich.rule.Rule`` (style, characters, ...).

    """
    _console.print(Rule(title, **kwargs))


def make_bar(current: float, maximum: float, length: int = 10, color: str = "white") -> str:
    """
    Renders a pool (HP, shield, gauge) as a fixed-width markup bar.

    Args:
        current (float): Current value of the pool.
        maximum (float): Cap of the pool; an empty bar is drawn when it is 0.
        length (int): Number of cells.
        color (str): Style of the filled cells.

    Returns:
        str: The bar, as rich markup.

    """
    if maximum <= 0:
        return f"[dim white]{'▯' * length}[/]"
    filled = max(0, min(length, int(current * length / maximum)))
    cells = f"[{color}]{'▮' * filled}[/]"
    if filled < length:
        cells += f"[dim white]{'▯' * (length - filled)}[/]"
    return cells

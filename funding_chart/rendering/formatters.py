"""Axis tick formatting for funding amounts."""
from __future__ import annotations

from matplotlib.ticker import FuncFormatter

BILLION = 1e9
MILLION = 1e6


def format_funding_tick(x: float, pos=None, big_mark: str = " ") -> str:
    """
    Format an x-axis break.

    ``0`` -> ``"0"``, ``1e9`` -> ``"1B"``, anything else in whole millions
    with an ``M`` suffix (``2.5e8`` -> ``"250M"``, ``1.1e9`` -> ``"1 100M"``).
    """
    if x == 0:
        return "0"
    if x == BILLION:
        return "1B"
    millions = int(round(x / MILLION))
    return f"{millions:,}".replace(",", big_mark) + "M"


def funding_tick_formatter(big_mark: str = " ") -> FuncFormatter:
    """Matplotlib formatter wrapping :func:`format_funding_tick`."""
    return FuncFormatter(lambda x, pos: format_funding_tick(x, pos, big_mark=big_mark))

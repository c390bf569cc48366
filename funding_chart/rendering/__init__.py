"""
Rendering layer for the funding chart.
"""

from .formatters import format_funding_tick
from .chart_spec import (
    ChartSpec,
    ChartStyle,
    BarLabel,
    build_chart_spec,
    split_labels,
)
from .bar_chart import render_chart

__all__ = [
    'format_funding_tick',
    'ChartSpec',
    'ChartStyle',
    'BarLabel',
    'build_chart_spec',
    'split_labels',
    'render_chart',
]

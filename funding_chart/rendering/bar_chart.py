#!/usr/bin/env python3
"""
Horizontal bar chart renderer.

Turns a finished ChartSpec into a matplotlib Figure.  Nothing is written
to disk here; see ChartExporter.
"""
from __future__ import annotations

import logging

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
from matplotlib.figure import Figure

from funding_chart.rendering.chart_spec import ChartSpec
from funding_chart.rendering.formatters import funding_tick_formatter

LOGGER = logging.getLogger(__name__)

# Figure-fraction layout: header (title + subtitle), axis area, caption
TITLE_Y = 0.975
SUBTITLE_Y = 0.905
CAPTION_Y = 0.02
AXES_RECT = dict(left=0.02, right=0.97, top=0.80, bottom=0.10)

# Discrete-axis padding around the first/last bar
Y_PAD = 0.6


def render_chart(spec: ChartSpec) -> Figure:
    """
    Render the top-N funding chart.

    Args:
        spec: Finished spec (see build_chart_spec)

    Returns:
        matplotlib Figure, sized per spec.style

    Raises:
        ValueError: If the spec has no axis stage applied
    """
    if spec.x_limits is None:
        raise ValueError("ChartSpec has no x limits; call with_axis() first")

    style = spec.style
    family = list(style.font_family)

    fig, ax = plt.subplots(figsize=(style.width_in, style.height_in))
    fig.patch.set_facecolor(style.background)
    ax.set_facecolor("white")
    fig.subplots_adjust(**AXES_RECT)

    # ========================================================================
    # BARS
    # ========================================================================
    n = len(spec.bars)
    y_pos = spec.y_positions
    ax.barh(y_pos, spec.values, height=style.bar_height,
            color=style.bar_color, linewidth=0, zorder=2)
    ax.set_ylim(-Y_PAD, max(n - 1, 0) + Y_PAD)

    # ========================================================================
    # X AXIS (top, gridlines at breaks, no ticks)
    # ========================================================================
    ax.set_xlim(*spec.x_limits)
    ax.set_xticks(list(spec.x_breaks))
    ax.xaxis.set_major_formatter(funding_tick_formatter(style.big_mark))
    ax.xaxis.tick_top()
    ax.tick_params(axis="x", length=0, labelsize=style.tick_font_size,
                   labelfontfamily=family)
    ax.grid(axis="x", color=style.grid_color, linewidth=style.grid_linewidth)
    ax.set_axisbelow(True)

    # ========================================================================
    # Y AXIS (line only)
    # ========================================================================
    ax.set_yticks([])
    ax.tick_params(axis="y", length=0)
    ax.set_xlabel("")
    ax.set_ylabel("")
    for side in ("top", "right", "bottom"):
        ax.spines[side].set_visible(False)
    ax.spines["left"].set_color(style.axis_line_color)

    # ========================================================================
    # BAR LABELS
    # ========================================================================
    for label in spec.labels:
        ax.text(label.x, label.y, label.text,
                ha="left", va="center", color=label.color,
                fontsize=style.label_font_size, fontfamily=family,
                clip_on=False, zorder=3)

    # ========================================================================
    # TITLES
    # ========================================================================
    left = AXES_RECT["left"]
    if spec.title:
        fig.text(left, TITLE_Y, spec.title, ha="left", va="top",
                 fontsize=style.title_font_size, fontweight="bold", fontfamily=family)
    if spec.subtitle:
        fig.text(left, SUBTITLE_Y, spec.subtitle, ha="left", va="top",
                 fontsize=style.subtitle_font_size, fontfamily=family)
    if spec.caption:
        fig.text(left, CAPTION_Y, spec.caption, ha="left", va="bottom",
                 fontsize=style.caption_font_size, color=style.caption_color,
                 fontfamily=family)

    LOGGER.info("[OK] Rendered chart: %d bars, %d labels", n, len(spec.labels))
    return fig

#!/usr/bin/env python3
"""
Declarative chart specification.

A ChartSpec is immutable and built in stages, each stage returning a new
instance:

    spec = (ChartSpec.from_top(top, style)
            .with_axis()
            .with_labels()
            .with_titles())

The renderer only reads the finished spec.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields, replace
from typing import Any, Mapping, Optional, Sequence, Tuple

import numpy as np

from funding_chart.pipeline.aggregator import InstitutionTotal

LOGGER = logging.getLogger(__name__)

INSIDE = "inside"
OUTSIDE = "outside"


# ============================================================================
# STYLE
# ============================================================================
@dataclass(frozen=True)
class ChartStyle:
    """
    Cosmetic parameters of the chart.

    Attributes mirror the ``chart`` and ``export`` config sections; unknown
    keys are ignored by :meth:`from_config`.
    """
    bar_color: str = "#d95f02"
    bar_height: float = 0.6
    inside_label_color: str = "#FFFFFF"
    grid_color: str = "#A8BAC4"
    grid_linewidth: float = 0.3
    axis_line_color: str = "#000000"
    caption_color: str = "#666666"
    font_family: Tuple[str, ...] = ("Econ Sans Cnd", "Arial", "Helvetica", "DejaVu Sans")
    tick_font_size: float = 16
    label_font_size: float = 15.6
    title_font_size: float = 20
    subtitle_font_size: float = 18
    caption_font_size: float = 12
    label_nudge: float = 5e6
    break_step: float = 1e8
    break_max: float = 1.1e9
    expand_right: float = 0.05
    big_mark: str = " "
    title: str = ""
    subtitle: str = ""
    caption: str = ""
    width_in: float = 12.0
    height_in: float = 6.0
    background: str = "#FFFFFF"

    @classmethod
    def from_config(cls, *sections: Optional[Mapping[str, Any]]) -> "ChartStyle":
        """Build a style from one or more config sections (later ones win)."""
        known = {f.name for f in fields(cls)}
        values = {}
        for section in sections:
            for key, value in (section or {}).items():
                if key in known and value is not None:
                    values[key] = value
        if "font_family" in values:
            family = values["font_family"]
            values["font_family"] = (family,) if isinstance(family, str) else tuple(family)
        return cls(**values)


# ============================================================================
# LABELS
# ============================================================================
@dataclass(frozen=True)
class BarLabel:
    """Text drawn next to (or on) one bar."""
    text: str
    x: float
    y: float
    color: str
    placement: str


def split_labels(top: Sequence[InstitutionTotal],
                 inside_count: int = 6) -> Tuple[Tuple[InstitutionTotal, ...],
                                                 Tuple[InstitutionTotal, ...]]:
    """Split ranked institutions into (inside, outside) label groups by position."""
    if inside_count < 0:
        raise ValueError(f"inside_count must be >= 0, got {inside_count}")
    ranked = tuple(top)
    return ranked[:inside_count], ranked[inside_count:]


def bar_positions(n: int) -> np.ndarray:
    """y positions for ``n`` ranked bars; rank 1 sits at the top."""
    return np.arange(n - 1, -1, -1, dtype=float)


# ============================================================================
# SPEC
# ============================================================================
@dataclass(frozen=True)
class ChartSpec:
    """Immutable description of the top-N funding chart."""
    bars: Tuple[InstitutionTotal, ...]
    style: ChartStyle = field(default_factory=ChartStyle)
    inside_count: int = 6
    x_breaks: Tuple[float, ...] = ()
    x_limits: Optional[Tuple[float, float]] = None
    labels: Tuple[BarLabel, ...] = ()
    title: str = ""
    subtitle: str = ""
    caption: str = ""

    @classmethod
    def from_top(cls, top: Sequence[InstitutionTotal],
                 style: Optional[ChartStyle] = None,
                 inside_count: int = 6) -> "ChartSpec":
        return cls(bars=tuple(top), style=style or ChartStyle(), inside_count=inside_count)

    @property
    def y_positions(self) -> np.ndarray:
        return bar_positions(len(self.bars))

    @property
    def values(self) -> np.ndarray:
        return np.array([b.total_funding for b in self.bars], dtype=float)

    def with_axis(self) -> "ChartSpec":
        """Fix x breaks and limits (zero left padding, proportional right padding)."""
        style = self.style
        steps = int(round(style.break_max / style.break_step))
        breaks = [float(i * style.break_step) for i in range(steps + 1)]

        inside, outside = split_labels(self.bars, self.inside_count)
        anchors = [0.0]
        anchors += [b.total_funding for b in self.bars]
        anchors += [style.label_nudge for _ in inside]
        anchors += [b.total_funding + style.label_nudge for b in outside]
        upper = max(anchors)

        if upper <= 0:
            limits = (0.0, float(style.break_max))
        else:
            limits = (0.0, float(upper * (1.0 + style.expand_right)))

        visible = tuple(b for b in breaks if b <= limits[1])
        LOGGER.debug("x limits %s, %d/%d breaks visible", limits, len(visible), len(breaks))
        return replace(self, x_breaks=visible, x_limits=limits)

    def with_labels(self, inside_count: Optional[int] = None) -> "ChartSpec":
        """Place names inside the first bars (white) and past the end of the rest."""
        count = self.inside_count if inside_count is None else inside_count
        style = self.style
        inside, outside = split_labels(self.bars, count)
        ys = self.y_positions

        labels = []
        for i, item in enumerate(inside):
            labels.append(BarLabel(
                text=item.research_body,
                x=0.0 + style.label_nudge,
                y=float(ys[i]),
                color=style.inside_label_color,
                placement=INSIDE,
            ))
        for j, item in enumerate(outside, start=len(inside)):
            labels.append(BarLabel(
                text=item.research_body,
                x=item.total_funding + style.label_nudge,
                y=float(ys[j]),
                color=style.bar_color,
                placement=OUTSIDE,
            ))
        return replace(self, inside_count=count, labels=tuple(labels))

    def with_titles(self, title: Optional[str] = None,
                    subtitle: Optional[str] = None,
                    caption: Optional[str] = None) -> "ChartSpec":
        style = self.style
        return replace(
            self,
            title=style.title if title is None else title,
            subtitle=style.subtitle if subtitle is None else subtitle,
            caption=style.caption if caption is None else caption,
        )

    def labels_by_placement(self, placement: str) -> Tuple[BarLabel, ...]:
        return tuple(lbl for lbl in self.labels if lbl.placement == placement)


def build_chart_spec(top: Sequence[InstitutionTotal],
                     style: Optional[ChartStyle] = None,
                     inside_count: int = 6) -> ChartSpec:
    """Run every build stage and return the finished spec."""
    return (ChartSpec.from_top(top, style, inside_count=inside_count)
            .with_labels()
            .with_axis()
            .with_titles())

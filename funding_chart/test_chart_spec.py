"""
Tests for tick formatting, label split and the staged chart spec.

Run with: pytest funding_chart/test_chart_spec.py -v
"""
import dataclasses

import pytest

from funding_chart.pipeline.aggregator import InstitutionTotal
from funding_chart.rendering.chart_spec import (
    INSIDE,
    OUTSIDE,
    ChartSpec,
    ChartStyle,
    bar_positions,
    build_chart_spec,
    split_labels,
)
from funding_chart.rendering.formatters import format_funding_tick


def _top(values):
    return tuple(InstitutionTotal(f"I{i}", float(v)) for i, v in enumerate(values))


# ============================================================================
# TICK LABELS
# ============================================================================
@pytest.mark.parametrize("value, expected", [
    (0, "0"),
    (0.0, "0"),
    (1_000_000_000, "1B"),
    (250_000_000, "250M"),
    (100_000_000, "100M"),
    (900_000_000, "900M"),
    (1_100_000_000, "1 100M"),
    (2_400_000, "2M"),
])
def test_format_funding_tick(value, expected):
    assert format_funding_tick(value) == expected


def test_format_funding_tick_big_mark():
    assert format_funding_tick(1_100_000_000, big_mark=",") == "1,100M"


# ============================================================================
# LABEL SPLIT
# ============================================================================
def test_split_three():
    """Three institutions: all labels inside."""
    inside, outside = split_labels(_top([5e8, 3e8, 1e8]))
    assert [t.research_body for t in inside] == ["I0", "I1", "I2"]
    assert outside == ()


def test_split_ten():
    inside, outside = split_labels(_top(range(10, 0, -1)))
    assert len(inside) == 6
    assert [t.research_body for t in outside] == ["I6", "I7", "I8", "I9"]


def test_split_is_positional():
    """Split depends on rank, not on value."""
    inside, outside = split_labels(_top([5] * 8))
    assert len(inside) == 6 and len(outside) == 2


def test_split_rejects_negative():
    with pytest.raises(ValueError):
        split_labels(_top([1]), inside_count=-1)


def test_bar_positions_put_rank_one_on_top():
    assert list(bar_positions(3)) == [2.0, 1.0, 0.0]


# ============================================================================
# SPEC STAGES
# ============================================================================
def test_spec_is_immutable():
    spec = ChartSpec.from_top(_top([1e8]))
    with pytest.raises(dataclasses.FrozenInstanceError):
        spec.title = "x"


def test_stages_return_new_instances():
    base = ChartSpec.from_top(_top([3e8, 2e8]))
    with_axis = base.with_axis()

    assert base.x_limits is None
    assert with_axis is not base
    assert with_axis.bars == base.bars


def test_axis_limits_and_breaks():
    """Zero left padding, 5% right padding; breaks beyond the limit are dropped."""
    spec = build_chart_spec(_top([5e8, 3e8, 1e8]))

    lo, hi = spec.x_limits
    assert lo == 0.0
    assert hi == pytest.approx(5e8 * 1.05)
    assert spec.x_breaks == tuple(float(i * 1e8) for i in range(6))


def test_axis_breaks_cover_full_range():
    spec = build_chart_spec(_top([1.08e9]))
    assert spec.x_breaks[-1] == pytest.approx(1.1e9)
    assert len(spec.x_breaks) == 12


def test_axis_accounts_for_outside_label_anchor():
    """An outside label starts past its bar and widens the range."""
    style = ChartStyle()
    spec = build_chart_spec(_top([1e8] * 7), style)
    assert spec.x_limits[1] == pytest.approx((1e8 + style.label_nudge) * 1.05)


def test_axis_on_empty_ranking():
    spec = build_chart_spec(())
    assert spec.x_limits == (0.0, 1.1e9)


def test_labels_ten_institutions():
    style = ChartStyle()
    top = _top([(10 - i) * 1e8 for i in range(10)])
    spec = build_chart_spec(top, style)

    inside = spec.labels_by_placement(INSIDE)
    outside = spec.labels_by_placement(OUTSIDE)

    assert len(inside) == 6
    assert len(outside) == 4
    assert all(lbl.color == style.inside_label_color for lbl in inside)
    assert all(lbl.color == style.bar_color for lbl in outside)
    assert all(lbl.x == style.label_nudge for lbl in inside)
    assert [lbl.x for lbl in outside] == [b.total_funding + style.label_nudge for b in top[6:]]
    # Label rows match bar rows, rank 1 on top
    assert inside[0].y == 9.0
    assert outside[-1].y == 0.0


def test_labels_three_institutions():
    spec = build_chart_spec(_top([5e8, 3e8, 1e8]))
    assert len(spec.labels_by_placement(INSIDE)) == 3
    assert spec.labels_by_placement(OUTSIDE) == ()


def test_titles_default_to_style():
    style = ChartStyle(title="T", subtitle="S", caption="C")
    spec = build_chart_spec(_top([1e8]), style)
    assert (spec.title, spec.subtitle, spec.caption) == ("T", "S", "C")

    retitled = spec.with_titles(title="Other")
    assert retitled.title == "Other"
    assert retitled.subtitle == "S"


def test_style_from_config_ignores_unknown_keys():
    style = ChartStyle.from_config(
        {"bar_color": "#123456", "font_family": "Arial", "bogus": 1},
        {"width_in": 10, "dpi": 400, "path": "x.png"},
    )
    assert style.bar_color == "#123456"
    assert style.font_family == ("Arial",)
    assert style.width_in == 10

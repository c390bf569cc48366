#!/usr/bin/env python3
"""
Funding aggregation for the chart.

Sums the current total commitment per research body and ranks the
institutions.

Provides:
- InstitutionTotal: One institution and its summed funding
- FundingBundle: Container for totals + top-N ranking
- aggregate_funding(): Group-by-sum over the cleaned table
- top_institutions(): Ranked top-N slice
- compute_funding(): Single entry point used by the builder
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Tuple

import pandas as pd

from funding_chart.pipeline.cleaner import COMMITMENT_COL, INSTITUTION_COL

LOGGER = logging.getLogger(__name__)

TOTAL_COL = "total_funding"
DEFAULT_TOP_N = 10
DEFAULT_BLANK_LABEL = "Unknown institution"


# ============================================================================
# TYPES
# ============================================================================
@dataclass(frozen=True)
class InstitutionTotal:
    """Summed commitment for one research body."""
    research_body: str
    total_funding: float


@dataclass
class FundingBundle:
    """
    Container for aggregated funding.

    Attributes:
        totals: One row per institution (research_body, total_funding),
            first-appearance order
        top: Top-N institutions, descending by total_funding
        record_count: Rows that went into the aggregation
        blank_count: Rows with a blank/missing research_body
    """
    totals: pd.DataFrame
    top: Tuple[InstitutionTotal, ...]
    record_count: int
    blank_count: int

    def __post_init__(self):
        """Log aggregation sizes."""
        LOGGER.info("FundingBundle computed:")
        LOGGER.info("  Records:       %d", self.record_count)
        LOGGER.info("  Institutions:  %d", len(self.totals))
        LOGGER.info("  Top-N kept:    %d", len(self.top))

    @property
    def grand_total(self) -> float:
        return float(self.totals[TOTAL_COL].sum()) if not self.totals.empty else 0.0


# ============================================================================
# AGGREGATION
# ============================================================================
def blank_mask(names: pd.Series) -> pd.Series:
    """True where the institution name is missing or whitespace-only."""
    return names.isna() | names.astype(str).str.strip().eq("")


def aggregate_funding(df: pd.DataFrame,
                      blank_label: str = DEFAULT_BLANK_LABEL,
                      drop_blank: bool = False) -> pd.DataFrame:
    """
    Sum ``current_total_commitment`` per ``research_body``.

    Missing commitments count as 0; they never remove a row from its group.

    Args:
        df: Cleaned grants table
        blank_label: Group name used for rows without an institution
        drop_blank: Drop rows without an institution instead of grouping them

    Returns:
        DataFrame with columns research_body, total_funding (one row per
        distinct institution, in order of first appearance)
    """
    names = df[INSTITUTION_COL]
    blank = blank_mask(names)

    if drop_blank:
        keep = ~blank
        if blank.any():
            LOGGER.info("  Dropping %d rows without %s", int(blank.sum()), INSTITUTION_COL)
        names = names[keep]
        amounts = df.loc[keep, COMMITMENT_COL]
    else:
        if blank.any() and (names[~blank].astype(str) == blank_label).any():
            LOGGER.warning("  Blank %s rows merge with the existing \"%s\" group",
                           INSTITUTION_COL, blank_label)
        names = names.where(~blank, blank_label)
        amounts = df[COMMITMENT_COL]

    frame = pd.DataFrame({
        INSTITUTION_COL: names.astype(str).to_numpy(),
        TOTAL_COL: pd.to_numeric(amounts, errors="coerce").fillna(0.0).astype(float).to_numpy(),
    })
    totals = frame.groupby(INSTITUTION_COL, sort=False, as_index=False)[TOTAL_COL].sum()
    return totals.reset_index(drop=True)


def top_institutions(totals: pd.DataFrame,
                     n: int = DEFAULT_TOP_N) -> Tuple[InstitutionTotal, ...]:
    """
    Return the ``n`` best-funded institutions, descending.

    Ties keep their input order, so the result never exceeds ``n``.
    """
    if n < 1:
        raise ValueError(f"n must be >= 1, got {n}")

    ranked = totals.sort_values(TOTAL_COL, ascending=False, kind="mergesort")
    head = ranked.head(n).sort_values(TOTAL_COL, ascending=False, kind="mergesort")

    return tuple(
        InstitutionTotal(research_body=str(name), total_funding=float(total))
        for name, total in zip(head[INSTITUTION_COL], head[TOTAL_COL])
    )


def compute_funding(df: pd.DataFrame,
                    n: int = DEFAULT_TOP_N,
                    blank_label: str = DEFAULT_BLANK_LABEL,
                    drop_blank: bool = False) -> FundingBundle:
    """
    Aggregate and rank in one call.

    Example:
        >>> bundle = compute_funding(clean_grants(raw), n=10)
        >>> bundle.top[0].research_body
    """
    LOGGER.info("Aggregating %s by %s", COMMITMENT_COL, INSTITUTION_COL)

    blanks = int(blank_mask(df[INSTITUTION_COL]).sum())
    if blanks and not drop_blank:
        LOGGER.warning("%d rows without %s grouped as '%s'",
                       blanks, INSTITUTION_COL, blank_label)

    totals = aggregate_funding(df, blank_label=blank_label, drop_blank=drop_blank)
    top = top_institutions(totals, n=n)

    for rank, item in enumerate(top, start=1):
        LOGGER.debug("  #%-2d %-50s %16.0f", rank, item.research_body, item.total_funding)

    return FundingBundle(totals=totals, top=top, record_count=len(df), blank_count=blanks)


# ============================================================================
# UTILITY FUNCTIONS
# ============================================================================
def summarize_funding_bundle(bundle: FundingBundle) -> str:
    """
    Create human-readable summary of a funding bundle.

    Args:
        bundle: FundingBundle to summarize

    Returns:
        Multi-line summary string
    """
    lines = [
        "Funding Summary",
        f"  Records:      {bundle.record_count:8d}",
        f"  Blank names:  {bundle.blank_count:8d}",
        f"  Institutions: {len(bundle.totals):8d}",
        f"  Grand total:  {bundle.grand_total:16,.0f}",
        "",
        f"Top {len(bundle.top)}:",
    ]
    for rank, item in enumerate(bundle.top, start=1):
        lines.append(f"  {rank:2d}. {item.research_body:<50s} {item.total_funding:16,.0f}")
    return "\n".join(lines)

#!/usr/bin/env python3
"""
Funding Chart Builder - Main Orchestrator

Coordinates the chart generation pipeline:
1. Load dataset (TidyTuesdayDataset)
2. Clean & select columns
3. Aggregate funding (FundingBundle)
4. Render chart (ChartSpec -> Figure)
5. Export PNG

Usage:
    builder = FundingChartBuilder("2026-02-24", Path("outputs/20260224.png"), cfg)
    png_path = builder.build()
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from core.config import get_section
from core.runtime import resolve_path
from funding_chart.errors import FundingChartError
from funding_chart.pipeline.aggregator import (
    DEFAULT_BLANK_LABEL,
    DEFAULT_TOP_N,
    compute_funding,
    summarize_funding_bundle,
)
from funding_chart.pipeline.chart_exporter import ChartExporter
from funding_chart.pipeline.cleaner import clean_grants
from funding_chart.pipeline.data_loader import (
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT_S,
    load_local_table,
    load_tidytuesday,
)
from funding_chart.rendering.bar_chart import render_chart
from funding_chart.rendering.chart_spec import ChartStyle, build_chart_spec

LOGGER = logging.getLogger(__name__)

DEFAULT_DATE_KEY = "2026-02-24"
DEFAULT_TABLE = "sfi_grants"
DEFAULT_OUTPUT = "outputs/20260224.png"


# ============================================================================
# CHART BUILDER
# ============================================================================
class FundingChartBuilder:
    """
    Main orchestrator for the top-N funding chart.

    Attributes:
        date_key: TidyTuesday release date
        output_path: Output image path
        cfg: Configuration dict (sections dataset/aggregation/chart/export)
        input_path: Optional local CSV used instead of downloading

    Example:
        >>> builder = FundingChartBuilder(
        ...     date_key="2026-02-24",
        ...     output_path=Path("outputs/20260224.png"),
        ...     cfg=get_config()
        ... )
        >>> png_path = builder.build()
    """

    def __init__(self,
                 date_key: str,
                 output_path: Path,
                 cfg: Optional[Dict[str, Any]] = None,
                 input_path: Optional[Path] = None):
        self.date_key = str(date_key)
        self.output_path = Path(output_path)
        self.cfg = cfg or {}
        self.input_path = Path(input_path) if input_path else None

        self.dataset_cfg = get_section(self.cfg, "dataset")
        self.aggregation_cfg = get_section(self.cfg, "aggregation")
        self.chart_cfg = get_section(self.cfg, "chart")
        self.export_cfg = get_section(self.cfg, "export")

        # Populated during build
        self.dataset = None
        self.grants = None
        self.funding = None
        self.spec = None
        self.figure = None

        LOGGER.info("FundingChartBuilder initialized:")
        LOGGER.info("  Dataset: %s", self.date_key)
        LOGGER.info("  Input:   %s", self.input_path or "download")
        LOGGER.info("  Output:  %s", self.output_path)

    # ========================================================================
    # PUBLIC API
    # ========================================================================
    def build(self) -> Path:
        """
        Execute the complete pipeline.

        Returns:
            Path to the written image

        Raises:
            DataUnavailable: Dataset cannot be fetched
            SchemaMismatch: Required columns missing
            WriteError: Image cannot be written
        """
        LOGGER.info("=" * 70)
        LOGGER.info("FUNDING CHART GENERATION")
        LOGGER.info("=" * 70)

        try:
            LOGGER.info("[1/5] Loading data...")
            self._load_data()

            LOGGER.info("[2/5] Cleaning columns...")
            self._clean()

            LOGGER.info("[3/5] Aggregating funding...")
            self._aggregate()

            LOGGER.info("[4/5] Rendering chart...")
            self._render()

            LOGGER.info("[5/5] Exporting image...")
            path = self._export()
        except FundingChartError as e:
            LOGGER.error("Chart generation failed: %s", e)
            raise

        LOGGER.info("=" * 70)
        LOGGER.info("[OK] CHART GENERATION COMPLETE")
        LOGGER.info("  Output: %s", path)
        LOGGER.info("=" * 70)
        return path

    # ========================================================================
    # PRIVATE METHODS (Pipeline Stages)
    # ========================================================================
    def _load_data(self):
        table = self.dataset_cfg.get("table", DEFAULT_TABLE)
        if self.input_path is not None:
            self.dataset = load_local_table(self.input_path, table, date_key=self.date_key)
            return

        cache_dir = self.dataset_cfg.get("cache_dir")
        self.dataset = load_tidytuesday(
            self.date_key,
            table,
            base_url=self.dataset_cfg.get("base_url", DEFAULT_BASE_URL),
            cache_dir=resolve_path(cache_dir) if cache_dir else None,
            timeout=float(self.dataset_cfg.get("timeout_s", DEFAULT_TIMEOUT_S)),
        )

    def _clean(self):
        self.grants = clean_grants(self.dataset.table)

    def _aggregate(self):
        self.funding = compute_funding(
            self.grants,
            n=int(self.aggregation_cfg.get("top_n", DEFAULT_TOP_N)),
            blank_label=self.aggregation_cfg.get("blank_label", DEFAULT_BLANK_LABEL),
            drop_blank=bool(self.aggregation_cfg.get("drop_blank", False)),
        )
        for line in summarize_funding_bundle(self.funding).splitlines():
            LOGGER.debug("  %s", line)

    def _render(self):
        style = ChartStyle.from_config(self.chart_cfg, self.export_cfg)
        self.spec = build_chart_spec(
            self.funding.top,
            style,
            inside_count=int(self.aggregation_cfg.get("inside_count", 6)),
        )
        self.figure = render_chart(self.spec)

    def _export(self) -> Path:
        style = self.spec.style
        exporter = ChartExporter(
            self.output_path,
            dpi=int(self.export_cfg.get("dpi", 400)),
            size=(style.width_in, style.height_in),
            background=style.background,
            create_dirs=bool(self.export_cfg.get("create_dirs", False)),
        )
        return exporter.export(self.figure)


# ============================================================================
# CONVENIENCE FUNCTIONS
# ============================================================================
def generate_funding_chart(date_key: Optional[str] = None,
                           output_path: Optional[Path] = None,
                           cfg: Optional[Dict[str, Any]] = None,
                           input_path: Optional[Path] = None) -> Path:
    """
    Generate the funding chart with defaults taken from ``cfg``.

    Convenience wrapper around FundingChartBuilder.

    Example:
        >>> png = generate_funding_chart(cfg=get_config())
    """
    cfg = cfg or {}
    date_key = date_key or get_section(cfg, "dataset").get("date", DEFAULT_DATE_KEY)
    if output_path is None:
        output_path = resolve_path(get_section(cfg, "export").get("path", DEFAULT_OUTPUT))

    builder = FundingChartBuilder(date_key, output_path, cfg, input_path=input_path)
    return builder.build()

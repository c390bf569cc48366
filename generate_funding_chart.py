#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
SFI Funding Chart - Standalone Entry Point

Downloads the TidyTuesday SFI grants release, sums the funding per
research body and saves a bar chart of the top 10 institutions.

Usage:
    # Default run (2026-02-24 release -> outputs/20260224.png)
    python generate_funding_chart.py

    # Offline, from a downloaded CSV
    python generate_funding_chart.py --input sfi_grants.csv

    # Custom output location
    python generate_funding_chart.py --output my_charts/sfi.png

    # Config overrides
    python generate_funding_chart.py --set chart.bar_color=#1b9e77 -v
"""
from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

from core.config import get_config, get_config_overrides, get_config_source, get_section
from core.runtime import output_name_for, outputs_root, resolve_path
from funding_chart.chart_builder import DEFAULT_DATE_KEY, DEFAULT_OUTPUT, FundingChartBuilder
from funding_chart.errors import DataUnavailable, FundingChartError, SchemaMismatch, WriteError

# Setup logging format
LOG_FORMAT = "[%(levelname)s] %(message)s"


# ============================================================================
# MAIN LOGIC
# ============================================================================
def generate_chart(date_key: str,
                   output_path: Path,
                   cfg: dict,
                   input_path: Path | None = None,
                   verbose: bool = False) -> int:
    """
    Generate the funding chart.

    Returns:
        Exit code (0 = success, 1 = error)
    """
    logger = logging.getLogger(__name__)

    print()
    print("=" * 80)
    print("  SFI FUNDING CHART")
    print("=" * 80)
    print(f"  Dataset:      {date_key}")
    print(f"  Input:        {input_path or 'TidyTuesday download'}")
    print(f"  Output:       {output_path}")
    print(f"  Timestamp:    {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print("=" * 80)
    print()

    try:
        builder = FundingChartBuilder(
            date_key=date_key,
            output_path=output_path,
            cfg=cfg,
            input_path=input_path,
        )
        png_path = builder.build()

    except DataUnavailable as e:
        logger.error("[FAIL] Dataset unavailable: %s", e)
        return 1

    except SchemaMismatch as e:
        logger.error("[FAIL] Unexpected table layout: %s", e)
        if e.available:
            logger.error("   Columns found: %s", ", ".join(map(str, e.available)))
        return 1

    except WriteError as e:
        logger.error("[FAIL] Could not write chart: %s", e)
        logger.error("   Check that %s exists and is writable", e.path.parent)
        return 1

    except FundingChartError as e:
        logger.error("[FAIL] Chart generation failed: %s", e)
        return 1

    except Exception as e:
        logger.error("[FAIL] Unexpected error: %s", e, exc_info=verbose)
        return 1

    size_kb = png_path.stat().st_size / 1024
    print()
    print("=" * 80)
    print("  [OK] GENERATION COMPLETE")
    print("=" * 80)
    print(f"  Output file:  {png_path}")
    print(f"  File size:    {size_kb:.1f} KB")
    print("=" * 80)
    print()
    return 0


# ============================================================================
# COMMAND LINE INTERFACE
# ============================================================================
def parse_args(argv, defaults):
    """Parse command-line arguments (config flags are consumed by get_config)."""
    parser = argparse.ArgumentParser(
        description="Plot the top funded institutions in the SFI grants dataset",
        epilog="Config overrides: --config <yaml>, --set section.key=value",
    )
    parser.add_argument(
        "--date", "-d",
        help=f"TidyTuesday release date (default: {defaults['date']})",
        default=defaults["date"],
        metavar="YYYY-MM-DD",
    )
    parser.add_argument(
        "--output", "-o",
        help=f"Output image path (default: {defaults['output']})",
        type=Path,
        default=None,
        metavar="PATH",
    )
    parser.add_argument(
        "--input", "-i",
        help="Read the grants table from a local CSV instead of downloading",
        type=Path,
        default=None,
        metavar="CSV",
    )
    parser.add_argument(
        "--top-n",
        help="Number of institutions to plot (default: from config)",
        type=int,
        default=None,
    )
    parser.add_argument(
        "--verbose", "-v",
        help="Enable verbose logging (DEBUG level)",
        action="store_true",
    )
    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point."""
    argv = sys.argv[1:] if argv is None else list(argv)
    cfg, remaining = get_config(cli_args=argv, with_cli=True)

    defaults = {
        "date": get_section(cfg, "dataset").get("date", DEFAULT_DATE_KEY),
        "output": get_section(cfg, "export").get("path", DEFAULT_OUTPUT),
    }
    args = parse_args(remaining, defaults)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format=LOG_FORMAT)
    logging.getLogger(__name__).info(
        "Config: %s (%d overrides)", get_config_source(), len(get_config_overrides())
    )

    if args.top_n is not None:
        cfg.setdefault("aggregation", {})["top_n"] = args.top_n

    # Explicit --output is relative to the CWD, the configured path to the repo root
    if args.output:
        output_path = args.output
    elif args.date != defaults["date"]:
        output_path = outputs_root(output_name_for(args.date))
    else:
        output_path = resolve_path(defaults["output"])

    return generate_chart(
        date_key=args.date,
        output_path=output_path,
        cfg=cfg,
        input_path=args.input,
        verbose=args.verbose,
    )


if __name__ == "__main__":
    sys.exit(main())

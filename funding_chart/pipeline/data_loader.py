#!/usr/bin/env python3
"""
Data loader for the funding chart.

Fetches one member table of a TidyTuesday release (keyed by its date)
from the TidyTuesday GitHub repository, with an optional on-disk cache.

Provides:
- TidyTuesdayDataset: Container for the loaded table
- load_tidytuesday(): Download (or read cached) table for a date key
- load_local_table(): Read an already downloaded CSV
"""
from __future__ import annotations

import hashlib
import io
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

import pandas as pd
import requests

from funding_chart.errors import DataUnavailable

LOGGER = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://raw.githubusercontent.com/rfordatascience/tidytuesday/main/data"
DEFAULT_TIMEOUT_S = 60.0


# ============================================================================
# DATASET CONTAINER
# ============================================================================
@dataclass
class TidyTuesdayDataset:
    """
    One named table of a TidyTuesday release.

    Attributes:
        date_key: Release date (YYYY-MM-DD)
        name: Member table name (e.g. "sfi_grants")
        table: Raw table, column names untouched
        source: URL or file the table was read from
    """
    date_key: str
    name: str
    table: pd.DataFrame
    source: str

    def __post_init__(self):
        """Log table shape."""
        LOGGER.info("Dataset loaded: %s/%s", self.date_key, self.name)
        LOGGER.info("  Rows:    %d", len(self.table))
        LOGGER.info("  Columns: %d", len(self.table.columns))
        LOGGER.debug("  Source:  %s", self.source)

    @property
    def is_empty(self) -> bool:
        """Check if the table has no rows."""
        return self.table.empty


# ============================================================================
# HELPERS
# ============================================================================
def parse_date_key(date_key: str) -> datetime:
    """Validate a ``YYYY-MM-DD`` release key."""
    try:
        return datetime.strptime(str(date_key).strip(), "%Y-%m-%d")
    except ValueError as e:
        raise DataUnavailable(
            f"Invalid dataset identifier {date_key!r}: expected YYYY-MM-DD"
        ) from e


def dataset_url(date_key: str, table_name: str,
                base_url: str = DEFAULT_BASE_URL) -> str:
    """Build the raw CSV URL of ``table_name`` in the release ``date_key``."""
    date = parse_date_key(date_key)
    return f"{base_url.rstrip('/')}/{date.year}/{date.strftime('%Y-%m-%d')}/{table_name}.csv"


def cache_path_for(cache_dir: Union[str, Path], date_key: str, table_name: str,
                   base_url: str = DEFAULT_BASE_URL) -> Path:
    """Cache location, keyed by source so a new base URL never reuses old files."""
    source_key = hashlib.sha1(base_url.rstrip("/").encode("utf-8")).hexdigest()[:12]
    return Path(cache_dir) / source_key / str(date_key) / f"{table_name}.csv"


def _read_csv_text(text: str, source: str) -> pd.DataFrame:
    try:
        return pd.read_csv(io.StringIO(text))
    except (pd.errors.EmptyDataError, pd.errors.ParserError) as e:
        raise DataUnavailable(f"Could not parse CSV from {source}: {e}") from e


def _read_file_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise DataUnavailable(f"Could not read {path}: {e}") from e


def _write_cache(path: Path, text: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        LOGGER.debug("  Cached: %s", path)
    except OSError as e:
        LOGGER.warning("Could not write cache %s: %s", path, e)


# ============================================================================
# LOADING FUNCTIONS
# ============================================================================
def load_tidytuesday(date_key: str,
                     table_name: str,
                     *,
                     base_url: str = DEFAULT_BASE_URL,
                     cache_dir: Optional[Union[str, Path]] = None,
                     timeout: float = DEFAULT_TIMEOUT_S) -> TidyTuesdayDataset:
    """
    Load one member table of a TidyTuesday release.

    Args:
        date_key: Release date (e.g. "2026-02-24")
        table_name: Member table (e.g. "sfi_grants")
        base_url: Root of the TidyTuesday data tree
        cache_dir: Directory for downloaded CSVs (None disables caching)
        timeout: HTTP timeout in seconds

    Returns:
        TidyTuesdayDataset with the raw table

    Raises:
        DataUnavailable: Bad identifier, unreachable source or unreadable CSV

    Example:
        >>> ds = load_tidytuesday("2026-02-24", "sfi_grants")
        >>> print(len(ds.table), "grants")
    """
    url = dataset_url(date_key, table_name, base_url)
    LOGGER.info("Loading dataset %s (table=%s)", date_key, table_name)

    cached = cache_path_for(cache_dir, date_key, table_name, base_url) if cache_dir else None
    if cached is not None and cached.exists():
        LOGGER.info("[OK] Using cached copy: %s", cached)
        table = _read_csv_text(_read_file_text(cached), str(cached))
        return TidyTuesdayDataset(date_key=date_key, name=table_name,
                                  table=table, source=str(cached))

    LOGGER.debug("GET %s", url)
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.exceptions.HTTPError as e:
        status = e.response.status_code if e.response is not None else "?"
        raise DataUnavailable(
            f"Dataset {date_key}/{table_name} not available (HTTP {status}): {url}"
        ) from e
    except requests.exceptions.RequestException as e:
        raise DataUnavailable(f"Could not reach {url}: {e}") from e

    text = response.text
    if not text.strip():
        raise DataUnavailable(f"Empty response for {date_key}/{table_name}: {url}")

    table = _read_csv_text(text, url)
    LOGGER.info("[OK] Downloaded %s (%.1f KB)", table_name, len(response.content) / 1024)

    if cached is not None:
        _write_cache(cached, text)

    return TidyTuesdayDataset(date_key=date_key, name=table_name,
                              table=table, source=url)


def load_local_table(path: Union[str, Path],
                     table_name: Optional[str] = None,
                     date_key: str = "local") -> TidyTuesdayDataset:
    """
    Read an already downloaded table from disk.

    Args:
        path: CSV file path
        table_name: Name to record (defaults to the file stem)
        date_key: Release key to record

    Returns:
        TidyTuesdayDataset with the raw table

    Raises:
        DataUnavailable: File missing or unreadable
    """
    path = Path(path)
    if not path.exists():
        raise DataUnavailable(f"Input file not found: {path}")

    table = _read_csv_text(_read_file_text(path), str(path))
    return TidyTuesdayDataset(date_key=date_key, name=table_name or path.stem,
                              table=table, source=str(path))

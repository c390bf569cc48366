"""
Error types raised by the funding chart pipeline.

Every failure is fatal to the run; the entry point catches
``FundingChartError`` and reports it.
"""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional


class FundingChartError(RuntimeError):
    """Base class for pipeline failures."""


class DataUnavailable(FundingChartError):
    """Dataset identifier cannot be resolved or the source is unreachable."""


class SchemaMismatch(FundingChartError):
    """One or more required columns are missing after cleaning."""

    def __init__(self, missing: Iterable[str], available: Optional[Iterable[str]] = None):
        self.missing = list(missing)
        self.available = [] if available is None else list(available)
        super().__init__(
            "missing required columns: %s" % ", ".join(self.missing)
        )


class WriteError(FundingChartError):
    """Output image could not be written."""

    def __init__(self, path: Path, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"cannot write {self.path}: {reason}")

"""Runtime helpers shared across the pipeline.

Small, explicit path utilities so the entry point and the chart builder
resolve repo-relative locations (outputs, download cache) the same way.
Plain functions, no classes.
"""

import re
from pathlib import Path

_DATE_KEY_RE = re.compile(r"[^0-9]")


def repo_root():
    """Return the repository root (resolved Path)."""

    return Path(__file__).resolve().parents[1]


def resolve_path(path):
    """Return ``path`` as an absolute Path (relative paths hang off the repo root)."""

    if path is None:
        return None
    base = Path(path).expanduser()
    if not base.is_absolute():
        base = repo_root() / base
    return base


def outputs_root(*parts):
    """Return the outputs/ directory joined with optional sub-parts."""

    base = repo_root() / "outputs"
    for part in parts:
        base = base / part
    return base


def output_name_for(date_key, suffix=".png"):
    """Map a dataset date key to the chart filename (``2026-02-24`` -> ``20260224.png``)."""

    return _DATE_KEY_RE.sub("", str(date_key)) + suffix


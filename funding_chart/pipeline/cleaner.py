"""Column cleaning and projection for the grants table.

Column names arrive with whatever casing/spacing the publisher used; they
are normalised to snake_case (janitor style) and the table is narrowed to
the twelve columns the chart relies on.  Rows are never filtered here.
"""

import logging
import re
import unicodedata

import pandas as pd

from funding_chart.errors import SchemaMismatch

LOGGER = logging.getLogger(__name__)

GRANT_COLUMNS = (
    "start_date",
    "end_date",
    "proposal_id",
    "programme_name",
    "sub_programme",
    "supplement",
    "research_body",
    "research_body_ror_id",
    "funder_name",
    "crossref_funder_registry_id",
    "proposal_title",
    "current_total_commitment",
)

INSTITUTION_COL = "research_body"
COMMITMENT_COL = "current_total_commitment"

_CAMEL_LOWER_UPPER = re.compile(r"([a-z0-9])([A-Z])")
_CAMEL_ACRONYM = re.compile(r"([A-Z]+)([A-Z][a-z])")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_AMOUNT = r"(-?\d[\d,]*(?:\.\d+)?)"


# ---------------------------------------------------------------------------
# Column names
# ---------------------------------------------------------------------------

def clean_column_name(name):
    """Return ``name`` in lower snake_case (``"Research Body"`` -> ``"research_body"``)."""

    text = str(name).strip()
    text = text.replace("%", " percent ").replace("#", " number ")
    text = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    text = _CAMEL_ACRONYM.sub(r"\1_\2", text)
    text = _CAMEL_LOWER_UPPER.sub(r"\1_\2", text)
    text = _NON_ALNUM.sub("_", text.lower()).strip("_")
    if not text:
        return "x"
    if text[0].isdigit():
        return "x" + text
    return text


def clean_names(df):
    """Return a copy of ``df`` with cleaned, de-duplicated column names."""

    seen = {}
    cleaned = []
    for col in df.columns:
        base = clean_column_name(col)
        count = seen.get(base, 0) + 1
        seen[base] = count
        cleaned.append(base if count == 1 else "%s_%d" % (base, count))

    out = df.copy()
    out.columns = cleaned
    renamed = [(a, b) for a, b in zip(df.columns, cleaned) if a != b]
    if renamed:
        LOGGER.debug("Renamed %d columns: %s", len(renamed), renamed)
    return out


# ---------------------------------------------------------------------------
# Projection
# ---------------------------------------------------------------------------

def coerce_commitment(series):
    """Parse currency amounts to float; unparsable values become NaN."""

    if pd.api.types.is_numeric_dtype(series):
        return pd.to_numeric(series, errors="coerce").astype(float)
    text = series.where(series.notna(), "").astype(str)
    text = text.str.extract(_AMOUNT, expand=False).str.replace(",", "", regex=False)
    return pd.to_numeric(text, errors="coerce").astype(float)


def select_grant_columns(df, required=GRANT_COLUMNS):
    """Project a cleaned table onto ``required`` (in that order)."""

    missing = [c for c in required if c not in df.columns]
    if missing:
        raise SchemaMismatch(missing, available=df.columns)

    out = df.loc[:, list(required)].copy()
    if COMMITMENT_COL in out.columns:
        out[COMMITMENT_COL] = coerce_commitment(out[COMMITMENT_COL])
    return out


def clean_grants(df, required=GRANT_COLUMNS):
    """Clean column names and select the grant columns in one go."""

    out = select_grant_columns(clean_names(df), required=required)
    LOGGER.info("[OK] Cleaned table: %d rows x %d columns", len(out), len(out.columns))
    n_missing = int(out[COMMITMENT_COL].isna().sum()) if COMMITMENT_COL in out else 0
    if n_missing:
        LOGGER.info("  %d rows without %s (counted as 0)", n_missing, COMMITMENT_COL)
    return out

"""Shared fixtures for the funding chart tests."""
import numpy as np
import pandas as pd
import pytest

# Column headers as a publisher might ship them (mixed case, spaces, hyphens)
RAW_HEADERS = {
    "start_date": "Start Date",
    "end_date": "End Date",
    "proposal_id": "Proposal ID",
    "programme_name": "Programme Name",
    "sub_programme": "Sub-programme",
    "supplement": "Supplement",
    "research_body": "Research Body",
    "research_body_ror_id": "Research Body ROR ID",
    "funder_name": "Funder Name",
    "crossref_funder_registry_id": "Crossref Funder Registry ID",
    "proposal_title": "Proposal Title",
    "current_total_commitment": "Current Total Commitment",
}


def make_raw_grants(rows):
    """Build a raw grants table from (research_body, commitment) pairs."""
    n = len(rows)
    data = {
        "Start Date": ["2020-01-01"] * n,
        "End Date": ["2024-12-31"] * n,
        "Proposal ID": [f"P{i:05d}" for i in range(n)],
        "Programme Name": ["Frontiers for the Future"] * n,
        "Sub-programme": ["Project"] * n,
        "Supplement": ["No"] * n,
        "Research Body": [name for name, _ in rows],
        "Research Body ROR ID": [f"https://ror.org/{i:07d}" for i in range(n)],
        "Funder Name": ["Science Foundation Ireland"] * n,
        "Crossref Funder Registry ID": ["501100001602"] * n,
        "Proposal Title": [f"Proposal {i}" for i in range(n)],
        "Current Total Commitment": [amount for _, amount in rows],
    }
    return pd.DataFrame(data)


@pytest.fixture
def raw_grants():
    """Small raw table: 3 institutions, one missing amount, one blank name."""
    return make_raw_grants([
        ("Trinity College Dublin", 200_000_000),
        ("University College Dublin", 150_000_000),
        ("Trinity College Dublin", 300_000_000),
        ("University of Galway", np.nan),
        ("University of Galway", 100_000_000),
        ("University College Dublin", 150_000_000),
        (np.nan, 5_000_000),
    ])


@pytest.fixture
def ten_institutions():
    """Ten institutions with strictly decreasing totals (1.0e9 .. 1.0e8)."""
    rows = [(f"Institution {i:02d}", (10 - i) * 100_000_000) for i in range(10)]
    return make_raw_grants(rows)

"""
Funding chart pipeline modules.

Modular components for data loading, cleaning, aggregation
and chart export.
"""

from .data_loader import load_tidytuesday, load_local_table, TidyTuesdayDataset
from .cleaner import clean_grants, clean_names, GRANT_COLUMNS
from .aggregator import (
    compute_funding,
    summarize_funding_bundle,
    FundingBundle,
    InstitutionTotal,
)
from .chart_exporter import ChartExporter

__all__ = [
    'load_tidytuesday',
    'load_local_table',
    'TidyTuesdayDataset',
    'clean_grants',
    'clean_names',
    'GRANT_COLUMNS',
    'compute_funding',
    'summarize_funding_bundle',
    'FundingBundle',
    'InstitutionTotal',
    'ChartExporter',
]

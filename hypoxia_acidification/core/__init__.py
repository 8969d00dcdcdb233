"""
Core processing modules for hypoxia and acidification mapping.

Modules:
    site_records: Site spreadsheet ingestion and label normalization
    aragonite_processing: Valid ocean domain, IDW gap fill and low-saturation filter
    country_statistics: Per-country site and low-aragonite counts
    hypoxia_pipeline: Pipeline orchestration, outputs and rendering

Author: Diego Bengochea
"""

from .site_records import load_site_records
from .aragonite_processing import valid_ocean_domain, fill_aragonite, low_saturation
from .country_statistics import site_counts_by_country, condition_count_table
from .hypoxia_pipeline import HypoxiaAcidificationPipeline

__all__ = [
    "load_site_records",
    "valid_ocean_domain",
    "fill_aragonite",
    "low_saturation",
    "site_counts_by_country",
    "condition_count_table",
    "HypoxiaAcidificationPipeline"
]

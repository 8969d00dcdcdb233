"""
Core processing modules for seaweed suitability mapping.

Modules:
    suitability_filters: N:P ratio, EEZ and SST filter chain
    country_attributes: Aquaculture production, native ranges and feasible-country list
    offset_scenarios: Offset scenario polygons and their statistics
    suitability_pipeline: Pipeline orchestration, outputs and rendering

Author: Diego Bengochea
"""

from .suitability_filters import np_ratio_layers, sst_suitability_mask, feasibility_layers
from .country_attributes import load_aquaculture_production, feasible_country_table
from .offset_scenarios import scenario_polygons, scenario_statistics
from .suitability_pipeline import SeaweedSuitabilityPipeline

__all__ = [
    "np_ratio_layers",
    "sst_suitability_mask",
    "feasibility_layers",
    "load_aquaculture_production",
    "feasible_country_table",
    "scenario_polygons",
    "scenario_statistics",
    "SeaweedSuitabilityPipeline"
]

"""
Core processing modules for nutrient seasonal mapping.

Modules:
    atlas_io: Oceanographic atlas CSV readers
    seasonal_rasterization: Per-season rasterization and seasonal aggregation
    seasonal_pipeline: Pipeline orchestration, outputs and rendering

Author: Diego Bengochea
"""

from .atlas_io import read_atlas_csv, atlas_file_path
from .seasonal_rasterization import NutrientRasterBuilder
from .seasonal_pipeline import NutrientSeasonalPipeline

__all__ = [
    "read_atlas_csv",
    "atlas_file_path",
    "NutrientRasterBuilder",
    "NutrientSeasonalPipeline"
]

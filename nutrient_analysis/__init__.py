"""
Nutrient Seasonal Mapping Component

Rasterizes seasonal nutrient concentrations from oceanographic atlas CSV
exports and renders seasonal panel and variability maps:

- Atlas CSV ingestion (long-form point records by depth)
- Per-depth rasterization by cell mean, averaged over the surface layer
- Annual mean and seasonal standard deviation rasters
- Seasonal panel maps and standard-deviation maps

Components:
    core/: Core processing modules
    scripts/: Executable entry points
    config.yaml: Component configuration

Author: Diego Bengochea
"""

from .core.seasonal_pipeline import NutrientSeasonalPipeline
from .core.seasonal_rasterization import NutrientRasterBuilder

__version__ = "1.0.0"
__component__ = "nutrient_analysis"

__all__ = [
    "NutrientSeasonalPipeline",
    "NutrientRasterBuilder"
]

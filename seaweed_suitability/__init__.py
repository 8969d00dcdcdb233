"""
Seaweed Suitability Mapping Component

Maps where seaweed farming is feasible from nutrient stoichiometry, maritime
jurisdiction and sea-surface temperature, and relates the result to current
aquaculture activity:

- N:P ratio from annual-mean nitrate and phosphate, filtered to the suitable range
- Restriction to exclusive economic zones and tolerable SST
- Feasible-country list with production and native-range flags
- Offset scenario statistics and the composite suitability map

Components:
    core/: Core processing modules
    scripts/: Executable entry points
    config.yaml: Component configuration

Author: Diego Bengochea
"""

from .core.suitability_pipeline import SeaweedSuitabilityPipeline
from .core.suitability_filters import feasibility_layers

__version__ = "1.0.0"
__component__ = "seaweed_suitability"

__all__ = [
    "SeaweedSuitabilityPipeline",
    "feasibility_layers"
]

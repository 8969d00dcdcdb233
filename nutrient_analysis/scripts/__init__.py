"""
Executable scripts for the nutrient seasonal mapping component.

Scripts:
    run_seasonal_mapping.py: Seasonal rasters, aggregation and maps

Author: Diego Bengochea
"""

from .run_seasonal_mapping import main as run_seasonal_mapping

__all__ = [
    "run_seasonal_mapping"
]

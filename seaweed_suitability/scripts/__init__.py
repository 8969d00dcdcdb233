"""
Executable scripts for the seaweed suitability component.

Scripts:
    run_suitability_mapping.py: Feasibility rasters, country tables and map

Author: Diego Bengochea
"""

from .run_suitability_mapping import main as run_suitability_mapping

__all__ = [
    "run_suitability_mapping"
]

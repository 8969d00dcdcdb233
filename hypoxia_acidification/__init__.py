"""
Hypoxia, Eutrophication and Acidification Component

Maps ocean acidification and coastal eutrophication/hypoxia and summarizes
conditions per country:

- Eutrophic and hypoxic site records as classified points
- IDW gap filling of aragonite saturation restricted to the ocean domain
- Low-saturation filtering
- Per-country condition counts and maps

Components:
    core/: Core processing modules
    scripts/: Executable entry points
    config.yaml: Component configuration

Author: Diego Bengochea
"""

from .core.hypoxia_pipeline import HypoxiaAcidificationPipeline

__version__ = "1.0.0"
__component__ = "hypoxia_acidification"

__all__ = [
    "HypoxiaAcidificationPipeline"
]

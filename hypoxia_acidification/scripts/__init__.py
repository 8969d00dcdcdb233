"""
Executable scripts for the hypoxia and acidification component.

Scripts:
    run_hypoxia_mapping.py: Aragonite gap fill, site overlay and country counts

Author: Diego Bengochea
"""

from .run_hypoxia_mapping import main as run_hypoxia_mapping

__all__ = [
    "run_hypoxia_mapping"
]

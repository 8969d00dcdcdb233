#!/usr/bin/env python3
"""
Recipe: Hypoxia, Eutrophication and Acidification

Reproduces the coastal condition results:
1. IDW gap filling of aragonite saturation over the ocean domain
2. Low-saturation filtering
3. Eutrophic/hypoxic site overlay and per-country condition counts

Usage:
    python 3_hypoxia_acidification_recipe.py [--config CONFIG] [--no-render]

Author: Diego Bengochea
"""

import argparse
import sys
import time
from pathlib import Path

# Add repo root to path for absolute imports
sys.path.insert(0, str(Path(__file__).parent))

from shared_utils.logging_utils import setup_logging
from shared_utils.config_utils import load_config, get_config_value
from shared_utils.central_data_paths_constants import ARAGONITE_FILE, HYPOXIA_SITES_FILE, EEZ_FILE

from hypoxia_acidification.scripts.run_hypoxia_mapping import main as run_hypoxia_mapping_main


class HypoxiaAcidificationRecipe:
    """
    Recipe for the hypoxia and acidification stage.
    """

    def __init__(self, config_path=None, log_level: str = "INFO"):
        self.logger = setup_logging(level=log_level, component_name='hypoxia_recipe')
        self.config = load_config(config_path, component_name='hypoxia_acidification')
        self.logger.info("Initialized Hypoxia and Acidification Recipe")

    def validate_prerequisites(self) -> bool:
        """
        Validate that the aragonite raster, site records and boundaries named
        by the component config exist.

        Returns:
            bool: True if prerequisites are met
        """
        required = [
            Path(get_config_value(self.config, 'data.aragonite_file', ARAGONITE_FILE)),
            Path(get_config_value(self.config, 'data.sites_file', HYPOXIA_SITES_FILE)),
            Path(get_config_value(self.config, 'data.boundaries_file', EEZ_FILE))
        ]
        missing = [p for p in required if not p.exists()]
        for path in missing:
            self.logger.error(f"Required input not found: {path}")
        return not missing

    def run(self, argv=None) -> bool:
        stage_start = time.time()
        try:
            success = run_hypoxia_mapping_main(argv)
        except Exception as e:
            self.logger.error(f"Hypoxia and acidification mapping failed with error: {e}")
            return False

        minutes = (time.time() - stage_start) / 60
        if success:
            self.logger.info(f"Hypoxia and acidification mapping completed successfully in {minutes:.2f} minutes")
        else:
            self.logger.error(f"Hypoxia and acidification mapping failed after {minutes:.2f} minutes")
        return success


def main():
    """Main entry point for the hypoxia and acidification recipe."""
    parser = argparse.ArgumentParser(description="Hypoxia, eutrophication and acidification recipe")
    parser.add_argument('--config', type=str, help='Component configuration file')
    parser.add_argument('--no-render', action='store_true', help='Skip map rendering')
    args = parser.parse_args()

    recipe = HypoxiaAcidificationRecipe(args.config)
    if not recipe.validate_prerequisites():
        recipe.logger.error("Prerequisites validation failed")
        sys.exit(1)

    argv = (['--config', args.config] if args.config else []) + (['--no-render'] if args.no_render else [])
    sys.exit(0 if recipe.run(argv) else 1)


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""
Recipe: Seaweed Suitability Mapping

Reproduces the seaweed farming feasibility results:
1. N:P ratio from the annual-mean nutrient rasters, filtered to 4-80
2. Restriction to exclusive economic zones and 0-35 °C SST
3. Feasible-country list, offset scenario statistics and composite map

Requires the outputs of 1_nutrient_mapping_recipe.py, or the atlas exports
to rasterize the nutrients on the fly.

Usage:
    python 2_seaweed_suitability_recipe.py [--config CONFIG] [--no-render]

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
from shared_utils.central_data_paths_constants import (
    NUTRIENT_RASTERS_DIR, ATLAS_CSV_DIR, EEZ_FILE, SST_MEAN_FILE
)

from seaweed_suitability.scripts.run_suitability_mapping import main as run_suitability_mapping_main


class SeaweedSuitabilityRecipe:
    """
    Recipe for the seaweed suitability stage.
    """

    def __init__(self, config_path=None, log_level: str = "INFO"):
        self.logger = setup_logging(level=log_level, component_name='suitability_recipe')
        self.config = load_config(config_path, component_name='seaweed_suitability')
        self.logger.info("Initialized Seaweed Suitability Recipe")

    def validate_prerequisites(self) -> bool:
        """
        Validate that the nutrients, EEZ boundaries and SST layers named by
        the component config are available.

        Returns:
            bool: True if prerequisites are met
        """
        nutrient_dir = Path(get_config_value(self.config, 'data.nutrient_dir', NUTRIENT_RASTERS_DIR))
        atlas_dir = Path(get_config_value(self.config, 'data.atlas_dir', ATLAS_CSV_DIR))
        eez_file = Path(get_config_value(self.config, 'data.eez_file', EEZ_FILE))
        sst_files = [Path(f) for f in get_config_value(self.config, 'sst.files') or [SST_MEAN_FILE]]

        nutrient_rasters = list(nutrient_dir.glob("*_annual_mean.tif")) if nutrient_dir.exists() else []
        if nutrient_rasters:
            self.logger.info(f"Found {len(nutrient_rasters)} annual-mean nutrient rasters")
        elif atlas_dir.exists():
            self.logger.warning("No nutrient rasters found, nutrients will be rasterized from the atlas exports")
        else:
            self.logger.error("Neither nutrient rasters nor atlas exports found")
            self.logger.error("Please run '1_nutrient_mapping_recipe.py' first")
            return False

        missing = [p for p in [eez_file] + sst_files if not p.exists()]
        for path in missing:
            self.logger.error(f"Required input not found: {path}")
        return not missing

    def run(self, argv=None) -> bool:
        stage_start = time.time()
        try:
            success = run_suitability_mapping_main(argv)
        except Exception as e:
            self.logger.error(f"Seaweed suitability mapping failed with error: {e}")
            return False

        minutes = (time.time() - stage_start) / 60
        if success:
            self.logger.info(f"Seaweed suitability mapping completed successfully in {minutes:.2f} minutes")
        else:
            self.logger.error(f"Seaweed suitability mapping failed after {minutes:.2f} minutes")
        return success


def main():
    """Main entry point for the seaweed suitability recipe."""
    parser = argparse.ArgumentParser(description="Seaweed suitability mapping recipe")
    parser.add_argument('--config', type=str, help='Component configuration file')
    parser.add_argument('--no-render', action='store_true', help='Skip map rendering')
    args = parser.parse_args()

    recipe = SeaweedSuitabilityRecipe(args.config)
    if not recipe.validate_prerequisites():
        recipe.logger.error("Prerequisites validation failed")
        sys.exit(1)

    argv = (['--config', args.config] if args.config else []) + (['--no-render'] if args.no_render else [])
    sys.exit(0 if recipe.run(argv) else 1)


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""
Recipe: Nutrient Seasonal Mapping

Reproduces the nutrient layers used by the rest of the analysis:
1. Seasonal nitrate and phosphate rasters from the ocean atlas exports
2. Annual mean and seasonal standard deviation rasters
3. Seasonal panel and variability maps

Usage:
    python 1_nutrient_mapping_recipe.py [--config CONFIG] [--no-render]

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
from shared_utils.path_utils import find_files
from shared_utils.central_data_paths_constants import ATLAS_CSV_DIR

from nutrient_analysis.scripts.run_seasonal_mapping import main as run_seasonal_mapping_main


class NutrientMappingRecipe:
    """
    Recipe for the nutrient seasonal mapping stage.
    """

    def __init__(self, config_path=None, log_level: str = "INFO"):
        self.logger = setup_logging(level=log_level, component_name='nutrient_recipe')
        self.config = load_config(config_path, component_name='nutrient_analysis')
        self.logger.info("Initialized Nutrient Mapping Recipe")

    def validate_prerequisites(self) -> bool:
        """
        Validate that the atlas exports named by the component config are available.

        Returns:
            bool: True if prerequisites are met
        """
        atlas_dir = Path(get_config_value(self.config, 'data.atlas_dir', ATLAS_CSV_DIR))
        if not atlas_dir.exists():
            self.logger.error(f"Atlas export directory not found: {atlas_dir}")
            return False

        csv_files = find_files(atlas_dir, "*.csv", recursive=False)
        if not csv_files:
            self.logger.error(f"No atlas CSV exports found in {atlas_dir}")
            return False

        self.logger.info(f"Found {len(csv_files)} atlas CSV exports")
        return True

    def run(self, argv=None) -> bool:
        stage_start = time.time()
        try:
            success = run_seasonal_mapping_main(argv)
        except Exception as e:
            self.logger.error(f"Nutrient mapping failed with error: {e}")
            return False

        minutes = (time.time() - stage_start) / 60
        if success:
            self.logger.info(f"Nutrient mapping completed successfully in {minutes:.2f} minutes")
        else:
            self.logger.error(f"Nutrient mapping failed after {minutes:.2f} minutes")
        return success


def main():
    """Main entry point for the nutrient mapping recipe."""
    parser = argparse.ArgumentParser(description="Nutrient seasonal mapping recipe")
    parser.add_argument('--config', type=str, help='Component configuration file')
    parser.add_argument('--no-render', action='store_true', help='Skip map rendering')
    args = parser.parse_args()

    recipe = NutrientMappingRecipe(args.config)
    if not recipe.validate_prerequisites():
        recipe.logger.error("Prerequisites validation failed")
        sys.exit(1)

    argv = (['--config', args.config] if args.config else []) + (['--no-render'] if args.no_render else [])
    sys.exit(0 if recipe.run(argv) else 1)


if __name__ == "__main__":
    main()

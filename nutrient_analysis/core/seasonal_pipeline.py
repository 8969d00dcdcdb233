"""
Nutrient seasonal mapping pipeline.

Reads the seasonal atlas exports for each configured nutrient, rasterizes the
near-surface layer per season, aggregates the seasons into annual mean and
seasonal standard-deviation rasters, and renders seasonal panel maps.

Outputs:
- <nutrient>_<season>.tif, <nutrient>_annual_mean.tif, <nutrient>_seasonal_std.tif
- nutrient_summary.csv
- <nutrient>_seasonal_panels.{pdf,png}, <nutrient>_seasonal_std.{pdf,png}

Author: Diego Bengochea
"""

import time
import traceback
from pathlib import Path
from typing import Dict, List, Optional, Union

import numpy as np
import pandas as pd
import rasterio

from shared_utils import (
    setup_logging, load_config, validate_config, get_config_value, ensure_directory,
    log_pipeline_start, log_pipeline_end, log_section
)
from shared_utils.central_data_paths_constants import (
    ATLAS_CSV_DIR, NUTRIENT_RASTERS_DIR, TABLES_DIR, FIGURES_DIR
)
from shared_utils.raster_utils import GridDefinition, write_raster, raster_summary

from .atlas_io import atlas_file_path
from .seasonal_rasterization import NutrientRasterBuilder


class NutrientSeasonalPipeline:
    """
    Seasonal nutrient rasters and maps from oceanographic atlas exports.
    """

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        """
        Initialize the nutrient pipeline.

        Args:
            config_path: Path to configuration file. If None, uses component default.
        """
        self.config = load_config(config_path, component_name="nutrient_analysis")
        validate_config(self.config, ['atlas', 'grid', 'processing'])

        self.logger = setup_logging(
            level=get_config_value(self.config, 'logging.level', 'INFO'),
            component_name='nutrient_analysis',
            log_file=get_config_value(self.config, 'logging.log_file')
        )

        self.atlas_dir = Path(get_config_value(self.config, 'data.atlas_dir', ATLAS_CSV_DIR))
        self.output_dir = Path(get_config_value(self.config, 'data.output_dir', NUTRIENT_RASTERS_DIR))
        self.tables_dir = Path(get_config_value(self.config, 'data.tables_dir', TABLES_DIR))
        self.figures_dir = Path(get_config_value(self.config, 'data.figures_dir', FIGURES_DIR))

        atlas_config = self.config['atlas']
        self.file_pattern = atlas_config['file_pattern']
        self.nutrients: Dict[str, str] = atlas_config['nutrients']
        self.seasons: Dict[str, int] = atlas_config['seasons']

        self.grid = GridDefinition.from_config(self.config['grid'])
        self.builder = NutrientRasterBuilder(
            self.grid,
            depth_range=self.config['processing']['depth_range']
        )
        self.compress = self.config['processing'].get('compress', 'lzw')
        self.render_enabled = get_config_value(self.config, 'render.enabled', True)

        self.logger.info(
            f"Initialized NutrientSeasonalPipeline: {list(self.nutrients)} x {list(self.seasons)}, "
            f"grid {self.grid.width}x{self.grid.height} at {self.grid.resolution}°"
        )

    def run_full_pipeline(self) -> bool:
        """
        Run rasterization, aggregation, summary and rendering for all nutrients.

        Returns:
            bool: True if the pipeline completed and outputs validated
        """
        start_time = time.time()
        log_pipeline_start(self.logger, 'nutrient seasonal mapping', self.config)

        try:
            results = {}
            for nutrient in self.nutrients:
                log_section(self.logger, nutrient)
                results[nutrient] = self.process_nutrient(nutrient)

            self.save_summary(results)
            success = self.validate_outputs()

            if self.render_enabled:
                log_section(self.logger, 'rendering')
                self.render_maps(results)

        except Exception as e:
            self.logger.error(f"Nutrient seasonal mapping failed: {e}")
            self.logger.debug(traceback.format_exc())
            success = False

        log_pipeline_end(self.logger, 'nutrient seasonal mapping', success, time.time() - start_time)
        return success

    def season_files(self, nutrient: str) -> Dict[str, Path]:
        """Atlas export path for every season of a nutrient."""
        code = self.nutrients[nutrient]
        files = {
            season: atlas_file_path(self.atlas_dir, self.file_pattern, code, period)
            for season, period in self.seasons.items()
        }

        missing = [str(p) for p in files.values() if not p.exists()]
        if missing:
            raise FileNotFoundError(f"Missing atlas exports for {nutrient}: {missing}")

        return files

    def output_path(self, nutrient: str, label: str) -> Path:
        return self.output_dir / f"{nutrient}_{label}.tif"

    def process_nutrient(self, nutrient: str) -> Dict[str, object]:
        """
        Build and write the seasonal, annual mean and seasonal std rasters.

        Returns:
            Dict with 'seasons' (season -> raster), 'annual_mean' and 'seasonal_std'
        """
        ensure_directory(self.output_dir)

        season_rasters = self.builder.seasonal_rasters(self.season_files(nutrient))

        for season, raster in season_rasters.items():
            write_raster(self.output_path(nutrient, season), raster,
                         self.grid.transform, self.grid.crs, self.compress)
            self.logger.info(
                f"{nutrient} {season}: {int(np.isfinite(raster).sum()):,} valid cells"
            )

        annual_mean = self.builder.annual_mean(season_rasters)
        seasonal_std = self.builder.seasonal_std(season_rasters)

        write_raster(self.output_path(nutrient, 'annual_mean'), annual_mean,
                     self.grid.transform, self.grid.crs, self.compress)
        write_raster(self.output_path(nutrient, 'seasonal_std'), seasonal_std,
                     self.grid.transform, self.grid.crs, self.compress)

        self.logger.info(f"Saved {nutrient} rasters to {self.output_dir}")

        return {
            'seasons': season_rasters,
            'annual_mean': annual_mean,
            'seasonal_std': seasonal_std
        }

    def save_summary(self, results: Dict[str, Dict[str, object]]) -> Path:
        """Write per nutrient/layer valid-cell counts and value ranges."""
        rows = []
        for nutrient, layers in results.items():
            labelled = dict(layers['seasons'])
            labelled['annual_mean'] = layers['annual_mean']
            labelled['seasonal_std'] = layers['seasonal_std']
            for label, raster in labelled.items():
                rows.append({'nutrient': nutrient, 'layer': label, **raster_summary(raster)})

        summary = pd.DataFrame(rows)
        output_file = ensure_directory(self.tables_dir) / 'nutrient_summary.csv'
        summary.to_csv(output_file, index=False)
        self.logger.info(f"Nutrient summary saved to: {output_file}")
        return output_file

    def expected_outputs(self) -> List[Path]:
        labels = list(self.seasons) + ['annual_mean', 'seasonal_std']
        return [self.output_path(n, label) for n in self.nutrients for label in labels]

    def validate_outputs(self) -> bool:
        """
        Check that every expected GeoTIFF exists on the analysis grid.

        Returns:
            True if all files are valid, False otherwise
        """
        invalid_files = []
        for tif_file in self.expected_outputs():
            if not tif_file.exists():
                invalid_files.append(f"{tif_file.name}: missing")
                continue
            with rasterio.open(tif_file) as src:
                if src.crs is None:
                    invalid_files.append(f"{tif_file.name}: No CRS")
                elif (src.height, src.width) != self.grid.shape:
                    invalid_files.append(f"{tif_file.name}: Wrong shape ({src.height}x{src.width})")

        if invalid_files:
            self.logger.error(f"Validation failed for {len(invalid_files)} files:")
            for error in invalid_files:
                self.logger.error(f"  {error}")
            return False

        self.logger.info(f"Validation successful: {len(self.expected_outputs())} files are valid")
        return True

    def render_maps(self, results: Dict[str, Dict[str, object]]) -> List[str]:
        """Render seasonal panel maps and seasonal standard-deviation maps."""
        from visualization.nutrient_maps import render_nutrient_maps

        render_config = self.config.get('render', {})
        colormaps = render_config.get('colormaps', {})
        saved = []

        for nutrient, layers in results.items():
            saved.extend(render_nutrient_maps(
                nutrient=nutrient,
                season_rasters=layers['seasons'],
                std_raster=layers['seasonal_std'],
                transform=self.grid.transform,
                output_dir=self.figures_dir,
                units=render_config.get('units', ''),
                cmap=colormaps.get(nutrient, 'viridis'),
                std_cmap=render_config.get('std_colormap', 'plasma'),
                viz_config_path=render_config.get('visualization_config'),
                logger=self.logger
            ))

        return saved

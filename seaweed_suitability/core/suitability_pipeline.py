"""
Seaweed suitability mapping pipeline.

Combines annual-mean nitrate and phosphate rasters into an N:P ratio,
filters it to the suitable range, restricts it to exclusive economic zones
and to cells with tolerable sea-surface temperature, then overlays
aquaculture production, native species ranges and offset scenarios.

Outputs:
- np_ratio.tif, np_ratio_filtered.tif, sst_suitable.tif, seaweed_feasibility.tif
- feasible_countries.csv, offset_scenarios.csv, offset_scenarios.geojson
- seaweed_suitability_map.{pdf,png}

Author: Diego Bengochea
"""

import time
import traceback
from pathlib import Path
from typing import Dict, List, Optional, Union

import geopandas as gpd
import numpy as np
import pandas as pd
import rasterio

from shared_utils import (
    setup_logging, load_config, validate_config, get_config_value, ensure_directory,
    log_pipeline_start, log_pipeline_end, log_section
)
from shared_utils.central_data_paths_constants import (
    ATLAS_CSV_DIR, NUTRIENT_RASTERS_DIR, SUITABILITY_RASTERS_DIR, TABLES_DIR, FIGURES_DIR,
    EEZ_FILE, SST_MEAN_FILE, AQUACULTURE_PRODUCTION_FILE, NATIVE_RANGE_FILE
)
from shared_utils.raster_utils import (
    GridDefinition, read_raster, write_raster, resample_to_grid, raster_summary
)
from shared_utils.vector_utils import load_boundaries
from nutrient_analysis.core.atlas_io import atlas_file_path
from nutrient_analysis.core.seasonal_rasterization import NutrientRasterBuilder

from .suitability_filters import feasibility_layers
from .country_attributes import (
    load_aquaculture_production, feasible_country_table, farming_sovereigns
)
from .offset_scenarios import scenario_polygons, scenario_statistics

RASTER_OUTPUTS = {
    'np_ratio': 'np_ratio.tif',
    'np_ratio_filtered': 'np_ratio_filtered.tif',
    'sst_suitable': 'sst_suitable.tif',
    'feasibility': 'seaweed_feasibility.tif'
}


class SeaweedSuitabilityPipeline:
    """
    Seaweed farming feasibility from nutrient ratio, EEZ and SST constraints.
    """

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        """
        Initialize the suitability pipeline.

        Args:
            config_path: Path to configuration file. If None, uses component default.
        """
        self.config = load_config(config_path, component_name="seaweed_suitability")
        validate_config(self.config, ['grid', 'nutrients', 'thresholds', 'eez'])

        self.logger = setup_logging(
            level=get_config_value(self.config, 'logging.level', 'INFO'),
            component_name='seaweed_suitability',
            log_file=get_config_value(self.config, 'logging.log_file')
        )

        self.grid = GridDefinition.from_config(self.config['grid'])

        # Paths
        self.nutrient_dir = Path(get_config_value(self.config, 'data.nutrient_dir', NUTRIENT_RASTERS_DIR))
        self.atlas_dir = Path(get_config_value(self.config, 'data.atlas_dir', ATLAS_CSV_DIR))
        self.eez_file = Path(get_config_value(self.config, 'data.eez_file', EEZ_FILE))
        self.production_file = Path(
            get_config_value(self.config, 'data.aquaculture_file', AQUACULTURE_PRODUCTION_FILE)
        )
        self.native_range_file = Path(get_config_value(self.config, 'data.native_range_file', NATIVE_RANGE_FILE))
        self.output_dir = Path(get_config_value(self.config, 'data.output_dir', SUITABILITY_RASTERS_DIR))
        self.tables_dir = Path(get_config_value(self.config, 'data.tables_dir', TABLES_DIR))
        self.figures_dir = Path(get_config_value(self.config, 'data.figures_dir', FIGURES_DIR))

        sst_files = get_config_value(self.config, 'sst.files') or [str(SST_MEAN_FILE)]
        self.sst_files = [Path(f) for f in sst_files]

        # Thresholds
        self.ratio_range = tuple(get_config_value(self.config, 'thresholds.np_ratio_range', [4.0, 80.0]))
        self.sst_range = tuple(get_config_value(self.config, 'thresholds.sst_range', [0.0, 35.0]))

        self.sovereign_col = get_config_value(self.config, 'eez.sovereign_column', 'SOVEREIGN1')
        self.compress = get_config_value(self.config, 'processing.compress', 'lzw')
        self.render_enabled = get_config_value(self.config, 'render.enabled', True)

        self.logger.info(
            f"Initialized SeaweedSuitabilityPipeline: N:P {self.ratio_range}, "
            f"SST {self.sst_range} °C over {len(self.sst_files)} layer(s)"
        )

    def run_full_pipeline(self) -> bool:
        """
        Run the complete suitability workflow.

        Returns:
            bool: True if all stages completed and outputs validated
        """
        start_time = time.time()
        log_pipeline_start(self.logger, 'seaweed suitability mapping', self.config)

        try:
            log_section(self.logger, 'nutrients')
            nitrate, phosphate = self.load_nutrients()

            log_section(self.logger, 'boundaries and SST')
            eez = load_boundaries(self.eez_file, crs=self.grid.crs)
            sst_layers = self.load_sst_layers()

            log_section(self.logger, 'feasibility filters')
            layers = feasibility_layers(
                nitrate, phosphate, sst_layers, eez.geometry, self.grid.transform,
                ratio_range=self.ratio_range, sst_range=self.sst_range
            )
            self.log_filter_chain(layers)
            self.save_rasters(layers)

            log_section(self.logger, 'country attributes')
            production = self.load_production()
            native_ranges = self.load_native_ranges()
            aliases = get_config_value(self.config, 'aquaculture.country_aliases')
            min_production_t = get_config_value(self.config, 'aquaculture.min_production_t', 0.0)
            countries = feasible_country_table(
                layers['feasibility'], self.grid.transform, self.grid.crs,
                eez, self.sovereign_col,
                production=production,
                native_ranges=native_ranges,
                country_aliases=aliases,
                min_production_t=min_production_t
            )
            farming = farming_sovereigns(eez, self.sovereign_col, production, aliases, min_production_t)
            self.logger.info(f"{len(farming)} sovereigns currently farming seaweed")
            self.save_table(countries, 'feasible_countries.csv')

            log_section(self.logger, 'offset scenarios')
            scenarios = scenario_polygons(self.config.get('offset_scenarios') or [], target_crs=self.grid.crs)
            offsets = scenario_statistics(
                layers['feasibility'], layers['np_ratio'], self.grid.transform, self.grid.crs, scenarios
            )
            self.save_table(offsets, 'offset_scenarios.csv')
            if len(scenarios) > 0:
                scenarios.to_file(ensure_directory(self.output_dir) / 'offset_scenarios.geojson', driver='GeoJSON')

            success = self.validate_outputs()

            if self.render_enabled:
                log_section(self.logger, 'rendering')
                self.render_map(layers['feasibility'], eez, farming, native_ranges, scenarios)

        except Exception as e:
            self.logger.error(f"Seaweed suitability mapping failed: {e}")
            self.logger.debug(traceback.format_exc())
            success = False

        log_pipeline_end(self.logger, 'seaweed suitability mapping', success, time.time() - start_time)
        return success

    def load_nutrients(self):
        """
        Annual-mean nitrate and phosphate rasters on the analysis grid.

        Reuses the nutrient pipeline GeoTIFFs when present unless
        nutrients.rebuild_from_atlas is set; otherwise rasterizes the
        atlas exports directly.
        """
        rebuild = get_config_value(self.config, 'nutrients.rebuild_from_atlas', False)
        rasters = []
        for nutrient in ('nitrate', 'phosphate'):
            path = get_config_value(self.config, f'nutrients.{nutrient}_raster')
            path = Path(path) if path else self.nutrient_dir / f"{nutrient}_annual_mean.tif"

            if path.exists() and not rebuild:
                data, transform, crs = read_raster(path)
                if data.shape != self.grid.shape or transform != self.grid.transform:
                    self.logger.info(f"Resampling {path.name} onto the analysis grid")
                    data = resample_to_grid(data, transform, crs, self.grid)
                self.logger.info(f"Loaded {nutrient} annual mean from {path}")
            else:
                data = self.rasterize_from_atlas(nutrient)

            rasters.append(data)

        return rasters[0], rasters[1]

    def rasterize_from_atlas(self, nutrient: str) -> np.ndarray:
        """Annual mean of a nutrient built straight from the seasonal atlas exports."""
        atlas_config = self.config.get('atlas') or {}
        code = atlas_config['nutrients'][nutrient]
        season_files = {
            season: atlas_file_path(self.atlas_dir, atlas_config['file_pattern'], code, period)
            for season, period in atlas_config['seasons'].items()
        }

        missing = [str(p) for p in season_files.values() if not p.exists()]
        if missing:
            raise FileNotFoundError(f"No {nutrient} raster and missing atlas exports: {missing}")

        self.logger.info(f"Rasterizing {nutrient} from {len(season_files)} atlas exports")
        builder = NutrientRasterBuilder(self.grid, depth_range=atlas_config.get('depth_range', [0, 50]))
        return builder.annual_mean(builder.seasonal_rasters(season_files))

    def load_sst_layers(self) -> List[np.ndarray]:
        """Every configured SST statistic, resampled (nearest) onto the analysis grid."""
        resampling = get_config_value(self.config, 'sst.resampling', 'nearest')
        layers = []
        for path in self.sst_files:
            if not path.exists():
                raise FileNotFoundError(f"SST raster not found: {path}")
            data, transform, crs = read_raster(path)
            layers.append(resample_to_grid(data, transform, crs, self.grid, resampling=resampling))
            self.logger.info(f"Loaded SST layer {path.name}")
        return layers

    def load_production(self) -> Optional[pd.DataFrame]:
        """Aquaculture production per country, or None when no file is available."""
        if not self.production_file.exists():
            self.logger.warning(
                f"Aquaculture production file not found: {self.production_file}. "
                f"Countries will not be flagged as currently farming"
            )
            return None

        columns = get_config_value(self.config, 'aquaculture.columns', {})
        return load_aquaculture_production(
            self.production_file,
            country_col=columns.get('country', 'country'),
            year_col=columns.get('year', 'year'),
            value_col=columns.get('production', 'production_t'),
            year_range=get_config_value(self.config, 'aquaculture.year_range'),
            group_col=columns.get('group'),
            group_values=get_config_value(self.config, 'aquaculture.groups')
        )

    def load_native_ranges(self) -> Optional[gpd.GeoDataFrame]:
        """Native-range features of farmed species, or None when unavailable."""
        if not self.native_range_file.exists():
            self.logger.warning(f"Native range file not found: {self.native_range_file}")
            return None
        return load_boundaries(self.native_range_file, crs=self.grid.crs)

    def log_filter_chain(self, layers: Dict[str, np.ndarray]) -> None:
        """Report how many cells survive each filter stage."""
        for key in ('np_ratio', 'np_ratio_filtered', 'np_ratio_eez', 'feasibility'):
            self.logger.info(f"{key}: {int(np.isfinite(layers[key]).sum()):,} cells")
        self.logger.info(f"sst_suitable: {int(layers['sst_suitable'].sum()):,} cells")

    def save_rasters(self, layers: Dict[str, np.ndarray]) -> None:
        """Write the filter-chain rasters; the SST mask is stored as 1/NaN."""
        ensure_directory(self.output_dir)
        for key, filename in RASTER_OUTPUTS.items():
            data = layers[key]
            if data.dtype == bool:
                data = np.where(data, 1.0, np.nan)
            write_raster(self.output_dir / filename, data, self.grid.transform, self.grid.crs, self.compress)

        summary = raster_summary(layers['feasibility'])
        self.logger.info(
            f"Feasibility: {summary['valid_cells']:,} cells, N:P {summary['min']:.1f}-{summary['max']:.1f}"
        )

    def save_table(self, table: pd.DataFrame, filename: str) -> Path:
        output_file = ensure_directory(self.tables_dir) / filename
        table.to_csv(output_file, index=False)
        self.logger.info(f"Saved {filename} ({len(table)} rows)")
        return output_file

    def validate_outputs(self) -> bool:
        """
        Check that every output raster and table exists.

        Returns:
            True if all outputs are valid, False otherwise
        """
        problems = []
        for filename in RASTER_OUTPUTS.values():
            tif_file = self.output_dir / filename
            if not tif_file.exists():
                problems.append(f"{filename}: missing")
                continue
            with rasterio.open(tif_file) as src:
                if (src.height, src.width) != self.grid.shape:
                    problems.append(f"{filename}: Wrong shape ({src.height}x{src.width})")

        for filename in ('feasible_countries.csv', 'offset_scenarios.csv'):
            if not (self.tables_dir / filename).exists():
                problems.append(f"{filename}: missing")

        if problems:
            self.logger.error(f"Validation failed for {len(problems)} outputs:")
            for problem in problems:
                self.logger.error(f"  {problem}")
            return False

        self.logger.info("Validation successful")
        return True

    def render_map(self, feasibility, eez, farming: set, native_ranges, scenarios) -> List[str]:
        """Render the composite suitability map, shading the EEZs of every farming sovereign."""
        from visualization.suitability_map import render_suitability_map

        farming_eez = eez[eez[self.sovereign_col].isin(sorted(farming))]

        return render_suitability_map(
            feasibility=feasibility,
            transform=self.grid.transform,
            eez=eez,
            farming_eez=farming_eez,
            native_ranges=native_ranges,
            offset_scenarios=scenarios,
            output_dir=self.figures_dir,
            viz_config_path=get_config_value(self.config, 'render.visualization_config'),
            logger=self.logger
        )

"""
Hypoxia, eutrophication and acidification pipeline.

Gap-fills the aragonite saturation raster by inverse-distance weighting,
keeps the low-saturation cells, overlays eutrophic and hypoxic site records
on country boundaries and counts conditions per country.

Outputs:
- aragonite_filled.tif, aragonite_low.tif
- country_condition_counts.csv
- hypoxia_acidification_map.{pdf,png}, country_condition_counts.{pdf,png}

Author: Diego Bengochea
"""

import time
import traceback
from pathlib import Path
from typing import List, Optional, Union

import geopandas as gpd
import numpy as np
import pandas as pd

from shared_utils import (
    setup_logging, load_config, validate_config, get_config_value,
    ensure_directory, validate_file_exists,
    log_pipeline_start, log_pipeline_end, log_section
)
from shared_utils.central_data_paths_constants import (
    ARAGONITE_FILE, HYPOXIA_SITES_FILE, EEZ_FILE, COUNTRY_BOUNDARIES_FILE,
    ACIDIFICATION_RASTERS_DIR, TABLES_DIR, FIGURES_DIR
)
from shared_utils.raster_utils import read_raster, write_raster, raster_summary
from shared_utils.vector_utils import load_boundaries

from .site_records import load_site_records
from .aragonite_processing import valid_ocean_domain, fill_aragonite, low_saturation
from .country_statistics import condition_count_table


class HypoxiaAcidificationPipeline:
    """
    Acidification gap filling, hypoxia site overlay and per-country statistics.
    """

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        """
        Initialize the hypoxia/acidification pipeline.

        Args:
            config_path: Path to configuration file. If None, uses component default.
        """
        self.config = load_config(config_path, component_name="hypoxia_acidification")
        validate_config(self.config, ['sites', 'acidification', 'statistics'])

        self.logger = setup_logging(
            level=get_config_value(self.config, 'logging.level', 'INFO'),
            component_name='hypoxia_acidification',
            log_file=get_config_value(self.config, 'logging.log_file')
        )

        self.aragonite_file = Path(get_config_value(self.config, 'data.aragonite_file', ARAGONITE_FILE))
        self.sites_file = Path(get_config_value(self.config, 'data.sites_file', HYPOXIA_SITES_FILE))
        self.boundaries_file = Path(get_config_value(self.config, 'data.boundaries_file', EEZ_FILE))
        self.countries_file = Path(get_config_value(self.config, 'data.countries_file', COUNTRY_BOUNDARIES_FILE))
        self.domain_file = get_config_value(self.config, 'data.domain_raster')
        self.output_dir = Path(get_config_value(self.config, 'data.output_dir', ACIDIFICATION_RASTERS_DIR))
        self.tables_dir = Path(get_config_value(self.config, 'data.tables_dir', TABLES_DIR))
        self.figures_dir = Path(get_config_value(self.config, 'data.figures_dir', FIGURES_DIR))

        self.idw_power = float(get_config_value(self.config, 'acidification.idw_power', 2.0))
        self.idw_neighbors = int(get_config_value(self.config, 'acidification.idw_neighbors', 12))
        self.low_range = tuple(get_config_value(self.config, 'acidification.low_range', [0.0, 3.0]))

        self.country_col = get_config_value(self.config, 'statistics.country_column', 'SOVEREIGN1')
        self.compress = get_config_value(self.config, 'processing.compress', 'lzw')
        self.render_enabled = get_config_value(self.config, 'render.enabled', True)

        self.logger.info(
            f"Initialized HypoxiaAcidificationPipeline: IDW power={self.idw_power}, "
            f"neighbours={self.idw_neighbors}, low aragonite range {self.low_range}"
        )

    def run_full_pipeline(self) -> bool:
        """
        Run the complete hypoxia/acidification workflow.

        Returns:
            bool: True if all stages completed and outputs were written
        """
        start_time = time.time()
        log_pipeline_start(self.logger, 'hypoxia and acidification mapping', self.config)

        try:
            log_section(self.logger, 'site records')
            sites = self.load_sites()

            log_section(self.logger, 'acidification')
            aragonite_file = validate_file_exists(self.aragonite_file, "aragonite saturation")
            aragonite, transform, crs = read_raster(aragonite_file)
            countries = self.load_countries(crs)
            domain = self.valid_domain(aragonite, transform, crs, countries)

            filled = fill_aragonite(
                aragonite, transform, crs, domain,
                power=self.idw_power, n_neighbors=self.idw_neighbors
            )
            low = low_saturation(filled, self.low_range)
            self.save_rasters(filled, low, transform, crs)

            log_section(self.logger, 'country statistics')
            boundaries = load_boundaries(self.boundaries_file, crs=crs)
            sites = sites.to_crs(crs) if sites.crs != crs else sites
            counts = condition_count_table(sites, low, transform, boundaries, self.country_col)
            output_file = ensure_directory(self.tables_dir) / 'country_condition_counts.csv'
            counts.to_csv(output_file, index=False)
            self.logger.info(f"Saved condition counts for {len(counts)} countries to {output_file}")

            success = True

            if self.render_enabled:
                log_section(self.logger, 'rendering')
                self.render_maps(low, transform, sites, countries, counts)

        except Exception as e:
            self.logger.error(f"Hypoxia and acidification mapping failed: {e}")
            self.logger.debug(traceback.format_exc())
            success = False

        log_pipeline_end(self.logger, 'hypoxia and acidification mapping', success, time.time() - start_time)
        return success

    def load_sites(self) -> gpd.GeoDataFrame:
        columns = get_config_value(self.config, 'sites.columns', {})
        return load_site_records(
            self.sites_file,
            lon_col=columns.get('longitude', 'longitude'),
            lat_col=columns.get('latitude', 'latitude'),
            classification_col=columns.get('classification', 'classification'),
            name_col=columns.get('name'),
            sheet_name=get_config_value(self.config, 'sites.sheet_name', 0)
        )

    def load_countries(self, crs) -> Optional[gpd.GeoDataFrame]:
        """Country land polygons, or None when the file is unavailable."""
        if not self.countries_file.exists():
            self.logger.warning(f"Country boundaries not found: {self.countries_file}")
            return None
        return load_boundaries(self.countries_file, crs=crs)

    def valid_domain(self, aragonite: np.ndarray, transform, crs, countries) -> np.ndarray:
        """Ocean cells allowed to receive interpolated values."""
        if self.domain_file and Path(self.domain_file).exists():
            domain_data, domain_transform, domain_crs = read_raster(self.domain_file)
            return valid_ocean_domain(
                aragonite, transform, crs,
                domain_raster=domain_data,
                domain_transform=domain_transform,
                domain_crs=domain_crs
            )
        if self.domain_file:
            self.logger.warning(f"Domain raster not found: {self.domain_file}")

        land = countries.geometry if countries is not None else None
        return valid_ocean_domain(aragonite, transform, crs, land_geometries=land)

    def save_rasters(self, filled: np.ndarray, low: np.ndarray, transform, crs) -> None:
        ensure_directory(self.output_dir)
        write_raster(self.output_dir / 'aragonite_filled.tif', filled, transform, crs, self.compress)
        write_raster(self.output_dir / 'aragonite_low.tif', low, transform, crs, self.compress)

        summary = raster_summary(low)
        self.logger.info(
            f"Aragonite filled: {int(np.isfinite(filled).sum()):,} cells, "
            f"low saturation: {summary['valid_cells']:,} cells"
        )

    def render_maps(self, low, transform, sites, countries, counts: pd.DataFrame) -> List[str]:
        """Render the hypoxia/acidification map and the per-country bar chart."""
        from visualization.hypoxia_maps import render_hypoxia_maps

        return render_hypoxia_maps(
            aragonite_low=low,
            transform=transform,
            sites=sites,
            countries=countries,
            counts=counts,
            low_range=self.low_range,
            output_dir=self.figures_dir,
            viz_config_path=get_config_value(self.config, 'render.visualization_config'),
            logger=self.logger
        )

"""
Seasonal nutrient rasterization.

Turns atlas point records into gridded rasters: every depth level inside the
configured layer is rasterized by cell mean and the levels are averaged into
one raster per season. Seasons are then combined into an annual mean and a
seasonal standard deviation.

Author: Diego Bengochea
"""

from pathlib import Path
from typing import Dict, Mapping, Sequence, Union

import numpy as np
import pandas as pd

from shared_utils import get_logger
from shared_utils.raster_utils import (
    GridDefinition, rasterize_point_mean, combine_mean, combine_std
)

from .atlas_io import read_atlas_csv


class NutrientRasterBuilder:
    """
    Builds per-season nutrient rasters on a fixed grid for a depth layer.
    """

    def __init__(self, grid: GridDefinition, depth_range: Sequence[float] = (0.0, 50.0)):
        """
        Args:
            grid: Target grid definition
            depth_range: Inclusive (min, max) depth of the layer in metres
        """
        d_min, d_max = (float(d) for d in depth_range)
        if d_min > d_max:
            raise ValueError(f"Invalid depth range: {depth_range}")

        self.grid = grid
        self.depth_range = (d_min, d_max)
        self.logger = get_logger('nutrient_rasterization')

    def depth_rasters(self, records: pd.DataFrame) -> Dict[float, np.ndarray]:
        """Rasterize every depth level of the layer separately."""
        d_min, d_max = self.depth_range
        in_layer = records[(records['depth'] >= d_min) & (records['depth'] <= d_max)]

        rasters = {}
        for depth, level in in_layer.groupby('depth'):
            rasters[float(depth)] = rasterize_point_mean(
                level['longitude'].values,
                level['latitude'].values,
                level['value'].values,
                self.grid
            )
        return rasters

    def season_raster(self, records: pd.DataFrame) -> np.ndarray:
        """
        Depth-averaged raster of one season.

        Returns an all-NaN raster when no records fall inside the depth layer.
        """
        rasters = self.depth_rasters(records)

        if not rasters:
            self.logger.warning(
                f"No records between {self.depth_range[0]:g} and {self.depth_range[1]:g} m"
            )
            return np.full(self.grid.shape, np.nan)

        self.logger.debug(f"Averaging {len(rasters)} depth levels: {sorted(rasters)}")
        return combine_mean(list(rasters.values()))

    def season_raster_from_file(self, path: Union[str, Path]) -> np.ndarray:
        """Read an atlas export and build its depth-averaged raster."""
        records = read_atlas_csv(path, depth_range=self.depth_range)
        self.logger.debug(f"{Path(path).name}: {len(records):,} records in layer")
        return self.season_raster(records)

    def seasonal_rasters(self, season_files: Mapping[str, Union[str, Path]]) -> Dict[str, np.ndarray]:
        """Build one raster per season from a season -> file mapping."""
        return {
            season: self.season_raster_from_file(path)
            for season, path in season_files.items()
        }

    @staticmethod
    def annual_mean(season_rasters: Mapping[str, np.ndarray]) -> np.ndarray:
        return combine_mean(list(season_rasters.values()))

    @staticmethod
    def seasonal_std(season_rasters: Mapping[str, np.ndarray]) -> np.ndarray:
        return combine_std(list(season_rasters.values()))

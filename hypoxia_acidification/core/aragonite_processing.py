"""
Aragonite saturation gap filling and low-saturation filtering.

Author: Diego Bengochea
"""

from typing import Optional, Sequence

import numpy as np
from rasterio.transform import Affine
from scipy import ndimage

from shared_utils import get_logger
from shared_utils.interpolation import idw_gap_fill
from shared_utils.raster_utils import apply_range_filter, polygon_coverage, reproject_array

logger = get_logger('aragonite_processing')

DEFAULT_LOW_RANGE = (0.0, 3.0)


def valid_ocean_domain(
    raster: np.ndarray,
    transform: Affine,
    crs,
    domain_raster: Optional[np.ndarray] = None,
    domain_transform: Optional[Affine] = None,
    domain_crs=None,
    land_geometries=None
) -> np.ndarray:
    """
    Boolean mask of cells that may hold interpolated values.

    In order of preference: finite cells of a domain raster resampled
    (nearest) onto the raster grid, cells outside land polygons, or the
    raster's own footprint with its enclosed gaps. Gaps connected to the
    raster edge stay outside the footprint.
    """
    if domain_raster is not None:
        resampled = reproject_array(
            domain_raster, domain_transform, domain_crs,
            raster.shape, transform, crs,
            resampling='nearest'
        )
        logger.info("Valid domain from domain raster")
        return np.isfinite(resampled)

    if land_geometries is not None:
        land = polygon_coverage(raster.shape, transform, land_geometries)
        logger.info("Valid domain from cells outside land polygons")
        return ~land

    footprint = ndimage.binary_fill_holes(np.isfinite(raster))
    logger.warning(
        "No domain raster or land polygons, valid domain is the raster footprint; "
        f"{int((footprint & ~np.isfinite(raster)).sum()):,} enclosed gaps will be filled"
    )
    return footprint


def fill_aragonite(
    aragonite: np.ndarray,
    transform: Affine,
    crs,
    valid_domain: np.ndarray,
    power: float = 2.0,
    n_neighbors: int = 12
) -> np.ndarray:
    """IDW gap fill of aragonite saturation restricted to the valid domain."""
    n_missing = int((~np.isfinite(aragonite) & valid_domain).sum())
    logger.info(f"Gap filling {n_missing:,} missing ocean cells")
    return idw_gap_fill(
        aragonite, transform, crs,
        power=power,
        n_neighbors=n_neighbors,
        valid_domain=valid_domain
    )


def low_saturation(aragonite: np.ndarray, low_range: Sequence[float] = DEFAULT_LOW_RANGE) -> np.ndarray:
    """Keep cells whose saturation state lies within the inclusive range."""
    return apply_range_filter(aragonite, *low_range)

"""
Suitability filter chain for seaweed farming.

A cell is feasible when its nitrogen:phosphorus ratio lies inside the
suitable range, it falls inside an exclusive economic zone, and every
sea-surface-temperature statistic is within the tolerated range. The
feasibility raster carries the N:P ratio of feasible cells and is empty
everywhere else.

Author: Diego Bengochea
"""

from typing import Dict, Sequence

import numpy as np
from rasterio.transform import Affine

from shared_utils.raster_utils import ratio_raster, apply_range_filter, mask_raster_with_polygons

# Literature thresholds, overridden from config
DEFAULT_RATIO_RANGE = (4.0, 80.0)
DEFAULT_SST_RANGE = (0.0, 35.0)


def np_ratio_layers(
    nitrate: np.ndarray,
    phosphate: np.ndarray,
    ratio_range: Sequence[float] = DEFAULT_RATIO_RANGE
) -> Dict[str, np.ndarray]:
    """
    N:P ratio raster and its range-filtered version.

    Returns:
        Dict with 'np_ratio' and 'np_ratio_filtered'
    """
    ratio = ratio_raster(nitrate, phosphate)
    return {
        'np_ratio': ratio,
        'np_ratio_filtered': apply_range_filter(ratio, *ratio_range)
    }


def sst_suitability_mask(
    sst_layers: Sequence[np.ndarray],
    sst_range: Sequence[float] = DEFAULT_SST_RANGE
) -> np.ndarray:
    """
    Boolean mask of cells whose every SST statistic lies in the inclusive range.

    Cells with a missing SST value in any layer are unsuitable.
    """
    if len(sst_layers) == 0:
        raise ValueError("At least one SST layer is required")

    lower, upper = sst_range
    suitable = np.ones(np.shape(sst_layers[0]), dtype=bool)
    for layer in sst_layers:
        layer = np.asarray(layer, dtype='float64')
        if layer.shape != suitable.shape:
            raise ValueError(f"SST layers are not co-registered: {layer.shape} vs {suitable.shape}")
        suitable &= (layer >= lower) & (layer <= upper)
    return suitable


def apply_boolean_mask(raster: np.ndarray, mask: np.ndarray) -> np.ndarray:
    """Set cells where mask is False to NaN."""
    masked = np.array(raster, dtype='float64', copy=True)
    masked[~np.asarray(mask, dtype=bool)] = np.nan
    return masked


def feasibility_layers(
    nitrate: np.ndarray,
    phosphate: np.ndarray,
    sst_layers: Sequence[np.ndarray],
    eez_geometries,
    transform: Affine,
    ratio_range: Sequence[float] = DEFAULT_RATIO_RANGE,
    sst_range: Sequence[float] = DEFAULT_SST_RANGE
) -> Dict[str, np.ndarray]:
    """
    Run the full filter chain on co-registered rasters.

    Args:
        nitrate: Nitrate concentration raster
        phosphate: Phosphate concentration raster
        sst_layers: SST statistic rasters on the same grid
        eez_geometries: EEZ polygons in the raster CRS
        transform: Affine transform shared by all rasters
        ratio_range: Inclusive suitable N:P ratio range
        sst_range: Inclusive suitable SST range (°C)

    Returns:
        Dict with 'np_ratio', 'np_ratio_filtered', 'np_ratio_eez',
        'sst_suitable' (bool) and 'feasibility'
    """
    layers = np_ratio_layers(nitrate, phosphate, ratio_range)
    layers['np_ratio_eez'] = mask_raster_with_polygons(
        layers['np_ratio_filtered'], transform, eez_geometries
    )
    layers['sst_suitable'] = sst_suitability_mask(sst_layers, sst_range)
    layers['feasibility'] = apply_boolean_mask(layers['np_ratio_eez'], layers['sst_suitable'])
    return layers

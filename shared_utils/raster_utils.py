"""
Raster utilities shared by the analysis pipelines.

Rasters are plain 2-D numpy float arrays paired with an affine transform and
a CRS. Missing cells are NaN throughout; nodata values are converted to NaN
on read and written back as NaN.

Author: Diego Bengochea
"""

import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple, Union

import numpy as np
import rasterio
from rasterio.crs import CRS
from rasterio.enums import Resampling
from rasterio.features import geometry_mask
from rasterio.transform import Affine, from_origin
from rasterio.warp import reproject

EARTH_RADIUS_KM = 6371.0088


@dataclass(frozen=True)
class GridDefinition:
    """
    Regular lattice over a fixed geographic extent.

    The default is the global 1 degree grid of the ocean atlas exports.
    """
    west: float = -180.0
    south: float = -90.0
    east: float = 180.0
    north: float = 90.0
    resolution: float = 1.0
    crs: str = "EPSG:4326"

    @classmethod
    def from_config(cls, grid_config: Optional[Dict[str, Any]]) -> "GridDefinition":
        """Build a grid from a config section with extent/resolution/crs keys."""
        if not grid_config:
            return cls()
        extent = grid_config.get('extent') or [cls.west, cls.south, cls.east, cls.north]
        west, south, east, north = [float(v) for v in extent]
        return cls(
            west=west,
            south=south,
            east=east,
            north=north,
            resolution=float(grid_config.get('resolution', cls.resolution)),
            crs=grid_config.get('crs', cls.crs)
        )

    @property
    def width(self) -> int:
        return int(round((self.east - self.west) / self.resolution))

    @property
    def height(self) -> int:
        return int(round((self.north - self.south) / self.resolution))

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.height, self.width)

    @property
    def transform(self) -> Affine:
        return from_origin(self.west, self.north, self.resolution, self.resolution)

    def cell_centers(self) -> Tuple[np.ndarray, np.ndarray]:
        """Return 1-D arrays of cell-centre x (columns) and y (rows) coordinates."""
        xs = self.west + (np.arange(self.width) + 0.5) * self.resolution
        ys = self.north - (np.arange(self.height) + 0.5) * self.resolution
        return xs, ys


def rasterize_point_mean(
    lons: Sequence[float],
    lats: Sequence[float],
    values: Sequence[float],
    grid: GridDefinition
) -> np.ndarray:
    """
    Rasterize point measurements onto a grid by cell-wise arithmetic mean.

    Each point falls in the cell that contains it. Points lying exactly on the
    east or south edge of the extent go to the last column or row, so every
    point inside the closed extent is counted once. Points outside the extent
    and non-finite values are ignored.

    Args:
        lons: Point x coordinates (longitude for geographic grids)
        lats: Point y coordinates (latitude for geographic grids)
        values: Measured values
        grid: Target grid definition

    Returns:
        2-D array of shape grid.shape; cells without points are NaN
    """
    lons = np.asarray(lons, dtype='float64').ravel()
    lats = np.asarray(lats, dtype='float64').ravel()
    values = np.asarray(values, dtype='float64').ravel()

    if not (lons.size == lats.size == values.size):
        raise ValueError(
            f"Coordinate and value arrays differ in length: "
            f"{lons.size}, {lats.size}, {values.size}"
        )

    keep = np.isfinite(lons) & np.isfinite(lats) & np.isfinite(values)
    keep &= (lons >= grid.west) & (lons <= grid.east)
    keep &= (lats >= grid.south) & (lats <= grid.north)

    cols = np.floor((lons[keep] - grid.west) / grid.resolution).astype('int64')
    rows = np.floor((grid.north - lats[keep]) / grid.resolution).astype('int64')
    cols = np.clip(cols, 0, grid.width - 1)
    rows = np.clip(rows, 0, grid.height - 1)

    n_cells = grid.height * grid.width
    flat_index = rows * grid.width + cols
    sums = np.bincount(flat_index, weights=values[keep], minlength=n_cells)
    counts = np.bincount(flat_index, minlength=n_cells)

    result = np.full(n_cells, np.nan, dtype='float64')
    occupied = counts > 0
    result[occupied] = sums[occupied] / counts[occupied]

    return result.reshape(grid.shape)


def _stack(rasters: Sequence[np.ndarray]) -> np.ndarray:
    if len(rasters) == 0:
        raise ValueError("At least one raster is required")
    shapes = {np.shape(r) for r in rasters}
    if len(shapes) > 1:
        raise ValueError(f"Rasters are not co-registered, shapes differ: {sorted(shapes)}")
    return np.stack([np.asarray(r, dtype='float64') for r in rasters])


def combine_mean(rasters: Sequence[np.ndarray]) -> np.ndarray:
    """
    Cell-wise mean across rasters, ignoring NaN.

    Cells that are NaN in every input stay NaN; a cell present in a single
    input keeps that input's value.
    """
    stack = _stack(rasters)
    with warnings.catch_warnings():
        warnings.simplefilter('ignore', category=RuntimeWarning)
        return np.nanmean(stack, axis=0)


def combine_std(rasters: Sequence[np.ndarray]) -> np.ndarray:
    """Cell-wise population standard deviation across rasters, ignoring NaN."""
    stack = _stack(rasters)
    with warnings.catch_warnings():
        warnings.simplefilter('ignore', category=RuntimeWarning)
        return np.nanstd(stack, axis=0)


def ratio_raster(numerator: np.ndarray, denominator: np.ndarray) -> np.ndarray:
    """
    Cell-wise quotient of two co-registered rasters.

    Division by zero and NaN operands give NaN.
    """
    numerator = np.asarray(numerator, dtype='float64')
    denominator = np.asarray(denominator, dtype='float64')

    if numerator.shape != denominator.shape:
        raise ValueError(
            f"Rasters are not co-registered: {numerator.shape} vs {denominator.shape}"
        )

    with np.errstate(divide='ignore', invalid='ignore'):
        quotient = numerator / denominator

    quotient[~np.isfinite(quotient)] = np.nan
    return quotient


def apply_range_filter(raster: np.ndarray, lower: float, upper: float) -> np.ndarray:
    """
    Keep cells inside the inclusive range [lower, upper]; all others become NaN.

    Applying the same filter twice gives the same raster.
    """
    if lower > upper:
        raise ValueError(f"Invalid range: lower bound {lower} exceeds upper bound {upper}")

    filtered = np.array(raster, dtype='float64', copy=True)
    inside = (filtered >= lower) & (filtered <= upper)
    filtered[~inside] = np.nan
    return filtered


def polygon_coverage(
    shape: Tuple[int, int],
    transform: Affine,
    geometries,
    all_touched: bool = False
) -> np.ndarray:
    """Boolean array, True where a cell falls inside any of the geometries."""
    geoms = [g for g in geometries if g is not None and not g.is_empty]
    if not geoms:
        return np.zeros(shape, dtype=bool)
    return geometry_mask(
        geoms,
        out_shape=shape,
        transform=transform,
        all_touched=all_touched,
        invert=True
    )


def mask_raster_with_polygons(
    raster: np.ndarray,
    transform: Affine,
    geometries,
    all_touched: bool = False
) -> np.ndarray:
    """
    Restrict a raster to the area covered by a set of polygons.

    Cells outside every polygon are set to NaN. Masking again with the same
    polygons changes nothing.

    Args:
        raster: Input raster
        transform: Affine transform of the raster
        geometries: Iterable of shapely geometries in the raster CRS
        all_touched: Include every cell touched by a polygon, not only those
            whose centre lies inside

    Returns:
        Masked copy of the raster
    """
    masked = np.array(raster, dtype='float64', copy=True)
    inside = polygon_coverage(masked.shape, transform, geometries, all_touched)
    masked[~inside] = np.nan
    return masked


def reproject_array(
    data: np.ndarray,
    src_transform: Affine,
    src_crs,
    dst_shape: Tuple[int, int],
    dst_transform: Affine,
    dst_crs,
    resampling: str = 'nearest'
) -> np.ndarray:
    """
    Warp a raster onto another grid.

    Args:
        data: Source raster (NaN for missing cells)
        src_transform: Source affine transform
        src_crs: Source CRS
        dst_shape: Destination (rows, cols)
        dst_transform: Destination affine transform
        dst_crs: Destination CRS
        resampling: Name of a rasterio Resampling method

    Returns:
        Destination raster, NaN where no source data maps
    """
    destination = np.full(dst_shape, np.nan, dtype='float64')

    reproject(
        source=np.asarray(data, dtype='float64'),
        destination=destination,
        src_transform=src_transform,
        src_crs=src_crs,
        src_nodata=np.nan,
        dst_transform=dst_transform,
        dst_crs=dst_crs,
        dst_nodata=np.nan,
        resampling=getattr(Resampling, resampling)
    )

    return destination


def resample_to_grid(
    data: np.ndarray,
    transform: Affine,
    crs,
    grid: GridDefinition,
    resampling: str = 'nearest'
) -> np.ndarray:
    """Resample a raster onto a grid definition (nearest neighbour by default)."""
    return reproject_array(
        data, transform, crs,
        grid.shape, grid.transform, grid.crs,
        resampling=resampling
    )


def cell_center_coordinates(shape: Tuple[int, int], transform: Affine) -> Tuple[np.ndarray, np.ndarray]:
    """Return 2-D arrays of cell-centre x and y coordinates."""
    rows, cols = np.indices(shape, dtype='float64')
    cols += 0.5
    rows += 0.5
    xs = transform.c + cols * transform.a + rows * transform.b
    ys = transform.f + cols * transform.d + rows * transform.e
    return xs, ys


def is_geographic(crs) -> bool:
    """True when the CRS uses angular (longitude/latitude) coordinates."""
    if crs is None:
        return False
    return CRS.from_user_input(crs).is_geographic


def cell_areas_km2(shape: Tuple[int, int], transform: Affine, crs) -> np.ndarray:
    """
    Area of every cell in km².

    Geographic grids use the spherical zone formula, projected grids the pixel
    size (assumed in metres).
    """
    if not is_geographic(crs):
        area = abs(transform.a * transform.e) / 1e6
        return np.full(shape, area, dtype='float64')

    rows = np.arange(shape[0] + 1, dtype='float64')
    edge_lats = np.clip(transform.f + rows * transform.e, -90.0, 90.0)
    band = np.abs(np.diff(np.sin(np.radians(edge_lats))))
    dlon = np.radians(abs(transform.a))
    row_areas = EARTH_RADIUS_KM ** 2 * dlon * band
    return np.repeat(row_areas[:, None], shape[1], axis=1)


def read_raster(path: Union[str, Path], band: int = 1) -> Tuple[np.ndarray, Affine, CRS]:
    """
    Read one raster band as float64 with nodata converted to NaN.

    Returns:
        Tuple of (data, transform, crs)
    """
    with rasterio.open(path) as src:
        data = src.read(band).astype('float64')
        nodata = src.nodata
        transform = src.transform
        crs = src.crs

    if nodata is not None and not np.isnan(nodata):
        data[data == nodata] = np.nan

    return data, transform, crs


def write_raster(
    path: Union[str, Path],
    data: np.ndarray,
    transform: Affine,
    crs,
    compress: str = 'lzw'
) -> Path:
    """Write a single-band float32 GeoTIFF with NaN as nodata."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    data = np.asarray(data, dtype='float32')
    profile = {
        'driver': 'GTiff',
        'height': data.shape[0],
        'width': data.shape[1],
        'count': 1,
        'dtype': 'float32',
        'crs': crs,
        'transform': transform,
        'nodata': np.nan,
        'compress': compress
    }

    with rasterio.open(path, 'w', **profile) as dst:
        dst.write(data, 1)

    return path


def raster_summary(data: np.ndarray) -> Dict[str, float]:
    """Valid cell count and min/mean/max of a raster (NaN when empty)."""
    valid = np.isfinite(data)
    n_valid = int(valid.sum())
    if n_valid == 0:
        return {'valid_cells': 0, 'min': np.nan, 'mean': np.nan, 'max': np.nan}
    values = data[valid]
    return {
        'valid_cells': n_valid,
        'min': float(values.min()),
        'mean': float(values.mean()),
        'max': float(values.max())
    }

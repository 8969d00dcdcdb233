"""
Vector overlay utilities: boundary loading, point layers, point-in-polygon
joins and per-polygon raster cell counts.

Author: Diego Bengochea
"""

from pathlib import Path
from typing import Iterable, Optional, Union

import geopandas as gpd
import numpy as np
import pandas as pd
from rasterio.transform import Affine

from .logging_utils import get_logger
from .raster_utils import polygon_coverage

logger = get_logger('vector_utils')


def load_boundaries(
    path: Union[str, Path],
    crs=None,
    dissolve_by: Optional[str] = None
) -> gpd.GeoDataFrame:
    """
    Load a boundary layer (EEZ, countries, ranges) from any vector format.

    Args:
        path: Path to shapefile, GeoPackage or GeoJSON
        crs: Optional target CRS; the layer is reprojected when it differs
        dissolve_by: Optional attribute; features sharing a value are merged

    Returns:
        Boundary GeoDataFrame
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Boundary file not found: {path}")

    boundaries = gpd.read_file(path)
    logger.debug(f"Loaded {len(boundaries)} features from {path.name}")

    if crs is not None and boundaries.crs is not None and boundaries.crs != crs:
        boundaries = boundaries.to_crs(crs)

    if dissolve_by:
        boundaries = boundaries.dissolve(by=dissolve_by, as_index=False)
        logger.debug(f"Dissolved to {len(boundaries)} features by '{dissolve_by}'")

    return boundaries


def points_from_dataframe(
    df: pd.DataFrame,
    lon_col: str = 'longitude',
    lat_col: str = 'latitude',
    crs: str = 'EPSG:4326'
) -> gpd.GeoDataFrame:
    """
    Build a point layer from longitude/latitude columns.

    Rows with missing or non-numeric coordinates are dropped.
    """
    missing = [c for c in (lon_col, lat_col) if c not in df.columns]
    if missing:
        raise KeyError(f"Coordinate columns not found: {missing}")

    df = df.copy()
    df[lon_col] = pd.to_numeric(df[lon_col], errors='coerce')
    df[lat_col] = pd.to_numeric(df[lat_col], errors='coerce')

    n_before = len(df)
    df = df.dropna(subset=[lon_col, lat_col])
    if len(df) < n_before:
        logger.warning(f"Dropped {n_before - len(df)} records without coordinates")

    return gpd.GeoDataFrame(
        df,
        geometry=gpd.points_from_xy(df[lon_col], df[lat_col]),
        crs=crs
    )


def join_points_to_polygons(
    points: gpd.GeoDataFrame,
    polygons: gpd.GeoDataFrame,
    attributes: Optional[Iterable[str]] = None
) -> gpd.GeoDataFrame:
    """
    Attach polygon attributes to the points that fall within them.

    Points outside every polygon are dropped. A point inside several
    overlapping polygons keeps the first match only.

    Args:
        points: Point layer
        polygons: Polygon layer
        attributes: Polygon columns to attach (default: all)

    Returns:
        Joined point layer
    """
    if polygons.crs != points.crs:
        polygons = polygons.to_crs(points.crs)

    if attributes is not None:
        polygons = polygons[list(attributes) + [polygons.geometry.name]]

    joined = gpd.sjoin(points, polygons, how='inner', predicate='within')
    joined = joined[~joined.index.duplicated(keep='first')]
    joined = joined.drop(columns=['index_right'], errors='ignore')

    n_dropped = len(points) - len(joined)
    if n_dropped:
        logger.info(f"{n_dropped} of {len(points)} points fall outside all polygons and were dropped")

    return joined


def zonal_cell_counts(
    raster: np.ndarray,
    transform: Affine,
    polygons: gpd.GeoDataFrame,
    id_col: str,
    weights: Optional[np.ndarray] = None
) -> pd.Series:
    """
    Count valid raster cells inside each polygon group.

    Features sharing an id are treated as one zone. With weights (for
    example cell areas) the weighted sum is returned instead of the count.

    Args:
        raster: Raster with NaN for empty cells
        transform: Affine transform of the raster (polygons must share its CRS)
        polygons: Polygon layer
        id_col: Column identifying zones
        weights: Optional per-cell weights with the raster's shape

    Returns:
        Series indexed by zone id
    """
    valid = np.isfinite(raster)
    if weights is None:
        weights = np.ones(raster.shape, dtype='float64')

    results = {}
    for zone_id, zone in polygons.groupby(id_col):
        inside = polygon_coverage(raster.shape, transform, zone.geometry)
        results[zone_id] = float(weights[inside & valid].sum())

    return pd.Series(results, name='cells', dtype='float64')

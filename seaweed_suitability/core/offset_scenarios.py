"""
Offset scenario polygons.

Offset scenarios are hand-drawn regions (for instance a stretch of open
ocean considered for carbon offset farming) given in the config as a name
and a ring of lon/lat vertices.

Author: Diego Bengochea
"""

from typing import Any, Dict, List

import geopandas as gpd
import numpy as np
import pandas as pd
from rasterio.transform import Affine
from shapely.geometry import Polygon

from shared_utils.raster_utils import cell_areas_km2, polygon_coverage


VERTEX_CRS = 'EPSG:4326'


def scenario_polygons(scenarios: List[Dict[str, Any]], target_crs=None) -> gpd.GeoDataFrame:
    """
    Build a GeoDataFrame from config scenario entries.

    Args:
        scenarios: List of {'name': str, 'coordinates': [[lon, lat], ...]}
        target_crs: Analysis CRS; polygons are reprojected from lon/lat when it differs

    Returns:
        GeoDataFrame with columns name, geometry
    """
    names = []
    geometries = []
    for scenario in scenarios or []:
        name = scenario.get('name')
        coordinates = scenario.get('coordinates') or []
        if not name:
            raise ValueError("Offset scenario without a name")
        if len(coordinates) < 3:
            raise ValueError(f"Offset scenario '{name}' needs at least 3 vertices")

        polygon = Polygon([(float(lon), float(lat)) for lon, lat in coordinates])
        if not polygon.is_valid:
            raise ValueError(f"Offset scenario '{name}' is not a valid polygon")

        names.append(name)
        geometries.append(polygon)

    polygons = gpd.GeoDataFrame({'name': names}, geometry=geometries, crs=VERTEX_CRS)
    if target_crs is not None and polygons.crs != target_crs:
        polygons = polygons.to_crs(target_crs)
    return polygons


def scenario_statistics(
    feasibility: np.ndarray,
    np_ratio: np.ndarray,
    transform: Affine,
    crs,
    scenarios: gpd.GeoDataFrame
) -> pd.DataFrame:
    """
    Feasible cells, feasible area and mean N:P ratio inside each scenario polygon.

    Returns:
        DataFrame with columns scenario, total_cells, feasible_cells,
        feasible_area_km2, feasible_fraction, mean_np_ratio
    """
    areas = cell_areas_km2(feasibility.shape, transform, crs)
    feasible = np.isfinite(feasibility)

    rows = []
    for name, geometry in zip(scenarios['name'], scenarios.geometry):
        inside = polygon_coverage(feasibility.shape, transform, [geometry])
        total_cells = int(inside.sum())
        hits = inside & feasible
        ratio_inside = np_ratio[inside & np.isfinite(np_ratio)]

        rows.append({
            'scenario': name,
            'total_cells': total_cells,
            'feasible_cells': int(hits.sum()),
            'feasible_area_km2': float(areas[hits].sum()),
            'feasible_fraction': float(hits.sum() / total_cells) if total_cells else 0.0,
            'mean_np_ratio': float(ratio_inside.mean()) if ratio_inside.size else np.nan
        })

    return pd.DataFrame(rows, columns=[
        'scenario', 'total_cells', 'feasible_cells', 'feasible_area_km2',
        'feasible_fraction', 'mean_np_ratio'
    ])

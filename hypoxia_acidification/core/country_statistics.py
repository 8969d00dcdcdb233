"""
Per-country condition counts.

Sites are attributed to the country polygon they fall within and counted
per classification; low-aragonite cells are counted per country over the
same boundary layer.

Author: Diego Bengochea
"""

import geopandas as gpd
import numpy as np
import pandas as pd
from rasterio.transform import Affine

from shared_utils.vector_utils import join_points_to_polygons, zonal_cell_counts


def site_counts_by_country(
    sites: gpd.GeoDataFrame,
    boundaries: gpd.GeoDataFrame,
    country_col: str
) -> pd.DataFrame:
    """
    Count sites per country and classification.

    Sites outside every polygon are dropped.

    Returns:
        DataFrame indexed by country with one column per classification
        and a 'total_sites' column
    """
    joined = join_points_to_polygons(sites, boundaries, attributes=[country_col])
    counts = pd.crosstab(joined[country_col], joined['classification'])
    counts.columns = [str(c) for c in counts.columns]
    counts['total_sites'] = counts.sum(axis=1)
    counts.index.name = 'country'
    return counts


def condition_count_table(
    sites: gpd.GeoDataFrame,
    aragonite_low: np.ndarray,
    transform: Affine,
    boundaries: gpd.GeoDataFrame,
    country_col: str
) -> pd.DataFrame:
    """
    Combined site and low-aragonite counts per country.

    Countries with neither sites nor low-aragonite cells are omitted.

    Returns:
        DataFrame with columns country, <classification>..., total_sites,
        low_aragonite_cells, sorted by total_sites then low_aragonite_cells
    """
    site_counts = site_counts_by_country(sites, boundaries, country_col)
    low_cells = zonal_cell_counts(aragonite_low, transform, boundaries, country_col)
    low_cells.index.name = 'country'

    table = site_counts.join(low_cells.rename('low_aragonite_cells'), how='outer')
    table = table.fillna(0).astype(int)
    table = table[(table['total_sites'] > 0) | (table['low_aragonite_cells'] > 0)]
    table = table.sort_values(['total_sites', 'low_aragonite_cells'], ascending=False)

    return table.reset_index()

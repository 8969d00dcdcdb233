"""
Country attributes for the suitability overlay.

Joins aquaculture production statistics and native species ranges onto
exclusive economic zones, and summarizes the feasible area of every
sovereign state into the feasible-country list.

Author: Diego Bengochea
"""

from pathlib import Path
from typing import Dict, Optional, Sequence, Union

import geopandas as gpd
import numpy as np
import pandas as pd
from rasterio.transform import Affine

from shared_utils import get_logger
from shared_utils.raster_utils import cell_areas_km2
from shared_utils.vector_utils import zonal_cell_counts

logger = get_logger('country_attributes')


def normalize_country_name(name: str, aliases: Optional[Dict[str, str]] = None) -> str:
    """Case- and whitespace-insensitive country key, with optional aliases."""
    key = ' '.join(str(name).split()).casefold()
    if aliases:
        normalized_aliases = {' '.join(k.split()).casefold(): v for k, v in aliases.items()}
        if key in normalized_aliases:
            key = ' '.join(str(normalized_aliases[key]).split()).casefold()
    return key


def load_aquaculture_production(
    path: Union[str, Path],
    country_col: str = 'country',
    year_col: str = 'year',
    value_col: str = 'production_t',
    year_range: Optional[Sequence[int]] = None,
    group_col: Optional[str] = None,
    group_values: Optional[Sequence[str]] = None
) -> pd.DataFrame:
    """
    Load aquaculture production by country and year and total it per country.

    Args:
        path: CSV with one row per country, year (and optionally species group)
        country_col: Country name column
        year_col: Year column
        value_col: Production column (tonnes)
        year_range: Optional inclusive (first, last) year window
        group_col: Optional species-group column to filter on
        group_values: Groups to keep when group_col is set

    Returns:
        DataFrame with columns country, production_t (mean annual production
        over the years present in the window)
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Aquaculture production file not found: {path}")

    production = pd.read_csv(path)

    required = [country_col, year_col, value_col] + ([group_col] if group_col else [])
    missing = [c for c in required if c not in production.columns]
    if missing:
        raise KeyError(f"Columns {missing} not found in {path.name}")

    production[value_col] = pd.to_numeric(production[value_col], errors='coerce').fillna(0.0)
    production[year_col] = pd.to_numeric(production[year_col], errors='coerce')

    if year_range is not None:
        first, last = year_range
        production = production[production[year_col].between(first, last)]

    if group_col and group_values:
        production = production[production[group_col].isin(group_values)]

    annual = production.groupby([country_col, year_col])[value_col].sum().reset_index()
    totals = annual.groupby(country_col)[value_col].mean().reset_index()
    totals.columns = ['country', 'production_t']

    logger.info(f"Loaded aquaculture production for {len(totals)} countries")
    return totals


def production_by_sovereign(
    sovereigns: Sequence[str],
    production: Optional[pd.DataFrame],
    country_aliases: Optional[Dict[str, str]] = None
) -> pd.Series:
    """Production (t) matched to each sovereign name, 0 where unmatched."""
    sovereigns = list(sovereigns)
    if production is None or len(production) == 0:
        return pd.Series(0.0, index=sovereigns, dtype='float64')

    lookup = {
        normalize_country_name(c, country_aliases): v
        for c, v in zip(production['country'], production['production_t'])
    }
    return pd.Series(
        [lookup.get(normalize_country_name(s, country_aliases), 0.0) for s in sovereigns],
        index=sovereigns, dtype='float64'
    )


def farming_sovereigns(
    eez: gpd.GeoDataFrame,
    sovereign_col: str,
    production: Optional[pd.DataFrame],
    country_aliases: Optional[Dict[str, str]] = None,
    min_production_t: float = 0.0
) -> set:
    """Every EEZ sovereign currently farming, whether or not it has feasible area."""
    sovereigns = eez[sovereign_col].dropna().unique()
    produced = production_by_sovereign(sovereigns, production, country_aliases)
    return set(produced.index[produced > min_production_t])


def native_range_sovereigns(
    eez: gpd.GeoDataFrame,
    native_ranges: Optional[gpd.GeoDataFrame],
    sovereign_col: str
) -> set:
    """Sovereigns whose EEZ is crossed by at least one native-range feature."""
    if native_ranges is None or len(native_ranges) == 0:
        return set()

    if native_ranges.crs != eez.crs:
        native_ranges = native_ranges.to_crs(eez.crs)

    hits = gpd.sjoin(
        eez[[sovereign_col, eez.geometry.name]],
        native_ranges[[native_ranges.geometry.name]],
        how='inner',
        predicate='intersects'
    )
    return set(hits[sovereign_col].unique())


def feasible_country_table(
    feasibility: np.ndarray,
    transform: Affine,
    crs,
    eez: gpd.GeoDataFrame,
    sovereign_col: str,
    production: Optional[pd.DataFrame] = None,
    native_ranges: Optional[gpd.GeoDataFrame] = None,
    country_aliases: Optional[Dict[str, str]] = None,
    min_production_t: float = 0.0
) -> pd.DataFrame:
    """
    Feasible cells and area per sovereign state, with farming attributes.

    Only sovereigns with at least one feasible cell are listed, largest
    feasible area first.

    Returns:
        DataFrame with columns sovereign, feasible_cells, feasible_area_km2,
        production_t, currently_farming, within_native_range
    """
    cells = zonal_cell_counts(feasibility, transform, eez, sovereign_col)
    areas = zonal_cell_counts(
        feasibility, transform, eez, sovereign_col,
        weights=cell_areas_km2(feasibility.shape, transform, crs)
    )

    table = pd.DataFrame({
        'sovereign': cells.index,
        'feasible_cells': cells.values.astype(int),
        'feasible_area_km2': areas.reindex(cells.index).values
    })
    table = table[table['feasible_cells'] > 0].copy()

    table['production_t'] = production_by_sovereign(
        table['sovereign'], production, country_aliases
    ).values

    table['currently_farming'] = table['production_t'] > min_production_t

    in_range = native_range_sovereigns(eez, native_ranges, sovereign_col)
    table['within_native_range'] = table['sovereign'].isin(sorted(in_range))

    table = table.sort_values('feasible_area_km2', ascending=False).reset_index(drop=True)
    logger.info(
        f"{len(table)} sovereigns with feasible area, "
        f"{int(table['currently_farming'].sum())} already farming"
    )
    return table

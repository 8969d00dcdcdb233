"""
Eutrophication and hypoxia site records.

Reads the site spreadsheet (one row per coastal system with coordinates and
a condition classification) into a point layer with normalized labels.

Author: Diego Bengochea
"""

from pathlib import Path
from typing import Optional, Union

import geopandas as gpd
import pandas as pd

from shared_utils import get_logger
from shared_utils.vector_utils import points_from_dataframe

logger = get_logger('site_records')

UNCLASSIFIED = 'unclassified'


def read_site_table(path: Union[str, Path], sheet_name: Union[str, int] = 0) -> pd.DataFrame:
    """Read a site table from an Excel workbook or a CSV file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Site records file not found: {path}")

    if path.suffix.lower() in ('.xlsx', '.xls'):
        return pd.read_excel(path, sheet_name=sheet_name)
    if path.suffix.lower() == '.csv':
        return pd.read_csv(path)
    raise ValueError(f"Unsupported site records format: {path.suffix}")


def normalize_classification(labels: pd.Series) -> pd.Series:
    """Lower-case, stripped classification labels; blanks become 'unclassified'."""
    normalized = labels.fillna('').astype(str).str.strip().str.lower()
    return normalized.replace('', UNCLASSIFIED)


def load_site_records(
    path: Union[str, Path],
    lon_col: str = 'longitude',
    lat_col: str = 'latitude',
    classification_col: str = 'classification',
    name_col: Optional[str] = None,
    sheet_name: Union[str, int] = 0,
    crs: str = 'EPSG:4326'
) -> gpd.GeoDataFrame:
    """
    Load site records as points with a normalized 'classification' column.

    Args:
        path: Spreadsheet (.xlsx/.xls) or CSV with site records
        lon_col: Longitude column
        lat_col: Latitude column
        classification_col: Condition classification column
        name_col: Optional site name column, copied to 'site'
        sheet_name: Worksheet to read from workbooks
        crs: CRS of the coordinates

    Returns:
        Point GeoDataFrame; rows without coordinates are dropped
    """
    table = read_site_table(path, sheet_name)

    if classification_col not in table.columns:
        raise KeyError(f"Classification column '{classification_col}' not found in {Path(path).name}")

    sites = points_from_dataframe(table, lon_col=lon_col, lat_col=lat_col, crs=crs)
    sites['classification'] = normalize_classification(sites[classification_col])
    if name_col and name_col in sites.columns:
        sites['site'] = sites[name_col]

    counts = sites['classification'].value_counts()
    logger.info(f"Loaded {len(sites)} sites: " + ", ".join(f"{k}={v}" for k, v in counts.items()))
    return sites

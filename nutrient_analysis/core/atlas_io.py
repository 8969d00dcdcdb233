"""
Readers for oceanographic atlas CSV exports.

The atlas publishes one CSV per variable and averaging period. Comment lines
start with '#'; the column header is itself a comment line ending in
'DEPTHS (M):' followed by the standard depth levels. Each data row holds
latitude, longitude and one value per depth level, with trailing levels left
out where the water column is shallower.

Author: Diego Bengochea
"""

from pathlib import Path
from typing import List, Optional, Sequence, Union

import pandas as pd

DEPTH_HEADER_MARKER = 'DEPTHS (M):'


def parse_depth_header(path: Union[str, Path]) -> List[float]:
    """
    Extract the standard depth levels from the comment header of an atlas CSV.

    Raises:
        ValueError: If the file has no depth header line
    """
    depths = None
    with open(path, 'r', encoding='utf-8') as f:
        for line in f:
            if not line.startswith('#'):
                break
            marker_pos = line.upper().find(DEPTH_HEADER_MARKER)
            if marker_pos >= 0:
                tail = line[marker_pos + len(DEPTH_HEADER_MARKER):]
                depths = [float(d) for d in tail.strip().split(',') if d.strip()]

    if not depths:
        raise ValueError(f"No '{DEPTH_HEADER_MARKER}' header found in atlas file: {path}")

    return depths


def read_atlas_csv(
    path: Union[str, Path],
    depth_range: Optional[Sequence[float]] = None
) -> pd.DataFrame:
    """
    Read an atlas CSV export into long-form point records.

    Args:
        path: Path to the CSV export
        depth_range: Optional inclusive (min, max) depth in metres; levels
            outside are not loaded

    Returns:
        DataFrame with columns latitude, longitude, depth, value; missing
        values are dropped
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Atlas file not found: {path}")

    depths = parse_depth_header(path)
    depth_labels = [f"{d:g}" for d in depths]

    table = pd.read_csv(
        path,
        comment='#',
        header=None,
        names=['latitude', 'longitude'] + depth_labels,
        skip_blank_lines=True
    )

    if depth_range is not None:
        d_min, d_max = depth_range
        depth_labels = [label for label, d in zip(depth_labels, depths) if d_min <= d <= d_max]
        table = table[['latitude', 'longitude'] + depth_labels]

    records = table.melt(
        id_vars=['latitude', 'longitude'],
        var_name='depth',
        value_name='value'
    )
    records['depth'] = records['depth'].astype(float)
    records['value'] = pd.to_numeric(records['value'], errors='coerce')
    records = records.dropna(subset=['latitude', 'longitude', 'value'])

    return records.reset_index(drop=True)


def atlas_file_path(
    directory: Union[str, Path],
    pattern: str,
    code: str,
    period: int
) -> Path:
    """
    Build the path of an atlas export.

    Examples:
        >>> atlas_file_path('data/raw/ocean_atlas', 'woa18_all_{code}{period:02d}_01.csv', 'n', 13)
        PosixPath('data/raw/ocean_atlas/woa18_all_n13_01.csv')
    """
    return Path(directory) / pattern.format(code=code, period=period)

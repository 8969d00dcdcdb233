"""
Shared fixtures for the seaweed feasibility tests.
"""

import sys
from pathlib import Path

import numpy as np
import pytest
import yaml

sys.path.insert(0, str(Path(__file__).parent.parent))

from shared_utils.raster_utils import GridDefinition


ATLAS_HEADER = [
    "#DATA FILE: synthetic seasonal atlas export",
    "#COMMA SEPARATED LATITUDE, LONGITUDE, AND VALUES AT DEPTHS (M):0,10,50,100",
]


@pytest.fixture
def small_grid():
    """4 x 4 one-degree grid over [0, 4] x [0, 4]."""
    return GridDefinition(west=0.0, south=0.0, east=4.0, north=4.0, resolution=1.0)


@pytest.fixture
def write_atlas_csv():
    """Write an atlas export from (lat, lon, values-by-depth) rows."""
    def _write(path, rows):
        lines = list(ATLAS_HEADER)
        for lat, lon, values in rows:
            cells = ['' if v is None else f"{v:g}" for v in values]
            lines.append(",".join([f"{lat:g}", f"{lon:g}"] + cells))
        Path(path).write_text("\n".join(lines) + "\n", encoding='utf-8')
        return Path(path)
    return _write


@pytest.fixture
def write_config():
    """Dump a config dictionary to YAML and return its path."""
    def _write(path, config):
        with open(path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(config, f)
        return Path(path)
    return _write


@pytest.fixture
def nan_raster():
    def _make(shape, value=np.nan):
        return np.full(shape, value, dtype='float64')
    return _make

"""
Central Data Paths - Constants

Centralized path management for the seaweed feasibility analysis.
All components import default paths from this module; component configs may
override any of them.

The data root lives on a shared data volume whose mount point differs between
hosts, so it is resolved from the SEAWEED_DATA_ROOT environment variable and
falls back to ./data.

Usage:
    from shared_utils.central_data_paths_constants import ATLAS_CSV_DIR, EEZ_FILE

    atlas_files = list(ATLAS_CSV_DIR.glob("woa18_*.csv"))

Author: Diego Bengochea
"""

import os
from pathlib import Path

DATA_ROOT_ENV_VAR = "SEAWEED_DATA_ROOT"

# Root directories
DATA_ROOT = Path(os.environ.get(DATA_ROOT_ENV_VAR, "data"))

RAW_DIR = DATA_ROOT / "raw"
PROCESSED_DIR = DATA_ROOT / "processed"
RESULTS_DIR = DATA_ROOT / "results"

# Oceanographic atlas exports (nitrate, phosphate, silicate by season)
ATLAS_CSV_DIR = RAW_DIR / "ocean_atlas"

# Boundaries
BOUNDARIES_DIR = RAW_DIR / "boundaries"
EEZ_FILE = BOUNDARIES_DIR / "eez_v11.shp"
COUNTRY_BOUNDARIES_FILE = BOUNDARIES_DIR / "ne_50m_admin_0_countries.shp"

# Sea-surface temperature statistics
SST_DIR = RAW_DIR / "sea_surface_temperature"
SST_MEAN_FILE = SST_DIR / "sst_mean.tif"
SST_MIN_FILE = SST_DIR / "sst_min.tif"
SST_MAX_FILE = SST_DIR / "sst_max.tif"

# Ocean acidification
ACIDIFICATION_DIR = RAW_DIR / "acidification"
ARAGONITE_FILE = ACIDIFICATION_DIR / "aragonite_saturation.tif"

# Eutrophication and hypoxia site records
HYPOXIA_SITES_FILE = RAW_DIR / "eutrophication_hypoxia" / "eutrophic_hypoxic_sites.xlsx"

# Aquaculture production and species ranges
AQUACULTURE_PRODUCTION_FILE = RAW_DIR / "aquaculture" / "aquaculture_production.csv"
NATIVE_RANGE_FILE = RAW_DIR / "species_ranges" / "native_ranges.shp"

# Processed rasters
NUTRIENT_RASTERS_DIR = PROCESSED_DIR / "nutrients"
SUITABILITY_RASTERS_DIR = PROCESSED_DIR / "seaweed_suitability"
ACIDIFICATION_RASTERS_DIR = PROCESSED_DIR / "acidification"

# Results
TABLES_DIR = RESULTS_DIR / "tables"
FIGURES_DIR = RESULTS_DIR / "figures"

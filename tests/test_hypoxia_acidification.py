"""
Tests for site records, aragonite processing, country statistics and the
hypoxia/acidification pipeline.
"""

import sys
from pathlib import Path

import geopandas as gpd
import numpy as np
import pandas as pd
import pytest
from shapely.geometry import box

sys.path.insert(0, str(Path(__file__).parent.parent))

from hypoxia_acidification.core.site_records import (
    load_site_records, normalize_classification, UNCLASSIFIED
)
from hypoxia_acidification.core.aragonite_processing import (
    valid_ocean_domain, fill_aragonite, low_saturation
)
from hypoxia_acidification.core.country_statistics import (
    site_counts_by_country, condition_count_table
)
from hypoxia_acidification.core.hypoxia_pipeline import HypoxiaAcidificationPipeline
from shared_utils.raster_utils import GridDefinition, read_raster, write_raster


@pytest.fixture
def site_table():
    return pd.DataFrame({
        'System': ['Bay A', 'Bay B', 'Fjord C', 'Lagoon D', 'Nowhere'],
        'Long': [0.5, 0.7, 1.5, 3.5, None],
        'Lat': [3.5, 3.2, 0.5, 3.5, 1.0],
        'Classification': [' Hypoxic', 'eutrophic', 'Improved ', 'HYPOXIC', 'hypoxic']
    })


@pytest.fixture
def zones():
    return gpd.GeoDataFrame(
        {'SOVEREIGN1': ['Atlantis', 'Lemuria']},
        geometry=[box(0, 2, 2, 4), box(0, 0, 2, 2)],
        crs='EPSG:4326'
    )


class TestSiteRecords:

    def test_normalize_classification(self):
        labels = normalize_classification(pd.Series([' Hypoxic ', 'EUTROPHIC', None, '']))
        assert labels.tolist() == ['hypoxic', 'eutrophic', UNCLASSIFIED, UNCLASSIFIED]

    def test_load_from_csv_drops_missing_coordinates(self, tmp_path, site_table):
        path = tmp_path / 'sites.csv'
        site_table.to_csv(path, index=False)
        sites = load_site_records(path, lon_col='Long', lat_col='Lat',
                                  classification_col='Classification', name_col='System')
        assert len(sites) == 4
        assert sites['classification'].tolist() == ['hypoxic', 'eutrophic', 'improved', 'hypoxic']
        assert sites['site'].iloc[0] == 'Bay A'

    def test_load_from_excel(self, tmp_path, site_table):
        path = tmp_path / 'sites.xlsx'
        site_table.to_excel(path, index=False)
        sites = load_site_records(path, lon_col='Long', lat_col='Lat', classification_col='Classification')
        assert len(sites) == 4

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / 'sites.txt'
        path.write_text('x', encoding='utf-8')
        with pytest.raises(ValueError):
            load_site_records(path)

    def test_missing_classification_column(self, tmp_path, site_table):
        path = tmp_path / 'sites.csv'
        site_table.drop(columns=['Classification']).to_csv(path, index=False)
        with pytest.raises(KeyError):
            load_site_records(path, lon_col='Long', lat_col='Lat')


class TestAragoniteProcessing:

    def test_domain_from_land_polygons(self, small_grid):
        raster = np.ones(small_grid.shape)
        domain = valid_ocean_domain(raster, small_grid.transform, small_grid.crs,
                                    land_geometries=[box(0, 0, 1, 4)])
        assert not domain[:, 0].any()
        assert domain[:, 1:].all()

    def test_domain_from_footprint(self, small_grid):
        raster = np.ones(small_grid.shape)
        raster[0, 0] = np.nan
        domain = valid_ocean_domain(raster, small_grid.transform, small_grid.crs)
        assert not domain[0, 0]
        assert domain.sum() == 15

    def test_footprint_domain_fills_enclosed_gaps(self, small_grid):
        aragonite = np.full(small_grid.shape, 2.0)
        aragonite[1, 1] = np.nan
        aragonite[0, 3] = np.nan
        domain = valid_ocean_domain(aragonite, small_grid.transform, small_grid.crs)
        assert domain[1, 1]
        assert not domain[0, 3]

        filled = fill_aragonite(aragonite, small_grid.transform, small_grid.crs, domain)
        assert filled[1, 1] == pytest.approx(2.0)
        assert np.isnan(filled[0, 3])

    def test_domain_from_coarser_raster(self, small_grid):
        coarse = GridDefinition(west=0.0, south=0.0, east=4.0, north=4.0, resolution=2.0)
        domain_raster = np.array([[1.0, np.nan], [1.0, 1.0]])
        domain = valid_ocean_domain(
            np.ones(small_grid.shape), small_grid.transform, small_grid.crs,
            domain_raster=domain_raster, domain_transform=coarse.transform, domain_crs=coarse.crs
        )
        assert not domain[:2, 2:].any()
        assert domain.sum() == 12

    def test_fill_stays_in_ocean(self, small_grid):
        aragonite = np.full(small_grid.shape, 2.0)
        aragonite[1, 2] = np.nan
        aragonite[:, 0] = np.nan
        domain = np.ones(small_grid.shape, dtype=bool)
        domain[:, 0] = False

        filled = fill_aragonite(aragonite, small_grid.transform, small_grid.crs, domain)
        assert filled[1, 2] == pytest.approx(2.0)
        assert np.isnan(filled[:, 0]).all()

    def test_low_saturation_default_range(self):
        low = low_saturation(np.array([[0.5, 3.0, 3.2, np.nan]]))
        assert low[0, :2].tolist() == [0.5, 3.0]
        assert np.isnan(low[0, 2:]).all()


class TestCountryStatistics:

    def test_site_counts(self, tmp_path, site_table, zones):
        path = tmp_path / 'sites.csv'
        site_table.to_csv(path, index=False)
        sites = load_site_records(path, lon_col='Long', lat_col='Lat', classification_col='Classification')

        counts = site_counts_by_country(sites, zones, 'SOVEREIGN1')
        assert counts.loc['Atlantis', 'hypoxic'] == 1
        assert counts.loc['Atlantis', 'eutrophic'] == 1
        assert counts.loc['Lemuria', 'improved'] == 1
        assert counts['total_sites'].sum() == 3

    def test_condition_table_combines_sites_and_cells(self, tmp_path, site_table, zones, small_grid):
        path = tmp_path / 'sites.csv'
        site_table.to_csv(path, index=False)
        sites = load_site_records(path, lon_col='Long', lat_col='Lat', classification_col='Classification')

        low = np.full(small_grid.shape, np.nan)
        low[3, :] = 1.0

        table = condition_count_table(sites, low, small_grid.transform, zones, 'SOVEREIGN1')
        by_country = table.set_index('country')
        assert by_country.loc['Atlantis', 'total_sites'] == 2
        assert by_country.loc['Atlantis', 'low_aragonite_cells'] == 0
        assert by_country.loc['Lemuria', 'low_aragonite_cells'] == 2
        assert table['country'].iloc[0] == 'Atlantis'


@pytest.fixture
def hypoxia_setup(tmp_path, small_grid, site_table, zones, write_config):
    """Aragonite raster with gaps, sites, zones and land polygons."""
    aragonite = np.full(small_grid.shape, 3.5)
    aragonite[2:, :] = 2.5
    aragonite[3, 1] = np.nan
    aragonite[:, 3] = np.nan
    write_raster(tmp_path / 'aragonite.tif', aragonite, small_grid.transform, small_grid.crs)

    sites_file = tmp_path / 'sites.xlsx'
    site_table.to_excel(sites_file, index=False)

    zones_file = tmp_path / 'eez.geojson'
    zones.to_file(zones_file, driver='GeoJSON')

    land = gpd.GeoDataFrame({'ADMIN': ['Mu']}, geometry=[box(3, 0, 4, 4)], crs='EPSG:4326')
    land_file = tmp_path / 'countries.geojson'
    land.to_file(land_file, driver='GeoJSON')

    config = {
        'logging': {'level': 'INFO'},
        'data': {
            'aragonite_file': str(tmp_path / 'aragonite.tif'),
            'sites_file': str(sites_file),
            'boundaries_file': str(zones_file),
            'countries_file': str(land_file),
            'output_dir': str(tmp_path / 'acidification'),
            'tables_dir': str(tmp_path / 'tables'),
            'figures_dir': str(tmp_path / 'figures')
        },
        'sites': {'columns': {'longitude': 'Long', 'latitude': 'Lat',
                              'classification': 'Classification', 'name': 'System'}},
        'acidification': {'idw_power': 2.0, 'idw_neighbors': 12, 'low_range': [0.0, 3.0]},
        'statistics': {'country_column': 'SOVEREIGN1'},
        'render': {'enabled': False}
    }
    return tmp_path, write_config(tmp_path / 'config.yaml', config)


class TestHypoxiaAcidificationPipeline:

    def test_full_pipeline(self, hypoxia_setup):
        tmp_path, config_path = hypoxia_setup
        assert HypoxiaAcidificationPipeline(config_path).run_full_pipeline() is True

        filled, _, _ = read_raster(tmp_path / 'acidification' / 'aragonite_filled.tif')
        low, _, _ = read_raster(tmp_path / 'acidification' / 'aragonite_low.tif')

        # gap at (3, 1) is ocean and filled, column 3 is land and stays empty
        assert np.isfinite(filled[3, 1])
        assert np.isnan(filled[:, 3]).all()
        assert 2.5 <= filled[3, 1] <= 3.5
        assert np.isfinite(low[2:, :3]).all()
        assert np.isnan(low[:2, :]).all()

    def test_condition_counts_table(self, hypoxia_setup):
        tmp_path, config_path = hypoxia_setup
        HypoxiaAcidificationPipeline(config_path).run_full_pipeline()

        counts = pd.read_csv(tmp_path / 'tables' / 'country_condition_counts.csv')
        by_country = counts.set_index('country')
        assert by_country.loc['Atlantis', 'total_sites'] == 2
        assert by_country.loc['Lemuria', 'improved'] == 1
        assert by_country.loc['Lemuria', 'low_aragonite_cells'] == 4
        assert 'Mu' not in by_country.index

    def test_missing_aragonite_fails(self, hypoxia_setup):
        tmp_path, config_path = hypoxia_setup
        (tmp_path / 'aragonite.tif').unlink()
        assert HypoxiaAcidificationPipeline(config_path).run_full_pipeline() is False

    def test_interior_gaps_filled_without_domain_sources(self, hypoxia_setup, small_grid):
        tmp_path, config_path = hypoxia_setup
        (tmp_path / 'countries.geojson').unlink()
        aragonite = np.full(small_grid.shape, 2.5)
        aragonite[1, 1] = np.nan
        write_raster(tmp_path / 'aragonite.tif', aragonite, small_grid.transform, small_grid.crs)

        assert HypoxiaAcidificationPipeline(config_path).run_full_pipeline() is True
        filled, _, _ = read_raster(tmp_path / 'acidification' / 'aragonite_filled.tif')
        assert filled[1, 1] == pytest.approx(2.5)

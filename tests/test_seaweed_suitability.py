"""
Tests for the seaweed suitability filters, country attributes, offset
scenarios and the suitability pipeline.
"""

import sys
from pathlib import Path

import geopandas as gpd
import numpy as np
import pandas as pd
import pytest
from shapely.geometry import LineString, box

sys.path.insert(0, str(Path(__file__).parent.parent))

from seaweed_suitability.core.suitability_filters import (
    np_ratio_layers, sst_suitability_mask, feasibility_layers
)
from seaweed_suitability.core.country_attributes import (
    normalize_country_name, load_aquaculture_production, feasible_country_table,
    farming_sovereigns
)
from seaweed_suitability.core.offset_scenarios import scenario_polygons, scenario_statistics
from seaweed_suitability.core.suitability_pipeline import SeaweedSuitabilityPipeline
from shared_utils.raster_utils import read_raster, write_raster


@pytest.fixture
def eez():
    """Two EEZs covering the western half of the 4 x 4 test grid."""
    return gpd.GeoDataFrame(
        {
            'SOVEREIGN1': ['Atlantis', 'Lemuria'],
            'GEONAME': ['Atlantis EEZ', 'Lemurian EEZ']
        },
        geometry=[box(0, 2, 2, 4), box(0, 0, 2, 2)],
        crs='EPSG:4326'
    )


@pytest.fixture
def uniform_layers(small_grid):
    """Phosphate of 1 everywhere, nitrate giving an N:P ratio of 30, SST of 20 °C."""
    nitrate = np.full(small_grid.shape, 30.0)
    phosphate = np.ones(small_grid.shape)
    sst = np.full(small_grid.shape, 20.0)
    return nitrate, phosphate, sst


class TestFeasibilityInvariants:

    def test_ratio_30_sst_20_inside_eez_is_feasible(self, small_grid, eez, uniform_layers):
        nitrate, phosphate, sst = uniform_layers
        layers = feasibility_layers(nitrate, phosphate, [sst], eez.geometry, small_grid.transform)
        assert layers['feasibility'][0, 0] == pytest.approx(30.0)
        assert np.isfinite(layers['feasibility'][:, :2]).all()

    def test_outside_every_eez_is_never_feasible(self, small_grid, eez, uniform_layers):
        nitrate, phosphate, sst = uniform_layers
        layers = feasibility_layers(nitrate, phosphate, [sst], eez.geometry, small_grid.transform)
        assert np.isnan(layers['feasibility'][:, 2:]).all()
        assert np.isfinite(layers['np_ratio_filtered'][:, 2:]).all()

    @pytest.mark.parametrize("ratio", [0.5, 3.99, 80.5, 200.0])
    def test_ratio_outside_range_is_empty(self, small_grid, eez, uniform_layers, ratio):
        _, phosphate, sst = uniform_layers
        nitrate = np.full(small_grid.shape, ratio)
        layers = feasibility_layers(nitrate, phosphate, [sst], eez.geometry, small_grid.transform)
        assert np.isnan(layers['feasibility']).all()

    @pytest.mark.parametrize("temperature", [-1.0, 35.5, np.nan])
    def test_sst_outside_range_is_empty(self, small_grid, eez, uniform_layers, temperature):
        nitrate, phosphate, _ = uniform_layers
        sst = np.full(small_grid.shape, temperature)
        layers = feasibility_layers(nitrate, phosphate, [sst], eez.geometry, small_grid.transform)
        assert np.isnan(layers['feasibility']).all()

    def test_every_sst_layer_must_be_in_range(self, small_grid, eez, uniform_layers):
        nitrate, phosphate, sst = uniform_layers
        sst_max = sst.copy()
        sst_max[0, 0] = 36.0
        layers = feasibility_layers(nitrate, phosphate, [sst, sst_max], eez.geometry, small_grid.transform)
        assert np.isnan(layers['feasibility'][0, 0])
        assert np.isfinite(layers['feasibility'][0, 1])


class TestFilters:

    def test_ratio_bounds_are_inclusive(self):
        layers = np_ratio_layers(np.array([[4.0, 80.0, 40.0]]), np.array([[1.0, 1.0, 0.0]]))
        np.testing.assert_array_equal(layers['np_ratio_filtered'][0, :2], [4.0, 80.0])
        assert np.isnan(layers['np_ratio'][0, 2])

    def test_custom_ratio_range(self):
        layers = np_ratio_layers(np.array([[10.0]]), np.array([[1.0]]), ratio_range=(12, 20))
        assert np.isnan(layers['np_ratio_filtered'][0, 0])

    def test_sst_mask_requires_layers(self):
        with pytest.raises(ValueError):
            sst_suitability_mask([])

    def test_sst_mask_rejects_misaligned_layers(self):
        with pytest.raises(ValueError):
            sst_suitability_mask([np.zeros((2, 2)), np.zeros((3, 3))])

    def test_sst_bounds_are_inclusive(self):
        mask = sst_suitability_mask([np.array([[0.0, 35.0, -0.01]])])
        assert mask.tolist() == [[True, True, False]]


class TestCountryAttributes:

    def test_normalize_with_aliases(self):
        aliases = {'Viet Nam': 'Vietnam'}
        assert normalize_country_name('  Viet   Nam ', aliases) == 'vietnam'
        assert normalize_country_name('VIETNAM') == 'vietnam'

    def test_production_is_filtered_and_averaged(self, tmp_path):
        path = tmp_path / 'production.csv'
        pd.DataFrame({
            'country': ['Atlantis'] * 4 + ['Lemuria'],
            'year': [2009, 2010, 2011, 2011, 2010],
            'production_t': [1000.0, 10.0, 20.0, 10.0, 0.0],
            'group': ['Aquatic plants', 'Aquatic plants', 'Aquatic plants', 'Molluscs', 'Aquatic plants']
        }).to_csv(path, index=False)

        production = load_aquaculture_production(
            path, year_range=[2010, 2019], group_col='group', group_values=['Aquatic plants']
        )
        values = dict(zip(production['country'], production['production_t']))
        assert values['Atlantis'] == pytest.approx(15.0)
        assert values['Lemuria'] == 0.0

    def test_production_missing_columns(self, tmp_path):
        path = tmp_path / 'production.csv'
        pd.DataFrame({'nation': ['A'], 'year': [2010], 'production_t': [1]}).to_csv(path, index=False)
        with pytest.raises(KeyError):
            load_aquaculture_production(path)

    def test_feasible_country_table(self, small_grid, eez):
        feasibility = np.full(small_grid.shape, np.nan)
        feasibility[0:2, 0:2] = 30.0
        feasibility[2, 0] = 30.0
        production = pd.DataFrame({'country': ['ATLANTIS'], 'production_t': [500.0]})
        ranges = gpd.GeoDataFrame(geometry=[LineString([(0.5, 0.5), (1.5, 1.5)])], crs='EPSG:4326')

        table = feasible_country_table(
            feasibility, small_grid.transform, small_grid.crs, eez, 'SOVEREIGN1',
            production=production, native_ranges=ranges
        )

        assert table['sovereign'].tolist() == ['Atlantis', 'Lemuria']
        assert table['feasible_cells'].tolist() == [4, 1]
        assert table['currently_farming'].tolist() == [True, False]
        assert table['within_native_range'].tolist() == [False, True]
        assert (table['feasible_area_km2'] > 0).all()

    def test_sovereigns_without_feasible_cells_are_omitted(self, small_grid, eez):
        feasibility = np.full(small_grid.shape, np.nan)
        feasibility[3, 1] = 10.0
        table = feasible_country_table(feasibility, small_grid.transform, small_grid.crs, eez, 'SOVEREIGN1')
        assert table['sovereign'].tolist() == ['Lemuria']
        assert not table['currently_farming'].any()

    def test_farming_sovereigns_include_countries_without_feasible_area(self, eez):
        production = pd.DataFrame({
            'country': [' ATLANTIS', 'Lemurian Republic', 'Mu'],
            'production_t': [99.0, 0.5, 10.0]
        })
        aliases = {'Lemurian Republic': 'Lemuria'}

        assert farming_sovereigns(eez, 'SOVEREIGN1', production, aliases) == {'Atlantis', 'Lemuria'}
        assert farming_sovereigns(eez, 'SOVEREIGN1', production, aliases, min_production_t=1.0) == {'Atlantis'}
        assert farming_sovereigns(eez, 'SOVEREIGN1', None) == set()


class TestOffsetScenarios:

    def test_polygons_from_config(self):
        scenarios = scenario_polygons([
            {'name': 'north', 'coordinates': [[0, 2], [4, 2], [4, 4], [0, 4]]}
        ])
        assert scenarios['name'].tolist() == ['north']
        assert scenarios.geometry.iloc[0].area == pytest.approx(8.0)

    @pytest.mark.parametrize("entry", [
        {'coordinates': [[0, 0], [1, 0], [1, 1]]},
        {'name': 'line', 'coordinates': [[0, 0], [1, 1]]},
        {'name': 'bowtie', 'coordinates': [[0, 0], [1, 1], [1, 0], [0, 1]]},
    ])
    def test_invalid_scenarios_raise(self, entry):
        with pytest.raises(ValueError):
            scenario_polygons([entry])

    def test_no_scenarios(self):
        assert len(scenario_polygons(None)) == 0

    def test_vertices_are_lon_lat_on_projected_grids(self):
        scenarios = scenario_polygons(
            [{'name': 'north', 'coordinates': [[0, 2], [4, 2], [4, 4], [0, 4]]}],
            target_crs='EPSG:3857'
        )
        assert scenarios.crs.to_epsg() == 3857
        minx, miny, maxx, maxy = scenarios.total_bounds
        assert minx == pytest.approx(0.0, abs=1e-6)
        assert maxx == pytest.approx(445277.96, rel=1e-4)
        assert miny == pytest.approx(222684.21, rel=1e-4)

    def test_statistics(self, small_grid):
        feasibility = np.full(small_grid.shape, np.nan)
        feasibility[0, 0] = 10.0
        ratio = np.full(small_grid.shape, 20.0)
        scenarios = scenario_polygons([{'name': 'north', 'coordinates': [[0, 2], [4, 2], [4, 4], [0, 4]]}])

        stats = scenario_statistics(feasibility, ratio, small_grid.transform, small_grid.crs, scenarios)
        row = stats.iloc[0]
        assert row['total_cells'] == 8
        assert row['feasible_cells'] == 1
        assert row['feasible_fraction'] == pytest.approx(1 / 8)
        assert row['mean_np_ratio'] == pytest.approx(20.0)


@pytest.fixture
def suitability_setup(tmp_path, small_grid, eez, write_config):
    """Nutrient, SST and boundary inputs for an end-to-end run."""
    nutrients = tmp_path / 'nutrients'
    nitrate = np.full(small_grid.shape, 30.0)
    nitrate[0, 1] = 2.0          # ratio below range
    phosphate = np.ones(small_grid.shape)
    sst = np.full(small_grid.shape, 20.0)
    sst[1, 1] = 36.0             # too warm
    write_raster(nutrients / 'nitrate_annual_mean.tif', nitrate, small_grid.transform, small_grid.crs)
    write_raster(nutrients / 'phosphate_annual_mean.tif', phosphate, small_grid.transform, small_grid.crs)
    write_raster(tmp_path / 'sst_mean.tif', sst, small_grid.transform, small_grid.crs)

    eez_file = tmp_path / 'eez.geojson'
    eez.to_file(eez_file, driver='GeoJSON')

    production_file = tmp_path / 'production.csv'
    pd.DataFrame({'country': ['Lemuria'], 'year': [2015], 'production_t': [42.0]}).to_csv(
        production_file, index=False
    )

    config = {
        'logging': {'level': 'INFO'},
        'data': {
            'nutrient_dir': str(nutrients),
            'eez_file': str(eez_file),
            'aquaculture_file': str(production_file),
            'native_range_file': str(tmp_path / 'no_ranges.shp'),
            'output_dir': str(tmp_path / 'suitability'),
            'tables_dir': str(tmp_path / 'tables'),
            'figures_dir': str(tmp_path / 'figures')
        },
        'grid': {'extent': [0, 0, 4, 4], 'resolution': 1.0},
        'nutrients': {'rebuild_from_atlas': False},
        'sst': {'files': [str(tmp_path / 'sst_mean.tif')]},
        'thresholds': {'np_ratio_range': [4, 80], 'sst_range': [0, 35]},
        'eez': {'sovereign_column': 'SOVEREIGN1'},
        'aquaculture': {'year_range': [2010, 2019]},
        'offset_scenarios': [{'name': 'east', 'coordinates': [[2, 0], [4, 0], [4, 4], [2, 4]]}],
        'render': {'enabled': False}
    }
    return tmp_path, write_config(tmp_path / 'config.yaml', config)


class TestSuitabilityPipeline:

    def test_full_pipeline(self, suitability_setup):
        tmp_path, config_path = suitability_setup
        assert SeaweedSuitabilityPipeline(config_path).run_full_pipeline() is True

        feasibility, _, _ = read_raster(tmp_path / 'suitability' / 'seaweed_feasibility.tif')
        expected = np.zeros((4, 4), dtype=bool)
        expected[:, :2] = True
        expected[0, 1] = False
        expected[1, 1] = False
        np.testing.assert_array_equal(np.isfinite(feasibility), expected)
        assert feasibility[0, 0] == pytest.approx(30.0)

    def test_country_and_offset_tables(self, suitability_setup):
        tmp_path, config_path = suitability_setup
        SeaweedSuitabilityPipeline(config_path).run_full_pipeline()

        countries = pd.read_csv(tmp_path / 'tables' / 'feasible_countries.csv')
        by_name = countries.set_index('sovereign')
        assert by_name.loc['Lemuria', 'feasible_cells'] == 4
        assert by_name.loc['Atlantis', 'feasible_cells'] == 2
        assert bool(by_name.loc['Lemuria', 'currently_farming'])
        assert not by_name['within_native_range'].any()

        offsets = pd.read_csv(tmp_path / 'tables' / 'offset_scenarios.csv')
        assert offsets.loc[0, 'scenario'] == 'east'
        assert offsets.loc[0, 'feasible_cells'] == 0
        assert (tmp_path / 'suitability' / 'offset_scenarios.geojson').exists()

    def test_intermediate_rasters(self, suitability_setup):
        tmp_path, config_path = suitability_setup
        SeaweedSuitabilityPipeline(config_path).run_full_pipeline()

        ratio, _, _ = read_raster(tmp_path / 'suitability' / 'np_ratio.tif')
        filtered, _, _ = read_raster(tmp_path / 'suitability' / 'np_ratio_filtered.tif')
        assert ratio[0, 1] == pytest.approx(2.0)
        assert np.isnan(filtered[0, 1])
        assert np.isfinite(filtered[:, 2:]).all()

    def test_missing_sst_fails(self, suitability_setup):
        tmp_path, config_path = suitability_setup
        (tmp_path / 'sst_mean.tif').unlink()
        assert SeaweedSuitabilityPipeline(config_path).run_full_pipeline() is False

    def test_farming_countries_without_feasible_area_are_shaded(self, suitability_setup, small_grid):
        tmp_path, config_path = suitability_setup
        nitrate = np.full(small_grid.shape, 30.0)
        nitrate[:2, :2] = 500.0      # Atlantis EEZ entirely above the ratio range
        write_raster(tmp_path / 'nutrients' / 'nitrate_annual_mean.tif', nitrate,
                     small_grid.transform, small_grid.crs)
        pd.DataFrame({
            'country': ['Atlantis', 'Lemuria'], 'year': [2015, 2015], 'production_t': [99.0, 42.0]
        }).to_csv(tmp_path / 'production.csv', index=False)

        pipeline = SeaweedSuitabilityPipeline(config_path)
        pipeline.render_enabled = True
        rendered = []
        pipeline.render_map = lambda *args: rendered.append(args)
        assert pipeline.run_full_pipeline() is True

        countries = pd.read_csv(tmp_path / 'tables' / 'feasible_countries.csv')
        assert countries['sovereign'].tolist() == ['Lemuria']
        assert rendered[0][2] == {'Atlantis', 'Lemuria'}

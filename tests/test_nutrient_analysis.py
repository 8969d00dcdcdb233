"""
Tests for atlas ingestion, seasonal rasterization and the nutrient pipeline.
"""

import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from nutrient_analysis.core.atlas_io import parse_depth_header, read_atlas_csv, atlas_file_path
from nutrient_analysis.core.seasonal_rasterization import NutrientRasterBuilder
from nutrient_analysis.core.seasonal_pipeline import NutrientSeasonalPipeline
from nutrient_analysis.scripts.run_seasonal_mapping import parse_arguments
from shared_utils.raster_utils import read_raster

SEASONS = {'winter': 13, 'spring': 14, 'summer': 15, 'autumn': 16}
PATTERN = "woa18_all_{code}{period:02d}_01.csv"


class TestAtlasIO:

    def test_depth_header(self, tmp_path, write_atlas_csv):
        path = write_atlas_csv(tmp_path / 'a.csv', [(0.5, 0.5, [1, 2, 3, 4])])
        assert parse_depth_header(path) == [0.0, 10.0, 50.0, 100.0]

    def test_missing_header_raises(self, tmp_path):
        path = tmp_path / 'bad.csv'
        path.write_text("0.5,0.5,1\n", encoding='utf-8')
        with pytest.raises(ValueError):
            parse_depth_header(path)

    def test_long_form_records(self, tmp_path, write_atlas_csv):
        path = write_atlas_csv(tmp_path / 'a.csv', [
            (0.5, 0.5, [1.0, 2.0, 3.0, 4.0]),
            (1.5, 2.5, [5.0, None, None, None]),
        ])
        records = read_atlas_csv(path)
        assert list(records.columns) == ['latitude', 'longitude', 'depth', 'value']
        assert len(records) == 5
        shallow_only = records[(records['latitude'] == 1.5)]
        assert shallow_only['depth'].tolist() == [0.0]

    def test_depth_range_limits_levels(self, tmp_path, write_atlas_csv):
        path = write_atlas_csv(tmp_path / 'a.csv', [(0.5, 0.5, [1.0, 2.0, 3.0, 4.0])])
        records = read_atlas_csv(path, depth_range=(0, 50))
        assert sorted(records['depth']) == [0.0, 10.0, 50.0]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_atlas_csv(tmp_path / 'missing.csv')

    def test_atlas_file_path(self):
        assert atlas_file_path('atlas', PATTERN, 'p', 14) == Path('atlas') / 'woa18_all_p14_01.csv'


class TestNutrientRasterBuilder:

    def test_season_raster_averages_depths_in_layer(self, small_grid):
        records = pd.DataFrame({
            'latitude': [3.5, 3.5, 3.5],
            'longitude': [0.5, 0.5, 0.5],
            'depth': [0.0, 10.0, 100.0],
            'value': [2.0, 4.0, 100.0]
        })
        raster = NutrientRasterBuilder(small_grid, depth_range=(0, 50)).season_raster(records)
        assert raster[0, 0] == pytest.approx(3.0)
        assert np.isfinite(raster).sum() == 1

    def test_no_records_in_layer_gives_empty_raster(self, small_grid):
        records = pd.DataFrame({'latitude': [3.5], 'longitude': [0.5], 'depth': [500.0], 'value': [1.0]})
        raster = NutrientRasterBuilder(small_grid).season_raster(records)
        assert raster.shape == small_grid.shape
        assert np.isnan(raster).all()

    def test_cell_present_in_one_season_keeps_value(self, small_grid):
        a = np.full(small_grid.shape, np.nan)
        b = np.full(small_grid.shape, np.nan)
        a[0, 0] = 1.0
        b[0, 0] = 3.0
        b[1, 1] = 7.25
        annual = NutrientRasterBuilder.annual_mean({'winter': a, 'summer': b})
        assert annual[0, 0] == 2.0
        assert annual[1, 1] == 7.25

    def test_four_disjoint_seasons_reproduce_source_values(self, small_grid):
        values = {'winter': 1.5, 'spring': 2.5, 'summer': 3.5, 'autumn': 4.5}
        seasons = {}
        for row, (season, value) in enumerate(values.items()):
            raster = np.full(small_grid.shape, np.nan)
            raster[row, :] = value + np.arange(small_grid.width)
            seasons[season] = raster

        annual = NutrientRasterBuilder.annual_mean(seasons)
        for row, (season, value) in enumerate(values.items()):
            np.testing.assert_array_equal(annual[row, :], seasons[season][row, :])
        assert np.isfinite(annual).all()

    def test_invalid_depth_range(self, small_grid):
        with pytest.raises(ValueError):
            NutrientRasterBuilder(small_grid, depth_range=(50, 0))


@pytest.fixture
def nutrient_setup(tmp_path, write_atlas_csv, write_config):
    """Atlas exports for nitrate and phosphate over four seasons and a config."""
    atlas_dir = tmp_path / 'atlas'
    atlas_dir.mkdir()
    for code, scale in (('n', 10.0), ('p', 1.0)):
        for i, period in enumerate(SEASONS.values(), start=1):
            value = scale * i
            write_atlas_csv(atlas_file_path(atlas_dir, PATTERN, code, period), [
                (0.5, 0.5, [value, value, value, 999.0]),
                (3.5, 3.5, [value / 2, None, None, None]),
            ])

    config = {
        'logging': {'level': 'DEBUG'},
        'data': {
            'atlas_dir': str(atlas_dir),
            'output_dir': str(tmp_path / 'rasters'),
            'tables_dir': str(tmp_path / 'tables'),
            'figures_dir': str(tmp_path / 'figures')
        },
        'atlas': {'file_pattern': PATTERN, 'nutrients': {'nitrate': 'n', 'phosphate': 'p'}, 'seasons': SEASONS},
        'grid': {'extent': [0, 0, 4, 4], 'resolution': 1.0},
        'processing': {'depth_range': [0, 50]},
        'render': {'enabled': False}
    }
    return tmp_path, write_config(tmp_path / 'config.yaml', config)


class TestNutrientSeasonalPipeline:

    def test_full_pipeline_outputs(self, nutrient_setup):
        tmp_path, config_path = nutrient_setup
        pipeline = NutrientSeasonalPipeline(config_path)
        assert pipeline.run_full_pipeline() is True

        for path in pipeline.expected_outputs():
            assert path.exists()
        assert (tmp_path / 'tables' / 'nutrient_summary.csv').exists()

    def test_annual_mean_and_seasonal_std(self, nutrient_setup):
        tmp_path, config_path = nutrient_setup
        NutrientSeasonalPipeline(config_path).run_full_pipeline()

        mean, _, _ = read_raster(tmp_path / 'rasters' / 'nitrate_annual_mean.tif')
        std, _, _ = read_raster(tmp_path / 'rasters' / 'nitrate_seasonal_std.tif')
        # cell (lat 0.5, lon 0.5) is row 3, column 0
        assert mean[3, 0] == pytest.approx(25.0, rel=1e-6)
        assert std[3, 0] == pytest.approx(10 * np.sqrt(1.25), rel=1e-6)
        assert mean[0, 3] == pytest.approx(12.5, rel=1e-6)
        assert np.isfinite(mean).sum() == 2

    def test_seasonal_rasters_keep_depth_layer(self, nutrient_setup):
        tmp_path, config_path = nutrient_setup
        NutrientSeasonalPipeline(config_path).run_full_pipeline()

        winter, _, _ = read_raster(tmp_path / 'rasters' / 'phosphate_winter.tif')
        assert winter[3, 0] == pytest.approx(1.0)

    def test_missing_atlas_exports_fail(self, nutrient_setup):
        tmp_path, config_path = nutrient_setup
        next((tmp_path / 'atlas').glob('woa18_all_p15*')).unlink()
        assert NutrientSeasonalPipeline(config_path).run_full_pipeline() is False

    def test_summary_table(self, nutrient_setup):
        tmp_path, config_path = nutrient_setup
        NutrientSeasonalPipeline(config_path).run_full_pipeline()

        summary = pd.read_csv(tmp_path / 'tables' / 'nutrient_summary.csv')
        assert len(summary) == 2 * (len(SEASONS) + 2)
        assert set(summary['nutrient']) == {'nitrate', 'phosphate'}


def test_cli_arguments():
    args = parse_arguments(['--config', 'custom.yaml', '--no-render'])
    assert args.config == 'custom.yaml'
    assert args.no_render is True

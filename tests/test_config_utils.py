"""
Unit tests for configuration loading.
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from shared_utils.config_utils import load_config, validate_config, get_config_value


def test_explicit_config_is_loaded(tmp_path, write_config):
    path = write_config(tmp_path / 'custom.yaml', {'grid': {'resolution': 0.5}})
    config = load_config(path)
    assert config['grid']['resolution'] == 0.5
    assert config['_meta']['config_file'] == str(path.absolute())


@pytest.mark.parametrize("component", ["nutrient_analysis", "seaweed_suitability", "hypoxia_acidification"])
def test_component_configs_are_discovered(component):
    config = load_config(component_name=component)
    assert config['_meta']['component_name'] == component
    assert 'logging' in config


def test_missing_config_raises(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv('SEAWEED_FEASIBILITY_CONFIG', raising=False)
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / 'nope.yaml')


def test_non_mapping_config_raises(tmp_path):
    path = tmp_path / 'list.yaml'
    path.write_text("- a\n- b\n", encoding='utf-8')
    with pytest.raises(ValueError):
        load_config(path)


def test_validate_missing_sections():
    with pytest.raises(ValueError):
        validate_config({'grid': {}}, ['grid', 'thresholds'])


def test_get_config_value_defaults():
    config = {'data': {'eez_file': None}, 'thresholds': {'sst_range': [0, 35]}}
    assert get_config_value(config, 'data.eez_file', 'default.shp') == 'default.shp'
    assert get_config_value(config, 'thresholds.sst_range') == [0, 35]
    assert get_config_value(config, 'thresholds.missing.deep', 7) == 7

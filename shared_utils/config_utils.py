"""
Configuration utilities for the seaweed feasibility analysis.

Each component ships a config.yaml next to its package; this module finds,
loads and validates those files.

Author: Diego Bengochea
"""

import yaml
import os
from pathlib import Path
from typing import Dict, Any, Optional, Union
import logging

CONFIG_ENV_VAR = 'SEAWEED_FEASIBILITY_CONFIG'
REPO_ROOT = Path(__file__).resolve().parent.parent
OUTPUT_KEYS = ('output', 'tables', 'figures')


def load_config(
    config_path: Optional[Union[str, Path]] = None,
    component_name: Optional[str] = None,
    default_config_name: str = "config.yaml"
) -> Dict[str, Any]:
    """
    Load configuration from YAML file with standardized search patterns.

    Search order:
    1. Explicit config_path if provided
    2. Component package directory + default_config_name
    3. Current directory + default_config_name
    4. Environment variable SEAWEED_FEASIBILITY_CONFIG

    Args:
        config_path: Explicit path to configuration file
        component_name: Name of component (for automatic config discovery)
        default_config_name: Default config filename to search for

    Returns:
        Dict[str, Any]: Configuration dictionary

    Raises:
        FileNotFoundError: If no configuration file is found
        yaml.YAMLError: If configuration file is invalid YAML

    Examples:
        >>> config = load_config(component_name="nutrient_analysis")
        >>> config = load_config("custom_config.yaml")
    """
    logger = logging.getLogger(__name__)

    search_paths = []

    if config_path:
        search_paths.append(Path(config_path))

    if component_name:
        search_paths.append(REPO_ROOT / component_name / default_config_name)

    search_paths.append(Path(default_config_name))

    env_config = os.environ.get(CONFIG_ENV_VAR)
    if env_config:
        search_paths.append(Path(env_config))

    config_file = None
    for path in search_paths:
        if path.exists():
            config_file = path
            logger.debug(f"Found configuration file: {config_file}")
            break

    if not config_file:
        searched_paths = [str(p) for p in search_paths]
        raise FileNotFoundError(
            f"Configuration file not found. Searched paths: {searched_paths}"
        )

    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"Invalid YAML in {config_file}: {e}")

    if not isinstance(config, dict):
        raise ValueError(f"Configuration in {config_file} must be a mapping")

    config['_meta'] = {
        'config_file': str(config_file.absolute()),
        'component_name': component_name,
        'working_dir': str(Path.cwd())
    }

    logger.info(f"Loaded configuration from: {config_file}")
    return config


def validate_config(config: Dict[str, Any], required_sections: list = None) -> bool:
    """
    Validate configuration dictionary structure.

    Args:
        config: Configuration dictionary to validate
        required_sections: List of required top-level sections

    Returns:
        bool: True if configuration is valid

    Raises:
        ValueError: If configuration is invalid

    Examples:
        >>> validate_config(config, ['data', 'processing', 'output'])
    """
    logger = logging.getLogger(__name__)

    if not isinstance(config, dict):
        raise ValueError("Configuration must be a dictionary")

    if required_sections:
        missing_sections = [s for s in required_sections if s not in config]
        if missing_sections:
            raise ValueError(f"Missing required configuration sections: {missing_sections}")

    data_section = config.get('data')
    if isinstance(data_section, dict):
        for key, value in data_section.items():
            is_input = key.endswith(('_dir', '_file', '_raster')) and not key.startswith(OUTPUT_KEYS)
            if is_input and isinstance(value, str):
                if not Path(value).exists():
                    logger.warning(f"Input path does not exist: data.{key} = {value}")

    logger.debug("Configuration validation passed")
    return True


def get_config_value(config: Dict[str, Any], key_path: str, default: Any = None) -> Any:
    """
    Get nested configuration value using dot notation.

    Args:
        config: Configuration dictionary
        key_path: Dot-separated path to the value (e.g., 'data.eez_file')
        default: Default value if key is not found or is null

    Returns:
        Any: Configuration value or default

    Examples:
        >>> eez_file = get_config_value(config, 'data.eez_file', EEZ_FILE)
        >>> power = get_config_value(config, 'interpolation.power', 2.0)
    """
    value = config

    try:
        for key in key_path.split('.'):
            value = value[key]
    except (KeyError, TypeError):
        return default

    return default if value is None else value

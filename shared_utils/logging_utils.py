"""
Standardized logging utilities for the seaweed feasibility analysis.

Every pipeline configures logging once through setup_logging and then logs
through component loggers under the 'seaweed_feasibility' namespace.

Author: Diego Bengochea
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

ROOT_LOGGER_NAME = 'seaweed_feasibility'

LOG_FORMATS = {
    'standard': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    'detailed': '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s',
    'simple': '%(levelname)s: %(message)s'
}

# Geospatial libraries that log every driver call at DEBUG
NOISY_LOGGERS = ('rasterio', 'fiona', 'pyogrio', 'matplotlib', 'PIL')


def setup_logging(
    level: Union[str, int] = 'INFO',
    component_name: Optional[str] = None,
    log_file: Optional[Union[str, Path]] = None,
    format_style: str = 'standard'
) -> logging.Logger:
    """
    Setup standardized logging configuration for pipeline components.

    Replaces any handlers already on the root logger, so calling it again
    (for instance from a recipe and then from a pipeline) does not duplicate
    output.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        component_name: Name of the component (for logger identification)
        log_file: Optional file path for logging output
        format_style: Logging format style ('standard', 'detailed', 'simple')

    Returns:
        logging.Logger: Configured logger instance

    Examples:
        >>> logger = setup_logging('INFO', 'nutrient_analysis')
        >>> logger = setup_logging('DEBUG', 'seaweed_suitability', 'suitability.log')
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())

    formatter = logging.Formatter(
        LOG_FORMATS.get(format_style, LOG_FORMATS['standard']),
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(level)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    return get_logger(component_name)


def get_logger(component_name: Optional[str] = None) -> logging.Logger:
    """Component logger under the project namespace."""
    if component_name:
        return logging.getLogger(f'{ROOT_LOGGER_NAME}.{component_name}')
    return logging.getLogger(ROOT_LOGGER_NAME)


def log_pipeline_start(logger: logging.Logger, pipeline_name: str, config: dict = None) -> None:
    """
    Log standardized pipeline start message.

    With a config loaded by load_config, the config file it came from is
    logged as well.
    """
    logger.info("=" * 80)
    logger.info(f"STARTING PIPELINE: {pipeline_name.upper()}")
    if config and '_meta' in config:
        logger.info(f"Configuration: {config['_meta']['config_file']}")
    logger.info("=" * 80)


def format_elapsed(seconds: float) -> str:
    """Elapsed seconds as HH:MM:SS."""
    minutes, secs = divmod(int(seconds), 60)
    hours, minutes = divmod(minutes, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def log_pipeline_end(logger: logging.Logger, pipeline_name: str, success: bool = True, elapsed_time: float = None) -> None:
    """
    Log standardized pipeline completion message.

    Args:
        logger: Logger instance
        pipeline_name: Name of the completed pipeline
        success: Whether pipeline completed successfully
        elapsed_time: Optional elapsed time in seconds
    """
    logger.info("=" * 80)

    if success:
        logger.info(f"✅ PIPELINE COMPLETED SUCCESSFULLY: {pipeline_name.upper()}")
    else:
        logger.error(f"❌ PIPELINE FAILED: {pipeline_name.upper()}")

    if elapsed_time is not None:
        logger.info(f"Total execution time: {format_elapsed(elapsed_time)}")

    logger.info("=" * 80)


def log_section(logger: logging.Logger, section_name: str) -> None:
    """Log a section header inside a pipeline run."""
    logger.info(f"---- {section_name.upper()} ----")

#!/usr/bin/env python3
"""
Visualization Utilities

Common utilities for the visualization component of the seaweed feasibility
analysis. Provides standardized functions for configuration loading,
matplotlib styling, figure saving and shared map decorations.

Author: Diego Bengochea
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import cartopy.crs as ccrs
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import matplotlib.ticker as mticker
import numpy as np
import yaml
from cartopy.mpl.ticker import LongitudeFormatter, LatitudeFormatter

DEFAULT_CONFIG_PATH = Path(__file__).parent / 'config.yaml'


def load_visualization_config(config_path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Load visualization configuration file.

    Args:
        config_path: Optional path to config file. If None, uses default location.

    Returns:
        Configuration dictionary
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            config = yaml.safe_load(f)
        return config
    except FileNotFoundError:
        raise FileNotFoundError(f"Visualization config file not found: {config_path}")
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing config file: {e}")


def apply_style_config(config: Dict[str, Any]) -> None:
    """
    Apply matplotlib style configuration.

    Args:
        config: Configuration dictionary containing style parameters
    """
    if 'style' in config:
        plt.rcParams.update(config['style'])


def save_figure_multiple_formats(
    fig: plt.Figure,
    output_path: Union[str, Path],
    config: Dict[str, Any],
    logger: Optional[logging.Logger] = None
) -> List[str]:
    """
    Save figure in multiple formats specified in config.

    Args:
        fig: Matplotlib figure object
        output_path: Base output path (without extension)
        config: Configuration dictionary with export settings
        logger: Optional logger for output messages

    Returns:
        List of saved file paths
    """
    if logger is None:
        logger = logging.getLogger(__name__)

    base_path = Path(output_path).with_suffix('')
    base_path.parent.mkdir(parents=True, exist_ok=True)
    export_config = config['export']
    saved_files = []

    for fmt in export_config['formats']:
        format_kwargs = export_config.get(f'{fmt}_kwargs', {})

        save_kwargs = {
            'format': fmt,
            'dpi': export_config['dpi'],
            'bbox_inches': export_config['bbox_inches'],
            **format_kwargs
        }

        output_file = f"{base_path}.{fmt}"
        fig.savefig(output_file, **save_kwargs)
        saved_files.append(output_file)

        logger.info(f"Saved figure: {output_file}")

    return saved_files


def raster_extent(shape: Tuple[int, int], transform) -> Tuple[float, float, float, float]:
    """Matplotlib imshow extent (left, right, bottom, top) of a north-up raster."""
    left = transform.c
    top = transform.f
    right = left + shape[1] * transform.a
    bottom = top + shape[0] * transform.e
    return (left, right, bottom, top)


def robust_limits(rasters, lower_pct: float = 2, upper_pct: float = 98) -> Tuple[float, float]:
    """Shared colour limits over several rasters from percentiles of valid cells."""
    values = np.concatenate([np.asarray(r)[np.isfinite(r)] for r in rasters])
    if values.size == 0:
        return (0.0, 1.0)
    vmin, vmax = np.percentile(values, [lower_pct, upper_pct])
    if vmin == vmax:
        vmax = vmin + 1.0
    return (float(vmin), float(vmax))


def create_map_axes(fig: plt.Figure, position, background: str = '#d9d9d9'):
    """
    Add a PlateCarree map axes with a neutral background (land and empty cells).

    Args:
        fig: Figure to draw on
        position: Subplot spec or (nrows, ncols, index) tuple
        background: Axes face colour
    """
    if isinstance(position, tuple):
        ax = fig.add_subplot(*position, projection=ccrs.PlateCarree())
    else:
        ax = fig.add_subplot(position, projection=ccrs.PlateCarree())

    ax.set_global()

    ax.set_facecolor(background)
    return ax


def add_map_gridlines(ax, left_labels: bool = True, bottom_labels: bool = True, step: float = 60) -> None:
    """Add light labelled gridlines to a map axes."""
    gl = ax.gridlines(draw_labels=True, alpha=0.2, linestyle='-', linewidth=0.4)
    gl.top_labels = False
    gl.right_labels = False
    gl.left_labels = left_labels
    gl.bottom_labels = bottom_labels
    gl.xlabel_style = {'size': 7}
    gl.ylabel_style = {'size': 7}
    gl.xlocator = mticker.FixedLocator(np.arange(-180, 181, step))
    gl.ylocator = mticker.FixedLocator(np.arange(-90, 91, step / 2))
    gl.xformatter = LongitudeFormatter()
    gl.yformatter = LatitudeFormatter()

    for spine in ax.spines.values():
        spine.set_edgecolor('0.5')
        spine.set_linewidth(0.5)


def add_boundaries(ax, boundaries, edgecolor: str = '0.3', linewidth: float = 0.3,
                   facecolor: str = 'none', zorder: int = 2, **kwargs) -> None:
    """Draw a GeoDataFrame (in geographic coordinates) onto a map axes."""
    if boundaries is None or len(boundaries) == 0:
        return
    ax.add_geometries(
        boundaries.geometry,
        crs=ccrs.PlateCarree(),
        facecolor=facecolor,
        edgecolor=edgecolor,
        linewidth=linewidth,
        zorder=zorder,
        **kwargs
    )


def add_colorbar(fig: plt.Figure, image, ax, label: str, orientation: str = 'horizontal'):
    """Colorbar under (or beside) a map axes."""
    cbar = fig.colorbar(image, ax=ax, orientation=orientation, shrink=0.7, pad=0.06)
    cbar.set_label(label, fontsize=8)
    cbar.ax.tick_params(labelsize=7)
    return cbar

#!/usr/bin/env python3
"""
Nutrient seasonal maps.

Seasonal panel maps (one panel per season on a shared colour scale) and
single-layer maps used for seasonal standard deviation.

Author: Diego Bengochea
"""

import math
from pathlib import Path
from typing import Dict, List, Optional

import cartopy.crs as ccrs
import matplotlib.pyplot as plt
import numpy as np

from visualization.utils import (
    load_visualization_config, apply_style_config, save_figure_multiple_formats,
    raster_extent, robust_limits, create_map_axes, add_map_gridlines, add_colorbar
)

PANEL_LETTERS = 'abcdefghijklmnop'


def plot_seasonal_panels(
    season_rasters: Dict[str, np.ndarray],
    transform,
    nutrient: str,
    units: str,
    cmap: str,
    config: dict
) -> plt.Figure:
    """
    Create a multi-panel figure with one map per season.

    All panels share colour limits so seasons compare directly.
    """
    fig_params = config['figure_params']
    n_panels = len(season_rasters)
    ncols = 2 if n_panels > 1 else 1
    nrows = math.ceil(n_panels / ncols)

    fig = plt.figure(figsize=fig_params['seasonal_panels']['figsize'])
    vmin, vmax = robust_limits(season_rasters.values())

    image = None
    axes = []
    for i, (season, raster) in enumerate(season_rasters.items()):
        ax = create_map_axes(fig, (nrows, ncols, i + 1), background=fig_params['background_color'])
        image = ax.imshow(
            raster,
            extent=raster_extent(raster.shape, transform),
            transform=ccrs.PlateCarree(),
            origin='upper',
            cmap=cmap,
            vmin=vmin,
            vmax=vmax,
            interpolation='nearest',
            zorder=1
        )
        add_map_gridlines(ax, left_labels=(i % ncols == 0), bottom_labels=(i >= n_panels - ncols))
        ax.set_title(f"{PANEL_LETTERS[i]}) {season.capitalize()}", loc='left')
        axes.append(ax)

    fig.suptitle(f"Seasonal {nutrient} concentration", fontsize=10)
    cbar = fig.colorbar(image, ax=axes, orientation='horizontal', shrink=0.5, pad=0.06, extend='both')
    cbar.set_label(f"{nutrient.capitalize()} ({units})" if units else nutrient.capitalize(), fontsize=8)
    cbar.ax.tick_params(labelsize=7)

    return fig


def plot_raster_map(
    raster: np.ndarray,
    transform,
    title: str,
    label: str,
    cmap: str,
    config: dict,
    vmin: Optional[float] = None,
    vmax: Optional[float] = None
) -> plt.Figure:
    """Single raster map with a colorbar, robust limits unless given."""
    fig_params = config['figure_params']
    fig = plt.figure(figsize=fig_params['single_map']['figsize'])
    ax = create_map_axes(fig, (1, 1, 1), background=fig_params['background_color'])

    if vmin is None or vmax is None:
        auto_min, auto_max = robust_limits([raster])
        vmin = auto_min if vmin is None else vmin
        vmax = auto_max if vmax is None else vmax

    image = ax.imshow(
        raster,
        extent=raster_extent(raster.shape, transform),
        transform=ccrs.PlateCarree(),
        origin='upper',
        cmap=cmap,
        vmin=vmin,
        vmax=vmax,
        interpolation='nearest',
        zorder=1
    )
    add_map_gridlines(ax)
    ax.set_title(title)
    add_colorbar(fig, image, ax, label)

    return fig


def render_nutrient_maps(
    nutrient: str,
    season_rasters: Dict[str, np.ndarray],
    std_raster: np.ndarray,
    transform,
    output_dir: Path,
    units: str = '',
    cmap: str = 'viridis',
    std_cmap: str = 'plasma',
    viz_config_path=None,
    logger=None
) -> List[str]:
    """
    Render and save the seasonal panel map and the seasonal std map of a nutrient.

    Returns:
        List of saved file paths
    """
    config = load_visualization_config(viz_config_path)
    apply_style_config(config)
    output_dir = Path(output_dir)
    saved = []

    fig = plot_seasonal_panels(season_rasters, transform, nutrient, units, cmap, config)
    saved.extend(save_figure_multiple_formats(
        fig, output_dir / f"{nutrient}_seasonal_panels", config, logger
    ))
    plt.close(fig)

    label = f"Seasonal standard deviation ({units})" if units else "Seasonal standard deviation"
    fig = plot_raster_map(
        std_raster, transform,
        title=f"Seasonal variability of {nutrient}",
        label=label,
        cmap=std_cmap,
        config=config,
        vmin=0.0
    )
    saved.extend(save_figure_multiple_formats(
        fig, output_dir / f"{nutrient}_seasonal_std", config, logger
    ))
    plt.close(fig)

    return saved

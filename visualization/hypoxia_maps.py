#!/usr/bin/env python3
"""
Hypoxia, eutrophication and acidification figures.

Map of low aragonite saturation with country outlines and classified site
points, and a stacked bar chart of per-country condition counts.

Author: Diego Bengochea
"""

from pathlib import Path
from typing import List, Sequence

import cartopy.crs as ccrs
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

from visualization.utils import (
    load_visualization_config, apply_style_config, save_figure_multiple_formats,
    raster_extent, create_map_axes, add_map_gridlines, add_boundaries, add_colorbar
)

# Columns of the condition table that are not classifications
NON_CLASS_COLUMNS = ('country', 'total_sites', 'low_aragonite_cells')


def site_color(classification: str, params: dict) -> str:
    return params['site_colors'].get(classification, params['default_site_color'])


def plot_hypoxia_map(
    aragonite_low: np.ndarray,
    transform,
    config: dict,
    sites=None,
    countries=None,
    low_range: Sequence[float] = (0.0, 3.0)
) -> plt.Figure:
    """
    Create the low-aragonite map with country outlines and site points.

    Args:
        aragonite_low: Aragonite saturation raster, NaN outside the low range
        transform: Raster affine transform (geographic coordinates)
        config: Visualization configuration
        sites: Point layer with a 'classification' column
        countries: Country polygons drawn as outlines
        low_range: Saturation range used as colour limits
    """
    fig_params = config['figure_params']
    params = fig_params['hypoxia_map']

    fig = plt.figure(figsize=params['figsize'])
    ax = create_map_axes(fig, (1, 1, 1), background=fig_params['background_color'])

    image = ax.imshow(
        aragonite_low,
        extent=raster_extent(aragonite_low.shape, transform),
        transform=ccrs.PlateCarree(),
        origin='upper',
        cmap=params['aragonite_cmap'],
        vmin=low_range[0],
        vmax=low_range[1],
        interpolation='nearest',
        zorder=1
    )

    add_boundaries(ax, countries, edgecolor=params['country_edgecolor'], linewidth=0.25)

    if sites is not None and len(sites) > 0:
        for classification, group in sites.groupby('classification'):
            ax.scatter(
                group.geometry.x, group.geometry.y,
                transform=ccrs.PlateCarree(),
                s=6,
                color=site_color(classification, params),
                edgecolor='black',
                linewidth=0.15,
                label=f"{classification.capitalize()} ({len(group)})",
                zorder=3
            )
        ax.legend(loc='lower left', fontsize=6, markerscale=2)

    add_map_gridlines(ax)
    ax.set_title('Low aragonite saturation and coastal eutrophication/hypoxia')
    add_colorbar(fig, image, ax, 'Aragonite saturation state (Ω)')

    return fig


def plot_country_counts(counts: pd.DataFrame, config: dict) -> plt.Figure:
    """
    Stacked horizontal bars of site classifications for the top countries.

    Args:
        counts: Condition table with a 'country' column, one column per
            classification and 'total_sites'
        config: Visualization configuration
    """
    fig_params = config['figure_params']
    params = fig_params['country_counts']
    site_params = fig_params['hypoxia_map']

    top = counts[counts['total_sites'] > 0].nlargest(params['top_n'], 'total_sites')
    top = top.iloc[::-1]
    classes = [c for c in counts.columns if c not in NON_CLASS_COLUMNS]

    fig, ax = plt.subplots(figsize=params['figsize'])
    left = np.zeros(len(top))
    for classification in classes:
        values = top[classification].to_numpy(dtype=float)
        ax.barh(
            top['country'], values, left=left,
            color=site_color(classification, site_params),
            edgecolor='white',
            linewidth=0.3,
            label=classification.capitalize()
        )
        left += values

    ax.set_xlabel('Number of sites')
    ax.set_ylabel('')
    ax.set_title(f"Eutrophic and hypoxic sites, top {len(top)} countries")
    if classes:
        ax.legend(loc='lower right')
    sns.despine(ax=ax)

    return fig


def render_hypoxia_maps(
    aragonite_low: np.ndarray,
    transform,
    output_dir: Path,
    sites=None,
    countries=None,
    counts: pd.DataFrame = None,
    low_range: Sequence[float] = (0.0, 3.0),
    viz_config_path=None,
    logger=None
) -> List[str]:
    """
    Render and save the hypoxia/acidification map and the country count chart.

    Returns:
        List of saved file paths
    """
    config = load_visualization_config(viz_config_path)
    apply_style_config(config)
    output_dir = Path(output_dir)
    saved = []

    fig = plot_hypoxia_map(aragonite_low, transform, config, sites=sites, countries=countries, low_range=low_range)
    saved.extend(save_figure_multiple_formats(fig, output_dir / 'hypoxia_acidification_map', config, logger))
    plt.close(fig)

    if counts is not None and len(counts) > 0:
        fig = plot_country_counts(counts, config)
        saved.extend(save_figure_multiple_formats(fig, output_dir / 'country_condition_counts', config, logger))
        plt.close(fig)

    return saved

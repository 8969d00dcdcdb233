#!/usr/bin/env python3
"""
Seaweed suitability composite map.

Feasibility raster (N:P ratio of feasible cells) with EEZ outlines, EEZs of
countries already farming seaweed, native-range lines of farmed species and
offset scenario polygons.

Author: Diego Bengochea
"""

from pathlib import Path
from typing import List

import cartopy.crs as ccrs
import matplotlib.pyplot as plt
import numpy as np
from matplotlib.lines import Line2D
from matplotlib.patches import Patch

from visualization.utils import (
    load_visualization_config, apply_style_config, save_figure_multiple_formats,
    raster_extent, create_map_axes, add_map_gridlines, add_boundaries, add_colorbar
)


def plot_suitability_map(
    feasibility: np.ndarray,
    transform,
    config: dict,
    eez=None,
    farming_eez=None,
    native_ranges=None,
    offset_scenarios=None
) -> plt.Figure:
    """
    Create the composite suitability map.

    Args:
        feasibility: N:P ratio raster, NaN outside feasible cells
        transform: Raster affine transform (geographic coordinates)
        config: Visualization configuration
        eez: EEZ polygons drawn as outlines
        farming_eez: EEZ polygons of countries currently farming, shaded
        native_ranges: Native-range line features
        offset_scenarios: Offset scenario polygons with a 'name' column
    """
    fig_params = config['figure_params']
    params = fig_params['suitability_map']

    fig = plt.figure(figsize=params['figsize'])
    ax = create_map_axes(fig, (1, 1, 1), background=fig_params['background_color'])

    legend_handles = []

    if farming_eez is not None and len(farming_eez) > 0:
        add_boundaries(ax, farming_eez, edgecolor='none', facecolor=params['farming_color'],
                       linewidth=0, alpha=0.6, zorder=0.5)
        legend_handles.append(Patch(facecolor=params['farming_color'], alpha=0.6,
                                    label='Currently farming seaweed'))

    valid = feasibility[np.isfinite(feasibility)]
    vmin, vmax = (float(valid.min()), float(valid.max())) if valid.size else (0.0, 1.0)
    if vmin == vmax:
        vmax = vmin + 1.0

    image = ax.imshow(
        feasibility,
        extent=raster_extent(feasibility.shape, transform),
        transform=ccrs.PlateCarree(),
        origin='upper',
        cmap=params['feasibility_cmap'],
        vmin=vmin,
        vmax=vmax,
        interpolation='nearest',
        zorder=1
    )

    if eez is not None and len(eez) > 0:
        add_boundaries(ax, eez, edgecolor=params['eez_color'], linewidth=0.2)
        legend_handles.append(Line2D([0], [0], color=params['eez_color'], linewidth=0.8, label='EEZ'))

    if native_ranges is not None and len(native_ranges) > 0:
        ax.add_geometries(
            native_ranges.geometry,
            crs=ccrs.PlateCarree(),
            facecolor='none',
            edgecolor=params['native_range_color'],
            linewidth=0.8,
            zorder=3
        )
        legend_handles.append(Line2D([0], [0], color=params['native_range_color'], linewidth=1.2,
                                     label='Native range'))

    if offset_scenarios is not None and len(offset_scenarios) > 0:
        add_boundaries(ax, offset_scenarios, edgecolor=params['offset_color'], linewidth=1.0,
                       linestyle='--', zorder=4)
        for name, geometry in zip(offset_scenarios['name'], offset_scenarios.geometry):
            point = geometry.representative_point()
            ax.text(point.x, point.y, name, transform=ccrs.PlateCarree(), fontsize=6,
                    color=params['offset_color'], ha='center', va='center', zorder=5)
        legend_handles.append(Line2D([0], [0], color=params['offset_color'], linestyle='--',
                                     linewidth=1.0, label='Offset scenario'))

    add_map_gridlines(ax)
    ax.set_title('Seaweed farming feasibility')
    add_colorbar(fig, image, ax, 'N:P ratio of feasible cells')

    if legend_handles:
        ax.legend(handles=legend_handles, loc='lower left', fontsize=6)

    return fig


def render_suitability_map(
    feasibility: np.ndarray,
    transform,
    output_dir: Path,
    eez=None,
    farming_eez=None,
    native_ranges=None,
    offset_scenarios=None,
    viz_config_path=None,
    logger=None
) -> List[str]:
    """
    Render and save the composite suitability map.

    Returns:
        List of saved file paths
    """
    config = load_visualization_config(viz_config_path)
    apply_style_config(config)

    fig = plot_suitability_map(
        feasibility, transform, config,
        eez=eez,
        farming_eez=farming_eez,
        native_ranges=native_ranges,
        offset_scenarios=offset_scenarios
    )
    saved = save_figure_multiple_formats(fig, Path(output_dir) / 'seaweed_suitability_map', config, logger)
    plt.close(fig)

    return saved

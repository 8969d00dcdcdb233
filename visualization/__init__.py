"""
Visualization component: publication maps and charts.

Modules:
    utils: Configuration, styling, figure export and map decorations
    nutrient_maps: Seasonal panel and variability maps
    suitability_map: Composite seaweed suitability map
    hypoxia_maps: Acidification/hypoxia map and per-country chart

Author: Diego Bengochea
"""

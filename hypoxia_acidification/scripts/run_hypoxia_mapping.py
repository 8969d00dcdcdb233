#!/usr/bin/env python3
"""
Hypoxia and acidification mapping script.

Command-line interface for gap filling aragonite saturation, filtering
low-saturation cells, overlaying eutrophic/hypoxic sites and counting
conditions per country.

Usage:
    python run_hypoxia_mapping.py [--config CONFIG] [--no-render]

Author: Diego Bengochea
"""

import argparse
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from hypoxia_acidification.core.hypoxia_pipeline import HypoxiaAcidificationPipeline


def parse_arguments(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Gap-fill aragonite saturation and map eutrophication/hypoxia by country",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    parser.add_argument(
        '--config',
        type=str,
        help='Path to configuration file (default: component config.yaml)'
    )

    parser.add_argument(
        '--no-render',
        action='store_true',
        help='Write rasters and tables only, skip map rendering'
    )

    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point for hypoxia and acidification mapping."""
    args = parse_arguments(argv)
    pipeline = HypoxiaAcidificationPipeline(args.config)
    if args.no_render:
        pipeline.render_enabled = False
    return pipeline.run_full_pipeline()


if __name__ == "__main__":
    success = main()
    sys.exit(0 if success else 1)

#!/usr/bin/env python3
"""
Seaweed suitability mapping script.

Command-line interface for computing the N:P ratio, applying the EEZ and
SST filters, building the feasible-country list and rendering the
composite suitability map.

Usage:
    python run_suitability_mapping.py [--config CONFIG] [--no-render]

Author: Diego Bengochea
"""

import argparse
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from seaweed_suitability.core.suitability_pipeline import SeaweedSuitabilityPipeline


def parse_arguments(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Map seaweed farming feasibility from N:P ratio, EEZ and SST",
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
        help='Write rasters and tables only, skip the suitability map'
    )

    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point for seaweed suitability mapping."""
    args = parse_arguments(argv)
    pipeline = SeaweedSuitabilityPipeline(args.config)
    if args.no_render:
        pipeline.render_enabled = False
    return pipeline.run_full_pipeline()


if __name__ == "__main__":
    success = main()
    sys.exit(0 if success else 1)

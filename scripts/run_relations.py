#!/usr/bin/env python3
"""
Relation Experiment Script.

Runs the configured operation (train and test, SGD train and test, graph
exploration, matrix creation) for every relation in the config.

Usage:
    python scripts/run_relations.py --config config/default.yaml
    python scripts/run_relations.py --relations concept:athleteplaysforteam --threads 1
"""

import argparse
import sys
import time
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from config import apply_overrides, load_config
from pra.experiments.driver import Driver


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description='Run PRA relation prediction experiments')

    parser.add_argument(
        '--config', type=str, default='config/default.yaml',
        help='Path to configuration file'
    )
    parser.add_argument(
        '--relations', type=str, nargs='+', default=None,
        help='Relations to run (overrides config)'
    )
    parser.add_argument(
        '--operation', type=str, default=None,
        help='Operation type, e.g. "train and test" (overrides config)'
    )
    parser.add_argument(
        '--threads', type=int, default=None,
        help='Worker threads for SGD train and test (overrides config)'
    )
    parser.add_argument(
        '--results-dir', type=str, default=None,
        help='Output directory (overrides config)'
    )
    parser.add_argument(
        '--quiet', action='store_true',
        help='Only write log files, do not print progress'
    )

    return parser.parse_args(argv)


def main(argv=None):
    """Main experiment function."""
    args = parse_args(argv)

    print("=" * 60)
    print("PRA Relation Prediction")
    print("=" * 60)

    config = load_config(args.config)
    if isinstance(config.get('operation'), str):
        config['operation'] = {'type': config['operation']}

    # Override config with command line args
    overrides = {}
    if args.operation is not None:
        overrides.setdefault('operation', {})['type'] = args.operation
    if args.threads is not None:
        overrides.setdefault('operation', {})['threads'] = args.threads
    if args.results_dir is not None:
        overrides['paths'] = {'results': args.results_dir}
    config = apply_overrides(config, overrides)

    print(f"Operation: {(config.get('operation') or {}).get('type', 'train and test')}")

    start_time = time.time()
    driver = Driver(config, verbose=not args.quiet)
    driver.run(args.relations)

    total_time = time.time() - start_time
    print(f"\nDone in {total_time / 60:.1f} minutes")
    print("=" * 60)


if __name__ == '__main__':
    main()

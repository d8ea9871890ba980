#!/usr/bin/env python3
"""
Split Creation Script.

Splits one labeled dataset file per relation into training.tsv and
testing.tsv under a split directory.

Input files hold ``source<TAB>target[<TAB>label]`` lines of graph node ids;
each relation is given as ``relation=path``.

Usage:
    python scripts/create_split.py --output-dir data/splits/default \\
        concept:athleteplaysforteam=data/athleteplaysforteam.tsv
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import numpy as np

from pra.data import Dataset, DatasetSplit


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description='Create a training / testing split')

    parser.add_argument(
        'relations', type=str, nargs='+',
        help='relation=path pairs, one per relation'
    )
    parser.add_argument(
        '--output-dir', type=str, default='data/splits/default',
        help='Split directory to write'
    )
    parser.add_argument(
        '--training-fraction', type=float, default=0.8,
        help='Fraction of each relation used for training'
    )
    parser.add_argument(
        '--seed', type=int, default=42,
        help='Random seed'
    )

    return parser.parse_args(argv)


def main(argv=None):
    """Main split function."""
    args = parse_args(argv)

    relation_data = {}
    for argument in args.relations:
        relation, sep, path = argument.partition('=')
        if not sep or not relation or not path:
            raise SystemExit(f"Expected relation=path, got {argument!r}")
        relation_data[relation] = Dataset.read_from_file(path)
        print(f"Loaded {relation}: {relation_data[relation]}")

    split = DatasetSplit.create(
        args.output_dir, relation_data, args.training_fraction,
        rng=np.random.default_rng(args.seed)
    )

    for relation in relation_data:
        training = split.get_training_data(relation)
        testing = split.get_testing_data(relation)
        print(f"{relation}: {len(training)} training, {len(testing)} testing")
    print(f"Split written to {split.split_dir}")


if __name__ == '__main__':
    main()

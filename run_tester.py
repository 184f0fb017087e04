#!/usr/bin/env python3
"""
Correctness and speedup test of the parallel prime engine.

Usage:
    python run_tester.py
    python run_tester.py 1000000 5
    python run_tester.py 1000000 5 --workers 4 --backend thread
    python run_tester.py --config config/custom.yaml
"""

import argparse
import sys
from pathlib import Path

from primecompute.config import EngineConfig, load_config
from primecompute.errors import InvalidInput
from primecompute.tester import run_test

DEFAULT_CONFIG = Path('config/default.yaml')


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Test compute_primes against the sequential baseline')
    parser.add_argument('max', type=int, nargs='?', default=None,
                        help='Upper bound of primes (excluded)')
    parser.add_argument('iterations', type=int, nargs='?', default=None,
                        help='Number of runs per method')
    parser.add_argument('--config', type=Path, default=None,
                        help=f'Path to config file (default: {DEFAULT_CONFIG} if present)')
    parser.add_argument('--workers', type=int, default=None,
                        help='Worker count (default: CPU count)')
    parser.add_argument('--backend', choices=['process', 'thread'], default=None)
    parser.add_argument('--cost-model', choices=['linear', 'sqrt', 'uniform'], default=None)
    parser.add_argument('--oversubscription', type=int, default=None,
                        help='Chunks per worker')
    parser.add_argument('--verbose', action='store_true', default=None)
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    try:
        config_path = args.config
        if config_path is None and DEFAULT_CONFIG.exists():
            config_path = DEFAULT_CONFIG
        if config_path is not None:
            settings = load_config(config_path)
        else:
            settings = {'max': 10_000_000, 'iterations': 10, 'engine': EngineConfig()}

        max_value = args.max if args.max is not None else settings['max']
        iterations = args.iterations if args.iterations is not None else settings['iterations']
        if max_value < 0:
            raise InvalidInput(f"max must be a natural number, got {max_value}")
        if iterations <= 0:
            raise InvalidInput(f"iterations must be positive, got {iterations}")

        engine = settings['engine'].override(
            workers=args.workers,
            backend=args.backend,
            cost_model=args.cost_model,
            oversubscription=args.oversubscription,
            verbose=args.verbose,
        ).validate()
    except InvalidInput as e:
        print(f"error: {e}", file=sys.stderr)
        print("usage: run_tester.py [max [iterations]]", file=sys.stderr)
        sys.exit(1)

    print("=" * 60)
    print("Parallel prime computation - correctness and speedup")
    print("=" * 60)
    print(f"  max = {max_value:,}")
    print(f"  iterations = {iterations}")
    print(f"  workers = {engine.workers} ({engine.backend})")
    print(f"  chunks per worker = {engine.oversubscription}, cost model = {engine.cost_model}")
    print()

    summary = run_test(max_value, iterations, engine)

    print()
    print("=" * 60)
    print("SUMMARY")
    print("=" * 60)
    print(summary.T.to_string(header=False))


if __name__ == '__main__':
    main()

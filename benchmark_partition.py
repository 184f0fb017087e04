#!/usr/bin/env python3
"""
Benchmark the partition cost models.

Compares, for one bound and worker count:
1. uniform : equal-width chunks
2. linear  : chunks balanced on cost(i) = i
3. sqrt    : chunks balanced on cost(i) = sqrt(i)

Chunk balance is always measured under the sqrt model, the closest
estimate of real trial-division work.
"""

import argparse
import time
import numpy as np
import pandas as pd

from primecompute.config import EngineConfig, default_worker_count
from primecompute.engine import PrimeEngine
from primecompute.partition import COST_MODELS, chunk_costs, partition


def benchmark(N: int, workers: int, oversubscription: int, backend: str) -> pd.DataFrame:
    """Run every cost model once and return one row per model."""
    print("=" * 60)
    print(f"Partition benchmark: N = {N:,}, workers = {workers}, backend = {backend}")
    print("=" * 60)

    rows = []
    reference = None
    for cost_model in COST_MODELS:
        chunks = partition(N, workers, oversubscription, cost_model)
        work = chunk_costs(chunks, 'sqrt')

        config = EngineConfig(workers=workers, backend=backend,
                              oversubscription=oversubscription, cost_model=cost_model)
        print(f"  {cost_model}: {len(chunks)} chunks...", end=" ", flush=True)
        t0 = time.perf_counter()
        primes = PrimeEngine(config).compute_primes(N)
        elapsed = time.perf_counter() - t0
        print(f"{elapsed:.2f}s")

        if reference is None:
            reference = primes
        elif primes != reference:
            print(f"  MISMATCH! {cost_model} found {len(primes):,} primes, expected {len(reference):,}")

        rows.append({
            'cost_model': cost_model,
            'chunks': len(chunks),
            'max_chunk_work': work.max() if len(work) else 0.0,
            'imbalance': work.max() / work.mean() if len(work) else np.nan,
            'seconds': elapsed,
            'primes': len(primes),
        })

    return pd.DataFrame(rows)


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Benchmark partition cost models')
    parser.add_argument('--N', type=float, default=1e6, help='Upper bound (excluded)')
    parser.add_argument('--workers', type=int, default=None, help='Worker count (default: CPU count)')
    parser.add_argument('--oversubscription', type=int, default=4)
    parser.add_argument('--backend', choices=['process', 'thread'], default='process')
    args = parser.parse_args()

    df = benchmark(int(args.N), args.workers or default_worker_count(),
                   args.oversubscription, args.backend)
    print()
    print(df.to_string(index=False))

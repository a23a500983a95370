"""
Metrics calculation for benchmark timings.

Latency summary per scenario plus an ORM/raw comparison per sweep cell.
"""

from typing import Dict, List, Sequence

import numpy as np

from ormbench.config import BackendKind, ScenarioResult


def calculate_metrics(timings: Sequence[float]) -> Dict[str, float]:
    """
    Calculate performance metrics from timing measurements.

    Args:
        timings: Query execution times in milliseconds

    Returns:
        Dictionary with count, mean_ms, min_ms, max_ms, stddev_ms,
        p50_ms, p95_ms, p99_ms and qps (queries per second)

    Example:
        >>> metrics = calculate_metrics([10.0, 12.0, 15.0, 11.0, 13.0])
        >>> metrics['p50_ms']
        12.0
    """
    if len(timings) == 0:
        return {
            'count': 0,
            'mean_ms': 0.0,
            'min_ms': 0.0,
            'max_ms': 0.0,
            'stddev_ms': 0.0,
            'p50_ms': 0.0,
            'p95_ms': 0.0,
            'p99_ms': 0.0,
            'qps': 0.0,
        }

    timings_array = np.asarray(timings, dtype=float)

    total_time_s = float(timings_array.sum()) / 1000.0
    qps = len(timings_array) / total_time_s if total_time_s > 0 else 0.0

    return {
        'count': len(timings_array),
        'mean_ms': float(timings_array.mean()),
        'min_ms': float(timings_array.min()),
        'max_ms': float(timings_array.max()),
        'stddev_ms': float(timings_array.std()),
        'p50_ms': float(np.percentile(timings_array, 50)),
        'p95_ms': float(np.percentile(timings_array, 95)),
        'p99_ms': float(np.percentile(timings_array, 99)),
        'qps': qps,
    }


def compare_backends(results: Sequence[ScenarioResult]) -> List[Dict]:
    """
    Pair ORM and raw results for the same query shape and row count.

    Returns:
        One dict per pair with both medians and orm_over_raw, the ratio of
        ORM p50 to raw p50 (None when the raw median is zero). Cells where
        only one backend ran are skipped.
    """
    cells: Dict[tuple, Dict[BackendKind, ScenarioResult]] = {}
    for result in results:
        cells.setdefault((result.shape, result.num_rows), {})[result.backend] = result

    comparisons = []
    for (shape, num_rows), by_backend in cells.items():
        orm = by_backend.get(BackendKind.ORM)
        raw = by_backend.get(BackendKind.RAW)
        if orm is None or raw is None:
            continue

        orm_p50 = orm.metrics['p50_ms']
        raw_p50 = raw.metrics['p50_ms']
        comparisons.append({
            'shape': shape.value,
            'num_rows': num_rows,
            'orm_p50_ms': orm_p50,
            'raw_p50_ms': raw_p50,
            'orm_over_raw': orm_p50 / raw_p50 if raw_p50 > 0 else None,
        })

    return comparisons

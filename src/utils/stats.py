# src/utils/stats.py

import math
from typing import Dict, Optional, Sequence


def expectation(counts: Sequence[int], node_count: Optional[int] = None) -> float:
    """Rata-rata key per node. node_count default-nya len(counts)."""
    if node_count is None:
        node_count = len(counts)
    if node_count <= 0:
        raise ValueError("expectation needs at least one node")
    return sum(counts) / node_count


def standard_deviation(counts: Sequence[int]) -> float:
    """Standar deviasi populasi dari jumlah key per node."""
    if not counts:
        raise ValueError("standard_deviation needs at least one value")
    mean = sum(counts) / len(counts)
    variance = sum((c - mean) ** 2 for c in counts)
    return math.sqrt(variance / len(counts))


def summarize(counts_by_node: Dict) -> dict:
    values = list(counts_by_node.values())
    return {
        "total": sum(values),
        "mean": expectation(values),
        "stddev": standard_deviation(values),
        "min": min(values),
        "max": max(values),
    }

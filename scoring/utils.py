"""
Scoring utility functions.
Counting and percentage helpers used by scoring.metrics.
"""
from typing import Iterable, List


# how many of the most common products or releases to report
TOP_N = 3


def percentage(part: int, total: int) -> float:
    """Return part as a percentage of total, or 0.0 when total is zero."""
    if not total:
        return 0.0
    return part / total * 100.0


def most_common(values: Iterable[str], n: int = TOP_N) -> List[str]:
    """
    Return up to n distinct values, most frequent first.
    Values with the same frequency keep the order in which they first appeared.
    """
    counts = {}
    for v in values:
        counts[v] = counts.get(v, 0) + 1
    # sorted() is stable and dicts keep insertion order, so ties stay in discovery order
    ranked = sorted(counts.items(), key=lambda item: -item[1])
    return [value for value, _count in ranked[:n]]


def list_or_placeholder(values: List[str], name: str) -> str:
    """Join the values for display, or return 'no <name>' for an empty list."""
    if not values:
        return f"no {name}"
    return ", ".join(values)

"""
Split-point finding for 1-D sequences.

`find_split_index` returns the index of the point lying farthest (vertically)
from the chord joining the first and last points; on a descending curve this
is the knee. `split_runs` applies it top-down to cut a curve into
near-linear runs.
"""
from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import numpy as np


def _normalize(values: Sequence[float], lo: float, span: float) -> np.ndarray:
    arr = np.asarray(values, dtype=float)
    if span == 0:
        return arr - lo
    return (arr - lo) / span


def chord_deviations(xs: Sequence[float], ys: Sequence[float]) -> np.ndarray:
    """Vertical distance of each point from the chord through the end points."""
    x = np.asarray(xs, dtype=float)
    y = np.asarray(ys, dtype=float)
    if len(x) < 2 or x[-1] == x[0]:
        return np.zeros(len(x))
    chord = y[0] + (x - x[0]) * (y[-1] - y[0]) / (x[-1] - x[0])
    return np.abs(y - chord)


def find_split_index(values: Sequence[float], xs: Optional[Sequence[float]] = None) -> int:
    """
    Index into `values` where the curve bends the most.

    Only interior points are candidates; sequences too short to have one
    return their last index (0 for a single value). Ties go to the earliest
    index.
    """
    n = len(values)
    if n == 0:
        raise ValueError("values must be non-empty")
    if n < 3:
        return n - 1
    if xs is None:
        xs = range(n)
    dev = chord_deviations(list(xs), values)[1:-1]
    # first of the (float-)equal maxima
    return int(np.flatnonzero(np.isclose(dev, dev.max()))[0]) + 1


def split_runs(
    xs: Sequence[float],
    ys: Sequence[float],
    *,
    y_span: float,
    tolerance: float = 0.05,
) -> List[Tuple[int, int]]:
    """
    Cut a curve into runs (lo, hi) of point indices, consecutive runs sharing
    their boundary point. A run is split at its farthest-from-chord point
    while that distance exceeds `tolerance`; x is normalized to [0, 1] over
    the whole curve and y by `y_span`.
    """
    n = len(xs)
    if n < 2:
        return []
    x_norm = _normalize(xs, xs[0], xs[-1] - xs[0])
    y_norm = _normalize(ys, 0.0, y_span)

    runs: List[Tuple[int, int]] = []
    stack = [(0, n - 1)]
    while stack:
        lo, hi = stack.pop()
        if hi - lo >= 2:
            dev = chord_deviations(x_norm[lo:hi + 1], y_norm[lo:hi + 1])
            k = int(np.argmax(dev[1:-1])) + 1
            if dev[k] > tolerance:
                # right half first so runs come off the stack left to right
                stack.append((lo + k, hi))
                stack.append((lo, lo + k))
                continue
        runs.append((lo, hi))
    return runs

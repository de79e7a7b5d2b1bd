from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

import numpy as np

from .breaks import find_split_index
from .data_model import Line
from .model import ClusterAssignment

logger = logging.getLogger(__name__)

MIN_POINTS = 2
NOISE = -1


def k_dist(k: int, i: int, values: np.ndarray) -> float:
    # k=0 is the point itself
    dists = np.sort(np.abs(values - values[i]))
    return float(dists[k])


def range_query(values: np.ndarray, i: int, eps: float) -> List[int]:
    return [int(j) for j in np.flatnonzero(np.abs(values - values[i]) <= eps)]


def dbscan(values: Sequence[float], eps: float, min_pts: int = MIN_POINTS) -> List[Optional[int]]:
    """
    Cluster label per value: 0, 1, ... in order of discovery, or NOISE.
    A point is core if at least `min_pts` values (itself included) lie within eps.
    """
    vals = np.asarray(values, dtype=float)
    labels: List[Optional[int]] = [None] * len(vals)
    c = -1
    for i in range(len(vals)):
        if labels[i] is not None:
            continue
        neighbors = range_query(vals, i, eps)
        if len(neighbors) < min_pts:
            labels[i] = NOISE
            continue
        c += 1
        labels[i] = c
        seeds = [j for j in neighbors if j != i]
        queued = set(seeds)
        while seeds:
            q = seeds.pop(0)
            if labels[q] == NOISE:
                # border point
                labels[q] = c
            if labels[q] is not None:
                continue
            labels[q] = c
            q_neighbors = range_query(vals, q, eps)
            if len(q_neighbors) >= min_pts:
                for n in q_neighbors:
                    if n not in queued:
                        queued.add(n)
                        seeds.append(n)
    return labels


def choose_eps(means: np.ndarray, y_range: float, min_eps_fraction: float = 0.1) -> float:
    kdists = sorted((k_dist(1, i, means) for i in range(len(means))), reverse=True)
    split = find_split_index(kdists)
    return max(kdists[split], y_range * min_eps_fraction)


def spatial_clusters(
    lines: Sequence[Line],
    min_pts: int = MIN_POINTS,
    min_eps_fraction: float = 0.1,
) -> ClusterAssignment:
    if len(lines) < 2:
        return ClusterAssignment()
    means = np.array([ln.mean_y() for ln in lines], dtype=float)
    y_lo = min(ln.y_bounds()[0] for ln in lines)
    y_hi = max(ln.y_bounds()[1] for ln in lines)
    eps = choose_eps(means, y_hi - y_lo, min_eps_fraction)
    labels = dbscan(means, eps, min_pts)
    logger.debug("clustering %d series with eps=%g", len(lines), eps)

    clusters: Dict[int, List[str]] = {}
    noise: List[str] = []
    for ln, tag in zip(lines, labels):
        if tag == NOISE:
            noise.append(ln.key)
        else:
            clusters.setdefault(tag, []).append(ln.key)
    return ClusterAssignment(
        clusters=tuple(tuple(clusters[t]) for t in sorted(clusters)),
        noise=tuple(noise),
    )

"""
Relative trajectories of a series pair.

The absolute-difference curve of two lines is cut into near-linear runs and
each run is tagged by how the gap behaves over it:

    tracking    - gap stable and small
    steady      - gap stable but wide
    converging  - gap shrinking
    diverging   - gap growing
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Literal, Tuple

import numpy as np

from .breaks import split_runs
from .config import AnalysisConfig
from .pair_analysis import PairInteraction

TrajectoryType = Literal["tracking", "steady", "converging", "diverging"]


@dataclass(frozen=True)
class RelativeTrajectory:
    type: TrajectoryType
    interval: Tuple[float, float]
    # 1 - std of the normalized gap over the interval
    degree: float
    mean_gap: float

    @property
    def width(self) -> float:
        return self.interval[1] - self.interval[0]


def _classify(angle: float, mean_gap: float, config: AnalysisConfig) -> TrajectoryType:
    if abs(angle) <= config.stable_angle_deg:
        return "tracking" if mean_gap <= config.max_tracking_gap else "steady"
    return "diverging" if angle > 0 else "converging"


def relative_trajectories(
    interaction: PairInteraction,
    y_range: float,
    config: AnalysisConfig,
) -> List[RelativeTrajectory]:
    xs, ys = interaction.difference_curve()
    if len(xs) < 2:
        return []
    span = y_range if y_range > 0 else 1.0
    width = xs[-1] - xs[0]
    x = np.asarray(xs, dtype=float)
    y = np.asarray(ys, dtype=float) / span

    tagged: List[Tuple[TrajectoryType, int, int]] = []
    for lo, hi in split_runs(xs, ys, y_span=span, tolerance=config.split_tolerance):
        dx = (x[hi] - x[lo]) / width
        dy = y[hi] - y[lo]
        angle = math.degrees(math.atan2(dy, dx))
        kind = _classify(angle, float(np.mean(y[lo:hi + 1])), config)
        if tagged and tagged[-1][0] == kind:
            tagged[-1] = (kind, tagged[-1][1], hi)
        else:
            tagged.append((kind, lo, hi))

    out: List[RelativeTrajectory] = []
    for kind, lo, hi in tagged:
        seg = y[lo:hi + 1]
        degree = min(max(1.0 - float(np.std(seg)), 0.0), 1.0)
        out.append(RelativeTrajectory(kind, (float(x[lo]), float(x[hi])), degree, float(np.mean(seg))))
    return out

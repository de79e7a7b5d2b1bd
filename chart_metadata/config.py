from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum


class AnalysisMode(str, Enum):
    # BASIC: geometry only (intersections, overlaps, parallels, pairs).
    # ENHANCED: additionally tracking groups/zones and spatial clusters.
    BASIC = "basic"
    ENHANCED = "enhanced"


@dataclass(frozen=True)
class AnalysisConfig:
    mode: AnalysisMode = AnalysisMode.ENHANCED

    # Slope angles (degrees) closer than this are functionally parallel.
    parallel_threshold_deg: float = 5.0

    # Tracking: minimum interval width as a fraction of the chart width,
    # and minimum closeness degree in [0, 1].
    min_tracking_size: float = 0.25
    closeness: float = 0.90

    # Difference-curve splitting and run classification (normalized units).
    split_tolerance: float = 0.05
    stable_angle_deg: float = 10.0
    max_tracking_gap: float = 0.10

    # Clustering.
    min_pts: int = 2
    min_eps_fraction: float = 0.1

    # Raise instead of warn when same-index points have different x values.
    strict_alignment: bool = False

    @property
    def enhanced(self) -> bool:
        return self.mode == AnalysisMode.ENHANCED

    def with_overrides(self, **kwargs) -> "AnalysisConfig":
        return replace(self, **kwargs)

from __future__ import annotations

import logging
from itertools import combinations
from typing import List, Optional, Sequence, Tuple

from .calibration import ChartCalibration
from .clusters import spatial_clusters
from .config import AnalysisConfig
from .data_model import Line
from .errors import ErrorCode, PairAnalysisError
from .model import (
    AnalysisResult,
    Intersection,
    Overlap,
    Pair,
    Parallel,
    TrackingGroup,
    TrackingZone,
)
from .pair_analysis import PairInteraction, analyze_pair
from .tracking import tracking_groups_and_zones

logger = logging.getLogger(__name__)


def validate_lines(lines: Sequence[Line], strict_alignment: bool = False) -> None:
    seen = set()
    for ln in lines:
        if ln.key is None:
            raise PairAnalysisError(ErrorCode.SERIES_WITHOUT_KEY)
        if ln.key in seen:
            raise PairAnalysisError(ErrorCode.DUPLICATE_KEY, ln.key)
        seen.add(ln.key)
        if len(ln) == 0:
            raise PairAnalysisError(ErrorCode.EMPTY_SERIES, ln.key)

    ref = lines[0]
    for ln in lines[1:]:
        if len(ln) != len(ref):
            raise PairAnalysisError(
                ErrorCode.NUM_POINTS_NOT_EQUAL, f"{ref.key}: {len(ref)}, {ln.key}: {len(ln)}"
            )
        # Same-index points are assumed to share an x value.
        if ln.xs != ref.xs:
            if strict_alignment:
                raise PairAnalysisError(ErrorCode.X_NOT_ALIGNED, f"{ref.key} / {ln.key}")
            logger.warning("series %s and %s have different x values at the same index", ref.key, ln.key)


def analyze_lines(
    lines: Sequence[Line],
    screen_size: Tuple[float, float] = (1.0, 1.0),
    y_min: Optional[float] = None,
    y_max: Optional[float] = None,
    config: Optional[AnalysisConfig] = None,
) -> AnalysisResult:
    config = config or AnalysisConfig()
    if not lines:
        raise ValueError("At least one series is required.")
    validate_lines(lines, config.strict_alignment)
    calib = ChartCalibration.from_lines(lines, screen_size, y_min, y_max)
    result = AnalysisResult(mode=config.mode, y_scale=calib.y_scale)

    # Nothing to relate with a single series.
    if len(lines) == 1:
        return result

    interactions: List[PairInteraction] = []
    for line_a, line_b in combinations(lines, 2):
        pa = analyze_pair(line_a, line_b, calib.y_scale, config.parallel_threshold_deg)
        result.intersections.extend(pa.intersections)
        result.overlaps.extend(pa.overlaps)
        result.parallels.extend(pa.parallels)
        result.pairs.append(pa.pair)
        interactions.append(pa.interaction)

    if config.enhanced:
        groups, zones = tracking_groups_and_zones(lines, interactions, config)
        result.tracking_groups.extend(groups)
        result.tracking_zones.extend(zones)
        result.clusters = spatial_clusters(lines, config.min_pts, config.min_eps_fraction)

    logger.debug(
        "analyzed %d series (%s): %d intersections, %d overlaps, %d parallels",
        len(lines), config.mode.value, len(result.intersections),
        len(result.overlaps), len(result.parallels),
    )
    return result


class SeriesPairAnalyzer:
    """
    Metadata on how the series of one chart relate to each other.

    `screen_size` is the (width, height) of the plot area; only the ratio is
    used. y-axis bounds default to [0, max y over all series].
    """

    def __init__(
        self,
        lines: Sequence[Line],
        screen_size: Tuple[float, float] = (1.0, 1.0),
        y_min: Optional[float] = None,
        y_max: Optional[float] = None,
        config: Optional[AnalysisConfig] = None,
    ):
        self.result = analyze_lines(lines, screen_size, y_min, y_max, config)

    @property
    def y_scale(self) -> float:
        return self.result.y_scale

    def get_intersections(self) -> List[Intersection]:
        return self.result.intersections

    def get_overlaps(self) -> List[Overlap]:
        return self.result.overlaps

    def get_parallels(self) -> List[Parallel]:
        return self.result.parallels

    def get_pairs(self) -> List[Pair]:
        return self.result.pairs

    def get_tracking_groups(self) -> List[TrackingGroup]:
        return self.result.tracking_groups

    def get_tracking_zones(self) -> List[TrackingZone]:
        return self.result.tracking_zones

    def get_clusters(self) -> List[List[str]]:
        return [list(c) for c in self.result.clusters.clusters]

    def get_cluster_outliers(self) -> List[str]:
        return list(self.result.clusters.noise)

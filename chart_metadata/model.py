from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional, Tuple

from .config import AnalysisMode

SeriesPair = Tuple[str, str]
ParallelDirection = Literal["converge", "diverge"]
ParallelKind = Literal["perfect", "functional"]
TransverseKind = Literal["cross", "touch", "edge"]


@dataclass(frozen=True)
class AngleDetails:
    # Key of the higher line on the side away from the meeting point (None if level).
    top: Optional[str]
    angle: float
    slopes: Dict[str, float]


@dataclass(frozen=True)
class Transversality:
    kind: TransverseKind
    # kind == "cross"
    top_to_bottom: Optional[str] = None
    bottom_to_top: Optional[str] = None
    # kind in ("touch", "edge")
    top: Optional[str] = None
    bottom: Optional[str] = None


@dataclass(frozen=True)
class RecordLocation:
    # Exact record label when the crossing is on a record, else the bracketing labels.
    label: Optional[str] = None
    before: Optional[str] = None
    after: Optional[str] = None


@dataclass(frozen=True)
class Intersection:
    record: RecordLocation
    value: float
    series: SeriesPair
    incoming_angle: Optional[AngleDetails]
    outgoing_angle: Optional[AngleDetails]
    transversality: Transversality
    x: float = 0.0


@dataclass(frozen=True)
class Overlap:
    # (label, y) along the shared path; at least two entries.
    datapoints: Tuple[Tuple[str, float], ...]
    series: SeriesPair
    incoming_angle: Optional[AngleDetails]
    outgoing_angle: Optional[AngleDetails]


@dataclass(frozen=True)
class Parallel:
    records: Tuple[str, ...]
    series: SeriesPair
    incoming_direction: Optional[ParallelDirection]
    outgoing_direction: Optional[ParallelDirection]
    kind: ParallelKind = "perfect"


@dataclass(frozen=True)
class Pair:
    series: SeriesPair
    dominant: Optional[str]
    dominant_percent: float
    parallel_percent: float
    average_gap: float = 0.0


@dataclass(frozen=True)
class TrackingGroup:
    keys: Tuple[str, ...]
    outliers: Tuple[str, ...]
    interval: Tuple[float, float]
    average_line: Tuple[Tuple[float, float], ...]


@dataclass(frozen=True)
class TrackingZone:
    interval: Tuple[float, float]
    groups: Tuple[TrackingGroup, ...] = ()


@dataclass(frozen=True)
class ClusterAssignment:
    clusters: Tuple[Tuple[str, ...], ...] = ()
    noise: Tuple[str, ...] = ()


@dataclass
class AnalysisResult:
    mode: AnalysisMode
    y_scale: float
    intersections: List[Intersection] = field(default_factory=list)
    overlaps: List[Overlap] = field(default_factory=list)
    parallels: List[Parallel] = field(default_factory=list)
    pairs: List[Pair] = field(default_factory=list)
    # Empty unless mode is ENHANCED.
    tracking_groups: List[TrackingGroup] = field(default_factory=list)
    tracking_zones: List[TrackingZone] = field(default_factory=list)
    clusters: ClusterAssignment = field(default_factory=ClusterAssignment)

"""
Segment geometry kernel.

Classifies the relationship between segment i of line A and segment i of
line B. Intersections are found with the vector cross-product formulation

    p + t*r == q + u*s,   t = ((q - p) x s) / (r x s),   u = ((q - p) x r) / (r x s)

where p, q are the segment start points and r, s their direction vectors.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .data_model import Point, Segment
from .errors import ErrorCode, PairAnalysisError

PARALLEL_THRESHOLD_DEG = 5.0


class SegRelationship(str, Enum):
    INTERSECTION = "intersection"
    DISJOINT = "disjoint"
    OVERLAP = "overlap"
    PARALLEL = "parallel"
    FUNCTIONALLY_PARALLEL = "functionally_parallel"

    @property
    def is_parallel(self) -> bool:
        return self in (SegRelationship.PARALLEL, SegRelationship.FUNCTIONALLY_PARALLEL)


@dataclass(frozen=True)
class IntersectionProperties:
    crosspoint: Point
    # Swept angle between the two segments, degrees.
    angle: float
    # True when the crossing sits exactly on a record.
    at_record: bool


@dataclass(frozen=True)
class SegPairProperties:
    i: int
    seg_a: Segment
    seg_b: Segment
    relationship: SegRelationship
    # Slopes scaled by y_scale (run is one record).
    slope_a: float
    slope_b: float
    intersection: Optional[IntersectionProperties] = None

    @property
    def segs(self) -> Tuple[Segment, Segment]:
        return self.seg_a, self.seg_b

    @property
    def angle(self) -> float:
        if self.intersection is not None:
            return self.intersection.angle
        return find_angle(self.slope_a, self.slope_b)

    def crosses_at_start(self) -> bool:
        isect = self.intersection
        return isect is not None and isect.at_record and isect.crosspoint.x == self.seg_a.start.x

    def crosses_at_end(self) -> bool:
        isect = self.intersection
        return isect is not None and isect.at_record and isect.crosspoint.x == self.seg_a.end.x


def slope_to_angle(slope: float) -> float:
    return math.degrees(math.atan(slope))


def find_slope(seg: Segment, y_scale: float) -> float:
    # run is always one record
    if seg.end.x <= seg.start.x:
        raise PairAnalysisError(ErrorCode.SEGMENT_ORDER, f"segment {seg.i}: x {seg.start.x} -> {seg.end.x}")
    rise = seg.end.y - seg.start.y
    scaled_rise = rise * y_scale
    if scaled_rise == 0:
        return 0.0
    return scaled_rise


def cross_product(p1: Point, p2: Point) -> float:
    return p1.x * p2.y - p1.y * p2.x


def _sub(p1: Point, p2: Point) -> Point:
    return Point(p1.x - p2.x, p1.y - p2.y)


def _add_rounded(p1: Point, p2: Point) -> Point:
    return Point(round(p1.x + p2.x, 3), round(p1.y + p2.y, 3))


def _slope_sign(slope: float) -> int:
    if slope > 0:
        return 1
    if slope < 0:
        return -1
    return 0


def line_intersection_angle(m1: float, m2: float) -> float:
    denom = 1 + m1 * m2
    if denom == 0:
        return 90.0
    return slope_to_angle(abs((m2 - m1) / denom))


def find_angle(m1: float, m2: float) -> float:
    """
    Angle actually swept between two crossing segments.

    For slopes of opposite sign the acute angle is only right while the
    positive slope stays below the perpendicular of the negative one;
    past it the segments open to 180 - acute.
    """
    acute = line_intersection_angle(m1, m2)
    s1, s2 = _slope_sign(m1), _slope_sign(m2)
    if s1 * s2 == -1:
        pos, neg = (m1, m2) if s1 > 0 else (m2, m1)
        if pos > -1.0 / neg:
            return 180.0 - acute
    return acute


def parallel_approximation(m1: float, m2: float, threshold_deg: float = PARALLEL_THRESHOLD_DEG) -> SegRelationship:
    a1 = slope_to_angle(m1)
    a2 = slope_to_angle(m2)
    if a1 == a2:
        return SegRelationship.PARALLEL
    if abs(a1 - a2) < threshold_deg:
        return SegRelationship.FUNCTIONALLY_PARALLEL
    return SegRelationship.DISJOINT


def check_intersection(
    seg_a: Segment,
    seg_b: Segment,
    y_scale: float,
    *,
    parallel_threshold_deg: float = PARALLEL_THRESHOLD_DEG,
) -> SegPairProperties:
    m1 = find_slope(seg_a, y_scale)
    m2 = find_slope(seg_b, y_scale)

    def props(rel: SegRelationship, isect: Optional[IntersectionProperties] = None) -> SegPairProperties:
        return SegPairProperties(seg_a.i, seg_a, seg_b, rel, m1, m2, isect)

    # Fast path 1: y-ranges don't overlap, no crossing possible
    if seg_a.y_max() < seg_b.y_min() or seg_a.y_min() > seg_b.y_max():
        return props(parallel_approximation(m1, m2, parallel_threshold_deg))

    # Fast path 2: shared start or end value
    start_eq = seg_a.start.y == seg_b.start.y
    end_eq = seg_a.end.y == seg_b.end.y
    if start_eq and end_eq:
        return props(SegRelationship.OVERLAP)
    if start_eq or end_eq:
        crosspoint = seg_a.start if start_eq else seg_a.end
        return props(
            SegRelationship.INTERSECTION,
            IntersectionProperties(crosspoint, find_angle(m1, m2), True),
        )

    # General case
    r = _sub(seg_a.end, seg_a.start)
    s = _sub(seg_b.end, seg_b.start)
    qp = _sub(seg_b.start, seg_a.start)
    denom = cross_product(r, s)
    u_num = cross_product(qp, r)
    if denom == 0:
        # Collinear segments with distinct endpoints cannot share an x-span,
        # so a zero denominator here is always a strict parallel.
        return props(SegRelationship.PARALLEL)

    t = cross_product(qp, s) / denom
    u = u_num / denom
    if 0 <= t <= 1 and 0 <= u <= 1:
        crosspoint = _add_rounded(Point(r.x * t, r.y * t), seg_a.start)
        return props(
            SegRelationship.INTERSECTION,
            IntersectionProperties(crosspoint, find_angle(m1, m2), False),
        )
    return props(parallel_approximation(m1, m2, parallel_threshold_deg))

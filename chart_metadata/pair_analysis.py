from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .data_model import Line, format_label
from .errors import ErrorCode, PairAnalysisError
from .geometry import PARALLEL_THRESHOLD_DEG, SegPairProperties, SegRelationship, check_intersection
from .model import (
    AngleDetails,
    Intersection,
    Overlap,
    Pair,
    Parallel,
    ParallelDirection,
    RecordLocation,
    SeriesPair,
    Transversality,
)

logger = logging.getLogger(__name__)


def _require_key(line: Line) -> str:
    if line.key is None:
        raise PairAnalysisError(ErrorCode.SERIES_WITHOUT_KEY)
    return line.key


class PairInteraction:
    """
    Segment-by-segment relationship between two equal-length lines.

    `props[i]` describes segment i of both lines. Dominance is measured in
    x units: how much of the domain each line spends strictly above the other.
    """

    def __init__(self, line_a: Line, line_b: Line, y_scale: float,
                 parallel_threshold_deg: float = PARALLEL_THRESHOLD_DEG):
        if len(line_a) != len(line_b):
            raise PairAnalysisError(
                ErrorCode.NUM_POINTS_NOT_EQUAL,
                f"{line_a.key}: {len(line_a)}, {line_b.key}: {len(line_b)}",
            )
        self.line_a = line_a
        self.line_b = line_b
        self.y_scale = y_scale
        self.props: List[SegPairProperties] = [
            check_intersection(sa, sb, y_scale, parallel_threshold_deg=parallel_threshold_deg)
            for sa, sb in zip(line_a.segments(), line_b.segments())
        ]
        self.a_on_top, self.b_on_top, self.shared = self._time_on_top()
        n = len(line_a)
        self.average_gap = sum(abs(pa.y - pb.y) for pa, pb in zip(line_a.points, line_b.points)) / n

    def _time_on_top(self) -> Tuple[float, float, float]:
        a_top = 0.0
        b_top = 0.0
        shared = 0.0
        for p in self.props:
            sa, sb = p.segs
            width = sa.end.x - sa.start.x
            if p.relationship == SegRelationship.OVERLAP:
                shared += width
            elif p.relationship == SegRelationship.INTERSECTION:
                isect = p.intersection
                if isect.at_record:
                    # The whole segment goes to whichever side is higher at the other end.
                    if p.crosses_at_start():
                        a_wins = sa.end.y > sb.end.y
                    else:
                        a_wins = sa.start.y > sb.start.y
                    if a_wins:
                        a_top += width
                    else:
                        b_top += width
                else:
                    left = isect.crosspoint.x - sa.start.x
                    right = sa.end.x - isect.crosspoint.x
                    if sa.start.y > sb.start.y:
                        a_top += left
                        b_top += right
                    else:
                        b_top += left
                        a_top += right
            elif sa.start.y > sb.start.y:
                a_top += width
            else:
                b_top += width
        return a_top, b_top, shared

    def a_percent(self) -> float:
        # overlapping stretches count half to each side
        total = self.a_on_top + self.b_on_top + self.shared
        if total == 0:
            return 50.0
        return (self.a_on_top + self.shared / 2) / total * 100

    def dominance(self) -> Tuple[Optional[int], float]:
        a_pct = self.a_percent()
        if math.isclose(a_pct, 50.0, abs_tol=1e-9):
            return None, 50.0
        if a_pct > 50.0:
            return 0, a_pct
        return 1, 100.0 - a_pct

    def parallel_segments(self) -> List[SegPairProperties]:
        return [p for p in self.props if p.relationship.is_parallel]

    def difference_curve(self) -> Tuple[List[float], List[float]]:
        # |A - B| per record plus a zero at each crossing between records
        xs: List[float] = []
        ys: List[float] = []
        for p in self.props:
            sa, sb = p.segs
            xs.append(sa.start.x)
            ys.append(abs(sa.start.y - sb.start.y))
            isect = p.intersection
            if (p.relationship == SegRelationship.INTERSECTION and not isect.at_record
                    and sa.start.x < isect.crosspoint.x < sa.end.x):
                xs.append(isect.crosspoint.x)
                ys.append(0.0)
        last_a = self.line_a.points[-1]
        last_b = self.line_b.points[-1]
        xs.append(last_a.x)
        ys.append(abs(last_a.y - last_b.y))
        return xs, ys


# --- helpers for record building ---

def _top_index(p: SegPairProperties, side: str) -> Optional[int]:
    ya = getattr(p.seg_a, side).y
    yb = getattr(p.seg_b, side).y
    if ya > yb:
        return 0
    if ya < yb:
        return 1
    return None


def _top(p: SegPairProperties, series: SeriesPair, side: str) -> Optional[str]:
    idx = _top_index(p, side)
    return None if idx is None else series[idx]


def _angle_details(p: SegPairProperties, series: SeriesPair, side: str) -> AngleDetails:
    return AngleDetails(
        top=_top(p, series, side),
        angle=p.angle,
        slopes={series[0]: p.slope_a, series[1]: p.slope_b},
    )


def _transversal(p: SegPairProperties, series: SeriesPair, edge: str) -> Transversality:
    if edge == "middle":
        top_idx = _top_index(p, "start")
        end_idx = _top_index(p, "end")
        kind = "touch" if top_idx == end_idx else "cross"
    else:
        kind = "edge"
        # the other end tells which series is on top
        top_idx = _top_index(p, "end" if edge == "start" else "start")
    bottom_idx = 1 - top_idx
    if kind == "cross":
        return Transversality(kind, top_to_bottom=series[top_idx], bottom_to_top=series[bottom_idx])
    return Transversality(kind, top=series[top_idx], bottom=series[bottom_idx])


def _transversal_on_record(left: SegPairProperties, right: SegPairProperties,
                           series: SeriesPair) -> Transversality:
    left_top = _top_index(left, "start")
    right_top = _top_index(right, "end")
    if left_top == right_top:
        return Transversality("touch", top=series[left_top], bottom=series[1 - left_top])
    return Transversality("cross", top_to_bottom=series[left_top], bottom_to_top=series[right_top])


def _direction(p: SegPairProperties, side: str) -> ParallelDirection:
    # Same rule on both sides of a run: gap at the edge touching the run
    # smaller than the gap at the far edge means "converge".
    start_gap = abs(p.seg_a.start.y - p.seg_b.start.y)
    end_gap = abs(p.seg_a.end.y - p.seg_b.end.y)
    near, far = (end_gap, start_gap) if side == "incoming" else (start_gap, end_gap)
    return "converge" if near < far else "diverge"


# --- scans ---

def collect_intersections(props: Sequence[SegPairProperties], series: SeriesPair) -> List[Intersection]:
    out: List[Intersection] = []
    n = len(props)
    consumed = set()
    for p in props:
        if p.relationship != SegRelationship.INTERSECTION or p.i in consumed:
            continue
        isect = p.intersection
        if isect.at_record:
            # Crossings on an overlap boundary belong to the overlap.
            if p.crosses_at_end() and p.i + 1 < n and props[p.i + 1].relationship == SegRelationship.OVERLAP:
                continue
            if p.crosses_at_start() and p.i > 0 and props[p.i - 1].relationship == SegRelationship.OVERLAP:
                continue
            record = RecordLocation(label=format_label(isect.crosspoint.x))
            if p.crosses_at_start() and p.i == 0:
                incoming = None
                outgoing = _angle_details(p, series, "end")
                trans = _transversal(p, series, "start")
            elif p.crosses_at_end() and p.i == n - 1:
                incoming = _angle_details(p, series, "start")
                outgoing = None
                trans = _transversal(p, series, "end")
            else:
                # A middle-record crossing shows up on both neighbouring
                # segments; report it once, incoming from the left segment
                # and outgoing from the right one.
                if p.crosses_at_end():
                    left, right = p, props[p.i + 1]
                    consumed.add(right.i)
                else:
                    left, right = props[p.i - 1], p
                incoming = _angle_details(left, series, "start")
                outgoing = AngleDetails(
                    top=_top(right, series, "end"),
                    angle=right.angle,
                    slopes={series[0]: right.slope_a, series[1]: right.slope_b},
                )
                trans = _transversal_on_record(left, right, series)
        else:
            record = RecordLocation(
                before=format_label(p.seg_a.start.x),
                after=format_label(p.seg_a.end.x),
            )
            incoming = _angle_details(p, series, "start")
            outgoing = _angle_details(p, series, "end")
            trans = _transversal(p, series, "middle")
        out.append(Intersection(
            record=record,
            value=isect.crosspoint.y,
            series=series,
            incoming_angle=incoming,
            outgoing_angle=outgoing,
            transversality=trans,
            x=isect.crosspoint.x,
        ))
    return out


def _runs(props: Sequence[SegPairProperties], member) -> List[List[SegPairProperties]]:
    runs: List[List[SegPairProperties]] = []
    cur: List[SegPairProperties] = []
    for p in props:
        if member(p):
            cur.append(p)
        elif cur:
            runs.append(cur)
            cur = []
    if cur:
        runs.append(cur)
    return runs


def collect_overlaps(props: Sequence[SegPairProperties], series: SeriesPair) -> List[Overlap]:
    out: List[Overlap] = []
    n = len(props)
    for run in _runs(props, lambda p: p.relationship == SegRelationship.OVERLAP):
        first, last = run[0], run[-1]
        start = first.seg_a.start
        datapoints = [(format_label(start.x), start.y)]
        datapoints.extend((format_label(p.seg_a.end.x), p.seg_a.end.y) for p in run)
        incoming = None if first.i == 0 else _angle_details(props[first.i - 1], series, "start")
        outgoing = None if last.i == n - 1 else _angle_details(props[last.i + 1], series, "end")
        out.append(Overlap(tuple(datapoints), series, incoming, outgoing))
    return out


def collect_parallels(props: Sequence[SegPairProperties], series: SeriesPair) -> List[Parallel]:
    out: List[Parallel] = []
    n = len(props)
    for run in _runs(props, lambda p: p.relationship.is_parallel):
        first, last = run[0], run[-1]
        records = [format_label(first.seg_a.start.x)]
        records.extend(format_label(p.seg_a.end.x) for p in run)
        functional = any(p.relationship == SegRelationship.FUNCTIONALLY_PARALLEL for p in run)
        out.append(Parallel(
            records=tuple(records),
            series=series,
            incoming_direction=None if first.i == 0 else _direction(props[first.i - 1], "incoming"),
            outgoing_direction=None if last.i == n - 1 else _direction(props[last.i + 1], "outgoing"),
            kind="functional" if functional else "perfect",
        ))
    return out


@dataclass(frozen=True)
class PairAnalysis:
    intersections: List[Intersection]
    overlaps: List[Overlap]
    parallels: List[Parallel]
    pair: Pair
    interaction: PairInteraction


def analyze_pair(line_a: Line, line_b: Line, y_scale: float,
                 parallel_threshold_deg: float = PARALLEL_THRESHOLD_DEG) -> PairAnalysis:
    series: SeriesPair = (_require_key(line_a), _require_key(line_b))
    interaction = PairInteraction(line_a, line_b, y_scale, parallel_threshold_deg)
    props = interaction.props

    dom_idx, dom_pct = interaction.dominance()
    n_par = len(interaction.parallel_segments())
    pair = Pair(
        series=series,
        dominant=None if dom_idx is None else series[dom_idx],
        dominant_percent=dom_pct,
        parallel_percent=(n_par / len(props) * 100) if props else 0.0,
        average_gap=interaction.average_gap,
    )
    result = PairAnalysis(
        intersections=collect_intersections(props, series),
        overlaps=collect_overlaps(props, series),
        parallels=collect_parallels(props, series),
        pair=pair,
        interaction=interaction,
    )
    logger.debug(
        "pair %s/%s: %d intersections, %d overlaps, %d parallels, dominant=%s (%.1f%%)",
        series[0], series[1], len(result.intersections), len(result.overlaps),
        len(result.parallels), pair.dominant, pair.dominant_percent,
    )
    return result

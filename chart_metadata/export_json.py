"""
Render analysis results as plain dicts in the schema consumers expect
(camelCase keys, angle maps nested by both series keys, string intervals).
"""
from __future__ import annotations

import json
from typing import Any, Dict, Optional

from .data_model import format_label
from .model import (
    AnalysisResult,
    AngleDetails,
    Intersection,
    Overlap,
    Pair,
    Parallel,
    SeriesPair,
    TrackingGroup,
    TrackingZone,
    Transversality,
)


def angle_to_dict(angle: Optional[AngleDetails], series: SeriesPair) -> Optional[Dict[str, Any]]:
    if angle is None:
        return None
    details = {"top": angle.top, "angle": angle.angle, "slope": dict(angle.slopes)}
    a, b = series
    return {a: {b: details}, b: {a: details}}


def transversality_to_dict(t: Transversality) -> Dict[str, Any]:
    if t.kind == "cross":
        return {"kind": t.kind, "topToBottom": t.top_to_bottom, "bottomToTop": t.bottom_to_top}
    return {"kind": t.kind, "top": t.top, "bottom": t.bottom}


def intersection_to_dict(i: Intersection) -> Dict[str, Any]:
    return {
        "record": {"label": i.record.label, "before": i.record.before, "after": i.record.after},
        "value": i.value,
        "series": list(i.series),
        "incomingAngle": angle_to_dict(i.incoming_angle, i.series),
        "outgoingAngle": angle_to_dict(i.outgoing_angle, i.series),
        "transversality": transversality_to_dict(i.transversality),
    }


def overlap_to_dict(o: Overlap) -> Dict[str, Any]:
    return {
        "datapoints": [[label, y] for label, y in o.datapoints],
        "series": list(o.series),
        "incomingAngle": angle_to_dict(o.incoming_angle, o.series),
        "outgoingAngle": angle_to_dict(o.outgoing_angle, o.series),
    }


def parallel_to_dict(p: Parallel) -> Dict[str, Any]:
    return {
        "records": [{"label": label} for label in p.records],
        "series": list(p.series),
        "incomingDirection": p.incoming_direction,
        "outgoingDirection": p.outgoing_direction,
        "kind": p.kind,
    }


def pair_to_dict(p: Pair) -> Dict[str, Any]:
    return {
        "series": list(p.series),
        "dominant": p.dominant,
        "dominantPercent": p.dominant_percent,
        "parallelPercent": p.parallel_percent,
        "averageGap": p.average_gap,
    }


def tracking_group_to_dict(g: TrackingGroup) -> Dict[str, Any]:
    return {
        "keys": list(g.keys),
        "outliers": list(g.outliers),
        "interval": [format_label(g.interval[0]), format_label(g.interval[1])],
        "averageLine": [[x, y] for x, y in g.average_line],
    }


def tracking_zone_to_dict(z: TrackingZone) -> Dict[str, Any]:
    return {
        "groups": [tracking_group_to_dict(g) for g in z.groups],
        "interval": [format_label(z.interval[0]), format_label(z.interval[1])],
    }


def result_to_dict(result: AnalysisResult) -> Dict[str, Any]:
    return {
        "mode": result.mode.value,
        "intersections": [intersection_to_dict(i) for i in result.intersections],
        "overlaps": [overlap_to_dict(o) for o in result.overlaps],
        "parallels": [parallel_to_dict(p) for p in result.parallels],
        "pairs": [pair_to_dict(p) for p in result.pairs],
        "trackingGroups": [tracking_group_to_dict(g) for g in result.tracking_groups],
        "trackingZones": [tracking_zone_to_dict(z) for z in result.tracking_zones],
        "clusters": [list(c) for c in result.clusters.clusters],
        "clusterOutliers": list(result.clusters.noise),
    }


def result_to_json(result: AnalysisResult, indent: Optional[int] = 2) -> str:
    return json.dumps(result_to_dict(result), indent=indent)

"""
Tracking groups and tracking zones.

Strictly, "tracks" is not transitive: tracking(A, B) and tracking(B, C) do not
imply tracking(A, C). Groups are nevertheless built as if it were, which
loosens the definition a little (closeness still applies pairwise) and keeps
the set of groups presented to the reader small.

Groups are normalized to a fixpoint by two operations:

    supplete - a group whose interval encloses (or equals) another's and
               shares a key with it lends it all its keys
    merge    - two groups with equal key sets and overlapping or abutting
               intervals become one group over the union interval
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

import numpy as np

from .config import AnalysisConfig
from .data_model import Line
from .model import TrackingGroup, TrackingZone
from .pair_analysis import PairInteraction
from .trajectory import relative_trajectories

logger = logging.getLogger(__name__)

Interval = Tuple[float, float]


@dataclass(frozen=True)
class TrackingPair:
    keys: Tuple[str, str]
    interval: Interval


@dataclass
class GroupRecord:
    keys: Set[str]
    interval: Interval

    @property
    def start(self) -> float:
        return self.interval[0]

    @property
    def end(self) -> float:
        return self.interval[1]

    @property
    def width(self) -> float:
        return self.interval[1] - self.interval[0]

    def encloses(self, other: "GroupRecord") -> bool:
        return self.start <= other.start and self.end >= other.end

    def touches(self, other: "GroupRecord") -> bool:
        # overlapping or abutting
        return self.start <= other.end and other.start <= self.end

    def supplete(self, other: "GroupRecord") -> bool:
        if not (self.keys & other.keys):
            return False
        missing = self.keys - other.keys
        other.keys |= missing
        return bool(missing)

    def copy(self, interval: Optional[Interval] = None) -> "GroupRecord":
        return GroupRecord(set(self.keys), self.interval if interval is None else interval)


def find_tracking_pairs(
    interactions: Iterable[PairInteraction],
    y_range: float,
    domain_width: float,
    config: AnalysisConfig,
) -> List[TrackingPair]:
    pairs: List[TrackingPair] = []
    min_width = domain_width * config.min_tracking_size
    for inter in interactions:
        keys = (inter.line_a.key, inter.line_b.key)
        for rt in relative_trajectories(inter, y_range, config):
            if rt.type == "tracking" and rt.width >= min_width and rt.degree >= config.closeness:
                pairs.append(TrackingPair(keys, rt.interval))
    return pairs


def groups_from_pairs(pairs: Sequence[TrackingPair]) -> List[GroupRecord]:
    by_interval: Dict[Interval, List[Tuple[str, str]]] = {}
    for tp in pairs:
        by_interval.setdefault(tp.interval, []).append(tp.keys)

    groups: List[GroupRecord] = []
    for interval, key_pairs in by_interval.items():
        parent: Dict[str, str] = {}

        def find(k: str) -> str:
            while parent[k] != k:
                parent[k] = parent[parent[k]]
                k = parent[k]
            return k

        order: List[str] = []
        for a, b in key_pairs:
            for k in (a, b):
                if k not in parent:
                    parent[k] = k
                    order.append(k)
            ra, rb = find(a), find(b)
            if ra != rb:
                parent[rb] = ra

        sets: Dict[str, Set[str]] = {}
        for k in order:
            sets.setdefault(find(k), set()).add(k)
        for keys in sets.values():
            groups.append(GroupRecord(keys, interval))
    return groups


def supplete_groups(groups: List[GroupRecord]) -> bool:
    # sorts in place, widest first
    changed = False
    groups.sort(key=lambda g: -g.width)
    for i, gi in enumerate(groups):
        for gj in groups[i + 1:]:
            if not gi.encloses(gj):
                continue
            if gi.width == gj.width:
                grew_j = gi.supplete(gj)
                grew_i = gj.supplete(gi)
                changed = changed or grew_j or grew_i
            elif gi.supplete(gj):
                changed = True
    return changed


def merge_groups(groups: Sequence[GroupRecord]) -> List[GroupRecord]:
    groups = list(groups)
    while True:
        found = None
        for i, gi in enumerate(groups):
            for j in range(i + 1, len(groups)):
                gj = groups[j]
                if gi.keys == gj.keys and gi.touches(gj):
                    found = (i, j)
                    break
            if found:
                break
        if found is None:
            return groups
        i, j = found
        gi, gj = groups[i], groups[j]
        merged = GroupRecord(set(gi.keys), (min(gi.start, gj.start), max(gi.end, gj.end)))
        groups = [g for k, g in enumerate(groups) if k not in found] + [merged]


def normalize_groups(groups: Sequence[GroupRecord]) -> List[GroupRecord]:
    groups = list(groups)
    supplete_groups(groups)
    while True:
        groups = merge_groups(groups)
        if not supplete_groups(groups):
            break
    groups.sort(key=lambda g: (g.start, g.end, sorted(g.keys)))
    return groups


def build_zones(groups: Sequence[GroupRecord], domain: Interval) -> List[Tuple[Interval, List[GroupRecord]]]:
    x0, x1 = domain
    breaks = {b for g in groups for b in g.interval} - {x0, x1}
    edges = [x0] + sorted(breaks) + [x1]
    zones: List[Tuple[Interval, List[GroupRecord]]] = []
    for start, end in zip(edges, edges[1:]):
        zone = (start, end)
        members = [g.copy(zone) for g in groups if g.start <= start and g.end >= end]
        zones.append((zone, normalize_groups(members)))
    return zones


# --- freezing into output records ---

def average_line(lines: Sequence[Line], interval: Interval) -> Tuple[Tuple[float, float], ...]:
    sections = [ln.section(*interval) for ln in lines]
    xs = [p.x for p in sections[0]]
    ys = np.mean(np.array([[p.y for p in sec] for sec in sections], dtype=float), axis=0)
    return tuple((float(x), float(y)) for x, y in zip(xs, ys))


def freeze_group(group: GroupRecord, lines: Sequence[Line]) -> TrackingGroup:
    members = [ln for ln in lines if ln.key in group.keys]
    outliers = sorted(ln.key for ln in lines if ln.key not in group.keys)
    return TrackingGroup(
        keys=tuple(ln.key for ln in members),
        outliers=tuple(outliers),
        interval=group.interval,
        average_line=average_line(members, group.interval),
    )


def tracking_groups_and_zones(
    lines: Sequence[Line],
    interactions: Sequence[PairInteraction],
    config: AnalysisConfig,
) -> Tuple[List[TrackingGroup], List[TrackingZone]]:
    y_lo = min(ln.y_bounds()[0] for ln in lines)
    y_hi = max(ln.y_bounds()[1] for ln in lines)
    domain = (lines[0].points[0].x, lines[0].points[-1].x)

    pairs = find_tracking_pairs(interactions, y_hi - y_lo, domain[1] - domain[0], config)
    groups = normalize_groups(groups_from_pairs(pairs))
    zones = build_zones(groups, domain)
    logger.debug("%d tracking pairs -> %d groups, %d zones", len(pairs), len(groups), len(zones))

    frozen_groups = [freeze_group(g, lines) for g in groups]
    frozen_zones = [
        TrackingZone(interval=zone, groups=tuple(freeze_group(g, lines) for g in members))
        for zone, members in zones
    ]
    return frozen_groups, frozen_zones

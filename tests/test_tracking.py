import pytest

from chart_metadata.config import AnalysisConfig
from chart_metadata.data_model import Line
from chart_metadata.pair_analysis import PairInteraction
from chart_metadata.tracking import (
    GroupRecord,
    TrackingPair,
    average_line,
    build_zones,
    find_tracking_pairs,
    groups_from_pairs,
    merge_groups,
    normalize_groups,
    supplete_groups,
    tracking_groups_and_zones,
)


def interactions(lines):
    out = []
    for i, a in enumerate(lines):
        for b in lines[i + 1:]:
            out.append(PairInteraction(a, b, 1.0))
    return out


def snapshot(groups):
    return [(frozenset(g.keys), g.interval) for g in groups]


def test_groups_from_pairs_joins_connected_keys():
    pairs = [
        TrackingPair(("A", "B"), (0.0, 4.0)),
        TrackingPair(("B", "C"), (0.0, 4.0)),
        TrackingPair(("D", "E"), (0.0, 4.0)),
        TrackingPair(("A", "D"), (1.0, 3.0)),
    ]
    groups = groups_from_pairs(pairs)
    assert sorted(snapshot(groups), key=lambda s: (s[1], sorted(s[0]))) == [
        (frozenset("ABC"), (0.0, 4.0)),
        (frozenset("DE"), (0.0, 4.0)),
        (frozenset("AD"), (1.0, 3.0)),
    ]


def test_supplete_lends_keys_to_enclosed_group():
    wide = GroupRecord({"A", "B"}, (0.0, 4.0))
    narrow = GroupRecord({"B", "C"}, (1.0, 3.0))
    groups = [narrow, wide]
    assert supplete_groups(groups) is True
    assert narrow.keys == {"A", "B", "C"}
    assert wide.keys == {"A", "B"}
    assert supplete_groups(groups) is False


def test_supplete_needs_a_shared_key():
    wide = GroupRecord({"A", "B"}, (0.0, 4.0))
    narrow = GroupRecord({"C", "D"}, (1.0, 3.0))
    assert supplete_groups([wide, narrow]) is False
    assert narrow.keys == {"C", "D"}


def test_equal_intervals_supplete_both_ways():
    g1 = GroupRecord({"A", "B"}, (0.0, 2.0))
    g2 = GroupRecord({"B", "C"}, (0.0, 2.0))
    supplete_groups([g1, g2])
    assert g1.keys == g2.keys == {"A", "B", "C"}


def test_merge_overlapping_and_abutting_groups():
    merged = merge_groups([
        GroupRecord({"A", "B"}, (0.0, 2.0)),
        GroupRecord({"A", "B"}, (2.0, 3.0)),
        GroupRecord({"A", "B"}, (2.5, 5.0)),
    ])
    assert snapshot(merged) == [(frozenset("AB"), (0.0, 5.0))]


def test_merge_keeps_separate_intervals_and_key_sets():
    merged = merge_groups([
        GroupRecord({"A", "B"}, (0.0, 1.0)),
        GroupRecord({"A", "B"}, (2.0, 3.0)),
        GroupRecord({"A", "C"}, (0.5, 2.5)),
    ])
    assert len(merged) == 3


def test_normalize_reaches_a_fixpoint():
    groups = [
        GroupRecord({"A", "B"}, (0.0, 4.0)),
        GroupRecord({"B", "C"}, (1.0, 2.0)),
        GroupRecord({"A", "B", "C"}, (2.0, 3.0)),
        GroupRecord({"D", "E"}, (3.0, 6.0)),
        GroupRecord({"D", "E"}, (5.0, 8.0)),
    ]
    once = normalize_groups(groups)
    # ABC over 1..3 after supplete and merge; DE over 3..8
    assert snapshot(once) == [
        (frozenset("AB"), (0.0, 4.0)),
        (frozenset("ABC"), (1.0, 3.0)),
        (frozenset("DE"), (3.0, 8.0)),
    ]
    twice = normalize_groups([g.copy() for g in once])
    assert snapshot(twice) == snapshot(once)


def test_zones_partition_the_domain():
    groups = [
        GroupRecord({"A", "B"}, (0.0, 2.0)),
        GroupRecord({"C", "D"}, (1.0, 4.0)),
    ]
    zones = build_zones(groups, (0.0, 4.0))
    assert [z for z, _ in zones] == [(0.0, 1.0), (1.0, 2.0), (2.0, 4.0)]
    assert [snapshot(members) for _, members in zones] == [
        [(frozenset("AB"), (0.0, 1.0))],
        [(frozenset("AB"), (1.0, 2.0)), (frozenset("CD"), (1.0, 2.0))],
        [(frozenset("CD"), (2.0, 4.0))],
    ]
    # zone groups are copies
    assert groups[0].interval == (0.0, 2.0)


def test_zone_coverage_without_gaps():
    groups = [
        GroupRecord({"A", "B"}, (1.5, 2.5)),
        GroupRecord({"B", "C"}, (10.0, 12.0)),
        GroupRecord({"A", "C"}, (3.0, 11.0)),
    ]
    zones = build_zones(groups, (0.0, 20.0))
    intervals = [z for z, _ in zones]
    assert intervals[0][0] == 0.0
    assert intervals[-1][1] == 20.0
    for (s1, e1), (s2, e2) in zip(intervals, intervals[1:]):
        assert e1 == s2
        assert s1 < e1
    assert zones[0][1] == []


def test_no_groups_gives_one_empty_zone():
    assert build_zones([], (0.0, 3.0)) == [((0.0, 3.0), [])]


def test_average_line_interpolates_interval_ends():
    a = Line.from_values([0, 2, 4], "A")
    b = Line.from_values([2, 4, 6], "B")
    avg = average_line([a, b], (0.5, 2.0))
    assert avg == ((0.5, pytest.approx(2.0)), (1.0, pytest.approx(3.0)), (2.0, pytest.approx(5.0)))


def test_close_series_form_one_group_and_zone():
    a = Line.from_values([0, 10, 20, 30], "A")
    b = Line.from_values([0.2, 10.2, 20.2, 30.2], "B")
    groups, zones = tracking_groups_and_zones([a, b], interactions([a, b]), AnalysisConfig())
    assert len(groups) == 1
    g = groups[0]
    assert g.keys == ("A", "B")
    assert g.outliers == ()
    assert g.interval == (0.0, 3.0)
    assert [x for x, _ in g.average_line] == [0.0, 1.0, 2.0, 3.0]
    assert g.average_line[1][1] == pytest.approx(10.1)
    assert len(zones) == 1
    assert zones[0].interval == (0.0, 3.0)
    assert zones[0].groups == (g,)


def test_far_series_is_an_outlier():
    lines = [Line.from_values([10] * 5, "A"), Line.from_values([11] * 5, "B"), Line.from_values([50] * 5, "C")]
    groups, zones = tracking_groups_and_zones(lines, interactions(lines), AnalysisConfig())
    assert [(g.keys, g.outliers) for g in groups] == [(("A", "B"), ("C",))]
    assert [z.interval for z in zones] == [(0.0, 4.0)]


def test_short_tracking_stretch_is_ignored():
    lines = [Line.from_values([10] * 5, "A"), Line.from_values([11] * 5, "B"), Line.from_values([50] * 5, "C")]
    config = AnalysisConfig(min_tracking_size=1.5)
    assert find_tracking_pairs(interactions(lines), 40.0, 4.0, config) == []
    groups, zones = tracking_groups_and_zones(lines, interactions(lines), config)
    assert groups == []
    assert [(z.interval, z.groups) for z in zones] == [((0.0, 4.0), ())]

import pytest

from chart_metadata.breaks import chord_deviations, find_split_index, split_runs


def test_chord_deviations():
    dev = chord_deviations([0, 1, 2, 3, 4], [10, 2, 1, 0.5, 0])
    assert list(dev) == pytest.approx([0.0, 5.5, 4.0, 2.0, 0.0])


def test_split_index_is_the_knee():
    assert find_split_index([10, 2, 1, 0.5, 0]) == 1
    assert find_split_index([10, 9.5, 9, 1, 0]) == 2


def test_split_index_uses_given_x():
    assert find_split_index([0, 5, 5, 10], xs=[0, 2.5, 2.8, 3]) == 2


def test_split_index_short_inputs():
    assert find_split_index([5.0]) == 0
    assert find_split_index([3.0, 1.0]) == 1
    with pytest.raises(ValueError):
        find_split_index([])


def test_split_index_ties_go_first():
    assert find_split_index([1, 1, 1, 1]) == 1
    # deviations 5/3 at both interior points differ only by rounding
    assert find_split_index([0, 5, 5, 10]) == 1


def test_straight_curve_is_one_run():
    assert split_runs([0, 1, 2, 3], [0, 1, 2, 3], y_span=3) == [(0, 3)]


def test_v_shape_splits_at_the_bottom():
    runs = split_runs([0, 1, 2, 3, 4], [4, 2, 0, 2, 4], y_span=4)
    assert runs == [(0, 2), (2, 4)]


def test_runs_share_boundaries_and_cover_the_curve():
    xs = list(range(9))
    ys = [0, 0, 0, 5, 10, 10, 10, 5, 0]
    runs = split_runs(xs, ys, y_span=10)
    assert runs[0][0] == 0
    assert runs[-1][1] == len(xs) - 1
    for (lo1, hi1), (lo2, hi2) in zip(runs, runs[1:]):
        assert hi1 == lo2
    assert len(runs) > 1


def test_small_wiggles_stay_within_tolerance():
    ys = [1.0, 1.02, 0.99, 1.01, 1.0]
    assert split_runs(list(range(5)), ys, y_span=10) == [(0, 4)]
    assert split_runs([0], [1], y_span=1) == []

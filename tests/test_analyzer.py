import logging

import pytest

from chart_metadata.analyzer import SeriesPairAnalyzer, analyze_lines
from chart_metadata.calibration import ChartCalibration
from chart_metadata.config import AnalysisConfig, AnalysisMode
from chart_metadata.data_model import Line, Point
from chart_metadata.errors import ErrorCode, PairAnalysisError


def chart():
    return [
        Line.from_values([10, 10.5, 11, 11.5, 12], "north"),
        Line.from_values([10.3, 10.8, 11.3, 11.8, 12.3], "south"),
        Line.from_values([50, 45, 40, 35, 30], "east"),
    ]


def test_y_scale_uses_records_range_and_aspect():
    lines = [Line.from_values([0, 2, 10, 4, 1], "a")]
    assert SeriesPairAnalyzer(lines, screen_size=(2, 1)).y_scale == pytest.approx(0.8)
    assert SeriesPairAnalyzer(lines, y_min=0, y_max=20).y_scale == pytest.approx(0.2)


def test_flat_chart_uses_unit_span():
    calib = ChartCalibration(n_records=3, y_min=0.0, y_max=0.0)
    assert not calib.is_valid()
    assert calib.y_scale == pytest.approx(2.0)
    with pytest.raises(ValueError):
        ChartCalibration(3, 0.0, 1.0, screen_size=(1.0, 0.0)).screen_scale


def test_all_negative_series_keep_slope_signs():
    lines = [Line.from_values([-5, -1], "a"), Line.from_values([-1, -5], "b")]
    # default bounds are [0, -1]
    analyzer = SeriesPairAnalyzer(lines)
    assert analyzer.y_scale == pytest.approx(1.0)
    (isect,) = analyzer.get_intersections()
    assert isect.value == pytest.approx(-3.0)
    assert isect.incoming_angle.slopes == {"a": pytest.approx(4.0), "b": pytest.approx(-4.0)}


def test_enhanced_analysis():
    analyzer = SeriesPairAnalyzer(chart())
    pairs = analyzer.get_pairs()
    assert [p.series for p in pairs] == [("north", "south"), ("north", "east"), ("south", "east")]
    assert pairs[0].dominant == "south"
    assert pairs[0].dominant_percent == pytest.approx(100.0)

    assert len(analyzer.get_intersections()) == 0
    assert len(analyzer.get_tracking_groups()) == 1
    group = analyzer.get_tracking_groups()[0]
    assert group.keys == ("north", "south")
    assert group.outliers == ("east",)
    assert [z.interval for z in analyzer.get_tracking_zones()] == [(0.0, 4.0)]
    assert analyzer.get_clusters() == [["north", "south"]]
    assert analyzer.get_cluster_outliers() == ["east"]
    assert analyzer.result.mode == AnalysisMode.ENHANCED


def test_basic_analysis_leaves_enhanced_fields_empty():
    analyzer = SeriesPairAnalyzer(chart(), config=AnalysisConfig(mode=AnalysisMode.BASIC))
    assert len(analyzer.get_pairs()) == 3
    assert analyzer.get_tracking_groups() == []
    assert analyzer.get_tracking_zones() == []
    assert analyzer.get_clusters() == []
    assert analyzer.get_cluster_outliers() == []


def test_single_series_is_empty():
    result = analyze_lines([Line.from_values([1, 5, 2], "solo")])
    assert result.intersections == []
    assert result.overlaps == []
    assert result.parallels == []
    assert result.pairs == []
    assert result.tracking_groups == []
    assert result.tracking_zones == []
    assert result.clusters.clusters == ()
    assert result.clusters.noise == ()


def test_intersections_are_collected_over_all_pairs():
    lines = [
        Line.from_values([0, 10], "a"),
        Line.from_values([10, 0], "b"),
        Line.from_values([5, 5], "c"),
    ]
    result = analyze_lines(lines, config=AnalysisConfig(mode=AnalysisMode.BASIC))
    # every pair crosses at x=0.5
    assert len(result.intersections) == 3
    assert {i.series for i in result.intersections} == {("a", "b"), ("a", "c"), ("b", "c")}
    assert all(i.value == pytest.approx(5.0) for i in result.intersections)


@pytest.mark.parametrize("lines, code", [
    ([Line.from_values([1, 2], "a"), Line.from_values([1, 2])], ErrorCode.SERIES_WITHOUT_KEY),
    ([Line.from_values([1, 2], "a"), Line.from_values([3, 4], "a")], ErrorCode.DUPLICATE_KEY),
    ([Line.from_values([1, 2], "a"), Line((), "b")], ErrorCode.EMPTY_SERIES),
    ([Line.from_values([1, 2], "a"), Line.from_values([1, 2, 3], "b")], ErrorCode.NUM_POINTS_NOT_EQUAL),
])
def test_invalid_input(lines, code):
    with pytest.raises(PairAnalysisError) as exc:
        analyze_lines(lines)
    assert exc.value.code == code


def test_no_series():
    with pytest.raises(ValueError):
        analyze_lines([])


def misaligned():
    return [
        Line.from_values([1, 2, 3], "a"),
        Line((Point(0, 3), Point(1.5, 2), Point(2, 1)), "b"),
    ]


def test_misaligned_x_warns(caplog):
    with caplog.at_level(logging.WARNING, logger="chart_metadata.analyzer"):
        result = analyze_lines(misaligned())
    assert len(result.pairs) == 1
    assert "different x values" in caplog.text


def test_misaligned_x_strict():
    with pytest.raises(PairAnalysisError) as exc:
        analyze_lines(misaligned(), config=AnalysisConfig(strict_alignment=True))
    assert exc.value.code == ErrorCode.X_NOT_ALIGNED

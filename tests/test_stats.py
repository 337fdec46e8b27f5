import math

import pytest

from codetype import AggregateStats, LineStats, format_metric, human_duration, merge, round_half_away


def test_merge_adds_fields():
    total = AggregateStats()
    merge(total, LineStats(char_count=10, seconds=4.0, mistakes=1))
    merge(total, LineStats(char_count=20, seconds=6.0, mistakes=2))
    assert (total.char_count, total.seconds, total.mistakes, total.lines) == (30, 10.0, 3, 2)


def test_zero_stats_leave_totals_unchanged():
    total = AggregateStats(char_count=30, seconds=10.0, mistakes=3)
    before = (total.chars_per_minute, total.words_per_minute, total.accuracy)
    total.add(LineStats.zero())
    assert (total.char_count, total.seconds, total.mistakes) == (30, 10.0, 3)
    assert (total.chars_per_minute, total.words_per_minute, total.accuracy) == before


def test_speed_metrics():
    total = AggregateStats(char_count=110, seconds=60.0, mistakes=10)
    assert total.chars_per_minute == 100
    assert total.words_per_minute == 20


def test_chars_per_minute_rounds_half_up():
    # 62.5 chars/min -> 63, where Python's round() would give 62
    total = AggregateStats(char_count=125, seconds=120.0, mistakes=0)
    assert total.chars_per_minute == 63
    assert total.words_per_minute == 13


@pytest.mark.parametrize("mistakes, expected", [(0, 1), (4, 1), (5, 1), (6, 0), (10, 0)])
def test_accuracy_collapses_to_whole_number(mistakes, expected):
    assert AggregateStats(char_count=10, seconds=1.0, mistakes=mistakes).accuracy == expected


def test_empty_totals_give_non_finite_metrics():
    total = AggregateStats()
    total.add(LineStats.zero())
    assert math.isnan(total.chars_per_minute)
    assert math.isnan(total.words_per_minute)
    assert math.isnan(total.accuracy)


def test_zero_seconds_with_chars_is_infinite():
    total = AggregateStats(char_count=8, seconds=0.0, mistakes=0)
    assert total.chars_per_minute == math.inf
    assert total.accuracy == 1


@pytest.mark.parametrize("value, expected", [
    (0.5, 1), (1.5, 2), (2.49, 2), (-0.5, -1), (0.0, 0), (0.49999999999999994, 0), (-0.49999999999999994, 0),
])
def test_round_half_away(value, expected):
    assert round_half_away(value) == expected


def test_format_metric_handles_non_finite():
    assert format_metric(math.nan) == "-"
    assert format_metric(math.inf) == "-"
    assert format_metric(42.0, "%") == "42%"


def test_human_duration():
    assert human_duration(5.9) == "5s"
    assert human_duration(125) == "2m05s"
    assert human_duration(math.nan) == "-"

"""Tests for hour-aligned window planning."""

from datetime import datetime, timedelta, timezone

import pytest

from xray_archiver.dto import TimeWindow
from xray_archiver.pipeline.windowing import hour_floor, plan_windows


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


class TestHourFloor:
    """Tests for hour_floor."""

    def test_truncates_to_the_hour(self):
        assert hour_floor(utc(2019, 1, 19, 4, 20, 21, 999)) == utc(2019, 1, 19, 4)

    def test_converts_aware_instants_to_utc(self, now):
        assert hour_floor(now) == utc(2019, 1, 19, 4)

    def test_treats_naive_instants_as_utc(self):
        assert hour_floor(datetime(2019, 1, 19, 4, 59, 59)) == utc(2019, 1, 19, 4)

    def test_exact_hour_is_unchanged(self):
        assert hour_floor(utc(2019, 1, 19, 4)) == utc(2019, 1, 19, 4)


class TestPlanWindows:
    """Tests for plan_windows."""

    def test_three_windows_before_the_current_hour(self, now):
        windows = plan_windows(now, 3)
        assert windows == [
            TimeWindow(utc(2019, 1, 19, 3), utc(2019, 1, 19, 4)),
            TimeWindow(utc(2019, 1, 19, 2), utc(2019, 1, 19, 3)),
            TimeWindow(utc(2019, 1, 19, 1), utc(2019, 1, 19, 2)),
        ]

    @pytest.mark.parametrize("count", [1, 2, 5, 24, 49])
    def test_windows_are_hourly_decreasing_and_aligned(self, now, count):
        windows = plan_windows(now, count)
        assert len(windows) == count
        assert windows[0].end == hour_floor(now)
        for w in windows:
            assert w.end - w.start == timedelta(hours=1)
            assert (w.start.minute, w.start.second, w.start.microsecond) == (0, 0, 0)
        for newer, older in zip(windows, windows[1:]):
            assert older.end == newer.start

    def test_crosses_day_boundaries(self):
        windows = plan_windows(utc(2019, 1, 1, 0, 30), 2)
        assert windows[0].start == utc(2018, 12, 31, 23)
        assert windows[1].start == utc(2018, 12, 31, 22)

    @pytest.mark.parametrize("count", [0, -1])
    def test_rejects_non_positive_count(self, now, count):
        with pytest.raises(ValueError):
            plan_windows(now, count)

    def test_label(self):
        window = TimeWindow(utc(2019, 1, 19, 3), utc(2019, 1, 19, 4))
        assert window.label == "2019-01-19T03:00:00Z/P1H"

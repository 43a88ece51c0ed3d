import pytest

from monitoring.domain.eta import REACHED, WAITING_UPDATE, describe_remaining, format_eta
from monitoring.domain.rate import estimate_rate, instantaneous_rate, last_positive_rate
from monitoring.domain.snapshot import Snapshot, elapsed_seconds


def snap(moment, views):
    return Snapshot(captured_at=moment, views=views)


class TestElapsedSeconds:
    def test_equal_timestamps_clamp_to_one_second(self, t0):
        assert elapsed_seconds(snap(t0, 100), snap(t0, 200)) == 1.0

    def test_equal_timestamps_rate_is_finite(self, t0):
        assert instantaneous_rate([snap(t0, 100), snap(t0, 160)]) == 60.0

    def test_naive_timestamps_are_treated_as_utc(self, t0):
        naive = t0.replace(tzinfo=None)
        assert elapsed_seconds(snap(naive, 0), snap(t0.replace(minute=1), 0)) == 60.0


class TestRateEstimator:
    def test_needs_two_snapshots(self, t0):
        assert instantaneous_rate([]) == 0.0
        assert instantaneous_rate([snap(t0, 100)]) == 0.0

    def test_drop_is_clamped_to_zero(self, at):
        rows = [snap(at(seconds=0), 100), snap(at(seconds=10), 90)]
        assert instantaneous_rate(rows) == 0.0
        assert estimate_rate(rows) == 0.0

    def test_flat_tail_falls_back_to_last_positive_pair(self, at):
        rows = [snap(at(seconds=0), 100), snap(at(seconds=10), 150), snap(at(seconds=20), 150)]
        assert instantaneous_rate(rows) == 0.0
        assert estimate_rate(rows) == pytest.approx(5.0)

    def test_positive_instantaneous_rate_wins(self, at):
        rows = [snap(at(seconds=0), 0), snap(at(seconds=10), 1000), snap(at(seconds=20), 1010)]
        assert estimate_rate(rows) == pytest.approx(1.0)

    def test_last_positive_rate_scans_backwards(self, at):
        rows = [
            snap(at(seconds=0), 0),
            snap(at(seconds=10), 100),
            snap(at(seconds=20), 300),
            snap(at(seconds=30), 250),
        ]
        assert last_positive_rate(rows) == pytest.approx(20.0)

    def test_missing_values_count_as_zero(self, at):
        rows = [Snapshot(captured_at=at(seconds=0)), snap(at(seconds=5), 50)]
        assert instantaneous_rate(rows) == pytest.approx(10.0)

    def test_other_fields(self, at):
        rows = [
            Snapshot(captured_at=at(seconds=0), likes=10),
            Snapshot(captured_at=at(seconds=10), likes=30),
        ]
        assert instantaneous_rate(rows, field="likes") == pytest.approx(2.0)


class TestEtaProjector:
    def test_hours(self):
        assert format_eta(3600, 1) == "1.0h"

    def test_seconds(self):
        assert format_eta(30, 2) == "15s"

    def test_zero_rate_waits_for_update(self):
        assert format_eta(1000, 0) == WAITING_UPDATE
        assert format_eta(1000, -3) == WAITING_UPDATE

    def test_minutes_round_up(self):
        assert format_eta(61, 1) == "2m"
        assert format_eta(60, 1) == "1m"

    def test_days(self):
        assert format_eta(86400 * 3, 1) == "3.0d"

    def test_seconds_are_ceiled(self):
        assert format_eta(10, 3) == "4s"

    def test_reached_when_nothing_remaining(self):
        assert describe_remaining(0, 5) == REACHED
        assert describe_remaining(-10, 0) == REACHED
        assert describe_remaining(10, 0) == WAITING_UPDATE

import asyncio
import threading

import pytest

from config.settings import MonitorSettings
from monitoring.application.usecase.live_monitor import LiveMonitor
from monitoring.application.usecase.scheduler import VirtualClock
from monitoring.domain.dismissal_state import DISMISSAL_KEY
from monitoring.domain.milestone import Milestone
from monitoring.domain.snapshot import Snapshot
from tests.fakes import FakeMilestoneRepository, FakeSnapshotRepository, InMemoryStore


def make_monitor(clock, snapshots=None, milestones=None, store=None):
    return LiveMonitor(
        snapshot_repository=snapshots or FakeSnapshotRepository(),
        milestone_repository=milestones or FakeMilestoneRepository(),
        state_store=store or InMemoryStore(),
        settings=MonitorSettings(poll_seconds=5, tick_seconds=1, timezone="UTC"),
        clock=clock,
    )


class GatedSnapshotRepository(FakeSnapshotRepository):
    """First fetch blocks until released and returns stale rows."""

    def __init__(self, stale, fresh):
        super().__init__(fresh)
        self.stale = stale
        self.started = threading.Event()
        self.release = threading.Event()
        self._first = True
        self._lock = threading.Lock()

    def fetch_recent(self, limit: int = 6000):
        with self._lock:
            first, self._first = self._first, False
        if first:
            self.started.set()
            self.release.wait(timeout=5)
            return self.stale
        return super().fetch_recent(limit)


class TestLiveCounter:
    def test_display_views_advance_with_instantaneous_rate(self, at):
        rows = [Snapshot(captured_at=at(seconds=0), views=1000), Snapshot(captured_at=at(seconds=10), views=1100)]
        clock = VirtualClock(at(seconds=10))
        monitor = make_monitor(clock, snapshots=FakeSnapshotRepository(rows))

        assert asyncio.run(monitor.refresh())
        assert monitor.display_views == 1100

        monitor.tick(at(seconds=13))
        assert monitor.display_views == 1130

    def test_falls_back_to_milestone_current_count_without_snapshots(self, at):
        milestones = FakeMilestoneRepository([Milestone(id="m", title="m", target_count=1000, current_count=420)])
        monitor = make_monitor(VirtualClock(at()), milestones=milestones)

        asyncio.run(monitor.refresh_milestones())
        assert monitor.display_views == 420

    def test_milestones_are_kept_in_display_order(self, at):
        milestones = FakeMilestoneRepository(
            [
                Milestone(id="late", title="late", target_count=2000, created_at=at(minutes=5)),
                Milestone(id="early", title="early", target_count=1000, created_at=at()),
            ]
        )
        monitor = make_monitor(VirtualClock(at()), milestones=milestones)

        asyncio.run(monitor.refresh_milestones())
        assert [row.id for row in monitor.milestones] == ["early", "late"]

    def test_scheduler_drives_polls_and_ticks(self, at):
        repo = FakeSnapshotRepository(
            [Snapshot(captured_at=at(seconds=-10), views=0), Snapshot(captured_at=at(), views=100)]
        )
        clock = VirtualClock(at())
        monitor = make_monitor(clock, snapshots=repo)

        asyncio.run(monitor.scheduler.advance(5))
        assert repo.calls == 2
        assert monitor.display_views == 150


class TestRefreshFailures:
    def test_store_error_keeps_last_good_state(self, at):
        rows = [Snapshot(captured_at=at(), views=10)]
        repo = FakeSnapshotRepository(rows)
        monitor = make_monitor(VirtualClock(at()), snapshots=repo)

        asyncio.run(monitor.refresh())
        repo.fail = "database unavailable"
        assert not asyncio.run(monitor.refresh())

        assert monitor.error == "database unavailable"
        assert monitor.snapshots == rows
        assert monitor.live_view()["error"] == "database unavailable"

        repo.fail = None
        asyncio.run(monitor.refresh())
        assert monitor.error is None

    def test_stale_response_is_dropped(self, at):
        stale = [Snapshot(captured_at=at(), views=1)]
        fresh = [Snapshot(captured_at=at(), views=1), Snapshot(captured_at=at(seconds=5), views=9)]
        repo = GatedSnapshotRepository(stale, fresh)
        monitor = make_monitor(VirtualClock(at(seconds=5)), snapshots=repo)

        async def scenario():
            slow = asyncio.create_task(monitor.refresh())
            await asyncio.to_thread(repo.started.wait, 5)
            fast_applied = await monitor.refresh()
            repo.release.set()
            return fast_applied, await slow

        fast_applied, slow_applied = asyncio.run(scenario())
        assert fast_applied is True
        assert slow_applied is False
        assert monitor.snapshots == fresh

    def test_closed_monitor_ignores_responses(self, at):
        repo = FakeSnapshotRepository([Snapshot(captured_at=at(), views=10)])
        monitor = make_monitor(VirtualClock(at()), snapshots=repo)
        monitor.close()

        assert not asyncio.run(monitor.refresh())
        assert monitor.snapshots == []


class TestCongratsDismissal:
    def crossing_monitor(self, at, store):
        rows = [
            Snapshot(captured_at=at(minutes=0), views=80),
            Snapshot(captured_at=at(minutes=5), views=95),
            Snapshot(captured_at=at(minutes=10), views=105),
        ]
        milestones = FakeMilestoneRepository([Milestone(id="m100", title="Hundred", target_count=100)])
        monitor = make_monitor(
            VirtualClock(at(minutes=10)),
            snapshots=FakeSnapshotRepository(rows),
            milestones=milestones,
            store=store,
        )

        async def boot():
            monitor.load_dismissal()
            await monitor.refresh_milestones()
            await monitor.refresh()

        asyncio.run(boot())
        return monitor

    def test_dismissal_is_persisted_and_suppresses_replay(self, at):
        store = InMemoryStore()
        monitor = self.crossing_monitor(at, store)
        assert monitor.live_view()["congrats"]["show"] is True
        assert monitor.live_view()["congrats"]["target"] == 100

        monitor.dismiss(100)
        assert store.data[DISMISSAL_KEY] == "[100]"
        assert monitor.live_view()["congrats"]["show"] is False

        restarted = self.crossing_monitor(at, store)
        assert restarted.live_view()["congrats"]["show"] is False

    def test_malformed_state_loads_empty(self, at):
        store = InMemoryStore({DISMISSAL_KEY: "not-json"})
        monitor = self.crossing_monitor(at, store)
        assert monitor.dismissal.targets == frozenset()
        assert monitor.live_view()["congrats"]["show"] is True

    def test_failed_write_leaves_dismissal_unchanged(self, at):
        class BrokenStore(InMemoryStore):
            def set(self, key, value):
                raise OSError("disk full")

        store = BrokenStore()
        monitor = self.crossing_monitor(at, store)
        with pytest.raises(OSError):
            monitor.dismiss(100)
        assert monitor.dismissal.targets == frozenset()
        assert monitor.live_view()["congrats"]["show"] is True

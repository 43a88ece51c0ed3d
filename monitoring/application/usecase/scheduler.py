import asyncio
import inspect
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Optional, Union

logger = logging.getLogger(__name__)

Callback = Callable[[datetime], Union[None, Awaitable[Any]]]


class SystemClock:
    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


class VirtualClock:
    """테스트용 시계. advance 로만 시간이 흐른다."""

    def __init__(self, start: datetime):
        self.current = start

    def now(self) -> datetime:
        return self.current

    def set(self, moment: datetime) -> None:
        self.current = moment

    async def sleep(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)
        await asyncio.sleep(0)


class MonitorScheduler:
    """
    폴링(기본 5초)과 화면 틱(기본 1초) 두 주기를 함께 관리한다.
    - on_poll 은 별도 태스크로 실행되어 느린 조회가 틱을 막지 않는다.
    - stop() 은 루프와 진행 중인 폴링 태스크를 모두 취소한다.
    - VirtualClock 과 advance() 로 실제 시간 없이 결정적으로 구동할 수 있다.
    """

    def __init__(
        self,
        on_poll: Callback,
        on_tick: Callback,
        poll_interval: float = 5.0,
        tick_interval: float = 1.0,
        clock=None,
    ):
        if poll_interval <= 0 or tick_interval <= 0:
            raise ValueError("scheduler intervals must be positive")
        self.on_poll = on_poll
        self.on_tick = on_tick
        self.poll_interval = timedelta(seconds=poll_interval)
        self.tick_interval = timedelta(seconds=tick_interval)
        self.clock = clock or SystemClock()
        self.next_poll_at: Optional[datetime] = None
        self.next_tick_at: Optional[datetime] = None
        self.stopped = False
        self._task: Optional[asyncio.Task] = None
        self._inflight: set[asyncio.Task] = set()

    def start(self) -> asyncio.Task:
        """첫 폴링을 즉시 실행하고 백그라운드 루프를 띄운다."""
        self._prime()
        self._task = asyncio.create_task(self._run())
        return self._task

    async def advance(self, seconds: float) -> None:
        """Move a virtual clock forward, firing every callback that falls due, in order."""
        if self.next_poll_at is None:
            self._prime()
        until = self.clock.now() + timedelta(seconds=seconds)
        while not self.stopped:
            due = min(self.next_poll_at, self.next_tick_at)
            if due > until:
                break
            self.clock.set(due)
            self._fire_due(due)
            await self.drain()
        if not self.stopped:
            self.clock.set(until)

    async def drain(self) -> None:
        if self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

    def stop(self) -> None:
        self.stopped = True
        if self._task is not None:
            self._task.cancel()
        for task in list(self._inflight):
            task.cancel()
        self._inflight.clear()

    def _prime(self) -> None:
        now = self.clock.now()
        self.stopped = False
        self.next_tick_at = now + self.tick_interval
        self.next_poll_at = now + self.poll_interval
        self._dispatch_poll(now)

    async def _run(self) -> None:
        logger.info("[MONITOR-SCHEDULER] started (poll=%s, tick=%s)", self.poll_interval, self.tick_interval)
        try:
            while not self.stopped:
                due = min(self.next_poll_at, self.next_tick_at)
                wait = (due - self.clock.now()).total_seconds()
                if wait > 0:
                    await self.clock.sleep(wait)
                self._fire_due(self.clock.now())
        except asyncio.CancelledError:
            logger.info("[MONITOR-SCHEDULER] stopped")
            raise

    def _fire_due(self, now: datetime) -> None:
        if now >= self.next_tick_at:
            self.next_tick_at += self.tick_interval
            self._invoke_tick(now)
        if now >= self.next_poll_at:
            self.next_poll_at += self.poll_interval
            self._dispatch_poll(now)

    def _invoke_tick(self, now: datetime) -> None:
        result = self.on_tick(now)
        if inspect.isawaitable(result):
            self._track(asyncio.ensure_future(result))

    def _dispatch_poll(self, now: datetime) -> None:
        result = self.on_poll(now)
        if inspect.isawaitable(result):
            self._track(asyncio.ensure_future(result))

    def _track(self, task: asyncio.Task) -> None:
        self._inflight.add(task)
        task.add_done_callback(self._finish)

    def _finish(self, task: asyncio.Task) -> None:
        self._inflight.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.warning("[MONITOR-SCHEDULER] callback failed: %s", task.exception())

import heapq
import itertools
import logging
import time
from typing import Callable, List, Optional, Tuple


logger = logging.getLogger(__name__)


class TimerHandle:
    """A pending one-shot timer. Cancelling only flags it; the worker checks."""

    __slots__ = ('delay', 'deadline', 'label', 'cancelled', 'fired')

    def __init__(self, delay: float, deadline: float, label: str = ''):
        self.delay = delay
        self.deadline = deadline
        self.label = label
        self.cancelled = False
        self.fired = False

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.fired)

    def cancel(self) -> None:
        self.cancelled = True

    def __repr__(self):
        state = 'cancelled' if self.cancelled else ('fired' if self.fired else 'pending')
        return f'<TimerHandle {self.label} delay={self.delay} {state}>'


TimerCallback = Callable[[TimerHandle], None]


class SocketIOScheduler:
    """Runs each timer as a Socket.IO background task.

    The worker sleeps with ``socketio.sleep`` so it cooperates with whichever
    async mode the server picked, optionally logging a heartbeat every
    ``heartbeat`` seconds while it waits.
    """

    def __init__(self, socketio, heartbeat: float = 0):
        self.socketio = socketio
        self.heartbeat = heartbeat

    def now(self) -> float:
        return time.monotonic()

    def schedule(self, delay: float, callback: TimerCallback, label: str = '') -> TimerHandle:
        handle = TimerHandle(delay, self.now() + delay, label)
        logger.info(f"[timer-set] {label} delay={delay}s")
        self.socketio.start_background_task(self._worker, handle, callback)
        return handle

    def _worker(self, handle: TimerHandle, callback: TimerCallback) -> None:
        while not handle.cancelled:
            remaining = handle.deadline - self.now()
            if remaining <= 0:
                break
            step = min(self.heartbeat, remaining) if self.heartbeat and self.heartbeat > 0 else remaining
            self.socketio.sleep(step)
            if self.heartbeat and self.heartbeat > 0:
                logger.info(
                    f"[timer-heartbeat] {handle.label} remaining={max(0.0, handle.deadline - self.now()):.2f}s"
                )
        if handle.cancelled:
            logger.debug(f"[timer-abort] {handle.label} cancelled before firing")
            return
        handle.fired = True
        logger.info(f"[timer-fire] {handle.label}")
        try:
            callback(handle)
        except Exception:
            logger.exception(f"[timer-error] {handle.label} callback failed")


class ManualScheduler:
    """Deterministic scheduler driven by ``advance``; used when TESTING.

    Time only moves when ``advance`` is called, and due timers fire in
    deadline order on the caller's thread.
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self._queue: List[Tuple[float, int, TimerHandle, TimerCallback]] = []
        self._seq = itertools.count()

    def now(self) -> float:
        return self._now

    def schedule(self, delay: float, callback: TimerCallback, label: str = '') -> TimerHandle:
        handle = TimerHandle(delay, self._now + delay, label)
        heapq.heappush(self._queue, (handle.deadline, next(self._seq), handle, callback))
        return handle

    def pending(self) -> List[TimerHandle]:
        return [entry[2] for entry in sorted(self._queue) if entry[2].active]

    def next_deadline(self) -> Optional[float]:
        live = self.pending()
        return live[0].deadline if live else None

    def fire_next(self) -> Optional[TimerHandle]:
        """Jump the clock to the earliest live timer and fire only that one."""
        while self._queue:
            deadline, _, handle, callback = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self._now = max(self._now, deadline)
            handle.fired = True
            callback(handle)
            return handle
        return None

    def advance(self, seconds: float) -> None:
        target = self._now + seconds
        while self._queue and self._queue[0][0] <= target:
            deadline, _, handle, callback = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self._now = max(self._now, deadline)
            handle.fired = True
            callback(handle)
        self._now = target

    def run_until_idle(self, limit: int = 10000) -> None:
        """Fire timers one by one until none are pending."""
        for _ in range(limit):
            if self.fire_next() is None:
                return
        raise RuntimeError('Scheduler did not settle')

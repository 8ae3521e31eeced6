"""Per-second ticking for a running session timer.

The tick runs as an asyncio task on the caller's event loop, so every
timer mutation and every tick happen on one thread, one at a time.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Callable

from tracker.dates import format_duration
from tracker.models import TimerHistoryEntry, TimerState
from tracker.storage import Storage
from tracker.timer import (
    apply_tick,
    elapsed_seconds,
    load_timer_state,
    pause_timer,
    reset_timer,
    restore_timer,
    save_session,
    start_timer,
    timer_progress,
)
from tracker.workspace import default_storage

logger = logging.getLogger(__name__)


class Ticker:
    """Calls *callback* every *interval* seconds until stopped."""

    def __init__(self, callback: Callable[[], Any], interval: float = 1.0) -> None:
        self._callback = callback
        self.interval = interval
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Begin ticking. Must be called from a running event loop."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    def stop(self) -> None:
        """Cancel the tick task; the callback does not fire again after this returns."""
        task, self._task = self._task, None
        if task is not None:
            task.cancel()

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                self._callback()
            except Exception:
                logger.exception("Timer tick failed, ticking stopped")
                self._task = None
                return


class TimerRunner:
    """Drives the timer state machine and keeps the ticker in step with it.

    Ticks advance ``self.state`` in memory only. The stored record is
    written on state changes; its anchor already gives the true elapsed
    time, so nothing is lost between writes.
    """

    def __init__(
        self,
        storage: Storage | None = None,
        interval: float = 1.0,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.storage = storage if storage is not None else default_storage()
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self.ticker = Ticker(self._tick, interval)
        self.state = TimerState()

    def restore(self) -> TimerState:
        self.state = restore_timer(self.storage, self._clock())
        if self.state.is_running:
            self.ticker.start()
        return self.state

    def start(self) -> TimerState:
        self.state = start_timer(self.storage, self._clock())
        self.ticker.start()
        return self.state

    def pause(self) -> TimerState:
        self.ticker.stop()
        self.state = pause_timer(self.storage, self._clock())
        return self.state

    def reset(self) -> TimerState:
        self.ticker.stop()
        self.state = reset_timer(self.storage)
        return self.state

    def save(self, note: str = "") -> TimerHistoryEntry | None:
        self.ticker.stop()
        entry = save_session(self.storage, self._clock(), note=note)
        self.state = load_timer_state(self.storage)
        if self.state.is_running:
            # nothing to save yet, keep running
            self.ticker.start()
        return entry

    def shutdown(self) -> None:
        """Stop ticking without touching persisted state; restore() picks it up later."""
        self.ticker.stop()

    def status(self) -> dict[str, Any]:
        state = load_timer_state(self.storage)
        seconds = elapsed_seconds(state, self._clock())
        return {
            "seconds": seconds,
            "display": format_duration(seconds),
            "isRunning": state.is_running,
            "ticking": self.ticker.running,
            **timer_progress(seconds),
        }

    def _tick(self) -> None:
        apply_tick(self.state, self._clock())
        if not self.state.is_running:
            self.ticker.stop()

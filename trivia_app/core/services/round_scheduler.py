"""Background trigger that opens and closes rounds at fixed hours."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime, timedelta
import logging
from threading import Event, Thread

from trivia_app.core.errors import TriviaError
from trivia_app.core.services.question_pool import utc_now
from trivia_app.core.trivia_manager import TriviaManager

logger = logging.getLogger(__name__)

OPEN = "open"
CLOSE = "close"


def next_trigger(
    now: datetime,
    open_hours: Sequence[int],
    window: timedelta,
) -> tuple[datetime, str]:
    """Return the first (time, action) strictly after ``now``.

    Opens fire on the hour for every entry of ``open_hours``; each open is
    followed by a close ``window`` later. When both fall on the same instant
    the close comes first.
    """
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    events: list[tuple[datetime, int, str]] = []
    for day_offset in (-1, 0, 1):
        day = midnight + timedelta(days=day_offset)
        for hour in open_hours:
            opens_at = day + timedelta(hours=hour)
            events.append((opens_at, 1, OPEN))
            events.append((opens_at + window, 0, CLOSE))
    when, _, action = min(event for event in events if event[0] > now)
    return when, action


class RoundScheduler:
    """Calls ``open_round``/``close_round`` on a timer; the core holds no timers.

    Failures are logged and the next trigger is awaited; retrying is a matter
    of the schedule, not of the core.
    """

    def __init__(
        self,
        manager: TriviaManager,
        open_hours: Sequence[int],
        window: timedelta,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        if not open_hours:
            raise ValueError("At least one open hour is required.")
        self._manager = manager
        self._open_hours = tuple(open_hours)
        self._window = window
        self._clock = clock
        self._stop = Event()
        self._thread: Thread | None = None
        self._last_fired: datetime | None = None

    def start(self) -> Thread:
        if self._thread is not None and self._thread.is_alive():
            return self._thread
        self._stop.clear()
        self._thread = Thread(target=self._run, name="RoundScheduler", daemon=True)
        self._thread.start()
        logger.info("Round scheduler started (open hours %s, window %s)", self._open_hours, self._window)
        return self._thread

    def stop(self, timeout: float | None = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def upcoming(self) -> tuple[datetime, str]:
        now = self._clock()
        if self._last_fired is not None and self._last_fired > now:
            now = self._last_fired
        return next_trigger(now, self._open_hours, self._window)

    def fire(self, action: str) -> None:
        try:
            if action == OPEN:
                logger.info("Starting new trivia round via schedule")
                self._manager.open_round()
            else:
                logger.info("Showing results via schedule")
                self._manager.close_round()
        except TriviaError as exc:
            logger.warning("Scheduled %s failed: %s", action, exc)
        except Exception:
            logger.exception("Unexpected error during scheduled %s; waiting for the next trigger", action)

    def _run(self) -> None:
        while not self._stop.is_set():
            when, action = self.upcoming()
            delay = (when - self._clock()).total_seconds()
            if self._stop.wait(max(0.0, delay)):
                break
            self._last_fired = when
            self.fire(action)

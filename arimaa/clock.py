"""Turn and game clock for the timed variant.

Two background reporters run on daemon threads: one for the active turn and
one for the whole game. Each wakes every ``tick_interval`` seconds, emits an
elapsed-time update and, once its limit is exceeded, a single timeout event
before stopping itself. All timer fields live in one :class:`TimerState`
guarded by a lock; the engine only reads them through the accessors.
"""

from __future__ import annotations

import functools
import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Protocol

from .constants import GOLD, MAX_TOTAL_DURATION, MAX_TURN_DURATION, SIDE_NAMES, TICK_INTERVAL

logger = logging.getLogger(__name__)

Dispatcher = Callable[[Callable[[], None]], None]


class TimerListener(Protocol):
    """Receiver of clock notifications, typically a UI layer."""

    def on_time_update(self, elapsed: float, side: int) -> None:
        """Elapsed time of the current turn."""

    def on_total_time_update(self, total: float) -> None:
        """Accumulated time of the whole game."""

    def on_turn_timeout(self, side: int) -> None:
        """The current turn ran past the maximum turn duration."""

    def on_total_timeout(self) -> None:
        """The game ran past the maximum total duration."""


def _call_inline(callback: Callable[[], None]) -> None:
    callback()


@dataclass
class TimerState:
    gold_elapsed: float = 0.0
    silver_elapsed: float = 0.0
    turn_start: float = 0.0
    running: bool = False
    active_side: int = GOLD


@dataclass
class _Reporter:
    thread: threading.Thread
    stop: threading.Event

    def is_alive(self) -> bool:
        return self.thread.is_alive()


class TurnClock:
    """Per-turn and total game timing, active only in timed mode."""

    def __init__(
        self,
        timed: bool = False,
        max_turn_duration: float = MAX_TURN_DURATION,
        max_total_duration: float = MAX_TOTAL_DURATION,
        tick_interval: float = TICK_INTERVAL,
        listener: TimerListener | None = None,
        dispatcher: Dispatcher | None = None,
        time_fn: Callable[[], float] = time.monotonic,
    ) -> None:
        """Create a stopped clock.

        Args:
            timed: Enables timing; when False every operation is a no-op.
            max_turn_duration: Seconds a single turn may last.
            max_total_duration: Seconds the whole game may last.
            tick_interval: Seconds between reporter wake-ups.
            listener: Receiver of update and timeout notifications.
            dispatcher: Runs each notification callback. Pass a function that
                hands the callback to the UI thread; the default calls it on
                the reporter thread.
            time_fn: Monotonic time source in seconds.
        """
        self.timed = timed
        self.max_turn_duration = max_turn_duration
        self.max_total_duration = max_total_duration
        self.tick_interval = tick_interval
        self._listener = listener
        self._dispatcher = dispatcher or _call_inline
        self._time = time_fn

        self._lock = threading.Lock()
        self._state = TimerState()
        self._turn_reporter: _Reporter | None = None
        self._total_reporter: _Reporter | None = None

    def set_listener(self, listener: TimerListener | None) -> None:
        self._listener = listener
        logger.debug("Timer listener set")

    def set_mode(self, timed: bool) -> None:
        """Switch timing on or off; any running timers are stopped and reset."""
        self.reset()
        self.timed = timed
        logger.info("Timer mode: %s", "timed" if timed else "untimed")

    def reset(self) -> None:
        """Stop both reporters and zero all accumulated time."""
        self.stop_game_timer()
        with self._lock:
            self._state = TimerState()

    # ---- lifecycle --------------------------------------------------------

    def start_game(self) -> None:
        """Start the total-time reporter once per game."""
        if not self.timed:
            logger.debug("Starting game: timing disabled")
            return
        with self._lock:
            if self._total_reporter is not None and self._total_reporter.is_alive():
                return
            logger.info("Starting total timer")
            self._total_reporter = self._spawn(self._run_total_reporter, "total-clock")

    def start_turn(self, side: int) -> None:
        """Begin timing ``side``'s turn.

        A running interval is folded into its side's total first, and the
        previous turn reporter is stopped and joined before a new one starts,
        so updates for a stale turn can no longer arrive.
        """
        if not self.timed:
            return
        logger.info("Starting turn timer for %s", SIDE_NAMES[side])
        with self._lock:
            self._fold_elapsed_locked()
            stale, self._turn_reporter = self._turn_reporter, None
            if stale is not None:
                stale.stop.set()
        self._join(stale, "turn")

        with self._lock:
            self._state.active_side = side
            self._state.turn_start = self._time()
            self._state.running = True
            self._turn_reporter = self._spawn(self._run_turn_reporter, "turn-clock", side)

    def end_turn(self) -> None:
        """Fold the running turn into its side's total and stop the turn reporter."""
        if not self.timed:
            return
        with self._lock:
            if not self._state.running:
                logger.debug("end_turn called but no turn is running")
                return
            elapsed = self._fold_elapsed_locked()
            side = self._state.active_side
            stale, self._turn_reporter = self._turn_reporter, None
            if stale is not None:
                stale.stop.set()
        logger.info("Turn ended for %s: elapsed %.3f s", SIDE_NAMES[side], elapsed)
        self._join(stale, "turn")

    def stop_game_timer(self) -> None:
        """Stop both reporters. Safe to call repeatedly."""
        self.end_turn()
        with self._lock:
            stale, self._total_reporter = self._total_reporter, None
            if stale is not None:
                stale.stop.set()
        if stale is not None:
            logger.info("Stopping game timer")
        self._join(stale, "total")

    # ---- reads ------------------------------------------------------------

    def get_current_turn_time(self) -> float:
        """Seconds since the current turn started, or 0 when idle or untimed."""
        if not self.timed:
            return 0.0
        with self._lock:
            return self._turn_elapsed_locked()

    def get_total_time(self) -> float:
        """Seconds used by both sides, including the running turn."""
        if not self.timed:
            return 0.0
        with self._lock:
            s = self._state
            return s.gold_elapsed + s.silver_elapsed + self._turn_elapsed_locked()

    def get_elapsed(self, side: int) -> float:
        """Seconds accumulated by ``side``, including its running turn."""
        if not self.timed:
            return 0.0
        with self._lock:
            s = self._state
            total = s.gold_elapsed if side == GOLD else s.silver_elapsed
            if s.running and s.active_side == side:
                total += self._turn_elapsed_locked()
            return total

    def snapshot(self) -> TimerState:
        """Point-in-time copy of the timer state."""
        with self._lock:
            return replace(self._state)

    @property
    def is_turn_reporter_alive(self) -> bool:
        reporter = self._turn_reporter
        return reporter is not None and reporter.is_alive()

    @property
    def is_total_reporter_alive(self) -> bool:
        reporter = self._total_reporter
        return reporter is not None and reporter.is_alive()

    # ---- internals (callers hold self._lock for *_locked) -----------------

    def _turn_elapsed_locked(self) -> float:
        if not self._state.running:
            return 0.0
        return self._time() - self._state.turn_start

    def _fold_elapsed_locked(self) -> float:
        s = self._state
        if not s.running:
            return 0.0
        elapsed = self._time() - s.turn_start
        if s.active_side == GOLD:
            s.gold_elapsed += elapsed
        else:
            s.silver_elapsed += elapsed
        s.running = False
        return elapsed

    def _spawn(self, target: Callable[..., None], name: str, *args: object) -> _Reporter:
        stop = threading.Event()
        thread = threading.Thread(target=target, args=(stop, *args), name=name, daemon=True)
        reporter = _Reporter(thread, stop)
        thread.start()
        logger.debug("%s reporter started", name)
        return reporter

    def _join(self, reporter: _Reporter | None, label: str) -> None:
        if reporter is None or reporter.thread is threading.current_thread():
            return
        timeout = max(1.0, 4 * self.tick_interval)
        reporter.thread.join(timeout=timeout)
        if reporter.is_alive():
            logger.warning("%s reporter did not exit within %.1f s", label.capitalize(), timeout)

    def _emit(self, stop: threading.Event, name: str, *args: object) -> None:
        if stop.is_set():
            return
        listener = self._listener
        if listener is None:
            return
        self._dispatcher(functools.partial(getattr(listener, name), *args))

    def _run_turn_reporter(self, stop: threading.Event, side: int) -> None:
        while not stop.is_set():
            with self._lock:
                if stop.is_set() or not self._state.running:
                    break
                elapsed = self._turn_elapsed_locked()
            if elapsed > self.max_turn_duration:
                logger.warning("Turn timer timed out for %s", SIDE_NAMES[side])
                self._emit(stop, "on_turn_timeout", side)
                break
            self._emit(stop, "on_time_update", elapsed, side)
            stop.wait(self.tick_interval)
        logger.debug("Turn reporter for %s exited", SIDE_NAMES[side])

    def _run_total_reporter(self, stop: threading.Event) -> None:
        while not stop.is_set():
            total = self.get_total_time()
            if total > self.max_total_duration:
                logger.warning("Total game timeout")
                self._emit(stop, "on_total_timeout")
                break
            self._emit(stop, "on_total_time_update", total)
            stop.wait(self.tick_interval)
        logger.debug("Total reporter exited")

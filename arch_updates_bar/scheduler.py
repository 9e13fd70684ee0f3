"""
Scheduler that reconciles update checks with pacman transactions.

Every fast tick samples the transaction detector, feeds it together with
the full-check schedule into :func:`transition`, performs the requested
action and emits exactly one display state.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations

import signal
import threading
import time
from typing import Any, Callable, Optional, Tuple

from .constants import FAST_TICK_SECONDS
from .exceptions import DetectorError, FetchError
from .models import (
    AppConfig, DisplayState, SchedulerPhase, TickAction, TickSignals,
)
from .utils.cache import StatusCache
from .utils.logger import get_logger

logger = get_logger(__name__)


def transition(phase: SchedulerPhase, signals: TickSignals) -> Tuple[SchedulerPhase, TickAction]:
    """
    Compute the next phase and the action for one tick.

    Args:
        phase: Current scheduler phase
        signals: Detector and schedule inputs sampled for this tick

    Returns:
        Tuple of (new phase, action to perform)
    """
    if signals.transaction_active:
        return SchedulerPhase.CHECKING, TickAction.EMIT_CHECKING
    if phase is SchedulerPhase.CHECKING:
        # The transaction just ended and has likely changed the pending set
        return SchedulerPhase.NORMAL, TickAction.FULL_CHECK
    if signals.interval_elapsed:
        return SchedulerPhase.NORMAL, TickAction.FULL_CHECK
    return SchedulerPhase.NORMAL, TickAction.EMIT_CACHED


class Scheduler:
    """Single-threaded control loop owning the status cache."""

    def __init__(self,
                 config: AppConfig,
                 source: Any,
                 detector: Any,
                 emitter: Any,
                 cache: Optional[StatusCache] = None,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Optional[Callable[[float], Any]] = None,
                 tick_interval: float = FAST_TICK_SECONDS) -> None:
        """
        Initialize the scheduler.

        Args:
            config: Application configuration
            source: Object with ``fetch_updates() -> UpdateSnapshot``
            detector: Object with ``is_transaction_active() -> bool``
            emitter: Object with ``emit(DisplayState)``
            cache: Status cache (a fresh one by default)
            clock: Monotonic clock in seconds
            sleep: Waits between ticks; defaults to an interruptible wait
            tick_interval: Seconds between tick starts
        """
        self.config = config
        self.source = source
        self.detector = detector
        self.emitter = emitter
        self.cache = cache if cache is not None else StatusCache()
        self.phase = SchedulerPhase.NORMAL
        self.tick_interval = tick_interval
        self.full_checks = 0
        self._clock = clock
        self._stop_event = threading.Event()
        self._sleep = sleep if sleep is not None else self._stop_event.wait

    def _transaction_active(self) -> bool:
        try:
            return bool(self.detector.is_transaction_active())
        except DetectorError as e:
            # A missed transaction is less harmful than a false one
            logger.warning(f"Transaction check failed, assuming none is running: {e}")
            return False

    def _full_check(self, now: float) -> DisplayState:
        self.full_checks += 1
        try:
            snapshot = self.source.fetch_updates()
        except FetchError as e:
            logger.error(f"Update check failed: {e}")
            self.cache.record_failure(e, now)
        else:
            self.cache.store(snapshot, now)
            logger.info(f"{snapshot.count} updates available")
        logger.debug(f"Next full check in {self.config.interval_in_seconds} seconds")
        return self.current_state()

    def current_state(self) -> DisplayState:
        """Display state for the cached data."""
        if self.cache.has_snapshot:
            return DisplayState.normal(self.cache.snapshot, stale=self.cache.is_stale)
        if self.cache.last_error is not None:
            return DisplayState.error(str(self.cache.last_error))
        return DisplayState.error("No update information yet")

    def _step(self, now: float) -> DisplayState:
        signals = TickSignals(
            transaction_active=self._transaction_active(),
            interval_elapsed=self.cache.interval_elapsed(now, self.config.interval_in_seconds),
        )
        previous = self.phase
        self.phase, action = transition(self.phase, signals)
        if self.phase is not previous:
            if self.phase is SchedulerPhase.CHECKING:
                logger.info("Package transaction started")
            else:
                logger.info("Package transaction finished, refreshing")

        if action is TickAction.EMIT_CHECKING:
            state = DisplayState.checking()
        elif action is TickAction.FULL_CHECK:
            state = self._full_check(now)
        else:
            state = self.current_state()
        return state

    def tick(self) -> DisplayState:
        """
        Run one tick and emit its display state.

        Exactly one state is emitted even when the step fails; the bar then
        keeps showing the cached data.
        """
        now = self._clock()
        try:
            state = self._step(now)
        except Exception as e:
            logger.exception(f"Unexpected error during tick: {e}")
            state = self.current_state()

        self.emitter.emit(state)
        return state

    def run(self, max_ticks: Optional[int] = None) -> None:
        """
        Tick until stopped.

        A tick that runs long delays the next one; ticks never overlap.
        Errors inside a tick are logged and the loop keeps going.

        Args:
            max_ticks: Stop after this many ticks (unbounded by default)
        """
        logger.info(f"Starting scheduler (full check every {self.config.interval_in_seconds}s)")
        ticks = 0
        while not self._stop_event.is_set():
            started = self._clock()
            try:
                self.tick()
            except BrokenPipeError:
                logger.info("Output stream closed, stopping")
                break
            except Exception as e:
                logger.exception(f"Failed to emit status: {e}")

            ticks += 1
            if max_ticks is not None and ticks >= max_ticks:
                break
            remaining = self.tick_interval - (self._clock() - started)
            if remaining > 0 and not self._stop_event.is_set():
                self._sleep(remaining)
        logger.info("Scheduler stopped")

    def stop(self) -> None:
        """Ask the loop to finish after the current tick."""
        self._stop_event.set()

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def install_signal_handlers(self) -> None:
        """Stop cleanly on SIGINT and SIGTERM."""
        def handler(signum, frame):
            logger.info(f"Received signal {signum}")
            self.stop()

        for sig in (signal.SIGINT, signal.SIGTERM):
            signal.signal(sig, handler)

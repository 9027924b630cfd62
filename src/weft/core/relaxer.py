"""Background scheduler that repeatedly steps an iterative process."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from time import perf_counter
from typing import Any, Optional

from ..config import resolve_relaxer_settings
from ..live.event_bus import EventBus, make_event
from .errors import ConcurrencyMisuse
from .process import IterativeProcess

LOGGER = logging.getLogger(__name__)


class RelaxerState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"


@dataclass(frozen=True)
class RelaxerStatus:
    """Point-in-time view of a relaxer, safe to hand to other threads."""

    state: RelaxerState
    running: bool
    paused: bool
    steps: int
    error: Optional[BaseException] = None


class Relaxer:
    """
    Drive an :class:`IterativeProcess` on a dedicated background thread.

    ``relax()`` starts a run; ``pause()``/``resume()`` suspend it at the top of
    the loop; ``stop()`` ends it. ``prerelax()`` steps synchronously for a short
    wall-clock budget and may only be used while no run is active, so ``step()``
    is never invoked from two threads at once.

    The suspend and stop flags live under one condition variable. Both the pause
    wait and the pacing sleep are waits on it, which is what lets ``stop()`` cut
    either short. A separate control lock makes draining the previous run,
    prerelaxing and starting the next thread one step for concurrent callers.
    ``stop()`` never takes it, so it can still interrupt a run that is being
    drained. A ``pause()`` issued while nothing runs carries over to the next
    ``relax()``.
    """

    def __init__(
        self,
        process: IterativeProcess,
        *,
        sleep_time: Optional[float] = None,
        prerelax_budget: Optional[float] = None,
        stop_timeout: Optional[float] = None,
        event_bus: Optional[EventBus] = None,
        name: Optional[str] = None,
    ) -> None:
        settings = resolve_relaxer_settings()
        self.process = process
        self.sleep_time = settings.sleep_time if sleep_time is None else float(sleep_time)
        self.prerelax_budget = settings.prerelax_budget if prerelax_budget is None else float(prerelax_budget)
        self.stop_timeout = settings.stop_timeout if stop_timeout is None else float(stop_timeout)
        self.event_bus = event_bus
        self.name = name or f"relaxer-{id(self):x}"
        self._cond = threading.Condition()
        self._step_lock = threading.Lock()
        # serializes drain, prerelax and thread start across callers
        self._control_lock = threading.RLock()
        self._thread: Optional[threading.Thread] = None
        self._state = RelaxerState.IDLE
        self._stop_requested = False
        self._suspended = False
        self._error: Optional[BaseException] = None
        self._steps = 0

    # -- status -----------------------------------------------------------

    @property
    def state(self) -> RelaxerState:
        with self._cond:
            return self._state

    @property
    def running(self) -> bool:
        with self._cond:
            return self._state in (RelaxerState.RUNNING, RelaxerState.STOPPING)

    @property
    def paused(self) -> bool:
        with self._cond:
            return self._suspended

    @property
    def error(self) -> Optional[BaseException]:
        with self._cond:
            return self._error

    @property
    def steps(self) -> int:
        with self._cond:
            return self._steps

    def status(self) -> RelaxerStatus:
        with self._cond:
            return RelaxerStatus(
                state=self._state,
                running=self._state in (RelaxerState.RUNNING, RelaxerState.STOPPING),
                paused=self._suspended,
                steps=self._steps,
                error=self._error,
            )

    def raise_if_failed(self) -> None:
        """Re-raise the exception that ended the last background run, if any."""

        error = self.error
        if error is not None:
            raise error

    # -- control ----------------------------------------------------------

    def _active_thread(self) -> Optional[threading.Thread]:
        thread = self._thread
        if thread is not None and thread.is_alive():
            return thread
        return None

    def _check_foreign_thread(self, operation: str) -> None:
        if self._thread is threading.current_thread():
            raise ConcurrencyMisuse(f"{self.name}: {operation}() called from its own step()")

    def _drain(self) -> None:
        # caller holds _control_lock
        self.stop()
        previous = self._active_thread()
        if previous is not None:
            LOGGER.debug("%s: waiting for previous run to end", self.name)
            previous.join()

    def relax(self) -> None:
        """Start a fresh background run, tearing down any previous one first."""

        self._check_foreign_thread("relax")
        with self._control_lock:
            self._drain()
            with self._cond:
                self._stop_requested = False
                self._error = None
                self._state = RelaxerState.RUNNING
                thread = threading.Thread(target=self._run, name=self.name, daemon=True)
                self._thread = thread
            self._publish("relaxer.started")
            thread.start()

    def prerelax(self) -> int:
        """Step synchronously until ``done()`` or the budget elapses; return the step count."""

        if self._active_thread() is not None:
            raise ConcurrencyMisuse(f"{self.name}: prerelax() while a background run is active")
        with self._control_lock:
            if self._active_thread() is not None:
                raise ConcurrencyMisuse(f"{self.name}: prerelax() while a background run is active")
            started = perf_counter()
            steps = 0
            while perf_counter() - started < self.prerelax_budget and not self.process.done():
                self._step()
                steps += 1
        LOGGER.debug("%s: prerelax took %d steps in %.3fs", self.name, steps, perf_counter() - started)
        return steps

    def pause(self) -> None:
        with self._cond:
            self._suspended = True
        self._publish("relaxer.paused")

    def _wake(self) -> bool:
        with self._cond:
            self._suspended = False
            active = self._active_thread() is not None and not self._stop_requested
            if active:
                self._cond.notify_all()
        return active

    def resume(self) -> None:
        """Wake a paused run, or start one (prerelax then relax) if none is active."""

        if self._wake():
            self._publish("relaxer.resumed")
            return
        self._check_foreign_thread("resume")
        with self._control_lock:
            # another caller may have started a run while we waited for the lock
            if self._wake():
                self._publish("relaxer.resumed")
                return
            self._drain()
            self.prerelax()
            self.relax()

    def stop(self) -> None:
        """Ask the background run to end and wait up to ``stop_timeout`` for it."""

        with self._cond:
            thread = self._active_thread()
            if thread is None:
                return
            self._suspended = False
            self._stop_requested = True
            if self._state is RelaxerState.RUNNING:
                self._state = RelaxerState.STOPPING
            self._cond.notify_all()
        if thread is threading.current_thread():
            return
        thread.join(self.stop_timeout)
        if thread.is_alive():
            LOGGER.warning(
                "%s: background run still inside step() after %.3fs; it will stop at the next step boundary",
                self.name,
                self.stop_timeout,
            )

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the current run to end; return whether it has."""

        thread = self._thread
        if thread is None:
            return True
        thread.join(timeout)
        return not thread.is_alive()

    # -- background loop --------------------------------------------------

    def _step(self) -> None:
        if not self._step_lock.acquire(blocking=False):
            raise ConcurrencyMisuse(f"{self.name}: step() re-entered while already stepping")
        try:
            self.process.step()
        finally:
            self._step_lock.release()
        with self._cond:
            self._steps += 1

    def _stopping(self) -> bool:
        with self._cond:
            return self._stop_requested

    def _run(self) -> None:
        outcome = "relaxer.finished"
        try:
            while True:
                if self._stopping():
                    outcome = "relaxer.stopped"
                    break
                if self.process.done():
                    break
                with self._cond:
                    while self._suspended and not self._stop_requested:
                        self._cond.wait()
                    if self._stop_requested:
                        outcome = "relaxer.stopped"
                        break
                self._step()
                with self._cond:
                    if self._stop_requested:
                        outcome = "relaxer.stopped"
                        break
                    if self.sleep_time > 0:
                        self._cond.wait_for(lambda: self._stop_requested, timeout=self.sleep_time)
        except Exception as exc:
            LOGGER.exception("%s: step() failed; ending background run", self.name)
            outcome = "relaxer.failed"
            with self._cond:
                self._error = exc
        finally:
            with self._cond:
                self._state = RelaxerState.STOPPED
                self._cond.notify_all()
        LOGGER.debug("%s: %s after %d steps", self.name, outcome, self.steps)
        if outcome == "relaxer.failed":
            self._publish(outcome, error=repr(self.error))
        else:
            self._publish(outcome)

    def _publish(self, kind: str, **fields: Any) -> None:
        if self.event_bus is None:
            return
        self.event_bus.publish(make_event(kind, relaxer=self.name, steps=self.steps, **fields))

    def __repr__(self) -> str:
        status = self.status()
        return f"Relaxer(name={self.name!r}, state={status.state.value}, paused={status.paused}, steps={status.steps})"

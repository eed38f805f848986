"""Tick pipeline and periodic monitoring thread for procmon."""

import logging
import threading
import time
from dataclasses import replace
from queue import Queue

import psutil

from procmon.config import MonitorConfig
from procmon.errors import InitializationError, SamplingError
from procmon.models import Snapshot
from procmon.ordering import OrderingState, SortColumn, next_ordering, sort_records
from procmon.sampler import Sampler
from procmon.snapshot import PreviousTable, build_snapshot

logger = logging.getLogger(__name__)

MonitorEvent = Snapshot | SamplingError


class ProcessMonitor:
    """
    Process monitor that samples the process table at a fixed interval.

    Runs ticks in a daemon thread and pushes each ordered Snapshot to a
    thread-safe Queue. Only one tick runs at a time; a tick slower than the
    interval delays the next one instead of overlapping it. A failed
    enumeration stops the thread and is pushed to the queue in place of a
    snapshot.
    """

    def __init__(
        self,
        update_queue: Queue[MonitorEvent],
        config: MonitorConfig | None = None,
        sampler: Sampler | None = None,
        cpu_count: int | None = None,
    ) -> None:
        """
        Initialize the ProcessMonitor.

        Args:
            update_queue: Thread-safe queue to push snapshots to.
            config: Monitor settings. Defaults to MonitorConfig().
            sampler: Process table reader. Defaults to a psutil Sampler.
            cpu_count: Logical CPU count. Queried from psutil when omitted.

        Raises:
            InitializationError: If the CPU count is unknown or the process
                table cannot be read.
        """
        self._queue = update_queue
        self._config = config or MonitorConfig()
        self._refresh_interval = self._config.refresh_interval
        self._sampler = sampler or Sampler()
        self._cpu_count = cpu_count if cpu_count is not None else psutil.cpu_count(logical=True)
        if not self._cpu_count or self._cpu_count < 1:
            raise InitializationError("Cannot determine the number of logical CPUs")
        self._sampler.probe()

        self._previous: PreviousTable = {}
        self._tick_count = 0
        self._tick_lock = threading.Lock()
        # Guards ordering and the last published snapshot
        self._state_lock = threading.Lock()
        self._ordering: OrderingState = self._config.ordering
        self._last_snapshot: Snapshot | None = None
        self._last_error: SamplingError | None = None

        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def refresh_interval(self) -> float:
        """Get the refresh interval in seconds."""
        return self._refresh_interval

    @refresh_interval.setter
    def refresh_interval(self, value: float) -> None:
        """Set the refresh interval in seconds."""
        self._refresh_interval = max(0.1, value)  # Minimum 0.1 seconds

    @property
    def cpu_count(self) -> int:
        return self._cpu_count

    @property
    def ordering(self) -> OrderingState:
        with self._state_lock:
            return self._ordering

    @property
    def last_snapshot(self) -> Snapshot | None:
        with self._state_lock:
            return self._last_snapshot

    @property
    def last_error(self) -> SamplingError | None:
        return self._last_error

    @property
    def previous_table(self) -> PreviousTable:
        """Copy of the CPU time baselines kept for the next tick."""
        return dict(self._previous)

    @property
    def is_running(self) -> bool:
        """Check if the monitor thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the monitoring thread. Also restarts after a failed tick."""
        if self.is_running:
            return

        self._last_error = None
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._poll_loop,
            daemon=True,
            name="ProcessMonitor",
        )
        self._thread.start()
        logger.info("Monitoring started, interval %.2fs", self._refresh_interval)

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Stop the monitoring thread.

        Args:
            timeout: How long to wait for thread to stop (seconds).
        """
        self._stop_event.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout=timeout)
        if self._thread is not None and not self._thread.is_alive():
            self._thread = None

    def tick(self) -> Snapshot:
        """
        Run one sample, estimate, build and sort cycle.

        The previous-sample table is replaced only when the tick succeeds.

        Raises:
            SamplingError: If the process table could not be enumerated.
        """
        with self._tick_lock:
            result = self._sampler.sample()
            records, table = build_snapshot(result.samples, self._previous, self._cpu_count)
            self._previous = table
            self._tick_count += 1

            with self._state_lock:
                ordering = self._ordering
                ordered = sort_records(records, ordering.column, ordering.ascending)
                snapshot = Snapshot(
                    records=tuple(ordered),
                    ordering=ordering,
                    tick=self._tick_count,
                    discarded=result.discarded,
                )
                self._last_snapshot = snapshot

        logger.debug(
            "Tick %d: %d processes, %d skipped",
            snapshot.tick,
            len(snapshot.records),
            snapshot.discarded,
        )
        return snapshot

    def on_sort_column_clicked(self, column: SortColumn) -> Snapshot | None:
        """
        Apply a sort column click and re-sort the last snapshot.

        Does not sample. Returns the re-sorted snapshot, or None if no tick
        has completed yet.
        """
        with self._state_lock:
            self._ordering = next_ordering(self._ordering, column)
            if self._last_snapshot is None:
                return None
            ordering = self._ordering
            ordered = sort_records(self._last_snapshot.records, ordering.column, ordering.ascending)
            self._last_snapshot = replace(
                self._last_snapshot, records=tuple(ordered), ordering=ordering
            )
            return self._last_snapshot

    def reorder(self, snapshot: Snapshot) -> Snapshot:
        """
        Return ``snapshot`` in the current ordering.

        A snapshot queued before a sort click carries the old ordering; it is
        re-sorted so the click is not undone when the snapshot is shown.
        """
        with self._state_lock:
            ordering = self._ordering
        if snapshot.ordering == ordering:
            return snapshot
        ordered = sort_records(snapshot.records, ordering.column, ordering.ascending)
        return replace(snapshot, records=tuple(ordered), ordering=ordering)

    def _poll_loop(self) -> None:
        """Main polling loop running in the background thread."""
        while not self._stop_event.is_set():
            started = time.monotonic()
            try:
                snapshot = self.tick()
            except SamplingError as exc:
                logger.error("Monitoring stopped: %s", exc)
                self._last_error = exc
                self._queue.put(exc)
                return
            except Exception as exc:
                logger.exception("Monitoring stopped by unexpected error")
                error = SamplingError(f"Tick failed: {exc!r}")
                error.__cause__ = exc
                self._last_error = error
                self._queue.put(error)
                return

            self._queue.put(snapshot)

            # Wait for the rest of the interval or until stop is requested
            elapsed = time.monotonic() - started
            self._stop_event.wait(timeout=max(0.0, self._refresh_interval - elapsed))

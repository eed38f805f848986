"""Process table sampling for procmon."""

import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

import psutil

from procmon.errors import InitializationError, SamplingError
from procmon.models import ProcessIdentity, RawSample

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SampleResult:
    """Successful samples of one tick plus the number of skipped processes."""

    samples: list[RawSample] = field(default_factory=list)
    discarded: int = 0


class Sampler:
    """
    Reads the OS process table once per call.

    Every process is read independently inside ``oneshot()``. A process that
    exits or denies access while being read is skipped and counted; it never
    aborts the rest of the scan.
    """

    def __init__(
        self,
        process_iter: Callable[[], Iterable[psutil.Process]] = psutil.process_iter,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize the Sampler.

        Args:
            process_iter: Callable enumerating processes. Default psutil.process_iter.
            clock: Monotonic clock in seconds used to timestamp samples.
        """
        self._process_iter = process_iter
        self._clock = clock

    def probe(self) -> None:
        """Check that the process table can be enumerated at all."""
        try:
            for _ in self._process_iter():
                break
        except (OSError, psutil.Error) as exc:
            raise InitializationError(f"Cannot access the process table: {exc}") from exc

    def sample(self) -> SampleResult:
        """
        Sample every visible process.

        Raises:
            SamplingError: If the enumeration itself fails.
        """
        result = SampleResult()
        timestamp_ms = self._clock() * 1000

        try:
            processes = iter(self._process_iter())
        except (OSError, psutil.Error) as exc:
            raise SamplingError(f"Process enumeration failed: {exc}") from exc

        while True:
            try:
                proc = next(processes)
            except StopIteration:
                break
            except (OSError, psutil.Error) as exc:
                raise SamplingError(f"Process enumeration failed: {exc}") from exc

            try:
                result.samples.append(self._read(proc, timestamp_ms))
            except (psutil.Error, OSError):
                # Exited, zombie, access denied or unreadable: skip this process only
                result.discarded += 1

        if result.discarded:
            logger.debug("Skipped %d processes during sampling", result.discarded)
        return result

    @staticmethod
    def _read(proc: psutil.Process, timestamp_ms: float) -> RawSample:
        """Read identity, resident memory and cumulative CPU time of one process."""
        with proc.oneshot():
            pid = proc.pid
            name = proc.name() or ""
            memory_bytes = proc.memory_info().rss
            cpu_times = proc.cpu_times()

        return RawSample(
            identity=ProcessIdentity(pid=pid, name=name),
            memory_bytes=memory_bytes,
            cpu_time_ms=(cpu_times.user + cpu_times.system) * 1000,
            timestamp_ms=timestamp_ms,
        )

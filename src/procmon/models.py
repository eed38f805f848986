"""Data models for procmon."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from procmon.ordering import OrderingState

BYTES_PER_MB = 1024 * 1024


@dataclass(slots=True, frozen=True)
class ProcessIdentity:
    """PID and name of a process as seen in one sample."""

    pid: int
    name: str


@dataclass(slots=True, frozen=True)
class CpuTimeSample:
    """Baseline carried to the next tick for CPU delta computation."""

    timestamp_ms: float
    cpu_time_ms: float  # user + system, all threads
    cpu_percent: float = 0.0  # Percentage reported for this sample


@dataclass(slots=True, frozen=True)
class RawSample:
    """One successful read of a process during a tick."""

    identity: ProcessIdentity
    memory_bytes: int  # Resident set size
    cpu_time_ms: float
    timestamp_ms: float

    @property
    def pid(self) -> int:
        return self.identity.pid


@dataclass(slots=True, frozen=True)
class ProcessRecord:
    """Immutable row of a snapshot."""

    identity: ProcessIdentity
    memory_bytes: int
    cpu_percent: float  # 0.0 - 100.0, normalized by logical CPU count
    sort_key: tuple  # (pid, casefolded name, memory bytes, cpu percent)

    @classmethod
    def create(
        cls, identity: ProcessIdentity, memory_bytes: int, cpu_percent: float
    ) -> ProcessRecord:
        """Build a record with its sort key precomputed."""
        return cls(
            identity=identity,
            memory_bytes=memory_bytes,
            cpu_percent=cpu_percent,
            sort_key=(identity.pid, identity.name.casefold(), memory_bytes, cpu_percent),
        )

    @property
    def pid(self) -> int:
        return self.identity.pid

    @property
    def name(self) -> str:
        return self.identity.name

    @property
    def memory_mb(self) -> float:
        return self.memory_bytes / BYTES_PER_MB

    @property
    def memory_display(self) -> str:
        return f"{self.memory_mb:.2f}"

    @property
    def cpu_display(self) -> str:
        return f"{self.cpu_percent:.2f}"


@dataclass(slots=True, frozen=True)
class Snapshot:
    """Ordered process records produced by one tick."""

    records: tuple[ProcessRecord, ...]
    ordering: OrderingState
    tick: int
    discarded: int = 0  # Processes skipped because they vanished or were denied

    @property
    def pids(self) -> set[int]:
        return {record.pid for record in self.records}

"""Snapshot building: raw samples to process records."""

from collections.abc import Iterable, Mapping

from procmon.estimator import estimate_cpu_percent
from procmon.models import CpuTimeSample, ProcessRecord, RawSample

PreviousTable = dict[int, CpuTimeSample]


def build_snapshot(
    samples: Iterable[RawSample],
    previous_table: Mapping[int, CpuTimeSample],
    logical_cpu_count: int,
) -> tuple[list[ProcessRecord], PreviousTable]:
    """
    Build the records of one tick and the baseline table for the next one.

    The returned table holds exactly the PIDs in ``samples``; entries of
    processes that exited are dropped. ``previous_table`` is never modified,
    so the caller swaps tables in a single assignment.
    """
    records: list[ProcessRecord] = []
    table: PreviousTable = {}

    for raw in samples:
        current = CpuTimeSample(timestamp_ms=raw.timestamp_ms, cpu_time_ms=raw.cpu_time_ms)
        cpu_percent = estimate_cpu_percent(
            previous_table.get(raw.pid), current, logical_cpu_count
        )
        table[raw.pid] = CpuTimeSample(
            timestamp_ms=raw.timestamp_ms,
            cpu_time_ms=raw.cpu_time_ms,
            cpu_percent=cpu_percent,
        )
        records.append(ProcessRecord.create(raw.identity, raw.memory_bytes, cpu_percent))

    return records, table

"""CPU usage estimation from cumulative CPU time deltas."""

from procmon.models import CpuTimeSample


def clamp_percent(value: float) -> float:
    """Clamp a percentage to [0, 100]."""
    return min(100.0, max(0.0, value))


def estimate_cpu_percent(
    previous: CpuTimeSample | None,
    current: CpuTimeSample,
    logical_cpu_count: int,
) -> float:
    """
    Derive the CPU percentage used by a process between two samples.

    The result is normalized by the number of logical CPUs, so a process
    saturating every core reports 100.

    Args:
        previous: Baseline from the last tick, or None if the process is new.
        current: Sample taken this tick.
        logical_cpu_count: Number of logical CPUs on the host.

    Returns:
        Percentage in [0, 100]. A new process reports 0. If the clock did not
        advance, the previous sample's percentage is repeated.
    """
    if logical_cpu_count <= 0:
        raise ValueError(f"logical_cpu_count must be positive, got {logical_cpu_count}")

    if previous is None:
        return 0.0

    elapsed_ms = current.timestamp_ms - previous.timestamp_ms
    if elapsed_ms <= 0:
        return previous.cpu_percent

    # Counter reset or PID reuse can make the delta negative
    cpu_delta_ms = max(0.0, current.cpu_time_ms - previous.cpu_time_ms)
    usage = cpu_delta_ms / (elapsed_ms * logical_cpu_count) * 100
    return clamp_percent(usage)

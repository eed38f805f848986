"""Tests for the Sampler class."""

import psutil
import pytest

from procmon.errors import InitializationError, SamplingError
from procmon.models import RawSample
from procmon.sampler import Sampler


class TestSampler:
    """Tests for Sampler with a fake process table."""

    def test_reads_identity_memory_and_cpu_time(self, process_table):
        """Test a sample carries PID, name, RSS and CPU time in ms."""
        process_table.add(100, "worker", rss=4096, cpu_seconds=2.0)

        result = process_table.sampler().sample()

        assert result.discarded == 0
        [sample] = result.samples
        assert sample.pid == 100
        assert sample.identity.name == "worker"
        assert sample.memory_bytes == 4096
        assert sample.cpu_time_ms == pytest.approx(2000.0)
        assert sample.timestamp_ms == pytest.approx(100_000.0)

    def test_samples_share_one_timestamp(self, process_table):
        """Test every sample of a tick has the same timestamp."""
        process_table.add(1, "a")
        process_table.add(2, "b")

        result = process_table.sampler().sample()

        assert len({sample.timestamp_ms for sample in result.samples}) == 1

    @pytest.mark.parametrize(
        "error",
        [psutil.NoSuchProcess(200), psutil.AccessDenied(200), psutil.ZombieProcess(200)],
    )
    def test_failing_process_skipped(self, process_table, error):
        """Test a process failing mid-read is skipped and counted."""
        process_table.add(100, "alive")
        process_table.add(200, "vanishing", error=error)
        process_table.add(300, "also-alive")

        result = process_table.sampler().sample()

        assert [sample.pid for sample in result.samples] == [100, 300]
        assert result.discarded == 1

    def test_unreadable_process_skipped(self, process_table):
        """Test an OS error reading one process skips only that process."""
        process_table.add(1, "first")
        process_table.add(2, "broken", error=OSError(22, "EINVAL reading /proc/2/stat"))
        process_table.add(3, "third")

        result = process_table.sampler().sample()

        assert [sample.pid for sample in result.samples] == [1, 3]
        assert result.discarded == 1

    def test_enumeration_failure_midway_raises(self, process_table):
        """Test the iterator itself failing part way aborts the tick."""
        first = process_table.add(1, "first")

        def failing_iter():
            yield first
            raise OSError(5, "EIO listing /proc")

        sampler = Sampler(process_iter=failing_iter, clock=process_table.clock)

        with pytest.raises(SamplingError):
            sampler.sample()

    def test_enumeration_failure_raises(self, process_table):
        """Test a failing enumeration aborts the tick with SamplingError."""
        process_table.add(100, "alive")
        process_table.fail = True

        with pytest.raises(SamplingError):
            process_table.sampler().sample()

    def test_probe_failure_is_initialization_error(self, process_table):
        """Test an unreadable process table fails initialization."""
        process_table.fail = True

        with pytest.raises(InitializationError):
            process_table.sampler().probe()

    def test_probe_ok(self, process_table):
        """Test probing a readable table returns quietly."""
        process_table.add(1, "init")
        process_table.sampler().probe()


class TestSamplerLive:
    """Tests against the real process table."""

    def test_sample_real_processes(self):
        """Test sampling the real system returns RawSamples."""
        result = Sampler().sample()

        assert len(result.samples) > 0
        for sample in result.samples[:5]:
            assert isinstance(sample, RawSample)
            assert sample.pid >= 0
            assert isinstance(sample.identity.name, str)
            assert isinstance(sample.memory_bytes, int)
            assert sample.cpu_time_ms >= 0.0

    def test_own_process_is_sampled(self):
        """Test the current process shows up."""
        result = Sampler().sample()

        assert psutil.Process().pid in {sample.pid for sample in result.samples}

"""Shared fixtures: a scriptable fake process table."""

from contextlib import nullcontext
from types import SimpleNamespace

import psutil
import pytest

from procmon.models import ProcessIdentity, ProcessRecord
from procmon.sampler import Sampler


class FakeProcess:
    """Stands in for psutil.Process with fixed readings."""

    def __init__(self, pid, name, rss=0, cpu_seconds=0.0, error=None):
        self.pid = pid
        self._name = name
        self.rss = rss
        self.cpu_seconds = cpu_seconds
        self.error = error

    def oneshot(self):
        return nullcontext()

    def name(self):
        return self._name

    def memory_info(self):
        return SimpleNamespace(rss=self.rss)

    def cpu_times(self):
        if self.error is not None:
            raise self.error
        return SimpleNamespace(user=self.cpu_seconds, system=0.0)


class FakeProcessTable:
    """Process table whose contents and clock are set by the test."""

    def __init__(self):
        self.processes: dict[int, FakeProcess] = {}
        self.now = 100.0  # seconds
        self.fail = False

    def add(self, pid, name, rss=0, cpu_seconds=0.0, error=None):
        self.processes[pid] = FakeProcess(pid, name, rss, cpu_seconds, error)
        return self.processes[pid]

    def remove(self, pid):
        del self.processes[pid]

    def advance(self, seconds):
        self.now += seconds

    def clock(self):
        return self.now

    def process_iter(self):
        if self.fail:
            raise psutil.Error("enumeration failed")
        return list(self.processes.values())

    def sampler(self):
        return Sampler(process_iter=self.process_iter, clock=self.clock)


@pytest.fixture
def process_table():
    return FakeProcessTable()


def make_record(pid, name="proc", memory_bytes=0, cpu_percent=0.0):
    return ProcessRecord.create(ProcessIdentity(pid, name), memory_bytes, cpu_percent)

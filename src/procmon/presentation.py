"""Presentation adapter contract and selection restoring."""

import json
import logging
from collections.abc import Iterable, Sequence
from typing import Protocol, TextIO

from procmon.models import ProcessRecord, Snapshot

logger = logging.getLogger(__name__)


class PresentationAdapter(Protocol):
    """Anything able to display an ordered snapshot."""

    def get_selected_keys(self) -> set[int]:
        """Return the PIDs currently selected by the user."""
        ...

    def render_snapshot(
        self, records: Sequence[ProcessRecord], selection: dict[int, int]
    ) -> None:
        """Display ``records`` and select the rows in ``selection`` (PID -> row)."""
        ...


def restore_selection(
    selected: Iterable[int], records: Sequence[ProcessRecord]
) -> dict[int, int]:
    """
    Map each selected PID to its row index in ``records``.

    Matching is by PID only, never by row position or displayed text. PIDs
    that are no longer present are dropped.
    """
    wanted = set(selected)
    if not wanted:
        return {}
    return {record.pid: row for row, record in enumerate(records) if record.pid in wanted}


def publish(adapter: PresentationAdapter, snapshot: Snapshot) -> dict[int, int]:
    """Render a snapshot on an adapter, carrying its selection over by PID."""
    selection = restore_selection(adapter.get_selected_keys(), snapshot.records)
    adapter.render_snapshot(snapshot.records, selection)
    return selection


class JsonLinesAdapter:
    """Writes one JSON object per snapshot to a text stream."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream
        self._selected: set[int] = set()

    def select(self, pids: Iterable[int]) -> None:
        self._selected = set(pids)

    def get_selected_keys(self) -> set[int]:
        return set(self._selected)

    def render_snapshot(
        self, records: Sequence[ProcessRecord], selection: dict[int, int]
    ) -> None:
        self._selected = set(selection)
        line = {
            "selected": sorted(selection),
            "processes": [
                {
                    "pid": record.pid,
                    "name": record.name,
                    "memory_mb": round(record.memory_mb, 2),
                    "cpu_percent": round(record.cpu_percent, 2),
                }
                for record in records
            ],
        }
        self._stream.write(json.dumps(line) + "\n")
        self._stream.flush()
        logger.debug("Wrote snapshot with %d processes", len(records))

"""procmon - Main Textual application."""

import logging
import sys
from collections.abc import Sequence
from queue import Empty, Queue
from typing import TextIO

from textual.app import App, ComposeResult
from textual.containers import Container
from textual.message import Message
from textual.widgets import DataTable, Footer, Static

from procmon.config import MonitorConfig, parse_args
from procmon.errors import InitializationError, SamplingError
from procmon.log_config import setup_logging
from procmon.models import ProcessRecord, Snapshot
from procmon.monitor import MonitorEvent, ProcessMonitor
from procmon.ordering import SortColumn
from procmon.presentation import JsonLinesAdapter, publish
from procmon.sampler import Sampler

logger = logging.getLogger(__name__)

COLUMNS: list[tuple[str, SortColumn, int | None]] = [
    ("PID", SortColumn.PID, 8),
    ("Name", SortColumn.NAME, None),
    ("Memory (MB)", SortColumn.MEMORY, 12),
    ("CPU (%)", SortColumn.CPU, 9),
]


class StatusLine(Static):
    """One-line summary of the last snapshot."""

    DEFAULT_CSS = """
    StatusLine {
        height: 1;
        padding: 0 1;
        background: $surface;
    }
    """

    def show_snapshot(self, snapshot: Snapshot) -> None:
        """Summarize a snapshot."""
        self.update(
            f"Processes: {len(snapshot.records)} | "
            f"Skipped: {snapshot.discarded} | "
            f"Sort: {snapshot.ordering.label}"
        )


class ProcessTable(Container):
    """Process data table; restores the selected row by PID after refresh."""

    DEFAULT_CSS = """
    ProcessTable {
        height: 1fr;
        border: solid $primary;
    }
    """

    class SortClicked(Message):
        """Posted when a column header is clicked."""

        def __init__(self, column: SortColumn) -> None:
            super().__init__()
            self.column = column

    def __init__(self, *args, **kwargs) -> None:
        """Initialize ProcessTable."""
        super().__init__(*args, **kwargs)
        self._row_pids: list[int] = []

    @property
    def row_pids(self) -> list[int]:
        """PIDs in display order."""
        return list(self._row_pids)

    def compose(self) -> ComposeResult:
        """Compose the process table."""
        yield DataTable(id="process-table")

    def on_mount(self) -> None:
        """Initialize the data table when mounted."""
        table = self.query_one("#process-table", DataTable)
        table.cursor_type = "row"
        for label, column, width in COLUMNS:
            table.add_column(label, key=column.value, width=width)

    def get_selected_keys(self) -> set[int]:
        """Return the PID under the row cursor."""
        table = self.query_one("#process-table", DataTable)
        row = table.cursor_row
        if table.row_count == 0 or row is None or not 0 <= row < len(self._row_pids):
            return set()
        return {self._row_pids[row]}

    def render_snapshot(
        self, records: Sequence[ProcessRecord], selection: dict[int, int]
    ) -> None:
        """Replace the table rows with ``records`` and move the cursor to the selection."""
        table = self.query_one("#process-table", DataTable)
        table.clear()
        for record in records:
            table.add_row(
                str(record.pid),
                record.name,
                record.memory_display,
                record.cpu_display,
                key=str(record.pid),
            )
        self._row_pids = [record.pid for record in records]

        if selection:
            table.move_cursor(row=min(selection.values()))

    def on_data_table_header_selected(self, event: DataTable.HeaderSelected) -> None:
        """Turn a header click into a sort request."""
        event.stop()
        try:
            column = SortColumn(str(event.column_key.value))
        except ValueError:
            return  # Unknown column key
        self.post_message(self.SortClicked(column))


class ProcessMonitorApp(App):
    """Main procmon application."""

    TITLE = "procmon"
    SUB_TITLE = "Process Monitor"

    CSS = """
    Screen {
        layout: vertical;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("r", "restart", "Restart"),
        ("1", "sort('pid')", "PID"),
        ("2", "sort('name')", "Name"),
        ("3", "sort('memory')", "Memory"),
        ("4", "sort('cpu')", "CPU"),
    ]

    def __init__(
        self,
        config: MonitorConfig | None = None,
        sampler: Sampler | None = None,
        cpu_count: int | None = None,
    ) -> None:
        """
        Initialize the ProcessMonitorApp.

        Raises:
            InitializationError: If the monitor cannot be created.
        """
        super().__init__()
        self._config = config or MonitorConfig()
        self._update_queue: Queue[MonitorEvent] = Queue()
        self._monitor = ProcessMonitor(
            self._update_queue, self._config, sampler=sampler, cpu_count=cpu_count
        )

    @property
    def monitor(self) -> ProcessMonitor:
        return self._monitor

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield StatusLine("Waiting for first sample...", id="status-line")
        yield ProcessTable()
        yield Footer()

    def on_mount(self) -> None:
        """Start the monitor when the app is mounted."""
        self._monitor.start()
        self.set_interval(0.2, self._check_for_updates)

    def _check_for_updates(self) -> None:
        """Drain the queue and show the most recent snapshot."""
        latest: Snapshot | None = None
        while True:
            try:
                event = self._update_queue.get_nowait()
            except Empty:
                break
            if isinstance(event, SamplingError):
                self.notify(
                    f"Monitoring stopped: {event}. Press r to restart.",
                    severity="error",
                    timeout=10,
                )
            else:
                latest = event

        if latest is not None:
            self.show_snapshot(self._monitor.reorder(latest))

    def show_snapshot(self, snapshot: Snapshot) -> None:
        """Publish a snapshot to the table, keeping the selected PID."""
        publish(self.query_one(ProcessTable), snapshot)
        self.query_one("#status-line", StatusLine).show_snapshot(snapshot)

    def apply_sort_click(self, column: SortColumn) -> None:
        """Re-sort the last snapshot without waiting for the next tick."""
        snapshot = self._monitor.on_sort_column_clicked(column)
        if snapshot is not None:
            self.show_snapshot(snapshot)
        else:
            self.notify(f"Sort: {self._monitor.ordering.label}")

    def on_process_table_sort_clicked(self, message: ProcessTable.SortClicked) -> None:
        self.apply_sort_click(message.column)

    def action_sort(self, column: str) -> None:
        """Handle sort key bindings."""
        self.apply_sort_click(SortColumn(column))

    def action_restart(self) -> None:
        """Restart monitoring after it stopped on an error."""
        if self._monitor.is_running:
            return
        logger.info("Restarting monitoring")
        self._monitor.start()
        self.notify("Monitoring restarted")

    def action_quit(self) -> None:
        """Handle quit action with graceful cleanup."""
        self._monitor.stop()
        self.exit()


def stream_json(config: MonitorConfig, stream: TextIO | None = None) -> int:
    """
    Write snapshots as JSON lines until interrupted, a failure, or ``config.ticks``.

    Returns:
        Process exit status.
    """
    adapter = JsonLinesAdapter(stream or sys.stdout)
    update_queue: Queue[MonitorEvent] = Queue()
    monitor = ProcessMonitor(update_queue, config)
    monitor.start()
    published = 0
    try:
        while config.ticks is None or published < config.ticks:
            event = update_queue.get()
            if isinstance(event, SamplingError):
                print(f"procmon: {event}", file=sys.stderr)
                return 1
            publish(adapter, event)
            published += 1
    except KeyboardInterrupt:
        pass
    finally:
        monitor.stop()
    return 0


def main(argv: list[str] | None = None) -> None:
    """Entry point for procmon application."""
    config = parse_args(argv)
    setup_logging(config.log_level, config.log_file)

    try:
        if config.json_output:
            sys.exit(stream_json(config))
        app = ProcessMonitorApp(config)
    except InitializationError as exc:
        logger.critical("Cannot start monitoring: %s", exc)
        print(f"procmon: {exc}", file=sys.stderr)
        sys.exit(1)

    app.run()


if __name__ == "__main__":
    main()

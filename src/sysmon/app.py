"""sysmon - Main Textual application."""

from queue import Empty, Queue

import structlog
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, DataTable, Footer, Label, Static

from sysmon.controller import Frame, HeaderSummary, InteractionController
from sysmon.models import SignalKind, Snapshot
from sysmon.monitor import SnapshotReader, SystemMonitor
from sysmon.signals import describe, send_signal

log = structlog.get_logger()

# Table border (2) plus column header (1)
TABLE_CHROME_ROWS = 3


def usage_bar(percent: float, color: str, width: int = 20) -> str:
    """Render a percentage as a Rich markup bar."""
    bar_len = min(int(percent / (100 / width)), width)
    return f"[{color}]█[/{color}]" * bar_len + "[dim]░[/dim]" * (width - bar_len)


class HeaderStats(Static):
    """Header widget showing refresh/sort state, CPU and memory usage."""

    DEFAULT_CSS = """
    HeaderStats {
        height: auto;
        padding: 0 1;
        background: $surface;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._summary: HeaderSummary | None = None

    def compose(self) -> ComposeResult:
        yield Horizontal(
            Static(self._get_cpu_info(), id="cpu-info"),
            Static(self._get_mem_info(), id="mem-info"),
        )

    @property
    def summary(self) -> HeaderSummary | None:
        return self._summary

    def update_summary(self, summary: HeaderSummary) -> None:
        """Update the header from a frame's summary."""
        self._summary = summary
        self.query_one("#cpu-info", Static).update(self._get_cpu_info())
        self.query_one("#mem-info", Static).update(self._get_mem_info())

    def _get_cpu_info(self) -> str:
        summary = self._summary
        if summary is None:
            return "Loading CPU info..."
        cpu = summary.system_cpu_percent
        # Escaped brackets for the bar container
        return (
            f"CPU \\[{usage_bar(cpu, 'green')}] {cpu:6.2f}%\n"
            f"Refresh: {summary.refresh_interval}s | Sort: {summary.sort_mode.name}"
        )

    def _get_mem_info(self) -> str:
        summary = self._summary
        if summary is None or summary.mem_total_kb == 0:
            return "Loading memory info..."
        mem = summary.mem_percent
        return (
            f"Mem \\[{usage_bar(mem, 'cyan')}] "
            f"{summary.mem_used_kb // 1024}MB/{summary.mem_total_kb // 1024}MB ({mem:.2f}%)\n"
            f"Processes: {summary.process_count}"
        )


class ProcessTable(Container):
    """Container for the process data table.

    Only the visible slice of the list is loaded into the table; the
    controller owns scrolling and selection.
    """

    DEFAULT_CSS = """
    ProcessTable {
        height: 1fr;
        border: solid $primary;
    }

    ProcessTable DataTable {
        height: 1fr;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._shown_pids: list[int] = []

    @property
    def shown_pids(self) -> list[int]:
        """PIDs currently shown, top to bottom."""
        return list(self._shown_pids)

    @property
    def body_rows(self) -> int:
        """Number of process rows that fit in the table."""
        return max(1, self.size.height - TABLE_CHROME_ROWS)

    def compose(self) -> ComposeResult:
        yield DataTable(id="process-table")

    def on_mount(self) -> None:
        table = self.query_one("#process-table", DataTable)
        table.cursor_type = "row"
        # Key handling belongs to the app, not the table
        table.can_focus = False

        table.add_column("PID", key="pid", width=7)
        table.add_column("USER", key="user", width=10)
        table.add_column("%CPU", key="cpu", width=7)
        table.add_column("MEM(%)", key="mem", width=8)
        table.add_column("RSS", key="rss", width=9)
        table.add_column("NAME", key="name")

    def show(self, frame: Frame) -> None:
        """Replace the table contents with the frame's visible slice."""
        table = self.query_one("#process-table", DataTable)
        table.clear()
        table.add_rows(
            (
                str(entry.pid),
                entry.owner[:10],
                f"{entry.cpu_percent:6.2f}",
                f"{entry.mem_percent:6.2f}",
                entry.memory_display,
                entry.name,
            )
            for entry in frame.rows
        )
        self._shown_pids = [entry.pid for entry in frame.rows]
        if frame.selected_row is not None:
            table.move_cursor(row=frame.selected_row)


class KillDialog(ModalScreen[SignalKind | None]):
    """Confirmation dialog for signalling a process."""

    DEFAULT_CSS = """
    KillDialog {
        align: center middle;
    }

    KillDialog > Vertical {
        width: auto;
        height: auto;
        padding: 1 2;
        border: thick $error;
        background: $surface;
    }

    KillDialog Horizontal {
        width: auto;
        height: auto;
    }
    """

    BINDINGS = [
        ("t", "choose('graceful')", "SIGTERM"),
        ("k", "choose('forceful')", "SIGKILL"),
        ("c", "cancel", "Cancel"),
        ("escape", "cancel", "Cancel"),
    ]

    def __init__(self, pid: int, name: str) -> None:
        super().__init__()
        self.pid = pid
        self.process_name = name

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Label(
                f"Send SIGTERM or SIGKILL to PID {self.pid} ({self.process_name})? "
                "(t=TERM / k=KILL / c=cancel)"
            )
            with Horizontal():
                yield Button("TERM", id="graceful", variant="warning")
                yield Button("KILL", id="forceful", variant="error")
                yield Button("Cancel", id="cancel")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "cancel":
            self.dismiss(None)
        else:
            self.dismiss(SignalKind(event.button.id))

    def action_choose(self, kind: str) -> None:
        self.dismiss(SignalKind(kind))

    def action_cancel(self) -> None:
        self.dismiss(None)


class SysmonApp(App):
    """Main sysmon application."""

    TITLE = "sysmon"
    SUB_TITLE = "Terminal System Monitor"

    CSS = """
    Screen {
        layout: vertical;
    }

    #header-stats {
        dock: top;
    }

    Horizontal {
        height: auto;
    }

    #cpu-info {
        width: 1fr;
        padding-right: 2;
    }

    #mem-info {
        width: 1fr;
        padding-left: 2;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("s", "sort", "Sort"),
        Binding("k", "kill", "Kill"),
        Binding("r", "refresh", "Refresh"),
        Binding("up", "move_up", "Up", show=False),
        Binding("down", "move_down", "Down", show=False),
        Binding("pageup", "page_up", "Page Up", show=False),
        Binding("pagedown", "page_down", "Page Down", show=False),
    ]

    # How often the UI drains the snapshot queue (seconds)
    UPDATE_INTERVAL = 0.1
    # Unread snapshots kept while the UI is not draining
    QUEUE_BACKLOG = 2

    LIST_ACTIONS = frozenset(
        {"sort", "kill", "refresh", "move_up", "move_down", "page_up", "page_down"}
    )

    def __init__(
        self,
        refresh_interval: int = 2,
        reader: SnapshotReader | None = None,
        sender=send_signal,
    ) -> None:
        """Initialize the SysmonApp."""
        super().__init__()
        self._update_queue: Queue[Snapshot] = Queue(maxsize=self.QUEUE_BACKLOG)
        self._controller = InteractionController(
            refresh_interval=refresh_interval,
            sender=sender,
        )
        self._monitor = SystemMonitor(
            self._update_queue,
            poll_rate=self._controller.state.refresh_interval,
            reader=reader,
        )

    @property
    def controller(self) -> InteractionController:
        return self._controller

    def compose(self) -> ComposeResult:
        yield HeaderStats(id="header-stats")
        yield ProcessTable()
        yield Footer()

    @property
    def _dialog_open(self) -> bool:
        return isinstance(self.screen, KillDialog)

    def check_action(self, action: str, parameters: tuple[object, ...]) -> bool | None:
        """Ignore list commands while the kill dialog is up."""
        if self._dialog_open and action in self.LIST_ACTIONS:
            return False
        return True

    def on_mount(self) -> None:
        """Start the system monitor when the app is mounted."""
        log.info("app_started", refresh_interval=self._controller.state.refresh_interval)
        self._monitor.start()
        self.set_interval(self.UPDATE_INTERVAL, self._check_for_updates)

    def on_resize(self) -> None:
        self.call_after_refresh(self._sync_body_rows)

    def _sync_body_rows(self) -> None:
        rows = self._process_table().body_rows
        if rows != self._controller.visible_rows:
            self._render_frame(self._controller.resize(rows))

    def _check_for_updates(self) -> None:
        """Drain the queue and run a refresh cycle with the newest snapshot."""
        # Sampling is suspended while the kill dialog holds focus
        if self._dialog_open:
            return

        if self._controller.consume_refresh_request():
            self._monitor.request_refresh()

        snapshot = None
        while True:
            try:
                snapshot = self._update_queue.get_nowait()
            except Empty:
                break

        if snapshot is not None:
            self._controller.resize(self._process_table().body_rows)
            self._render_frame(self._controller.refresh(snapshot))

    def _render_frame(self, frame: Frame) -> None:
        main = self.screen_stack[0]
        main.query_one("#header-stats", HeaderStats).update_summary(frame.header)
        main.query_one(ProcessTable).show(frame)

    def _process_table(self) -> ProcessTable:
        return self.screen_stack[0].query_one(ProcessTable)

    def action_move_up(self) -> None:
        self._render_frame(self._controller.move_up())

    def action_move_down(self) -> None:
        self._render_frame(self._controller.move_down())

    def action_page_up(self) -> None:
        self._render_frame(self._controller.page_up())

    def action_page_down(self) -> None:
        self._render_frame(self._controller.page_down())

    def action_sort(self) -> None:
        """Cycle through sort modes."""
        frame = self._controller.toggle_sort()
        self._render_frame(frame)
        self.notify(f"Sort: {frame.header.sort_mode.name}")

    def action_refresh(self) -> None:
        self._controller.force_refresh()

    def action_kill(self) -> None:
        """Ask how to signal the selected process."""
        entry = self._controller.selected_entry()
        if entry is None:
            return
        pid = entry.pid
        self.push_screen(
            KillDialog(pid, entry.name),
            callback=lambda kind: self._on_kill_choice(pid, kind),
        )

    def _on_kill_choice(self, pid: int, kind: SignalKind | None) -> None:
        result = self._controller.kill(pid, kind)
        if result is None:
            return
        if result.ok:
            self.notify(describe(result))
        else:
            self.notify(describe(result), severity="error", timeout=10)

    def action_quit(self) -> None:
        """Handle quit action with graceful cleanup."""
        self._monitor.stop()
        log.info("app_stopped")
        self.exit()

"""Interaction state machine for sysmon.

The controller owns all mutable UI state: sort mode, selection, scroll
offset, refresh cadence and the previous snapshot. Input handlers and the
refresh cycle mutate it synchronously and hand back a Frame describing
what the renderer should draw. It has no knowledge of the terminal.
"""

from collections.abc import Callable
from dataclasses import dataclass

from sysmon.models import KillResult, Rates, SignalKind, Snapshot, SortMode, ViewEntry
from sysmon.rates import compute_rates
from sysmon.signals import send_signal
from sysmon.view import build_view

DEFAULT_REFRESH_INTERVAL = 2
MIN_REFRESH_INTERVAL = 1


@dataclass(slots=True)
class InteractionState:
    """Mutable state owned by a single InteractionController."""

    sort_mode: SortMode = SortMode.CPU
    selected_index: int = 0
    scroll_offset: int = 0
    refresh_interval: int = DEFAULT_REFRESH_INTERVAL
    previous_snapshot: Snapshot | None = None
    refresh_requested: bool = False


@dataclass(slots=True, frozen=True)
class HeaderSummary:
    """Header line contents."""

    refresh_interval: int
    sort_mode: SortMode
    system_cpu_percent: float
    mem_used_kb: int
    mem_total_kb: int
    process_count: int

    @property
    def mem_percent(self) -> float:
        if self.mem_total_kb <= 0:
            return 0.0
        return 100.0 * self.mem_used_kb / self.mem_total_kb


@dataclass(slots=True, frozen=True)
class Frame:
    """Everything the renderer needs for one draw."""

    header: HeaderSummary
    rows: tuple[ViewEntry, ...]
    selected_row: int | None  # Index into rows, None when the list is empty
    selected_index: int
    scroll_offset: int


class InteractionController:
    """Drives the rate engine and view builder and applies user commands."""

    def __init__(
        self,
        refresh_interval: int = DEFAULT_REFRESH_INTERVAL,
        visible_rows: int = 1,
        sender: Callable[[int, SignalKind], KillResult] = send_signal,
    ) -> None:
        self.state = InteractionState(
            refresh_interval=max(MIN_REFRESH_INTERVAL, refresh_interval)
        )
        self._visible_rows = max(1, visible_rows)
        self._sender = sender
        self._view: list[ViewEntry] = []
        self._rates: Rates | None = None
        self._system_cpu_percent = 0.0
        self._mem_used_kb = 0
        self._mem_total_kb = 0

    @property
    def view(self) -> tuple[ViewEntry, ...]:
        """The last rendered list, in display order."""
        return tuple(self._view)

    @property
    def visible_rows(self) -> int:
        return self._visible_rows

    # -- refresh cycle -----------------------------------------------------

    def refresh(self, snapshot: Snapshot) -> Frame:
        """
        Run one sampling cycle against a freshly taken snapshot.

        Rates are computed against the stored previous snapshot, the view is
        rebuilt and selection/scroll are reconciled with it. The snapshot
        then becomes the new previous one.
        """
        rates = compute_rates(
            self.state.previous_snapshot, snapshot, fallback_mem_total_kb=self._mem_total_kb
        )
        if rates.system_cpu_percent is not None:
            self._system_cpu_percent = rates.system_cpu_percent
        if snapshot.system is not None:
            self._mem_used_kb = snapshot.system.mem_used_kb
            self._mem_total_kb = snapshot.system.mem_total_kb

        self._rates = rates
        self._view = build_view(snapshot, rates, self.state.sort_mode)
        self._clamp_selection()
        self._scroll_to_selection()

        self.state.previous_snapshot = snapshot
        return self.frame()

    def force_refresh(self) -> None:
        """Ask for a new sample without waiting for the refresh interval."""
        self.state.refresh_requested = True

    def consume_refresh_request(self) -> bool:
        """Return whether a refresh was requested, clearing the request."""
        requested = self.state.refresh_requested
        self.state.refresh_requested = False
        return requested

    # -- input commands ----------------------------------------------------

    def move_up(self) -> Frame:
        return self._move_to(self.state.selected_index - 1)

    def move_down(self) -> Frame:
        return self._move_to(self.state.selected_index + 1)

    def page_up(self) -> Frame:
        return self._move_to(self.state.selected_index - self._visible_rows)

    def page_down(self) -> Frame:
        return self._move_to(self.state.selected_index + self._visible_rows)

    def toggle_sort(self) -> Frame:
        """
        Cycle the sort mode and re-sort the current snapshot.

        Selection stays at the same list position, so it may now point at
        a different process.
        """
        self.state.sort_mode = self.state.sort_mode.next()
        current = self.state.previous_snapshot
        if current is not None and self._rates is not None:
            self._view = build_view(current, self._rates, self.state.sort_mode)
        self._clamp_selection()
        self._scroll_to_selection()
        return self.frame()

    def resize(self, visible_rows: int) -> Frame:
        """Update the number of rows the body can show."""
        self._visible_rows = max(1, visible_rows)
        self._scroll_to_selection()
        return self.frame()

    def selected_entry(self) -> ViewEntry | None:
        """Return the entry under the selection in the last rendered list."""
        if 0 <= self.state.selected_index < len(self._view):
            return self._view[self.state.selected_index]
        return None

    def kill(self, pid: int, kind: SignalKind | None) -> KillResult | None:
        """
        Signal a process chosen from the kill dialog.

        ``kind`` is None when the dialog was cancelled. A refresh is
        requested either way so the list reflects the outcome promptly.
        """
        result = None
        if kind is not None:
            result = self._sender(pid, kind)
        self.force_refresh()
        return result

    # -- rendering ---------------------------------------------------------

    def frame(self) -> Frame:
        """Describe the current visible slice and header."""
        state = self.state
        start = state.scroll_offset
        rows = tuple(self._view[start : start + self._visible_rows])
        selected_row = state.selected_index - start if rows else None
        return Frame(
            header=HeaderSummary(
                refresh_interval=state.refresh_interval,
                sort_mode=state.sort_mode,
                system_cpu_percent=self._system_cpu_percent,
                mem_used_kb=self._mem_used_kb,
                mem_total_kb=self._mem_total_kb,
                process_count=len(self._view),
            ),
            rows=rows,
            selected_row=selected_row,
            selected_index=state.selected_index,
            scroll_offset=state.scroll_offset,
        )

    def _move_to(self, index: int) -> Frame:
        self.state.selected_index = index
        self._clamp_selection()
        self._scroll_to_selection()
        return self.frame()

    def _clamp_selection(self) -> None:
        last = max(0, len(self._view) - 1)
        self.state.selected_index = min(max(0, self.state.selected_index), last)

    def _scroll_to_selection(self) -> None:
        """Adjust the scroll offset so the selected row is visible."""
        state = self.state
        if state.selected_index < state.scroll_offset:
            state.scroll_offset = state.selected_index
        elif state.selected_index >= state.scroll_offset + self._visible_rows:
            state.scroll_offset = state.selected_index - self._visible_rows + 1
        # Don't leave blank rows below a shortened list
        last_page = max(0, len(self._view) - self._visible_rows)
        state.scroll_offset = max(0, min(state.scroll_offset, last_page))

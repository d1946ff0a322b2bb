"""Data models for sysmon."""

from dataclasses import dataclass, field
from enum import Enum


class SortMode(Enum):
    """Sort modes for the process list."""

    CPU = "cpu"
    MEM = "mem"
    PID = "pid"

    def next(self) -> "SortMode":
        """Return the mode that follows this one (CPU -> MEM -> PID -> CPU)."""
        modes = list(SortMode)
        return modes[(modes.index(self) + 1) % len(modes)]


class SignalKind(Enum):
    """Termination signal choices offered by the kill dialog."""

    GRACEFUL = "graceful"  # SIGTERM
    FORCEFUL = "forceful"  # SIGKILL


@dataclass(slots=True, frozen=True)
class ProcessSample:
    """Immutable sample of one process at one instant."""

    pid: int
    name: str
    owner_id: int | None
    owner: str
    cumulative_cpu_ticks: int
    resident_memory_kb: int
    create_time: float | None = None


@dataclass(slots=True, frozen=True)
class SystemSample:
    """System-wide counters at one instant.

    ``cpu_ticks`` holds one cumulative counter per category named in
    ``cpu_categories`` (user, nice, system, idle, iowait, ...).
    """

    cpu_categories: tuple[str, ...]
    cpu_ticks: tuple[int, ...]
    mem_total_kb: int
    mem_available_kb: int

    @property
    def total_ticks(self) -> int:
        """Total CPU tick budget since boot."""
        return sum(self.cpu_ticks)

    @property
    def idle_ticks(self) -> int:
        """Ticks spent idle or waiting on I/O."""
        return sum(
            ticks
            for name, ticks in zip(self.cpu_categories, self.cpu_ticks)
            if name in ("idle", "iowait")
        )

    @property
    def mem_used_kb(self) -> int:
        return max(0, self.mem_total_kb - self.mem_available_kb)


@dataclass(slots=True, frozen=True)
class Snapshot:
    """Point-in-time capture of system and process counters.

    ``system`` is None when the system-wide counters could not be read.
    """

    system: SystemSample | None
    processes: dict[int, ProcessSample] = field(default_factory=dict)
    taken_at: float = 0.0


@dataclass(slots=True, frozen=True)
class ProcessRates:
    """Derived utilization for one process."""

    cpu_percent: float = 0.0
    mem_percent: float = 0.0


@dataclass(slots=True, frozen=True)
class Rates:
    """Output of the rate engine for one sampling cycle."""

    per_process: dict[int, ProcessRates]
    system_cpu_percent: float | None


@dataclass(slots=True, frozen=True)
class ViewEntry:
    """One render-ready row of the process list."""

    pid: int
    owner: str
    name: str
    cpu_percent: float
    mem_percent: float
    resident_memory_kb: int
    memory_display: str


@dataclass(slots=True, frozen=True)
class KillResult:
    """Outcome of a signal delivery attempt."""

    pid: int
    kind: SignalKind
    ok: bool
    reason: str = ""

"""View builder: projects a snapshot and its rates into a sorted list."""

from collections.abc import Callable

from sysmon.models import ProcessRates, Rates, Snapshot, SortMode, ViewEntry

_NO_RATES = ProcessRates()


def format_kb(size_kb: int) -> str:
    """Format a size in kilobytes as a human-readable string."""
    if size_kb > 1024 * 1024:
        return f"{size_kb / (1024 * 1024):.2f}GB"
    if size_kb > 1024:
        return f"{size_kb / 1024:.1f}MB"
    return f"{size_kb}KB"


def sort_key(mode: SortMode) -> Callable[[ViewEntry], tuple]:
    """Return the key function that orders entries for a sort mode.

    Metric modes sort descending with ascending pid as the tie-break, so
    every mode is a total order.
    """
    key_func = {
        SortMode.CPU: lambda e: (-e.cpu_percent, e.pid),
        SortMode.MEM: lambda e: (-e.mem_percent, e.pid),
        SortMode.PID: lambda e: (e.pid,),
    }
    return key_func[mode]


def build_view(current: Snapshot, rates: Rates, sort_mode: SortMode) -> list[ViewEntry]:
    """Build the ordered list of entries, one per pid in the current snapshot."""
    entries = []
    for pid, proc in current.processes.items():
        proc_rates = rates.per_process.get(pid, _NO_RATES)
        entries.append(
            ViewEntry(
                pid=pid,
                owner=proc.owner,
                name=proc.name,
                cpu_percent=proc_rates.cpu_percent,
                mem_percent=proc_rates.mem_percent,
                resident_memory_kb=proc.resident_memory_kb,
                memory_display=format_kb(proc.resident_memory_kb),
            )
        )
    entries.sort(key=sort_key(sort_mode))
    return entries

"""Rate engine: turns two snapshots into utilization percentages."""

from sysmon.models import ProcessRates, ProcessSample, Rates, Snapshot


def _clamp_percent(value: float) -> float:
    return min(100.0, max(0.0, value))


def process_cpu_delta(previous: ProcessSample | None, current: ProcessSample) -> int:
    """
    Ticks consumed by a process between two samples.

    A process with no previous sample, or whose previous sample belongs to
    another process that held the same pid, reports no delta: this cycle
    only establishes its baseline. A counter that moved backwards means the
    pid was reused, so the delta is 0 as well.
    """
    if previous is None:
        return 0
    if (
        previous.create_time is not None
        and current.create_time is not None
        and previous.create_time != current.create_time
    ):
        return 0
    return max(0, current.cumulative_cpu_ticks - previous.cumulative_cpu_ticks)


def compute_rates(
    previous: Snapshot | None,
    current: Snapshot,
    fallback_mem_total_kb: int = 0,
) -> Rates:
    """
    Compute system and per-process utilization between two snapshots.

    Per-process CPU percentages share the system-wide tick denominator so
    they are on the same scale as the system figure. Memory percentages
    depend only on the current snapshot's totals.

    ``system_cpu_percent`` is None when either snapshot lacks system counters.
    Memory percentages then use ``fallback_mem_total_kb``, the last known total.
    """
    system = current.system
    prev_system = previous.system if previous is not None else None

    total_delta: int | None = None
    system_cpu_percent: float | None = None
    if system is not None and prev_system is not None:
        total_delta = system.total_ticks - prev_system.total_ticks
        if total_delta <= 0:
            # No CPU budget elapsed: nothing was busy
            total_delta = 1
            system_cpu_percent = 0.0
        else:
            idle_delta = max(0, system.idle_ticks - prev_system.idle_ticks)
            system_cpu_percent = _clamp_percent(100.0 * (1.0 - idle_delta / total_delta))

    mem_total_kb = system.mem_total_kb if system is not None else fallback_mem_total_kb
    prev_processes = previous.processes if previous is not None else {}

    per_process: dict[int, ProcessRates] = {}
    for pid, proc in current.processes.items():
        cpu_percent = 0.0
        if total_delta is not None:
            delta = process_cpu_delta(prev_processes.get(pid), proc)
            cpu_percent = _clamp_percent(100.0 * delta / total_delta)

        mem_percent = 0.0
        if mem_total_kb > 0:
            mem_percent = _clamp_percent(100.0 * proc.resident_memory_kb / mem_total_kb)

        per_process[pid] = ProcessRates(cpu_percent=cpu_percent, mem_percent=mem_percent)

    return Rates(per_process=per_process, system_cpu_percent=system_cpu_percent)

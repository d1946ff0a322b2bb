"""System sampling engine for sysmon."""

import pwd
import threading
import time
from functools import lru_cache
from queue import Empty, Full, Queue

import psutil
import structlog

from sysmon.models import ProcessSample, Snapshot, SystemSample

log = structlog.get_logger()

# Cumulative CPU times are reported in seconds; ticks use the Linux USER_HZ.
TICKS_PER_SECOND = 100
NAME_MAX_LEN = 32
MIN_POLL_RATE = 0.1


def to_ticks(seconds: float) -> int:
    """Convert cumulative CPU seconds to integer ticks."""
    return int(round(seconds * TICKS_PER_SECOND))


@lru_cache(maxsize=512)
def resolve_owner(uid: int | None) -> str:
    """Resolve a numeric user ID to a login name, falling back to the ID."""
    if uid is None:
        return "?"
    try:
        return pwd.getpwuid(uid).pw_name
    except KeyError:
        return str(uid)


class SnapshotReader:
    """
    Reads a complete Snapshot of the process table and system counters.

    Processes that vanish or deny access while being read are skipped;
    the snapshot as a whole always succeeds.
    """

    # Attributes to fetch per process
    ATTRS = ["pid", "name", "uids", "cpu_times", "memory_info", "create_time"]

    def __init__(self, clock=time.monotonic) -> None:
        self._clock = clock

    def take_snapshot(self) -> Snapshot:
        """Take a snapshot of the current system state."""
        system = self._read_system()
        processes = self._read_processes()
        return Snapshot(system=system, processes=processes, taken_at=self._clock())

    def _read_system(self) -> SystemSample | None:
        """Read system-wide CPU category counters and memory totals."""
        try:
            cpu = psutil.cpu_times()
            mem = psutil.virtual_memory()
        except (OSError, RuntimeError) as e:
            log.warning("system_counters_unavailable", error=str(e))
            return None

        return SystemSample(
            cpu_categories=tuple(cpu._fields),
            cpu_ticks=tuple(to_ticks(value) for value in cpu),
            mem_total_kb=mem.total // 1024,
            mem_available_kb=mem.available // 1024,
        )

    def _read_processes(self) -> dict[int, ProcessSample]:
        """
        Read all visible processes keyed by pid.

        Uses psutil.process_iter() with oneshot() for efficiency.
        """
        processes: dict[int, ProcessSample] = {}

        for proc in psutil.process_iter(attrs=self.ATTRS):
            try:
                with proc.oneshot():
                    sample = self._sample_from_info(proc.info)
            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                # Process exited between enumeration and read
                continue
            if sample is not None:
                processes[sample.pid] = sample

        return processes

    @staticmethod
    def _sample_from_info(info: dict) -> ProcessSample | None:
        """Build a ProcessSample from a psutil info dict, or None if unusable."""
        pid = info.get("pid")
        if pid is None:
            return None

        cpu_times = info.get("cpu_times")
        ticks = to_ticks(cpu_times.user + cpu_times.system) if cpu_times else 0

        mem_info = info.get("memory_info")
        rss_kb = mem_info.rss // 1024 if mem_info else 0

        uids = info.get("uids")
        owner_id = uids.real if uids else None

        return ProcessSample(
            pid=pid,
            name=(info.get("name") or "")[:NAME_MAX_LEN],
            owner_id=owner_id,
            owner=resolve_owner(owner_id),
            cumulative_cpu_ticks=ticks,
            resident_memory_kb=rss_kb,
            create_time=info.get("create_time"),
        )


class SystemMonitor:
    """
    Background sampler that pushes Snapshots to a thread-safe Queue.

    Runs in a separate daemon thread. Each queued Snapshot is complete and
    immutable, so consumers never observe a partially-updated sample. With a
    bounded queue, the oldest unread snapshots are dropped to make room.
    """

    def __init__(
        self,
        update_queue: Queue[Snapshot],
        poll_rate: float = 2.0,
        reader: SnapshotReader | None = None,
    ) -> None:
        """
        Initialize the SystemMonitor.

        Args:
            update_queue: Thread-safe queue to push snapshots to.
            poll_rate: How often to sample the system (in seconds). Default 2.0s.
            reader: Snapshot source. Defaults to a psutil-backed SnapshotReader.
        """
        self._queue = update_queue
        self._poll_rate = max(MIN_POLL_RATE, poll_rate)
        self._reader = reader or SnapshotReader()
        self._stop_event = threading.Event()
        self._wake_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def poll_rate(self) -> float:
        """Get the current poll rate."""
        return self._poll_rate

    @poll_rate.setter
    def poll_rate(self, value: float) -> None:
        """Set the poll rate."""
        self._poll_rate = max(MIN_POLL_RATE, value)

    @property
    def is_running(self) -> bool:
        """Check if the monitor thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the monitoring thread."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._poll_loop,
            daemon=True,
            name="SystemMonitor",
        )
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Stop the monitoring thread.

        Args:
            timeout: How long to wait for thread to stop (seconds).
        """
        self._stop_event.set()
        self._wake_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

    def request_refresh(self) -> None:
        """Take the next snapshot now instead of waiting out the poll rate."""
        self._wake_event.set()

    def _poll_loop(self) -> None:
        """Main polling loop running in the background thread."""
        while not self._stop_event.is_set():
            # Cleared before sampling so a request made mid-sample is not lost
            self._wake_event.clear()
            try:
                self._publish(self._reader.take_snapshot())
            except Exception:
                log.exception("snapshot_failed")

            self._wake_event.wait(timeout=self._poll_rate)

    def _publish(self, snapshot: Snapshot) -> None:
        """Queue a snapshot, dropping the oldest ones when the queue is full."""
        while True:
            try:
                self._queue.put_nowait(snapshot)
                return
            except Full:
                try:
                    self._queue.get_nowait()
                except Empty:
                    # Drained by the consumer in the meantime
                    pass

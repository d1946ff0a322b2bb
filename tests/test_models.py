"""Tests for sysmon data models."""

import pytest

from sysmon.models import ProcessSample, Snapshot, SortMode, SystemSample

from factories import make_process, make_system


def test_process_sample_creation():
    """Test ProcessSample dataclass creation."""
    sample = ProcessSample(
        pid=123,
        name="test_process",
        owner_id=1000,
        owner="testuser",
        cumulative_cpu_ticks=4200,
        resident_memory_kb=2048,
        create_time=1700000000.0,
    )

    assert sample.pid == 123
    assert sample.name == "test_process"
    assert sample.owner_id == 1000
    assert sample.owner == "testuser"
    assert sample.cumulative_cpu_ticks == 4200
    assert sample.resident_memory_kb == 2048
    assert sample.create_time == 1700000000.0


def test_process_sample_is_frozen():
    """Test that ProcessSample is immutable (frozen)."""
    sample = make_process(1)

    with pytest.raises(AttributeError):
        sample.pid = 999


def test_process_sample_uses_slots():
    """Test that ProcessSample uses __slots__ for memory efficiency."""
    assert not hasattr(make_process(1), "__dict__")


def test_snapshot_is_frozen():
    """Snapshots are immutable once produced."""
    snapshot = Snapshot(system=None)

    with pytest.raises(AttributeError):
        snapshot.system = make_system()


def test_system_sample_totals():
    """Total ticks sum every category; idle ticks sum idle and iowait."""
    system = make_system(busy=300, idle=600, iowait=100)

    assert system.total_ticks == 1000
    assert system.idle_ticks == 700


def test_system_sample_without_iowait():
    """Platforms without an iowait category count only idle."""
    system = SystemSample(
        cpu_categories=("user", "system", "idle"),
        cpu_ticks=(10, 20, 70),
        mem_total_kb=100,
        mem_available_kb=40,
    )

    assert system.total_ticks == 100
    assert system.idle_ticks == 70
    assert system.mem_used_kb == 60


class TestSortMode:
    """Tests for SortMode enum."""

    def test_sort_mode_values(self):
        assert SortMode.CPU.value == "cpu"
        assert SortMode.MEM.value == "mem"
        assert SortMode.PID.value == "pid"

    def test_sort_mode_cycles(self):
        """Sort modes cycle CPU -> MEM -> PID -> CPU."""
        assert SortMode.CPU.next() is SortMode.MEM
        assert SortMode.MEM.next() is SortMode.PID
        assert SortMode.PID.next() is SortMode.CPU

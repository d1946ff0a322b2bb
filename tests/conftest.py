"""Shared test fixtures for sysmon."""

import pytest

from factories import make_process, make_snapshot, make_system
from sysmon.models import Snapshot


@pytest.fixture
def two_snapshots() -> tuple[Snapshot, Snapshot]:
    """Previous/current pair: 100 ticks elapsed, 70 of them idle or waiting."""
    previous = make_snapshot(
        [make_process(1, ticks=500), make_process(2, ticks=100)],
        system=make_system(busy=300, idle=600, iowait=100),
    )
    current = make_snapshot(
        [make_process(1, ticks=520), make_process(2, ticks=110)],
        system=make_system(busy=330, idle=660, iowait=110),
    )
    return previous, current

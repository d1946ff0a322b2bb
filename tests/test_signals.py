"""Tests for signal delivery."""

import multiprocessing
import os
import signal
import time

import psutil

from sysmon.models import KillResult, SignalKind
from sysmon.signals import describe, send_signal


def sleeper(duration: float = 30.0) -> None:
    """A child process that sleeps for a given duration."""
    try:
        time.sleep(duration)
    except (KeyboardInterrupt, SystemExit):
        pass


def test_graceful_signal_terminates_child():
    p = multiprocessing.Process(target=sleeper)
    p.start()
    try:
        result = send_signal(p.pid, SignalKind.GRACEFUL)
        p.join(timeout=5.0)

        assert result == KillResult(pid=p.pid, kind=SignalKind.GRACEFUL, ok=True)
        assert not p.is_alive()
        assert p.exitcode == -signal.SIGTERM
    finally:
        if p.is_alive():
            p.kill()
            p.join(timeout=1.0)


def test_forceful_signal_kills_child():
    p = multiprocessing.Process(target=sleeper)
    p.start()
    try:
        result = send_signal(p.pid, SignalKind.FORCEFUL)
        p.join(timeout=5.0)

        assert result.ok
        assert p.exitcode == -signal.SIGKILL
    finally:
        if p.is_alive():
            p.kill()
            p.join(timeout=1.0)


def test_missing_process_reports_failure(monkeypatch):
    def no_such_process(pid):
        raise psutil.NoSuchProcess(pid)

    monkeypatch.setattr(psutil, "Process", no_such_process)

    result = send_signal(424242, SignalKind.GRACEFUL)

    assert not result.ok
    assert result.reason == "no such process"


def test_permission_denied_reports_failure(monkeypatch):
    class DeniedProcess:
        def __init__(self, pid):
            self.pid = pid

        def send_signal(self, sig):
            raise psutil.AccessDenied(self.pid)

    monkeypatch.setattr(psutil, "Process", DeniedProcess)

    result = send_signal(1, SignalKind.FORCEFUL)

    assert result == KillResult(
        pid=1, kind=SignalKind.FORCEFUL, ok=False, reason="permission denied"
    )


def test_describe():
    ok = KillResult(pid=os.getpid(), kind=SignalKind.GRACEFUL, ok=True)
    failed = KillResult(pid=1, kind=SignalKind.FORCEFUL, ok=False, reason="permission denied")

    assert describe(ok) == f"SIGTERM sent to PID {os.getpid()}"
    assert describe(failed) == "Failed to send SIGKILL to PID 1: permission denied"

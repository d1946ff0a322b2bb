"""Signal delivery for killing processes."""

import signal

import psutil
import structlog

from sysmon.models import KillResult, SignalKind

log = structlog.get_logger()

SIGNALS = {
    SignalKind.GRACEFUL: signal.SIGTERM,
    SignalKind.FORCEFUL: signal.SIGKILL,
}


def send_signal(pid: int, kind: SignalKind) -> KillResult:
    """Send a termination signal to a process, reporting failure instead of raising."""
    sig = SIGNALS[kind]
    try:
        psutil.Process(pid).send_signal(sig)
    except psutil.NoSuchProcess:
        log.warning("signal_failed", pid=pid, signal=sig.name, reason="no such process")
        return KillResult(pid=pid, kind=kind, ok=False, reason="no such process")
    except psutil.AccessDenied:
        log.warning("signal_failed", pid=pid, signal=sig.name, reason="permission denied")
        return KillResult(pid=pid, kind=kind, ok=False, reason="permission denied")

    log.info("signal_sent", pid=pid, signal=sig.name)
    return KillResult(pid=pid, kind=kind, ok=True)


def describe(result: KillResult) -> str:
    """Human-readable summary of a kill attempt."""
    name = SIGNALS[result.kind].name
    if result.ok:
        return f"{name} sent to PID {result.pid}"
    return f"Failed to send {name} to PID {result.pid}: {result.reason}"

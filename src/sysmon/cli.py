"""Command-line entry point for sysmon."""

import re

import click

from sysmon.controller import MIN_REFRESH_INTERVAL

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_refresh_interval(value: str | None, default: int) -> int:
    """
    Parse the refresh interval argument leniently.

    A leading integer is used ("3s" -> 3), anything else falls back to
    ``default``. Values below the minimum are clamped up to it.
    """
    if value is None:
        seconds = default
    else:
        match = _LEADING_INT.match(value)
        seconds = int(match.group(1)) if match else default
    return max(MIN_REFRESH_INTERVAL, seconds)


@click.command(context_settings={"ignore_unknown_options": True})
@click.argument("interval", required=False)
@click.version_option(package_name="sysmon")
def main(interval: str | None) -> None:
    """Live process and resource monitor.

    INTERVAL is the refresh interval in whole seconds (default 2).

    \b
    Keys: Up/Down move, PageUp/PageDown page, s sort (CPU/MEM/PID),
    k kill selected, r refresh now, q quit.
    """
    from sysmon.app import SysmonApp
    from sysmon.config import Config
    from sysmon.logging import configure

    try:
        config = Config.load()
    except ValueError as e:
        click.echo(f"{e}; using defaults", err=True)
        config = Config()

    configure(config)
    refresh_interval = parse_refresh_interval(interval, config.refresh_interval)
    SysmonApp(refresh_interval=refresh_interval).run()


if __name__ == "__main__":
    main()

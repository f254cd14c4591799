"""CLI entry point for pi-monitor. Uses Click for argument parsing."""

from __future__ import annotations

import asyncio
import logging

import click

from pi.monitor.config import (
    DEFAULT_LOGS,
    get_settings_path,
    load_settings,
    parse_monitor_options,
)
from pi.monitor.loop import run_monitor
from pi.monitor.types import MonitorConfigError


def _run(coro):
    """Run an async function synchronously."""
    return asyncio.run(coro)


@click.command()
@click.option("--logs", default=None, help=f"Glob pattern for log files to watch [default: {DEFAULT_LOGS}]")
@click.option("--warn-seconds", default=None, help="Idle seconds before warning state [default: 60]")
@click.option("--critical-seconds", default=None, help="Idle seconds before critical state [default: 120]")
@click.option("--ok-emoji", default=None, help="Symbol shown while logs are fresh")
@click.option("--warn-emoji", default=None, help="Symbol shown between warning and critical")
@click.option("--critical-emoji", default=None, help="Symbol shown for the full-width critical bar")
@click.option(
    "--decay-side",
    type=click.Choice(["left", "right"]),
    default=None,
    help="Which side empties as idle time grows [default: left]",
)
@click.option("--refresh-ms", default=None, help="Redraw interval in milliseconds [default: 250]")
@click.option("--width", default=None, help="Monitor width in columns, or auto [default: auto]")
@click.option("--hide-cursor/--no-hide-cursor", default=None, help="Hide the cursor while monitoring")
@click.option(
    "--clear-on-events/--no-clear-on-events",
    default=None,
    help="Clear the screen and redraw after a resize or Enter",
)
@click.option(
    "--terminal-profile",
    type=click.Choice(["auto", "apple-terminal", "iterm2", "warp", "generic"]),
    default=None,
    help="Terminal rendering profile [default: auto]",
)
@click.option(
    "--emoji-width",
    type=click.Choice(["auto", "1", "2"]),
    default=None,
    help="Columns one symbol occupies [default: auto]",
)
@click.option(
    "--glyph-style",
    type=click.Choice(["auto", "text", "image"]),
    default=None,
    help="Render symbols as text or inline images [default: auto]",
)
@click.option(
    "--color-mode",
    type=click.Choice(["auto", "dark", "light"]),
    default=None,
    help="Pick symbols for a dark or light background [default: auto]",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"]),
    default="warning",
    help="Diagnostics level, written to stderr",
)
def main(log_level, **flags):
    """Single-line terminal monitor for local log activity."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        raw = load_settings(get_settings_path())
        raw.update({k: v for k, v in flags.items() if v is not None})
        options = parse_monitor_options(raw)
    except MonitorConfigError as e:
        raise click.UsageError(str(e)) from e

    _run(run_monitor(options))


if __name__ == "__main__":
    main()

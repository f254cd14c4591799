"""The render loop: poll, render and redraw the status line on a fixed cadence.

The loop is a small state machine (``running -> draining -> stopped``). Its
only suspension point is the wait between ticks, which is interruptible by
the stop event. Signal handlers and the stdin reader only set the stop event
or the pending-clear flag; all drawing happens inside :meth:`RenderLoop.tick`.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import signal
import sys
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, Mapping, TextIO

from pi.monitor.render import render_line_with_width
from pi.monitor.terminal import MonitorTerminal, resolve_terminal_config
from pi.monitor.types import MonitorOptions, ResolvedTerminalConfig
from pi.monitor.watcher import LogGrowthWatcher

logger = logging.getLogger(__name__)

DEFAULT_TERMINAL_WIDTH = 120


class LoopState(str, Enum):
    RUNNING = "running"
    DRAINING = "draining"
    STOPPED = "stopped"


@dataclass
class RenderState:
    idle_start: float
    previous_width: int = 0
    pending_clear: bool = False


class RenderLoop:
    """Drive the watcher and renderer until the stop event is set.

    Example::

        loop = RenderLoop(options)
        await loop.run(stop_event)
    """

    def __init__(
        self,
        options: MonitorOptions,
        *,
        stream: TextIO | None = None,
        env: Mapping[str, str] | None = None,
        watcher: LogGrowthWatcher | None = None,
        config: ResolvedTerminalConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
        handle_signals: bool = True,
        stdin: TextIO | None = None,
    ) -> None:
        self._options = options
        self._terminal = MonitorTerminal(stream)
        self._watcher = watcher if watcher is not None else LogGrowthWatcher(options.logs)
        self._config = config if config is not None else resolve_terminal_config(options, env)
        self._clock = clock
        self._handle_signals = handle_signals
        self._stdin = stdin if stdin is not None else sys.stdin
        self._cursor_hidden = False
        self.state = LoopState.STOPPED
        self.render_state = RenderState(idle_start=clock())

    @property
    def config(self) -> ResolvedTerminalConfig:
        return self._config

    def request_clear(self) -> None:
        """Ask for a full-screen clear before the next redraw."""
        self.render_state.pending_clear = True

    def resolve_columns(self) -> int:
        if self._options.width != "auto":
            return self._options.width
        columns = self._terminal.columns
        if columns is not None and columns > 0:
            return columns
        return DEFAULT_TERMINAL_WIDTH

    def tick(self) -> None:
        now = self._clock()
        rs = self.render_state
        if self._watcher.scan_for_growth():
            rs.idle_start = now

        if rs.pending_clear:
            self._terminal.clear_screen()
            rs.previous_width = 0
            rs.pending_clear = False

        line, width = render_line_with_width(
            self._options,
            (now - rs.idle_start) * 1000,
            self.resolve_columns(),
            self._config,
        )
        pad = " " * max(0, rs.previous_width - width)
        self._terminal.write(f"{self._config.draw_prefix}{line}{pad}")
        rs.previous_width = width

    async def run(self, stop_event: asyncio.Event | None = None) -> None:
        """Tick until *stop_event* is set or the task is cancelled."""
        stop = stop_event if stop_event is not None else asyncio.Event()
        interval = self._options.refresh_ms / 1000
        self.render_state = RenderState(idle_start=self._clock())
        self.state = LoopState.RUNNING

        if (
            self._options.hide_cursor
            and self._config.hide_cursor_supported
            and self._terminal.is_interactive
        ):
            self._terminal.hide_cursor()
            self._cursor_hidden = True

        try:
            with self._subscriptions(stop):
                while not stop.is_set():
                    self.tick()
                    try:
                        await asyncio.wait_for(stop.wait(), timeout=interval)
                    except asyncio.TimeoutError:
                        continue
                    except asyncio.CancelledError:
                        logger.debug("Render loop cancelled")
                        break
                self.state = LoopState.DRAINING
        finally:
            if self._cursor_hidden:
                self._terminal.show_cursor()
                self._cursor_hidden = False
            self._terminal.write("\n")
            self.state = LoopState.STOPPED

    # -- private: signal scope ---------------------------------------------

    @contextlib.contextmanager
    def _subscriptions(self, stop: asyncio.Event) -> Iterator[None]:
        """Install signal and stdin hooks for the lifetime of the loop."""
        if not self._handle_signals:
            yield
            return

        loop = asyncio.get_running_loop()
        installed: list[int] = []
        reader_fd: int | None = None

        def _add(sig: int, handler: Callable[[], None]) -> None:
            try:
                loop.add_signal_handler(sig, handler)
                installed.append(sig)
            except (NotImplementedError, RuntimeError, ValueError) as e:
                logger.debug("Cannot handle signal %s: %s", sig, e)

        _add(signal.SIGINT, stop.set)
        _add(signal.SIGTERM, stop.set)

        if self._options.clear_on_events:
            sigwinch = getattr(signal, "SIGWINCH", None)
            if sigwinch is not None:
                _add(sigwinch, self.request_clear)
            reader_fd = self._watch_stdin(loop)

        try:
            yield
        finally:
            for sig in installed:
                loop.remove_signal_handler(sig)
            if reader_fd is not None:
                loop.remove_reader(reader_fd)

    def _watch_stdin(self, loop: asyncio.AbstractEventLoop) -> int | None:
        """Redraw from scratch when Enter scrolls the status line away."""
        try:
            if self._stdin is None or not self._stdin.isatty():
                return None
            fd = self._stdin.fileno()
        except (ValueError, OSError):
            return None

        def _on_readable() -> None:
            try:
                data = os.read(fd, 4096)
            except OSError:
                return
            if not data:
                # EOF: stop polling a closed stdin
                loop.remove_reader(fd)
                return
            if b"\n" in data or b"\r" in data:
                self.request_clear()

        try:
            loop.add_reader(fd, _on_readable)
        except (NotImplementedError, OSError, ValueError) as e:
            logger.debug("Cannot watch stdin: %s", e)
            return None
        return fd


async def run_monitor(
    options: MonitorOptions,
    *,
    stream: TextIO | None = None,
    env: Mapping[str, str] | None = None,
) -> None:
    """Run the monitor until SIGINT/SIGTERM."""
    loop = RenderLoop(options, stream=stream, env=env)
    logger.info(
        "Monitoring %s (profile=%s, style=%s)",
        options.logs,
        loop.config.profile,
        loop.config.glyph_style,
    )
    await loop.run()

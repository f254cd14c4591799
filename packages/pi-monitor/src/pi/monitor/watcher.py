"""Polling log-growth detection.

Tracks ``(st_dev, st_ino, st_size)`` for every path matching a glob so that
appends, truncation and rotation can be told apart without file-change
notifications.
"""

from __future__ import annotations

import glob
import logging
import os

from pi.monitor.types import FileState

logger = logging.getLogger(__name__)


class LogGrowthWatcher:
    """Report whether any file matching *pattern* grew since the last scan."""

    def __init__(self, pattern: str) -> None:
        self.pattern = os.path.expanduser(pattern)
        self._states: dict[str, FileState] = {}

    @property
    def tracked_paths(self) -> list[str]:
        return sorted(self._states)

    def scan_for_growth(self) -> bool:
        saw_growth = False
        matched = set(glob.glob(self.pattern, recursive=True))

        for tracked in list(self._states):
            if tracked not in matched:
                logger.debug("No longer tracking %s", tracked)
                del self._states[tracked]

        for path in sorted(matched):
            try:
                st = os.stat(path)
            except OSError as e:
                logger.debug("Dropping %s: %s", path, e)
                self._states.pop(path, None)
                continue

            state = self._states.get(path)
            if state is None:
                # Baseline at EOF so existing contents don't count as activity
                self._states[path] = FileState(dev=st.st_dev, ino=st.st_ino, size=st.st_size)
                logger.debug("Tracking %s from offset %d", path, st.st_size)
                continue

            if state.dev != st.st_dev or state.ino != st.st_ino:
                logger.debug("%s was rotated", path)
                state.dev = st.st_dev
                state.ino = st.st_ino
                state.size = 0

            if st.st_size < state.size:
                # Anything rewritten after truncation is reported on the next scan
                logger.debug("%s was truncated", path)
                state.size = 0
                continue

            if st.st_size > state.size:
                saw_growth = True
                state.size = st.st_size

        return saw_growth

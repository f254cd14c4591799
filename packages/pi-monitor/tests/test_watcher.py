"""Tests for pi.monitor.watcher."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from pi.monitor.watcher import LogGrowthWatcher


def _append(path: Path, text: str) -> None:
    with open(path, "a", encoding="utf-8") as f:
        f.write(text)


@pytest.fixture
def log_dir(tmp_path: Path) -> Path:
    d = tmp_path / "logs"
    d.mkdir()
    return d


class TestLogGrowthWatcher:
    def test_existing_content_is_not_growth(self, log_dir: Path) -> None:
        log_path = log_dir / "pi-test.log"
        log_path.write_text("seed\n", encoding="utf-8")

        watcher = LogGrowthWatcher(str(log_dir / "pi-*.log"))
        assert watcher.scan_for_growth() is False

    def test_append_is_reported_once(self, log_dir: Path) -> None:
        log_path = log_dir / "pi-test.log"
        log_path.write_text("seed\n", encoding="utf-8")
        watcher = LogGrowthWatcher(str(log_dir / "pi-*.log"))
        watcher.scan_for_growth()

        _append(log_path, "line-1\n")
        assert watcher.scan_for_growth() is True
        assert watcher.scan_for_growth() is False

    def test_truncate_then_append(self, log_dir: Path) -> None:
        log_path = log_dir / "pi-test.log"
        log_path.write_text("seed\n", encoding="utf-8")
        watcher = LogGrowthWatcher(str(log_dir / "pi-*.log"))
        watcher.scan_for_growth()
        _append(log_path, "line-1\n")
        assert watcher.scan_for_growth() is True

        os.truncate(log_path, 0)
        assert watcher.scan_for_growth() is False

        _append(log_path, "line-2\n")
        assert watcher.scan_for_growth() is True

    def test_partial_truncation_is_not_growth_on_that_scan(self, log_dir: Path) -> None:
        log_path = log_dir / "pi-test.log"
        log_path.write_text("0123456789", encoding="utf-8")
        watcher = LogGrowthWatcher(str(log_dir / "pi-*.log"))
        watcher.scan_for_growth()

        os.truncate(log_path, 3)
        assert watcher.scan_for_growth() is False
        # Measured from zero after the truncation
        assert watcher.scan_for_growth() is True
        assert watcher.scan_for_growth() is False

    def test_rotation_is_detected_as_growth(self, log_dir: Path) -> None:
        log_path = log_dir / "pi-test.log"
        log_path.write_text("seed\n", encoding="utf-8")
        watcher = LogGrowthWatcher(str(log_dir / "pi-*.log"))
        watcher.scan_for_growth()

        os.rename(log_path, log_dir / "pi-test.log.1")
        log_path.write_text("line-after-rotate\n", encoding="utf-8")
        assert watcher.scan_for_growth() is True
        assert watcher.scan_for_growth() is False

    def test_full_sequence(self, log_dir: Path) -> None:
        log_path = log_dir / "pi-test.log"
        log_path.write_text("seed\n", encoding="utf-8")
        watcher = LogGrowthWatcher(str(log_dir / "pi-*.log"))

        assert watcher.scan_for_growth() is False
        _append(log_path, "line-1\n")
        assert watcher.scan_for_growth() is True
        assert watcher.scan_for_growth() is False
        os.truncate(log_path, 0)
        assert watcher.scan_for_growth() is False
        _append(log_path, "line-2\n")
        assert watcher.scan_for_growth() is True
        os.rename(log_path, f"{log_path}.1")
        log_path.write_text("line-after-rotate\n", encoding="utf-8")
        assert watcher.scan_for_growth() is True

    def test_new_file_is_baselined(self, log_dir: Path) -> None:
        watcher = LogGrowthWatcher(str(log_dir / "pi-*.log"))
        assert watcher.scan_for_growth() is False

        (log_dir / "pi-new.log").write_text("already here\n", encoding="utf-8")
        assert watcher.scan_for_growth() is False
        assert watcher.tracked_paths == [str(log_dir / "pi-new.log")]

    def test_growth_in_any_matched_file(self, log_dir: Path) -> None:
        a = log_dir / "pi-a.log"
        b = log_dir / "pi-b.log"
        a.write_text("a\n", encoding="utf-8")
        b.write_text("b\n", encoding="utf-8")
        watcher = LogGrowthWatcher(str(log_dir / "pi-*.log"))
        watcher.scan_for_growth()

        _append(b, "more\n")
        assert watcher.scan_for_growth() is True

    def test_unmatched_files_are_ignored(self, log_dir: Path) -> None:
        other = log_dir / "other.log"
        other.write_text("x\n", encoding="utf-8")
        watcher = LogGrowthWatcher(str(log_dir / "pi-*.log"))
        watcher.scan_for_growth()

        _append(other, "y\n")
        assert watcher.scan_for_growth() is False
        assert watcher.tracked_paths == []

    def test_removed_file_is_dropped(self, log_dir: Path) -> None:
        log_path = log_dir / "pi-test.log"
        log_path.write_text("seed\n", encoding="utf-8")
        watcher = LogGrowthWatcher(str(log_dir / "pi-*.log"))
        watcher.scan_for_growth()
        assert watcher.tracked_paths == [str(log_path)]

        log_path.unlink()
        assert watcher.scan_for_growth() is False
        assert watcher.tracked_paths == []

        # Re-created files start from a fresh baseline
        log_path.write_text("back again\n", encoding="utf-8")
        assert watcher.scan_for_growth() is False

    def test_unstatable_path_is_skipped(self, log_dir: Path) -> None:
        dangling = log_dir / "pi-dangling.log"
        os.symlink(log_dir / "missing-target", dangling)
        watcher = LogGrowthWatcher(str(log_dir / "pi-*.log"))

        assert watcher.scan_for_growth() is False
        assert watcher.tracked_paths == []

    def test_recursive_pattern(self, log_dir: Path) -> None:
        nested = log_dir / "svc" / "deep"
        nested.mkdir(parents=True)
        log_path = nested / "pi-nested.log"
        log_path.write_text("seed\n", encoding="utf-8")
        watcher = LogGrowthWatcher(str(log_dir / "**" / "pi-*.log"))
        watcher.scan_for_growth()

        _append(log_path, "line\n")
        assert watcher.scan_for_growth() is True

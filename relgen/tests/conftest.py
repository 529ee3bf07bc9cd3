"""Pytest configuration and fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from relgen.differ import DiffResult
from relgen.store import InstructionFileStore


class RecordingDiffer:
    """Differ double that returns canned results and records every call."""

    def __init__(self, results: dict[tuple[Path, Path], DiffResult] | None = None):
        self.results = dict(results or {})
        self.calls: list[tuple[Path, Path]] = []

    def diff(self, old_dir: Path, new_dir: Path) -> DiffResult:
        self.calls.append((Path(old_dir), Path(new_dir)))
        return self.results.get((Path(old_dir), Path(new_dir)), DiffResult())


class FailingDiffer:
    """Differ that must never be reached."""

    def diff(self, old_dir: Path, new_dir: Path) -> DiffResult:
        raise AssertionError(f"differ called for {old_dir} -> {new_dir}")


@pytest.fixture
def recording_differ() -> RecordingDiffer:
    return RecordingDiffer()


@pytest.fixture
def failing_differ() -> FailingDiffer:
    return FailingDiffer()


@pytest.fixture
def store() -> InstructionFileStore:
    return InstructionFileStore()


@pytest.fixture
def artifact_dirs(tmp_path: Path) -> dict[str, Path]:
    """Artifact directories for foo 1.0/2.0 and bar 1.0, already created."""
    dirs = {
        "foo-1.0": tmp_path / "lib" / "foo-1.0",
        "foo-2.0": tmp_path / "lib" / "foo-2.0",
        "bar-1.0": tmp_path / "lib" / "bar-1.0",
    }
    for path in dirs.values():
        path.mkdir(parents=True)
    return dirs

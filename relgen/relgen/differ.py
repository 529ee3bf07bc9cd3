"""
Artifact directory comparison.

A differ answers one question: between an old and a new artifact directory,
which modules were removed, added, or changed?
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from .errors import ConfigurationError, InstructionIOError
from .store import DEFAULT_EXTENSION


@dataclass(frozen=True)
class DiffResult:
    removed: frozenset[str] = frozenset()
    added: frozenset[str] = frozenset()
    changed: frozenset[str] = frozenset()

    @property
    def is_empty(self) -> bool:
        return not (self.removed or self.added or self.changed)


class ArtifactDiffer(Protocol):
    """Protocol for comparing two artifact directories."""

    def diff(self, old_dir: Path, new_dir: Path) -> DiffResult:
        """
        Compare module sets of two artifact directories.

        Must return the same result for the same inputs.
        """
        ...


class DirectoryDiffer:
    """
    Compare the module files of two directories by content hash.

    Modules are the regular files directly inside the directory that match
    `pattern`; a module's id is its file stem (`foo.beam` -> `foo`). Files with
    an ignored suffix (instruction files by default) are never modules. Two
    files with the same stem in one directory are an error; narrow `pattern`
    to a single suffix to pick one.
    """

    def __init__(self, pattern: str = "*", ignore_suffixes: tuple[str, ...] = (DEFAULT_EXTENSION,)):
        self.pattern = pattern
        self.ignore_suffixes = ignore_suffixes

    def diff(self, old_dir: Path, new_dir: Path) -> DiffResult:
        old_modules = self._module_hashes(Path(old_dir))
        new_modules = self._module_hashes(Path(new_dir))

        removed = old_modules.keys() - new_modules.keys()
        added = new_modules.keys() - old_modules.keys()
        changed = {
            module
            for module in old_modules.keys() & new_modules.keys()
            if old_modules[module] != new_modules[module]
        }
        return DiffResult(frozenset(removed), frozenset(added), frozenset(changed))

    def _module_hashes(self, directory: Path) -> dict[str, str]:
        if not directory.is_dir():
            raise InstructionIOError(
                "Missing artifact directory", path=directory, reason="not a directory"
            )

        hashes: dict[str, str] = {}
        sources: dict[str, Path] = {}
        try:
            for path in sorted(directory.glob(self.pattern)):
                if not path.is_file() or path.suffix in self.ignore_suffixes:
                    continue
                if path.stem in sources:
                    raise ConfigurationError(
                        f"Module {path.stem!r} matches both {sources[path.stem].name} and {path.name}",
                        path=directory,
                    )
                sources[path.stem] = path
                hashes[path.stem] = hashlib.sha256(path.read_bytes()).hexdigest()
        except OSError as exc:
            raise InstructionIOError.wrap("Error reading artifact directory", directory, exc) from exc
        return hashes

"""
Error types raised by relgen.

Two kinds surface from the generation core:

- ConfigurationError: an instruction file (or descriptor/config) has the wrong
  shape, or its up/down version sets do not match.
- InstructionIOError: the filesystem refused a read or write.

Both are fatal to the current run. The CLI is the only place that catches them.
"""

from __future__ import annotations

from pathlib import Path


class RelgenError(Exception):
    """Base class for all relgen errors."""


class ConfigurationError(RelgenError, ValueError):
    """Raised when persisted or supplied data fails a shape or symmetry check."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        component: str | None = None,
        version: str | None = None,
    ):
        self.path = path
        self.component = component
        self.version = version
        super().__init__(_with_context(message, path, component, version))


class InstructionIOError(RelgenError, OSError):
    """Raised when reading or writing a file fails at the filesystem level."""

    def __init__(self, message: str, *, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{message} {path}: {reason}")

    def __str__(self) -> str:
        return self.args[0]

    @classmethod
    def wrap(cls, message: str, path: Path, exc: OSError) -> "InstructionIOError":
        return cls(message, path=path, reason=exc.strerror or str(exc))


def _with_context(message: str, path: Path | None, component: str | None, version: str | None) -> str:
    parts = []
    if component:
        parts.append(f"{component} {version}" if version else component)
    if path is not None:
        parts.append(str(path))
    if not parts:
        return message
    return f"{message} ({', '.join(parts)})"

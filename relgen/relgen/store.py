"""
On-disk instruction files.

Each upgraded component gets one file next to its artifacts:

    <artifact_dir>/<name>.instructions

The file is a header comment followed by a single YAML record:

    # Generated by relgen: 2026-10-17T09:30:00+00:00

    version: '2.0'
    up_from:
    - version: '1.0'
      instructions: [...]
    down_to:
    - version: '1.0'
      instructions: []

The up and down version sets must match. This is checked on every load and
before every write, so an asymmetric record never reaches disk.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigurationError, InstructionIOError
from .models import ComponentInfo, InstructionFile, VersionInstructions

DEFAULT_EXTENSION = ".instructions"
HEADER_PREFIX = "# Generated by relgen: "

_RECORD_KEYS = frozenset({"version", "up_from", "down_to"})
_ENTRY_KEYS = frozenset({"version", "instructions"})


class InstructionFileStore:
    """Derives paths for, reads, validates and writes instruction files."""

    def __init__(self, extension: str = DEFAULT_EXTENSION):
        if not extension.startswith("."):
            extension = "." + extension
        self.extension = extension

    def path_for(self, component: ComponentInfo) -> Path:
        return Path(component.artifact_dir) / f"{component.name}{self.extension}"

    def load(self, path: Path, component: ComponentInfo | None = None) -> InstructionFile:
        """
        Read and validate an instruction file.

        Args:
            path: File to read
            component: Component the file belongs to, used in error messages

        Returns:
            The parsed instruction file

        Raises:
            InstructionIOError: the file could not be read
            ConfigurationError: the file is not exactly one well-formed record,
                or its up/down versions do not match
        """
        name, version = _identity(component)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise InstructionIOError.wrap("Error reading instruction file", path, exc) from exc
        except UnicodeDecodeError as exc:
            raise ConfigurationError(
                f"Invalid instruction file: not UTF-8 text ({exc.reason})",
                path=path,
                component=name,
                version=version,
            ) from exc

        try:
            documents = list(yaml.safe_load_all(text))
        except yaml.YAMLError as exc:
            raise ConfigurationError(
                f"Invalid instruction file: {exc}", path=path, component=name, version=version
            ) from exc

        if len(documents) != 1:
            raise ConfigurationError(
                f"Invalid instruction file: expected one record, found {len(documents)}",
                path=path,
                component=name,
                version=version,
            )

        instruction_file = _parse_record(documents[0], path, name, version)
        self.validate(instruction_file, path=path, component=component)
        return instruction_file

    def validate(
        self,
        instruction_file: InstructionFile,
        *,
        path: Path | None = None,
        component: ComponentInfo | None = None,
    ) -> None:
        """Check that the up and down version sets are the same.

        Only the version sets are compared, not the instructions themselves.
        """
        up_versions = sorted(instruction_file.up_versions())
        down_versions = sorted(instruction_file.down_versions())
        if up_versions != down_versions:
            name, _ = _identity(component)
            raise ConfigurationError(
                f"Mismatched upgrade/downgrade versions: up {up_versions}, down {down_versions}",
                path=path,
                component=name,
                version=instruction_file.version,
            )

    def write(
        self,
        path: Path,
        instruction_file: InstructionFile,
        component: ComponentInfo | None = None,
    ) -> None:
        """Validate, then write the file with a generation header."""
        self.validate(instruction_file, path=path, component=component)

        text = render_instruction_file(instruction_file)

        # Write to a sibling temp file, then rename over the target
        temp_path = path.with_name(path.name + ".tmp")
        try:
            temp_path.write_text(text, encoding="utf-8")
            temp_path.replace(path)
        except OSError as exc:
            temp_path.unlink(missing_ok=True)
            raise InstructionIOError.wrap("Failed to write", path, exc) from exc


def render_instruction_file(instruction_file: InstructionFile, *, now: datetime | None = None) -> str:
    """Serialize an instruction file to its on-disk text."""
    timestamp = (now or datetime.now(timezone.utc)).isoformat(timespec="seconds")
    body = yaml.safe_dump(instruction_file.to_dict(), sort_keys=False, default_flow_style=False)
    return f"{HEADER_PREFIX}{timestamp}\n\n{body}\n"


def _identity(component: ComponentInfo | None) -> tuple[str | None, str | None]:
    if component is None:
        return None, None
    return component.name, component.version


def _parse_record(data: Any, path: Path, name: str | None, version: str | None) -> InstructionFile:
    def bad(message: str) -> ConfigurationError:
        return ConfigurationError(f"Invalid instruction file: {message}", path=path, component=name, version=version)

    if not isinstance(data, dict):
        raise bad(f"expected a mapping, found {type(data).__name__}")

    keys = set(data)
    if keys != _RECORD_KEYS:
        raise bad(f"expected keys {sorted(_RECORD_KEYS)}, found {sorted(str(k) for k in keys)}")

    new_version = data["version"]
    if not isinstance(new_version, str):
        raise bad("version must be a string")

    return InstructionFile(
        version=new_version,
        up_from=_parse_entries(data["up_from"], "up_from", bad),
        down_to=_parse_entries(data["down_to"], "down_to", bad),
    )


def _parse_entries(raw: Any, field_name: str, bad) -> list[VersionInstructions]:
    if not isinstance(raw, list):
        raise bad(f"{field_name} must be a list")

    entries: list[VersionInstructions] = []
    for item in raw:
        if not isinstance(item, dict) or set(item) != _ENTRY_KEYS:
            raise bad(f"{field_name} entries must have exactly the keys {sorted(_ENTRY_KEYS)}")
        old_version = item["version"]
        if not isinstance(old_version, str):
            raise bad(f"{field_name} versions must be strings")
        instructions = item["instructions"]
        if not isinstance(instructions, list):
            raise bad(f"{field_name} instructions for {old_version} must be a list")
        entries.append(VersionInstructions(old_version, instructions))
    return entries

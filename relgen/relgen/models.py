"""Data models for releases, upgrade units and instruction files."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

# Component name -> every version it is upgraded from, then its target version
VersionLedger = dict[str, list[str]]


@dataclass(frozen=True)
class ComponentVersion:
    name: str
    version: str


@dataclass(frozen=True)
class ComponentInfo:
    """One component as shipped in one release."""

    name: str
    version: str
    artifact_dir: Path

    @property
    def key(self) -> ComponentVersion:
        return ComponentVersion(self.name, self.version)


@dataclass(frozen=True)
class ReleaseDescriptor:
    """A release as supplied by the descriptor loader. Never mutated here."""

    source_file: Path
    metadata: dict[str, Any] = field(default_factory=dict)
    components: tuple[ComponentInfo, ...] = ()

    def versions(self) -> dict[str, str]:
        """Name -> version lookup for this release."""
        return {c.name: c.version for c in self.components}


@dataclass(frozen=True)
class UpgradeUnit:
    """Old versions of one component paired with its new version."""

    old_infos: tuple[ComponentInfo, ...]
    new_info: ComponentInfo

    def __post_init__(self) -> None:
        for old in self.old_infos:
            if old.name != self.new_info.name:
                raise ValueError(
                    f"Upgrade unit for {self.new_info.name} contains component {old.name}"
                )

    @property
    def name(self) -> str:
        return self.new_info.name

    @property
    def old_versions(self) -> list[str]:
        return [old.version for old in self.old_infos]


class InstructionKind(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    CHANGED = "changed"


@dataclass(frozen=True)
class Instruction:
    """A single module-level change, tagged with its kind."""

    kind: InstructionKind
    module: str

    @classmethod
    def added(cls, module: str) -> Instruction:
        return cls(InstructionKind.ADDED, module)

    @classmethod
    def removed(cls, module: str) -> Instruction:
        return cls(InstructionKind.REMOVED, module)

    @classmethod
    def changed(cls, module: str) -> Instruction:
        return cls(InstructionKind.CHANGED, module)

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind.value, "module": self.module}


@dataclass
class VersionInstructions:
    """Instructions that move between the file's version and `version`."""

    version: str
    instructions: list[Any] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"version": self.version, "instructions": list(self.instructions)}


@dataclass
class InstructionFile:
    """
    The persisted upgrade record for one component version.

    `up_from` holds how to get here from each old version, `down_to` how to go
    back. Both are kept as ordered lists because the file order is meaningful
    to readers and is preserved through a load/write cycle.
    """

    version: str
    up_from: list[VersionInstructions] = field(default_factory=list)
    down_to: list[VersionInstructions] = field(default_factory=list)

    def up_versions(self) -> list[str]:
        return [entry.version for entry in self.up_from]

    def down_versions(self) -> list[str]:
        return [entry.version for entry in self.down_to]

    def up_map(self) -> dict[str, list[Any]]:
        return {entry.version: entry.instructions for entry in self.up_from}

    def down_map(self) -> dict[str, list[Any]]:
        return {entry.version: entry.instructions for entry in self.down_to}

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "up_from": [entry.to_dict() for entry in self.up_from],
            "down_to": [entry.to_dict() for entry in self.down_to],
        }

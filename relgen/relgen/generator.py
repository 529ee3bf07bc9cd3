"""
Instruction generation for a single upgrade unit.

Policy: an instruction file already on disk is authoritative. It is loaded,
validated and its up versions returned; nothing is diffed and nothing is
rewritten. This lets an operator hand-write or hand-edit a file to override
generation. Only when no file exists is one generated from artifact diffs.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from .differ import ArtifactDiffer
from .models import ComponentInfo, Instruction, InstructionFile, UpgradeUnit, VersionInstructions
from .render import InstructionRenderer
from .store import InstructionFileStore

logger = logging.getLogger(__name__)

# (old, new) -> down-path instructions for that edge
DownRenderer = Callable[[ComponentInfo, ComponentInfo], list[Any]]


def no_down_instructions(old: ComponentInfo, new: ComponentInfo) -> list[Any]:
    """Down-path generation is not implemented; every down path is empty."""
    return []


class InstructionGenerator:
    """Creates, or validates an existing, instruction file per upgrade unit."""

    def __init__(
        self,
        differ: ArtifactDiffer,
        renderer: InstructionRenderer,
        store: InstructionFileStore | None = None,
        *,
        down_renderer: DownRenderer = no_down_instructions,
        log: logging.Logger | None = None,
    ):
        self.differ = differ
        self.renderer = renderer
        self.store = store or InstructionFileStore()
        self.down_renderer = down_renderer
        self.log = log or logger

    def generate(self, unit: UpgradeUnit) -> tuple[str, list[str]]:
        """
        Make sure an instruction file exists for `unit.new_info`.

        Returns:
            (component name, old versions the instruction file covers)
        """
        new_info = unit.new_info
        path = self.store.path_for(new_info)

        if path.is_file():
            self.log.info("%s exists", path.name)
            existing = self.store.load(path, new_info)
            return unit.name, existing.up_versions()

        instruction_file = self.build(unit)
        self.store.write(path, instruction_file, new_info)
        self.log.debug("Wrote %s", path)
        # Only report versions the file actually covers
        return unit.name, instruction_file.up_versions()

    def build(self, unit: UpgradeUnit) -> InstructionFile:
        """Diff every old version against the new one and render the result."""
        up_from: list[VersionInstructions] = []
        down_to: list[VersionInstructions] = []
        for old_info in unit.old_infos:
            tagged = self.tagged_changes(old_info, unit.new_info)
            up_from.append(VersionInstructions(old_info.version, self.renderer.render(tagged)))
            down_to.append(VersionInstructions(old_info.version, self.down_renderer(old_info, unit.new_info)))
        return InstructionFile(unit.new_info.version, up_from, down_to)

    def tagged_changes(self, old_info: ComponentInfo, new_info: ComponentInfo) -> list[Instruction]:
        result = self.differ.diff(old_info.artifact_dir, new_info.artifact_dir)
        self.log.debug(
            "%s %s -> %s: %d removed, %d added, %d changed",
            new_info.name,
            old_info.version,
            new_info.version,
            len(result.removed),
            len(result.added),
            len(result.changed),
        )
        return (
            [Instruction.removed(m) for m in sorted(result.removed)]
            + [Instruction.added(m) for m in sorted(result.added)]
            + [Instruction.changed(m) for m in sorted(result.changed)]
        )

"""
Instruction renderers.

A renderer turns the tagged module changes for one old -> new edge into the
instruction list stored in the instruction file. The stored form is opaque to
the rest of relgen, it only has to be YAML-serializable.
"""

from __future__ import annotations

from typing import Any, Protocol, Sequence

from .errors import ConfigurationError
from .models import Instruction, InstructionKind


class InstructionRenderer(Protocol):
    """Protocol for turning tagged changes into runtime instructions."""

    name: str

    def render(self, tagged: Sequence[Instruction]) -> list[Any]:
        ...


class TaggedRenderer:
    """Store the tagged changes as-is: `{kind: changed, module: m}`."""

    name = "tagged"

    def render(self, tagged: Sequence[Instruction]) -> list[Any]:
        return [instruction.to_dict() for instruction in tagged]


class ModuleOpsRenderer:
    """Translate changes into module operations a runtime can apply in order."""

    name = "module-ops"

    OPS = {
        InstructionKind.REMOVED: "delete_module",
        InstructionKind.ADDED: "add_module",
        InstructionKind.CHANGED: "load_module",
    }

    def render(self, tagged: Sequence[Instruction]) -> list[Any]:
        return [{"op": self.OPS[i.kind], "module": i.module} for i in tagged]


_RENDERERS: dict[str, InstructionRenderer] = {
    TaggedRenderer.name: TaggedRenderer(),
    ModuleOpsRenderer.name: ModuleOpsRenderer(),
}


def get_renderer(name: str) -> InstructionRenderer:
    """Look up a renderer by name."""
    try:
        return _RENDERERS[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown renderer '{name}' (available: {', '.join(list_renderers())})"
        ) from None


def list_renderers() -> list[str]:
    return sorted(_RENDERERS)

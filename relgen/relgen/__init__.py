"""
relgen - upgrade instruction generator for component-based releases.

Given prior releases and a target release, relgen finds the components whose
version changed, writes one instruction file per changed component, and
returns the version ledger used by release-upgrade tooling.
"""

from .differ import ArtifactDiffer, DiffResult, DirectoryDiffer
from .errors import ConfigurationError, InstructionIOError, RelgenError
from .generator import InstructionGenerator
from .ledger import build_version_ledger
from .models import (
    ComponentInfo,
    ComponentVersion,
    Instruction,
    InstructionFile,
    InstructionKind,
    ReleaseDescriptor,
    UpgradeUnit,
    VersionInstructions,
    VersionLedger,
)
from .release import load_release
from .render import InstructionRenderer, ModuleOpsRenderer, TaggedRenderer, get_renderer
from .resolver import resolve
from .store import InstructionFileStore
from .upgrades import generate_upgrades

__version__ = "0.1.0"

__all__ = [
    # Models
    "ComponentInfo",
    "ComponentVersion",
    "Instruction",
    "InstructionFile",
    "InstructionKind",
    "ReleaseDescriptor",
    "UpgradeUnit",
    "VersionInstructions",
    "VersionLedger",
    # Errors
    "ConfigurationError",
    "InstructionIOError",
    "RelgenError",
    # Pipeline
    "resolve",
    "InstructionGenerator",
    "InstructionFileStore",
    "build_version_ledger",
    "generate_upgrades",
    # Collaborators
    "ArtifactDiffer",
    "DiffResult",
    "DirectoryDiffer",
    "InstructionRenderer",
    "ModuleOpsRenderer",
    "TaggedRenderer",
    "get_renderer",
    "load_release",
]

"""End-to-end upgrade generation for one target release."""

from __future__ import annotations

import logging
from typing import Sequence

from .differ import ArtifactDiffer
from .generator import InstructionGenerator
from .ledger import build_version_ledger
from .models import ReleaseDescriptor, VersionLedger
from .render import InstructionRenderer
from .resolver import resolve
from .store import InstructionFileStore

logger = logging.getLogger(__name__)


def generate_upgrades(
    prior_releases: Sequence[ReleaseDescriptor],
    target: ReleaseDescriptor,
    *,
    differ: ArtifactDiffer,
    renderer: InstructionRenderer,
    store: InstructionFileStore | None = None,
    log: logging.Logger | None = None,
) -> VersionLedger:
    """
    Resolve upgrades, make sure each has an instruction file, and build the ledger.

    Any failure aborts the whole run; units already written stay on disk and
    are picked up as existing files next time.

    Args:
        prior_releases: Releases that may be running when the upgrade starts
        target: Release being built
        differ: Compares old and new artifact directories
        renderer: Turns tagged module changes into stored instructions
        store: Instruction file store (default extension if omitted)
        log: Logger for progress messages

    Returns:
        Component name -> old versions followed by the target version
    """
    log = log or logger
    log.debug("Generating upgrade instructions for %s", target.source_file)

    units = resolve(prior_releases, target, log=log)
    generator = InstructionGenerator(differ, renderer, store, log=log)
    generated = [generator.generate(unit) for unit in units]

    return build_version_ledger(target, generated)

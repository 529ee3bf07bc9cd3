"""Version ledger: every version a component has been, ending with its target version."""

from __future__ import annotations

from typing import Iterable, Sequence

from .models import ReleaseDescriptor, VersionLedger


def build_version_ledger(
    target: ReleaseDescriptor,
    generated: Iterable[tuple[str, Sequence[str]]],
) -> VersionLedger:
    """Fold generated old versions and the target's own versions together.

    Target versions are appended for every component, upgraded or not, so an
    unchanged component still shows up with a single entry. Downstream tooling
    reads that as "upgrading to the same version is a no-op".
    """
    ledger: VersionLedger = {}
    for name, old_versions in generated:
        ledger.setdefault(name, []).extend(old_versions)

    for component in target.components:
        ledger.setdefault(component.name, []).append(component.version)

    return ledger

"""
Upgrade resolution: which components changed version between releases.

A component is an upgrade if it exists in the target release with a different
version than in some prior release. Versions are compared for equality only;
there is no ordering, so a "downgrade" is an upgrade edge like any other.
"""

from __future__ import annotations

import logging
from typing import Sequence

from .models import ComponentInfo, ComponentVersion, ReleaseDescriptor, UpgradeUnit

logger = logging.getLogger(__name__)


def resolve(
    prior_releases: Sequence[ReleaseDescriptor],
    target: ReleaseDescriptor,
    *,
    log: logging.Logger | None = None,
) -> list[UpgradeUnit]:
    """Compute one upgrade unit per target component that has old versions.

    Units are ordered by the component's position in the target release.
    Old versions within a unit keep the order in which they were first seen
    across `prior_releases`.
    """
    log = log or logger
    target_versions = target.versions()

    candidates: list[ComponentInfo] = []
    for release in prior_releases:
        for info in release.components:
            new_version = target_versions.get(info.name)
            if new_version is not None and info.version != new_version:
                candidates.append(info)

    grouped: dict[str, list[ComponentInfo]] = {}
    for info in _dedupe(candidates, log):
        grouped.setdefault(info.name, []).append(info)

    units: list[UpgradeUnit] = []
    for new_info in target.components:
        old_infos = grouped.get(new_info.name)
        if old_infos:
            units.append(UpgradeUnit(tuple(old_infos), new_info))

    for unit in units:
        log.info("Upgrading %s: %s -> %s", unit.name, unit.old_versions, unit.new_info.version)

    return units


def _dedupe(candidates: list[ComponentInfo], log: logging.Logger) -> list[ComponentInfo]:
    """Drop repeated (name, version) pairs; the first occurrence wins."""
    seen: dict[ComponentVersion, ComponentInfo] = {}
    for info in candidates:
        kept = seen.get(info.key)
        if kept is None:
            seen[info.key] = info
        elif kept.artifact_dir != info.artifact_dir:
            log.warning(
                "%s %s appears in several releases with different artifacts; using %s, ignoring %s",
                info.name,
                info.version,
                kept.artifact_dir,
                info.artifact_dir,
            )
    return list(seen.values())

"""Generate, plan and check commands."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from rich.console import Console
from rich.table import Table

from ..config import RelgenConfig
from ..differ import DirectoryDiffer
from ..errors import RelgenError
from ..models import ReleaseDescriptor, VersionLedger
from ..release import load_release
from ..render import get_renderer
from ..resolver import resolve
from ..store import InstructionFileStore
from ..upgrades import generate_upgrades

logger = logging.getLogger(__name__)


def _load_releases(target_path: Path, prior_paths: list[Path]) -> tuple[list[ReleaseDescriptor], ReleaseDescriptor]:
    prior = [load_release(p) for p in prior_paths]
    return prior, load_release(target_path)


def run_generate(
    target_path: Path,
    prior_paths: list[Path],
    config: RelgenConfig,
    *,
    output_json: bool = False,
) -> int:
    """Write instruction files for every upgraded component and print the ledger.

    Returns:
        Exit code (0 = success, 1 = generation failed)
    """
    err = Console(stderr=True)
    store = InstructionFileStore(config.extension)
    try:
        prior, target = _load_releases(target_path, prior_paths)
        ledger = generate_upgrades(
            prior,
            target,
            differ=DirectoryDiffer(config.module_pattern, ignore_suffixes=(store.extension,)),
            renderer=get_renderer(config.renderer),
            store=store,
            log=logger,
        )
    except RelgenError as e:
        err.print(f"Error: {e}", style="bold red")
        return 1

    if output_json:
        print(json.dumps(ledger, indent=2, sort_keys=True))
    else:
        _print_ledger(ledger, target)
    return 0


def run_plan(target_path: Path, prior_paths: list[Path], *, output_json: bool = False) -> int:
    """Show which components would get instruction files, without writing any."""
    err = Console(stderr=True)
    try:
        prior, target = _load_releases(target_path, prior_paths)
    except RelgenError as e:
        err.print(f"Error: {e}", style="bold red")
        return 1

    units = resolve(prior, target, log=logger)

    if output_json:
        data = [
            {
                "name": unit.name,
                "old_versions": unit.old_versions,
                "new_version": unit.new_info.version,
                "artifact_dir": str(unit.new_info.artifact_dir),
            }
            for unit in units
        ]
        print(json.dumps(data, indent=2, sort_keys=True))
        return 0

    console = Console()
    if not units:
        console.print("No upgrades: every component matches the prior releases.")
        return 0

    table = Table(title=f"Upgrades for {target.source_file.name}")
    table.add_column("component", style="cyan", no_wrap=True)
    table.add_column("from")
    table.add_column("to", style="green")
    for unit in units:
        table.add_row(unit.name, ", ".join(unit.old_versions), unit.new_info.version)
    console.print(table)
    return 0


def run_check(path: Path) -> int:
    """Load and validate a single instruction file."""
    err = Console(stderr=True)
    console = Console()
    try:
        instruction_file = InstructionFileStore().load(path)
    except RelgenError as e:
        err.print(f"Error: {e}", style="bold red")
        return 1

    console.print(f"[bold]{path}[/bold]: version {instruction_file.version}")
    for entry in instruction_file.up_from:
        console.print(f"  up from {entry.version}: {len(entry.instructions)} instructions")
    for entry in instruction_file.down_to:
        console.print(f"  down to {entry.version}: {len(entry.instructions)} instructions", style="dim")
    return 0


def _print_ledger(ledger: VersionLedger, target: ReleaseDescriptor) -> None:
    console = Console()
    table = Table(title="Version ledger")
    table.add_column("component", style="cyan", no_wrap=True)
    table.add_column("versions")
    table.add_column("upgrade")

    for name, versions in ledger.items():
        if len(versions) > 1:
            table.add_row(name, f"{', '.join(versions[:-1])} -> {versions[-1]}", "yes")
        else:
            table.add_row(name, versions[0], "[dim]no-op[/dim]")

    console.print(table)
    console.print(f"[dim]{len(target.components)} components in {target.source_file}[/dim]")

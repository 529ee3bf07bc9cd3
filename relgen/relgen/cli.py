"""CLI entrypoint for relgen."""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from . import __version__
from .config import RelgenConfig, find_config, load_config
from .errors import RelgenError
from .render import list_renderers


def _configure_logging(verbose: bool, quiet: bool) -> None:
    """Send relgen's log records to stderr through rich."""
    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO
    handler = RichHandler(console=Console(stderr=True), show_path=False, show_time=False)
    handler.setFormatter(logging.Formatter("%(message)s"))

    relgen_logger = logging.getLogger("relgen")
    relgen_logger.handlers[:] = [handler]
    relgen_logger.setLevel(level)


@click.group()
@click.version_option(__version__, prog_name="relgen")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=False, dir_okay=False, path_type=Path),
    default=None,
    help="Path to relgen.toml (defaults to ./relgen.toml if present)",
)
@click.option("--verbose", "-V", is_flag=True, help="Show debug output")
@click.option("--quiet", "-q", is_flag=True, help="Only show warnings and errors")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, verbose: bool, quiet: bool) -> None:
    """relgen - Upgrade instruction generator for component releases.

    Finds components whose version changed since prior releases and writes
    an instruction file next to each changed component's artifacts.
    """
    ctx.ensure_object(dict)
    _configure_logging(verbose, quiet)

    if config_path is None:
        config_path = find_config(Path.cwd())
    elif not config_path.is_file():
        raise click.BadParameter(f"File '{config_path}' does not exist.", param_hint="--config")

    try:
        ctx.obj["config"] = load_config(config_path) if config_path else RelgenConfig()
    except RelgenError as e:
        raise click.ClickException(str(e)) from e


_release_path = click.Path(exists=True, dir_okay=False, path_type=Path)


@cli.command()
@click.argument("target", type=_release_path)
@click.option(
    "--from",
    "prior",
    type=_release_path,
    multiple=True,
    required=True,
    help="Prior release descriptor. Repeatable.",
)
@click.option("--pattern", default=None, help="Glob selecting module files in artifact directories")
@click.option(
    "--renderer",
    type=click.Choice(list_renderers()),
    default=None,
    help="How instructions are written into the instruction file",
)
@click.option("--extension", default=None, help="Instruction file extension (default .instructions)")
@click.option("--json", "output_json", is_flag=True, help="Output the version ledger as JSON")
@click.pass_context
def generate(
    ctx: click.Context,
    target: Path,
    prior: tuple[Path, ...],
    pattern: str | None,
    renderer: str | None,
    extension: str | None,
    output_json: bool,
) -> None:
    """Write instruction files for TARGET and print the version ledger.

    Existing instruction files are validated and kept as they are; delete one
    to have it regenerated.

    Examples:

        relgen generate rel/shop-2.yaml --from rel/shop-1.yaml

        relgen generate rel/shop-3.yaml --from rel/shop-1.yaml --from rel/shop-2.yaml --json
    """
    from .commands.generate_cmd import run_generate

    try:
        config = ctx.obj["config"].with_overrides(
            module_pattern=pattern,
            renderer=renderer,
            extension=extension,
        )
    except RelgenError as e:
        raise click.BadParameter(str(e)) from e

    exit_code = run_generate(target, list(prior), config, output_json=output_json)
    sys.exit(exit_code)


@cli.command()
@click.argument("target", type=_release_path)
@click.option(
    "--from",
    "prior",
    type=_release_path,
    multiple=True,
    required=True,
    help="Prior release descriptor. Repeatable.",
)
@click.option("--json", "output_json", is_flag=True, help="Output upgrade units as JSON")
def plan(target: Path, prior: tuple[Path, ...], output_json: bool) -> None:
    """Show which components of TARGET need instruction files.

    Nothing is written.
    """
    from .commands.generate_cmd import run_plan

    exit_code = run_plan(target, list(prior), output_json=output_json)
    sys.exit(exit_code)


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def check(path: Path) -> None:
    """Validate an instruction file.

    Fails if the file is not a single well-formed record or if its up and
    down version sets differ.
    """
    from .commands.generate_cmd import run_check

    exit_code = run_check(path)
    sys.exit(exit_code)


def main() -> None:
    """Main entrypoint."""
    cli()


if __name__ == "__main__":
    main()

"""Command-line interface for autoversioning."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from autoversioning import __version__
from autoversioning.config import VersioningConfig, find_config_file, load_config
from autoversioning.diagnostics import Diagnostics, default_log_path
from autoversioning.exceptions import ConfigError
from autoversioning.models import ResolutionReport, VersionRecord

# Load environment variables from .env file
load_dotenv()

console = Console()


def _load(ctx: click.Context) -> tuple[VersioningConfig, Path | None]:
    """Load the config selected on the command line, exiting on errors."""
    config_path: Path | None = ctx.obj.get("config_path")
    if config_path is None:
        config_path = find_config_file()
    try:
        return load_config(config_path), config_path
    except ConfigError as e:
        console.print(f"[red]Config error:[/red] {escape(str(e))}")
        sys.exit(1)


def _diagnostics(ctx: click.Context) -> Diagnostics:
    return Diagnostics(
        log_path=default_log_path(),
        verbose=ctx.obj.get("verbose", False),
        quiet=ctx.obj.get("quiet", False),
    )


@click.group()
@click.version_option(version=__version__, prog_name="autoversioning")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output (only results and errors)")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: search standard locations)",
)
@click.pass_context
def main(ctx: click.Context, verbose: bool, quiet: bool, config_path: Path | None) -> None:
    """autoversioning - Derive version and build numbers from git."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = config_path


@main.command()
@click.option(
    "--format",
    "-f",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format",
)
@click.pass_context
def resolve(ctx: click.Context, format: str) -> None:
    """Resolve the current version without saving anything."""
    from autoversioning.versioner import Versioner

    cfg, _ = _load(ctx)
    versioner = Versioner(cfg, diagnostics=_diagnostics(ctx))
    report = versioner.resolve()

    if format == "json":
        _output_report_json(report)
    else:
        _output_report_text(report)

    if not report.ok:
        sys.exit(1)


@main.command()
@click.option("--no-write-settings", is_flag=True, help="Don't write the version back to the config file")
@click.pass_context
def apply(ctx: click.Context, no_write_settings: bool) -> None:
    """Resolve the version, update the config file and save the version record."""
    from autoversioning.versioner import Versioner

    cfg, config_path = _load(ctx)
    quiet = ctx.obj.get("quiet", False)
    versioner = Versioner(cfg, diagnostics=_diagnostics(ctx))
    report = versioner.run(config_path=config_path, write_settings=not no_write_settings)

    if not quiet:
        _output_report_text(report)
        failed = [f.name for f in report.failed_fields]
        if not cfg.output.auto_save:
            console.print("[dim]Version record not saved (output.auto_save is off).[/dim]")
        elif "record" not in failed:
            console.print(f"[green]Saved version record:[/green] {versioner.record_path}")
        else:
            console.print(f"[red]Version record not saved:[/red] {versioner.record_path}")
    else:
        console.print(report.record.bundle_version_with_hash)

    if not report.ok:
        sys.exit(1)


@main.command()
@click.option(
    "--path",
    "record_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Version record file (default: output.path from config)",
)
@click.pass_context
def show(ctx: click.Context, record_path: Path | None) -> None:
    """Show the saved version record."""
    from autoversioning.store import VersionStore

    if record_path is None:
        cfg, _ = _load(ctx)
        record_path = Path(cfg.output.path)

    store = VersionStore(create_gitignore=False, diagnostics=_diagnostics(ctx))
    try:
        record = store.load(record_path)
    except (OSError, ValueError) as e:
        console.print(f"[red]Could not read version record:[/red] {escape(str(e))}")
        sys.exit(1)

    if record is None:
        console.print(f"[yellow]No version record found:[/yellow] {record_path}")
        sys.exit(1)

    console.print(f"[dim]Record file:[/dim] {record_path}")
    _output_record_table(record)


@main.command()
@click.option("--path", "git_path", default=None, help="Git executable to check (default: from config)")
@click.pass_context
def git(ctx: click.Context, git_path: str | None) -> None:
    """Check that the git executable works."""
    from autoversioning.git import GitClient

    if git_path is None:
        cfg, _ = _load(ctx)
        git_path = cfg.git.path

    if not GitClient.validate_path(git_path):
        console.print(f"[red]Git not found:[/red] {git_path}")
        console.print("Please install Git and set git.path in the config file.")
        sys.exit(1)

    client = GitClient(git_path=git_path, diagnostics=_diagnostics(ctx))
    console.print(f"[green]Git OK:[/green] {git_path} (version {client.git_version()})")


def _output_record_table(record: VersionRecord) -> None:
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Field", style="dim")
    table.add_column("Value", style="white")
    table.add_row("Bundle version", record.bundle_version)
    table.add_row("iOS build number", str(record.ios_build_number))
    table.add_row("Android bundle version code", str(record.android_bundle_version_code))
    table.add_row("Commit hash", record.hash or "(none)")
    console.print(table)


def _output_report_text(report: ResolutionReport) -> None:
    """Output a resolution report as formatted text."""
    console.print(f"[bold blue]{report.record.bundle_version_with_hash}[/bold blue]")
    _output_record_table(report.record)

    if report.failed_fields:
        console.print()
        console.print(
            f"[yellow]{len(report.failed_fields)} field(s) kept their previous value:[/yellow] "
            + ", ".join(f.name for f in report.failed_fields)
        )


def _output_report_json(report: ResolutionReport) -> None:
    """Output a resolution report as JSON."""
    output = {
        "record": report.record.model_dump(),
        "bundle_version": report.record.bundle_version,
        "bundle_version_with_hash": report.record.bundle_version_with_hash,
        "failed_fields": [
            {"name": f.name, "error": f.error} for f in report.failed_fields
        ],
    }
    console.print_json(json.dumps(output))


@main.group()
def config() -> None:
    """Manage autoversioning configuration."""
    pass


@config.command(name="show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Show current configuration."""
    from autoversioning.config import field_states

    cfg, config_file = _load(ctx)

    console.print("[bold]Current Configuration[/bold]")
    console.print()

    if config_file:
        console.print(f"[dim]Config file:[/dim] {config_file}")
    else:
        console.print("[dim]Config file:[/dim] (none - using defaults)")
    console.print()

    console.print("[bold]Numbering:[/bold]")
    console.print(f"  Patch: {cfg.numbering.patch.value}")
    console.print(f"  iOS build: {cfg.numbering.ios_build.value}")
    console.print(f"  Android build: {cfg.numbering.android_build.value}")
    console.print(f"  Tag pattern: {cfg.numbering.tag_pattern}", markup=False)
    console.print()

    console.print("[bold]Git:[/bold]")
    console.print(f"  Path: {cfg.git.path}")
    console.print()

    console.print("[bold]Version:[/bold]")
    console.print(f"  Bundle version: {cfg.version.bundle_version}")
    console.print(f"  iOS build number: {cfg.version.ios_build_number}")
    console.print(f"  Android bundle version code: {cfg.version.android_bundle_version_code}")
    console.print()

    console.print("[bold]Output:[/bold]")
    console.print(f"  Auto save: {cfg.output.auto_save}")
    console.print(f"  Path: {cfg.output.path}")
    console.print(f"  Create .gitignore: {cfg.output.create_gitignore}")
    console.print(f"  Save commit hash: {cfg.output.save_commit_hash}")
    console.print(f"  Hash length: {cfg.output.hash_length}")
    console.print()

    console.print("[bold]Manually editable:[/bold]")
    editable = [name for name, enabled in field_states(cfg) if enabled]
    console.print(f"  {', '.join(editable) if editable else '(none)'}")


@config.command(name="path")
def config_path() -> None:
    """Show configuration file paths."""
    from autoversioning.config import get_config_paths

    console.print("[bold]Configuration paths (in priority order):[/bold]")
    config_file = find_config_file()

    for path in get_config_paths():
        if path.exists():
            if path == config_file:
                console.print(f"  [green]{path}[/green] (active)")
            else:
                console.print(f"  {path} (exists)")
        else:
            console.print(f"  [dim]{path}[/dim]")

    console.print()
    console.print("[bold]Other paths:[/bold]")
    console.print(f"  Error log: {default_log_path()}")
    console.print(f"  .env file: {Path.cwd() / '.env'}")


@config.command(name="init")
@click.option("--force", is_flag=True, help="Overwrite existing config file")
def config_init(force: bool) -> None:
    """Create a default configuration file in the current directory."""
    from autoversioning.config import CONFIG_FILE_NAME, save_default_config

    config_path = Path.cwd() / CONFIG_FILE_NAME

    if config_path.exists() and not force:
        console.print(f"[yellow]Config file already exists:[/yellow] {config_path}")
        console.print("Use --force to overwrite.")
        sys.exit(1)

    save_default_config(config_path)
    console.print(f"[green]Created config file:[/green] {config_path}")
    console.print("Edit this file to customize your settings.")


if __name__ == "__main__":
    main()

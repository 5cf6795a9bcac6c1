"""
binstall — CLI entrypoint.

Usage:
    binstall --help
    binstall platform
    binstall install
    binstall table list
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from binstall import __version__
from binstall.core.observability.logging_config import resolve_level, setup_logging


def _settings(ctx: click.Context, **overrides):
    """Resolve settings, exiting with a readable error if they are invalid."""
    from binstall.core.config.loader import ConfigError
    from binstall.core.config.settings import load_settings

    try:
        return load_settings(table_path=ctx.obj.get("table_path"), **overrides)
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)


def _table(settings):
    """Load the release table once per invocation."""
    from binstall.core.config.loader import ConfigError, load_table

    try:
        return load_table(settings.table_path)
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="binstall")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--table",
    "-t",
    "table_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Release table YAML (default: BINSTALL_TABLE or the bundled table).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    table_path: Path | None,
) -> None:
    """binstall — verified install of a prebuilt CLI binary."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["table_path"] = table_path

    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose, quiet=quiet),
        log_file=os.environ.get("BINSTALL_LOG_FILE"),
        log_file_level=os.environ.get("BINSTALL_LOG_FILE_LEVEL"),
    )


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def platform(as_json: bool) -> None:
    """Show the detected OS family and CPU architecture."""
    from binstall.core.services.installer import UnsupportedPlatform, resolve

    try:
        os_name, arch = resolve()
    except UnsupportedPlatform as e:
        if as_json:
            click.echo(json.dumps({"supported": False, "error": str(e)}, indent=2))
        else:
            click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps({"supported": True, "os": os_name, "arch": arch}, indent=2))
        return
    click.echo(f"{os_name}/{arch}")


@cli.command()
@click.option("--version", "-V", "version", default=None, help="Version to install (default: newest).")
@click.option(
    "--install-dir",
    "-d",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Target directory (default: BINSTALL_INSTALL_DIR, /usr/local/bin or ~/.local/bin).",
)
@click.option("--timeout", type=float, default=None, help="Seconds for download + install.")
@click.option("--os", "os_override", type=click.Choice(["macos", "linux"]), default=None,
              help="Install the artifact for this OS instead of the detected one.")
@click.option("--arch", "arch_override", type=click.Choice(["arm64", "amd64"]), default=None,
              help="Install the artifact for this architecture instead of the detected one.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def install(
    ctx: click.Context,
    version: str | None,
    install_dir: Path | None,
    timeout: float | None,
    os_override: str | None,
    arch_override: str | None,
    as_json: bool,
) -> None:
    """Download, verify and install the formula's binary.

    Examples:

        binstall install

        binstall install --version 0.1.0 --install-dir ~/bin
    """
    from binstall.core.use_cases.install import run_install

    settings = _settings(ctx, install_dir=install_dir, timeout=timeout)
    table = _table(settings)

    platform_override = None
    if os_override or arch_override:
        from binstall.core.services.installer import UnsupportedPlatform, resolve

        try:
            detected_os, detected_arch = resolve()
        except UnsupportedPlatform:
            detected_os, detected_arch = None, None
        os_name = os_override or detected_os
        arch = arch_override or detected_arch
        if os_name is None or arch is None:
            click.secho("❌ Pass both --os and --arch on an unsupported host", fg="red")
            sys.exit(1)
        platform_override = (
            {"macos": "Darwin", "linux": "Linux"}[os_name],
            {"arm64": "arm64", "amd64": "x86_64"}[arch],
        )

    outcome = run_install(table, settings, version=version, platform=platform_override)

    if as_json:
        click.echo(json.dumps(outcome.to_dict(), indent=2))
        sys.exit(1 if outcome.failed else 0)

    if outcome.failed:
        click.secho(
            f"❌ Install failed at {outcome.stage} ({outcome.error_type})", fg="red", bold=True,
        )
        for line in (outcome.error or "").split("\n"):
            click.echo(f"   {line}")
        sys.exit(1)

    formula = table.formula
    click.secho(
        f"✅ {formula.name} {outcome.version} installed → {outcome.path}", fg="green", bold=True,
    )
    click.echo(f"   {outcome.os}/{outcome.arch}  sha256 {outcome.digest}")

    if outcome.warning:
        click.echo()
        click.secho("⚠️  Installed, but could not confirm it works:", fg="yellow")
        click.echo(f"   {outcome.warning}")

    install_dir_str = str(settings.install_dir)
    if install_dir_str not in os.environ.get("PATH", "").split(os.pathsep):
        click.echo()
        click.secho(f"⚠️  {install_dir_str} is not on your PATH", fg="yellow")

    if formula.caveats and not ctx.obj.get("quiet"):
        click.echo()
        click.secho("==> Caveats", fg="cyan", bold=True)
        click.echo(formula.caveats.rstrip())
    click.echo()


@cli.command()
@click.argument("archive", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--version", "-V", "version", default=None, help="Declared version (default: newest).")
@click.option("--os", "os_name", type=click.Choice(["macos", "linux"]), default=None)
@click.option("--arch", type=click.Choice(["arm64", "amd64"]), default=None)
@click.pass_context
def verify(
    ctx: click.Context,
    archive: Path,
    version: str | None,
    os_name: str | None,
    arch: str | None,
) -> None:
    """Check a local archive against its declared sha256."""
    from binstall.core.services.installer import (
        InstallError,
        locate,
        resolve,
        verify_file,
    )

    settings = _settings(ctx)
    table = _table(settings)

    try:
        if os_name is None or arch is None:
            detected_os, detected_arch = resolve()
            os_name = os_name or detected_os
            arch = arch or detected_arch
        artifact = locate(table, os_name, arch, version)
    except InstallError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    result = verify_file(archive, artifact)
    if not result.ok:
        click.secho(f"❌ {result.reason}", fg="red")
        sys.exit(1)

    click.secho(
        f"✅ {archive.name} matches {table.formula.name} {artifact.version} "
        f"{artifact.os}/{artifact.arch}",
        fg="green",
    )
    click.echo(f"   sha256 {result.digest}")


@cli.command()
@click.option("-n", "count", default=20, type=int, help="Number of records to show.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def history(ctx: click.Context, count: int, as_json: bool) -> None:
    """Show recent install runs from the ledger."""
    from binstall.core.persistence.ledger import LedgerWriter

    settings = _settings(ctx)
    records = LedgerWriter(settings.ledger_path).read_recent(count)

    if as_json:
        click.echo(json.dumps([r.model_dump(mode="json") for r in records], indent=2))
        return

    if not records:
        click.secho("No installs recorded yet.", fg="yellow")
        return

    colors = {"installed": "green", "installed_with_warning": "yellow", "failed": "red"}
    for r in records:
        click.secho(f"   {r.status:<24}", fg=colors.get(r.status, "white"), nl=False)
        platform_label = f"{r.os}/{r.arch}" if r.os else "?"
        click.echo(f"{r.formula} {r.version or '?'} ({platform_label})  {r.timestamp}")
        if r.error and ctx.obj.get("verbose"):
            click.echo(f"      {r.stage}: {r.error.splitlines()[0]}")


# ── Register sub-command groups from binstall/ui/cli/ ──────────────────

from binstall.ui.cli.table import table  # noqa: E402

cli.add_command(table)


if __name__ == "__main__":
    cli()

"""
CLI commands for the release table.

Thin wrappers over ``binstall.core.config.loader`` and the locator.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click


def _load(ctx: click.Context):
    from binstall.core.config.loader import ConfigError, load_table
    from binstall.core.config.settings import load_settings

    try:
        settings = load_settings(table_path=ctx.obj.get("table_path"))
        return load_table(settings.table_path)
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)


@click.group()
def table() -> None:
    """Release table — list, show, check."""


@table.command("list")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def list_artifacts(ctx: click.Context, as_json: bool) -> None:
    """List every declared (version, os, arch) artifact."""
    from binstall.core.services.installer.domain.locator import version_key

    tbl = _load(ctx)
    rows = sorted(
        tbl.artifacts,
        key=lambda a: (version_key(a.version), a.os, a.arch),
        reverse=True,
    )

    if as_json:
        click.echo(json.dumps(
            [{**a.model_dump(mode="json"), "pending": not a.has_digest} for a in rows],
            indent=2,
        ))
        return

    formula = tbl.formula
    click.secho(f"\n📦 {formula.name}", fg="cyan", bold=True)
    if formula.desc:
        click.echo(f"   {formula.desc}")
    if formula.homepage:
        click.echo(f"   {formula.homepage}")
    click.echo()

    if not rows:
        click.secho("   ⚠️  No artifacts declared", fg="yellow")
        click.echo()
        return

    for a in rows:
        if a.has_digest:
            click.secho("   ✓ ", fg="green", nl=False)
            digest = a.digest.lower()[:16] + "…"
        else:
            click.secho("   ⏳ ", fg="yellow", nl=False)
            digest = f"pending ({a.digest})"
        click.echo(f"{a.version:<10} {a.os + '/' + a.arch:<14} {digest}")
    click.echo()


@table.command()
@click.option("--version", "-V", "version", default=None, help="Version (default: newest).")
@click.option("--os", "os_name", type=click.Choice(["macos", "linux"]), default=None,
              help="OS family (default: detected).")
@click.option("--arch", type=click.Choice(["arm64", "amd64"]), default=None,
              help="Architecture (default: detected).")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def show(
    ctx: click.Context,
    version: str | None,
    os_name: str | None,
    arch: str | None,
    as_json: bool,
) -> None:
    """Show the artifact the installer would pick."""
    from binstall.core.services.installer import InstallError, locate, resolve

    tbl = _load(ctx)

    try:
        if os_name is None or arch is None:
            detected_os, detected_arch = resolve()
            os_name = os_name or detected_os
            arch = arch or detected_arch
        artifact = locate(tbl, os_name, arch, version)
    except InstallError as e:
        if as_json:
            click.echo(json.dumps(
                {"found": False, "error_type": type(e).__name__, "error": str(e)}, indent=2,
            ))
        else:
            click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps({"found": True, **artifact.model_dump(mode="json")}, indent=2))
        return

    click.secho(f"{tbl.formula.name} {artifact.version} ({artifact.os}/{artifact.arch})",
                fg="cyan", bold=True)
    click.echo(f"   url:    {artifact.url}")
    click.echo(f"   sha256: {artifact.digest.lower()}")


@table.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def check(ctx: click.Context, as_json: bool) -> None:
    """Validate the release table."""
    from binstall.core.config.loader import ConfigError
    from binstall.core.config.settings import load_settings
    from binstall.core.use_cases.table_check import check_table

    table_path: Path | None = ctx.obj.get("table_path")
    if table_path is None:
        try:
            table_path = load_settings().table_path
        except ConfigError as e:
            click.secho(f"❌ {e}", fg="red")
            sys.exit(1)
    result = check_table(table_path)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else 1)

    if result.valid:
        assert result.table is not None  # guaranteed when valid
        click.secho("✅ Release table is valid", fg="green", bold=True)
        click.echo(f"   Formula:   {result.table.formula.name}")
        click.echo(f"   Versions:  {', '.join(result.table.versions()) or '-'}")
        click.echo(f"   Artifacts: {len(result.table.artifacts)}")
    else:
        click.secho("❌ Release table errors:", fg="red", bold=True)
        for err in result.errors:
            click.echo(f"   • {err}")

    if result.warnings:
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warn in result.warnings:
            click.echo(f"   • {warn}")

    click.echo()
    if not result.valid:
        sys.exit(1)

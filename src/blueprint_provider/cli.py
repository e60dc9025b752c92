"""Azure Blueprint provider CLI (azbp).

Usage:
    azbp scope validate SCOPE          # Check a blueprint scope
    azbp scope parse RESOURCE_ID       # Extract the scope from a resource ID
    azbp validate MANIFEST             # Validate a manifest offline
    azbp plan MANIFEST                 # Show what apply would change
    azbp apply MANIFEST                # Create or update blueprints and artifacts
    azbp destroy MANIFEST              # Delete everything in the manifest
    azbp show blueprint ...            # Print a blueprint as read from Azure

Exit codes: 0 success, 1 configuration or validation error or failed
resources, 2 API or authentication failure.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import click

from .client import BlueprintApiError, BlueprintClient
from .config import ConfigurationError, ProviderConfig
from .main import setup_logging
from .models import BlueprintManifest
from .reconciler import ChangeAction, ReconcileResult, Reconciler
from .resources import ArtifactKindMismatchError, ArtifactResource, BlueprintResource
from .scope import ScopeError, parse_scope, validate_blueprint_scope
from .spec_loader import SpecLoadError, load_manifest

EXIT_API_ERROR = 2

ACTION_SYMBOLS = {
    ChangeAction.CREATE: "+",
    ChangeAction.UPDATE: "~",
    ChangeAction.NO_OP: " ",
    ChangeAction.DELETE: "-",
}

MANIFEST_ARGUMENT = click.argument(
    "manifest", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)


class ApiError(click.ClickException):
    """A remote call failed; exits with a distinct code."""

    exit_code = EXIT_API_ERROR


def get_client(ctx: click.Context) -> BlueprintClient:
    """Return the client for this invocation, building it on first use.

    A client placed in ``ctx.obj["client"]`` by the caller is used as is.

    Raises:
        click.ClickException: If the environment configuration is invalid.
    """
    obj = ctx.ensure_object(dict)
    if "client" not in obj:
        try:
            config = ProviderConfig.from_env()
        except ConfigurationError as e:
            raise click.ClickException(str(e)) from e
        setup_logging(config.log_level, stream=sys.stderr)
        obj["client"] = BlueprintClient.from_config(config)
    return obj["client"]


def read_manifest(path: Path) -> BlueprintManifest:
    try:
        return load_manifest(path)
    except SpecLoadError as e:
        raise click.ClickException(str(e)) from e


def echo_result(result: ReconcileResult) -> None:
    """Print per-resource actions, failures and a summary line."""
    for change in result.changes:
        click.echo(f"{ACTION_SYMBOLS[change.action]} {change.address} ({change.action.value})")
        for field_change in change.changes:
            click.echo(f"    {field_change.describe()}")

    for address in result.published:
        click.echo(f"published {address}")

    for failure in result.failures:
        click.secho(f"Error: {failure.address}: {failure.error}", fg="red", err=True)

    summary = result.summary()
    click.echo(
        f"{result.operation.capitalize()}: {summary['create']} to create, "
        f"{summary['update']} to update, {summary['no_op']} unchanged, "
        f"{summary['delete']} to delete, {summary['failed']} failed."
    )


def finish(result: ReconcileResult) -> None:
    echo_result(result)
    if not result.success:
        raise SystemExit(1)


def echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, sort_keys=True, default=str))


@click.group()
@click.version_option(version="0.1.0", prog_name="azbp")
def cli() -> None:
    """Azure Blueprint provider CLI (azbp).

    Manages blueprint definitions and their artifacts from a YAML manifest.

    \b
    Authentication uses the default Azure credential chain, or managed
    identity only when ARM_USE_MSI=true.
    """
    pass


# =============================================================================
# Scope Commands
# =============================================================================


@cli.group()
def scope() -> None:
    """Blueprint scope utilities."""
    pass


@scope.command("validate")
@click.argument("value")
def scope_validate(value: str) -> None:
    """Validate a subscription or management group scope."""
    warnings, errors = validate_blueprint_scope(value)
    for warning in warnings:
        click.secho(f"Warning: {warning}", fg="yellow", err=True)
    if errors:
        for error in errors:
            click.secho(f"Error: {error}", fg="red", err=True)
        raise SystemExit(1)
    click.secho(f"✓ {value} is a valid blueprint scope", fg="green")


@scope.command("parse")
@click.argument("resource_id")
def scope_parse(resource_id: str) -> None:
    """Print the blueprint scope a resource ID belongs to."""
    parsed = parse_scope(resource_id)
    if not parsed:
        raise click.ClickException(f"No blueprint scope found in {resource_id!r}")
    click.echo(parsed)


# =============================================================================
# Manifest Commands
# =============================================================================


@cli.command()
@MANIFEST_ARGUMENT
def validate(manifest: Path) -> None:
    """Validate a manifest without contacting Azure."""
    loaded = read_manifest(manifest)
    click.secho(
        f"✓ {manifest}: {len(loaded.blueprints)} blueprint(s), "
        f"{len(loaded.all_artifacts)} artifact(s)",
        fg="green",
    )


@cli.command()
@MANIFEST_ARGUMENT
@click.pass_context
def plan(ctx: click.Context, manifest: Path) -> None:
    """Show the changes apply would make."""
    loaded = read_manifest(manifest)
    finish(Reconciler(get_client(ctx)).plan(loaded))


@cli.command()
@MANIFEST_ARGUMENT
@click.option("--publish", "publish_version", help="Publish each blueprint as this version")
@click.pass_context
def apply(ctx: click.Context, manifest: Path, publish_version: str | None) -> None:
    """Create or update every resource in the manifest."""
    loaded = read_manifest(manifest)
    finish(Reconciler(get_client(ctx)).apply(loaded, publish_version=publish_version))


@cli.command()
@MANIFEST_ARGUMENT
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def destroy(ctx: click.Context, manifest: Path, yes: bool) -> None:
    """Delete every resource in the manifest."""
    loaded = read_manifest(manifest)
    total = len(loaded.blueprints) + len(loaded.all_artifacts)
    if not yes:
        click.confirm(f"Delete {total} resource(s) declared in {manifest}?", abort=True)
    finish(Reconciler(get_client(ctx)).destroy(loaded))


# =============================================================================
# Show Commands
# =============================================================================


@cli.group()
def show() -> None:
    """Print resources as read from Azure."""
    pass


@show.command("blueprint")
@click.option("--scope", "scope_value", required=True, help="Blueprint scope")
@click.option("--name", required=True, help="Blueprint name")
@click.pass_context
def show_blueprint(ctx: click.Context, scope_value: str, name: str) -> None:
    """Print a blueprint definition."""
    try:
        state = BlueprintResource(get_client(ctx)).read(scope_value, name)
    except ScopeError as e:
        raise click.ClickException(str(e)) from e
    except BlueprintApiError as e:
        raise ApiError(str(e)) from e

    if state is None:
        raise click.ClickException(f"Blueprint {name!r} not found in scope {scope_value!r}")
    echo_json(state.model_dump(mode="json", exclude_none=True))


@show.command("artifact")
@click.option("--scope", "scope_value", required=True, help="Blueprint scope")
@click.option("--blueprint", "blueprint_name", required=True, help="Blueprint name")
@click.option("--name", required=True, help="Artifact name")
@click.pass_context
def show_artifact(ctx: click.Context, scope_value: str, blueprint_name: str, name: str) -> None:
    """Print a blueprint artifact."""
    try:
        state = ArtifactResource(get_client(ctx)).read(scope_value, blueprint_name, name)
    except (ScopeError, ArtifactKindMismatchError) as e:
        raise click.ClickException(str(e)) from e
    except BlueprintApiError as e:
        raise ApiError(str(e)) from e

    if state is None:
        raise click.ClickException(
            f"Artifact {name!r} not found in blueprint {blueprint_name!r}"
        )
    echo_json(state.model_dump(mode="json", exclude_none=True))


if __name__ == "__main__":
    cli()

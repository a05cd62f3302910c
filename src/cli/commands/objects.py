"""Object creation commands.

Creates CloudNativePG and Kubernetes objects from manifests, or prints them
as YAML with --dry-run.
"""

import sys
from pathlib import Path
from typing import Annotated, Any

import typer

from src.cli.context import get_cli_context
from src.cli.shared.console import with_error_handling
from src.infra.k8s import (
    ConfigFlags,
    ManifestError,
    build_objects,
    create_and_generate_objects,
    load_manifests,
    run_sync,
    setup_kubernetes_client,
)


def _read_manifest(source: str) -> str:
    """Read manifest text from a file, or stdin for '-'."""
    if source == "-":
        return sys.stdin.read()
    try:
        return Path(source).read_text()
    except OSError as e:
        raise ManifestError(f"Cannot read {source}", details=str(e)) from e


async def _apply(
    flags: ConfigFlags, manifests: list[dict[str, Any]], dry_run: bool
) -> None:
    client_ctx = await setup_kubernetes_client(flags)
    objects = build_objects(client_ctx, manifests)
    await create_and_generate_objects(client_ctx, objects, dry_run)


@with_error_handling
def apply(
    ctx: typer.Context,
    file: Annotated[
        str,
        typer.Argument(help="Manifest file, or '-' to read from stdin"),
    ],
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            help="Print the objects as YAML instead of creating them",
        ),
    ] = False,
) -> None:
    """Create the objects described in a manifest file.

    Objects are created in file order and creation stops at the first
    failure. Objects without a namespace go to the current namespace.

    Examples:
        kubectl-cnpg apply cluster.yaml
        kubectl-cnpg -n databases apply cluster.yaml --dry-run
    """
    cli_ctx = get_cli_context(ctx)
    manifests = load_manifests(_read_manifest(file))
    if not manifests:
        cli_ctx.console.warn(f"No objects found in {file}")
        return

    run_sync(_apply(cli_ctx.flags, manifests, dry_run))

"""Main CLI application module.

This module provides the entry point for the kubectl-cnpg plugin. Global
options select the cluster connection (kubeconfig, context, namespace) and
are shared by every command through the CLIContext.

Commands:
- apply: create objects from a manifest, or render them with --dry-run
- controldata: print pg_controldata from an instance pod
"""

from pathlib import Path
from typing import Annotated

import typer

from src.infra.k8s.config import ConfigFlags

from .commands import apply, controldata
from .context import build_cli_context
from .shared.log_setup import configure_logging

# Create the main CLI application
app = typer.Typer(
    help="🐘 kubectl-cnpg - Manage CloudNativePG clusters",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@app.callback()
def main_callback(
    ctx: typer.Context,
    kubeconfig: Annotated[
        Path | None,
        typer.Option(
            "--kubeconfig",
            envvar="CNPG_KUBECONFIG",
            help="Path to the kubeconfig file",
        ),
    ] = None,
    context: Annotated[
        str | None,
        typer.Option(
            "--context",
            envvar="CNPG_CONTEXT",
            help="Kubeconfig context to use",
        ),
    ] = None,
    namespace: Annotated[
        str | None,
        typer.Option(
            "--namespace",
            "-n",
            envvar="CNPG_NAMESPACE",
            help="Namespace to operate in",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    """Set up logging and the connection flags shared by all commands."""
    configure_logging(verbose)
    ctx.obj = build_cli_context(
        ConfigFlags(kubeconfig=kubeconfig, context=context, namespace=namespace)
    )


# Register commands
app.command()(apply)
app.command()(controldata)


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()

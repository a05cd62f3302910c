"""pg_controldata command."""

from typing import Annotated

import typer

from src.cli.context import get_cli_context
from src.cli.shared.console import with_error_handling
from src.infra.k8s import (
    ConfigFlags,
    PodReference,
    get_pg_control_data,
    run_sync,
    setup_kubernetes_client,
)


async def _controldata(flags: ConfigFlags, pod_name: str) -> str:
    client_ctx = await setup_kubernetes_client(flags)
    pod = PodReference(name=pod_name, namespace=client_ctx.namespace)
    return await get_pg_control_data(client_ctx, pod)


@with_error_handling
def controldata(
    ctx: typer.Context,
    pod: Annotated[str, typer.Argument(help="Name of a running instance pod")],
) -> None:
    """Print the pg_controldata output of an instance pod.

    Examples:
        kubectl-cnpg -n databases controldata cluster-example-1
    """
    cli_ctx = get_cli_context(ctx)
    output = run_sync(_controldata(cli_ctx.flags, pod))
    typer.echo(output, nl=False)

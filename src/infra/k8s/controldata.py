"""Retrieval of pg_controldata output from database pods."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from loguru import logger

from src.infra.constants import DEFAULT_CONSTANTS

from .errors import ExecutionError
from .pod_exec import PodExecClient, PodReference

if TYPE_CHECKING:
    from kr8s.asyncio.objects import Pod

    from .client import ClientContext


@dataclass(frozen=True)
class ExecutionRequest:
    """A single command to run in a pod's database container."""

    pod: PodReference
    container: str = DEFAULT_CONSTANTS.POSTGRES_CONTAINER_NAME
    command: tuple[str, ...] = DEFAULT_CONSTANTS.PG_CONTROLDATA_COMMAND
    timeout: float = DEFAULT_CONSTANTS.EXEC_TIMEOUT_SECONDS


class ControlDataRetriever:
    """Runs ``pg_controldata`` inside the postgres container of a pod.

    The output is returned verbatim; parsing it is left to the caller.
    Failures are never retried.
    """

    def __init__(self, exec_client: PodExecClient) -> None:
        self._exec_client = exec_client

    async def retrieve(self, pod: PodReference | Pod) -> str:
        """Return the pg_controldata output of a pod.

        Args:
            pod: Pod reference or kr8s pod

        Returns:
            Captured standard output, unmodified

        Raises:
            ExecutionError: If the command times out, exits non-zero or
                the exec stream fails
        """
        ref = pod if isinstance(pod, PodReference) else PodReference.from_pod(pod)
        request = ExecutionRequest(pod=ref)

        try:
            result = await self._exec_client.exec(
                request.pod,
                request.container,
                request.command,
                request.timeout,
            )
        except TimeoutError as e:
            raise ExecutionError(
                f"Timed out running pg_controldata in pod {ref}",
                pod=ref,
                details=f"No output after {request.timeout:g}s",
            ) from e
        except Exception as e:
            raise ExecutionError(
                f"Failed to run pg_controldata in pod {ref}",
                pod=ref,
                details=str(e),
            ) from e

        logger.debug(f"Retrieved control data from {ref}")
        return result.stdout


async def get_pg_control_data(ctx: ClientContext, pod: PodReference | Pod) -> str:
    """Obtain pg_controldata output from a pod through the context's exec client."""
    return await ControlDataRetriever(ctx.exec_client).retrieve(pod)

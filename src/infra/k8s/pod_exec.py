"""Command execution inside pods.

Provides the low-level exec handle used by the plugin, kept separate from
the typed client so commands that only need exec do not depend on the
type registry.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from kr8s.asyncio.objects import Pod
from loguru import logger


@dataclass(frozen=True)
class PodReference:
    """Identity of a pod within the cluster."""

    name: str
    namespace: str

    @classmethod
    def from_pod(cls, pod: Pod) -> PodReference:
        return cls(name=pod.name, namespace=pod.namespace)

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


@dataclass(frozen=True)
class ExecResult:
    """Captured output of a command run inside a container."""

    stdout: str
    stderr: str
    returncode: int = 0


class PodExecClient:
    """Runs commands inside pod containers through the kr8s exec API.

    Errors from the transport (non-zero exit, closed stream, server errors)
    and timeouts propagate unchanged to the caller.
    """

    def __init__(self, api: Any) -> None:  # kr8s.asyncio.Api
        self._api = api

    @property
    def api(self) -> Any:
        return self._api

    async def exec(
        self,
        pod: PodReference,
        container: str,
        command: Sequence[str],
        timeout: float,
    ) -> ExecResult:
        """Run a command and capture its output.

        Args:
            pod: Target pod
            container: Container to run the command in
            command: Command and arguments
            timeout: Maximum time to wait in seconds

        Returns:
            ExecResult with decoded stdout and stderr

        Raises:
            TimeoutError: If the command does not finish within ``timeout``
            kr8s.ExecError: If the command exits with a non-zero status
        """
        target = Pod(
            {"metadata": {"name": pod.name, "namespace": pod.namespace}},
            api=self._api,
        )
        logger.debug(f"Executing {list(command)} in {pod} (container {container})")
        completed = await asyncio.wait_for(
            target.exec(list(command), container=container, check=True),
            timeout=timeout,
        )
        return ExecResult(
            stdout=_decode(completed.stdout),
            stderr=_decode(completed.stderr),
            returncode=completed.returncode,
        )


def _decode(data: bytes | str | None) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8")
    return data

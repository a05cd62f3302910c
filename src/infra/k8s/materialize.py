"""Object materialization: create objects in the cluster or render them.

Objects are processed strictly in input order, because later objects may
depend on earlier ones (a namespace before the objects inside it, owner
references, ...). Creation stops at the first failure; objects already
created are left in place.
"""

from __future__ import annotations

import sys
from collections.abc import Sequence
from enum import Enum
from typing import TYPE_CHECKING, Any, TextIO

import yaml
from loguru import logger

from src.infra.constants import DEFAULT_CONSTANTS

from .errors import MaterializationError

if TYPE_CHECKING:
    from .client import ClientContext, KubernetesClient


class MaterializationMode(str, Enum):
    """How objects are materialized."""

    RENDER = "render"  # YAML to the output stream, no cluster access
    CREATE = "create"  # submit to the cluster


def render_object(obj: Any) -> str:
    """Serialize an object to a YAML document.

    Raises:
        yaml.YAMLError: If the object contains values YAML cannot represent
    """
    return yaml.safe_dump(obj.to_dict(), sort_keys=False, default_flow_style=False)


class ObjectMaterializer:
    """Creates or renders a batch of objects.

    Example:
        materializer = ObjectMaterializer(ctx.client)
        await materializer.materialize(objects, MaterializationMode.RENDER)
    """

    def __init__(self, client: KubernetesClient, out: TextIO | None = None) -> None:
        self._client = client
        self._out = out

    @property
    def out(self) -> TextIO:
        # sys.stdout is looked up on every access
        return self._out if self._out is not None else sys.stdout

    async def materialize(
        self,
        objects: Sequence[Any],
        mode: MaterializationMode,
    ) -> None:
        """Materialize objects in order.

        Args:
            objects: Objects to process
            mode: RENDER to print YAML, CREATE to submit to the cluster

        Raises:
            MaterializationError: On the first object that cannot be
                rendered or created; later objects are not processed
        """
        for index, obj in enumerate(objects, start=1):
            if mode is MaterializationMode.RENDER:
                self._render(obj, index)
            else:
                await self._create(obj, index)

    def _render(self, obj: Any, index: int) -> None:
        try:
            document = render_object(obj)
        except yaml.YAMLError as e:
            raise MaterializationError(
                f"Failed to render {obj.kind}/{obj.name}",
                kind=obj.kind,
                name=obj.name,
                namespace=obj.namespace,
                index=index,
                details=str(e),
            ) from e

        self.out.write(document)
        self.out.write(f"{DEFAULT_CONSTANTS.DOCUMENT_SEPARATOR}\n")

    async def _create(self, obj: Any, index: int) -> None:
        kind, name = obj.kind, obj.name
        logger.debug(f"Creating {kind}/{name} (namespace={obj.namespace})")
        try:
            await self._client.create(obj)
        except Exception as e:
            raise MaterializationError(
                f"Failed to create {kind}/{name}",
                kind=kind,
                name=name,
                namespace=obj.namespace,
                index=index,
                details=str(e),
            ) from e

        self.out.write(f"{kind}/{name} created\n")


async def create_and_generate_objects(
    ctx: ClientContext,
    objects: Sequence[Any],
    dry_run: bool,
    out: TextIO | None = None,
) -> None:
    """Create the objects in the cluster, or print their manifests on dry run."""
    mode = MaterializationMode.RENDER if dry_run else MaterializationMode.CREATE
    await ObjectMaterializer(ctx.client, out).materialize(objects, mode)

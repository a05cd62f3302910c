"""Loading manifests into typed objects."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import yaml
from kr8s.asyncio.objects import APIObject

from .errors import ManifestError, MaterializationError

if TYPE_CHECKING:
    from .client import ClientContext


def load_manifests(text: str) -> list[dict[str, Any]]:
    """Parse a multi-document YAML stream.

    Empty documents are skipped.

    Raises:
        ManifestError: If the stream is not valid YAML or a document is
            not a mapping
    """
    try:
        documents = list(yaml.safe_load_all(text))
    except yaml.YAMLError as e:
        raise ManifestError("Invalid YAML manifest", details=str(e)) from e

    manifests = []
    for position, document in enumerate(documents, start=1):
        if document is None:
            continue
        if not isinstance(document, dict):
            raise ManifestError(
                f"Document {position} is not a mapping",
                details=f"Got {type(document).__name__}",
            )
        manifests.append(document)
    return manifests


def _non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _validate_manifest(manifest: dict[str, Any], index: int) -> None:
    """Check the fields every object needs before it is typed.

    Args:
        manifest: Parsed manifest
        index: 1-based position of the manifest in the batch

    Raises:
        ManifestError: If ``apiVersion``, ``kind`` or ``metadata.name`` is
            missing or malformed
    """
    for key in ("apiVersion", "kind"):
        if not _non_empty_string(manifest.get(key)):
            raise ManifestError(
                f"Manifest {index} has no valid {key}",
                details=f"Got {manifest.get(key)!r}",
            )

    kind = manifest["kind"]
    metadata = manifest.get("metadata")
    if not isinstance(metadata, dict):
        raise ManifestError(
            f"Manifest {index} ({kind}) has no metadata mapping",
            details=f"Got {metadata!r}",
        )
    if not _non_empty_string(metadata.get("name")):
        raise ManifestError(f"Manifest {index} ({kind}) has no metadata.name")

    namespace = metadata.get("namespace")
    if namespace is not None and not isinstance(namespace, str):
        raise ManifestError(
            f"Manifest {index} ({kind}/{metadata['name']}) has an invalid namespace",
            details=f"Got {namespace!r}",
        )


def build_objects(
    ctx: ClientContext, manifests: list[dict[str, Any]]
) -> list[APIObject]:
    """Turn manifests into objects bound to the context's typed client.

    Namespaced objects without a namespace are placed in ``ctx.namespace``.
    Every manifest is checked before any object is built.

    Raises:
        ManifestError: If a manifest lacks a usable apiVersion, kind or name
        MaterializationError: If a manifest's kind is not registered
    """
    for index, manifest in enumerate(manifests, start=1):
        _validate_manifest(manifest, index)

    objects = []
    for index, manifest in enumerate(manifests, start=1):
        try:
            objects.append(
                ctx.client.object_from_manifest(manifest, namespace=ctx.namespace)
            )
        except LookupError as e:
            metadata = manifest["metadata"]
            raise MaterializationError(
                str(e),
                kind=manifest["kind"],
                name=metadata["name"],
                namespace=metadata.get("namespace"),
                index=index,
            ) from e
    return objects

"""Kubernetes client context for the plugin.

Builds the single connection context used by every plugin command: a typed
client bound to the plugin's type registry, a lower-level exec client, and
the resolved working namespace.

Example:
    from src.infra.k8s import ConfigFlags, run_sync, setup_kubernetes_client

    ctx = run_sync(setup_kubernetes_client(ConfigFlags(namespace="db")))
    print(ctx.namespace, ctx.namespace_explicit)
"""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

import kr8s
from kr8s.asyncio.objects import APIObject
from loguru import logger

from src.infra.constants import DEFAULT_CONSTANTS

from . import config as cluster_config
from .config import ClusterConfig, ConfigFlags
from .errors import (
    ClientConstructionError,
    ConfigResolutionError,
    NamespaceResolutionError,
    PluginError,
)
from .pod_exec import PodExecClient
from .registry import TypeRegistry, build_type_registry

# =============================================================================
# Typed Client
# =============================================================================


class KubernetesClient:
    """Typed client: a kr8s API session bound to a type registry."""

    def __init__(self, api: Any, registry: TypeRegistry) -> None:
        self._api = api
        self._registry = registry

    @property
    def api(self) -> Any:
        return self._api

    @property
    def registry(self) -> TypeRegistry:
        return self._registry

    def object_from_manifest(
        self,
        manifest: dict[str, Any],
        namespace: str | None = None,
    ) -> APIObject:
        """Build a typed object bound to this client from a manifest.

        Args:
            manifest: Resource manifest (left unmodified)
            namespace: Namespace for namespaced objects that declare none

        Raises:
            LookupError: If the manifest's kind is not in the registry
        """
        api_version = manifest.get("apiVersion", "")
        kind = manifest.get("kind", "")
        cls = self._registry.lookup(api_version, kind)
        if cls is None:
            raise LookupError(f"Unknown resource type {api_version}/{kind}")

        resource = copy.deepcopy(manifest)
        metadata = resource.setdefault("metadata", {})
        if cls.namespaced and namespace and not metadata.get("namespace"):
            metadata["namespace"] = namespace
        return cls(resource, api=self._api)

    async def create(self, obj: APIObject) -> None:
        """Create an object in its declared namespace."""
        await obj.create()


# =============================================================================
# Cluster Connector
# =============================================================================


class ClusterConnector(ABC):
    """Connectivity capability used to build a ClientContext."""

    @abstractmethod
    def resolve_config(self, flags: ConfigFlags) -> ClusterConfig:
        """Resolve a concrete configuration from the flags."""
        ...

    @abstractmethod
    async def new_client(
        self, config: ClusterConfig, registry: TypeRegistry
    ) -> KubernetesClient:
        """Create the typed client."""
        ...

    @abstractmethod
    def resolve_namespace(
        self, flags: ConfigFlags, config: ClusterConfig
    ) -> tuple[str, bool]:
        """Resolve the working namespace and whether it was explicit."""
        ...

    @abstractmethod
    async def new_exec_client(self, config: ClusterConfig) -> PodExecClient:
        """Create the client used to exec into pods."""
        ...


class Kr8sConnector(ClusterConnector):
    """Connector backed by kubeconfig files and the kr8s async API."""

    def resolve_config(self, flags: ConfigFlags) -> ClusterConfig:
        return cluster_config.resolve_config(flags)

    def resolve_namespace(
        self, flags: ConfigFlags, config: ClusterConfig
    ) -> tuple[str, bool]:
        return cluster_config.resolve_namespace(flags, config)

    async def _get_api(self, config: ClusterConfig) -> Any:  # kr8s.asyncio.Api
        if config.in_cluster:
            return await kr8s.asyncio.api(
                serviceaccount=str(DEFAULT_CONSTANTS.SERVICE_ACCOUNT_DIR)
            )
        return await kr8s.asyncio.api(
            kubeconfig=config.kubeconfig,
            context=config.context,
        )

    async def new_client(
        self, config: ClusterConfig, registry: TypeRegistry
    ) -> KubernetesClient:
        return KubernetesClient(await self._get_api(config), registry)

    async def new_exec_client(self, config: ClusterConfig) -> PodExecClient:
        return PodExecClient(await self._get_api(config))


# =============================================================================
# Client Context
# =============================================================================


@dataclass(frozen=True)
class ClientContext:
    """Connection state shared by all plugin operations.

    Built once per invocation by ``setup_kubernetes_client`` and read-only
    afterwards.
    """

    client: KubernetesClient
    exec_client: PodExecClient
    namespace: str
    namespace_explicit: bool
    config: ClusterConfig


@contextmanager
def _failing_as(error_cls: type[PluginError], message: str) -> Iterator[None]:
    """Re-raise unexpected errors as ``error_cls``; plugin errors pass through."""
    try:
        yield
    except PluginError:
        raise
    except Exception as e:
        raise error_cls(message, details=str(e)) from e


async def setup_kubernetes_client(
    flags: ConfigFlags,
    connector: ClusterConnector | None = None,
) -> ClientContext:
    """Create the client context used by plugin commands.

    Args:
        flags: Global connection flags
        connector: Connectivity capability (defaults to Kr8sConnector)

    Returns:
        A fully populated ClientContext

    Raises:
        ConfigResolutionError: If the configuration source is unusable
        ClientConstructionError: If the registry or a client cannot be built
        NamespaceResolutionError: If no namespace can be resolved
    """
    connector = connector or Kr8sConnector()

    with _failing_as(ConfigResolutionError, "Unable to resolve cluster configuration"):
        config = connector.resolve_config(flags)

    with _failing_as(ClientConstructionError, "Unable to create Kubernetes client"):
        registry = build_type_registry()
        client = await connector.new_client(config, registry)
    if client is None:
        raise ClientConstructionError("Unable to create Kubernetes client")

    with _failing_as(NamespaceResolutionError, "Unable to resolve namespace"):
        namespace, explicit = connector.resolve_namespace(flags, config)
    if not namespace:
        raise NamespaceResolutionError("Resolved namespace is empty")

    with _failing_as(ClientConstructionError, "Unable to create exec client"):
        exec_client = await connector.new_exec_client(config)
    if exec_client is None:
        raise ClientConstructionError("Unable to create exec client")

    logger.debug(
        f"Client ready (context={config.context or 'in-cluster'}, "
        f"namespace={namespace}, explicit={explicit})"
    )
    return ClientContext(
        client=client,
        exec_client=exec_client,
        namespace=namespace,
        namespace_explicit=explicit,
        config=config,
    )

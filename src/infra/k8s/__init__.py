"""Kubernetes layer of the CloudNativePG plugin.

Builds the per-invocation client context, materializes objects (create or
render) and runs diagnostic commands inside database pods. All cluster
operations are async on top of kr8s; use `run_sync()` from CLI commands.

Example:
    from src.infra.k8s import ConfigFlags, run_sync, setup_kubernetes_client

    ctx = run_sync(setup_kubernetes_client(ConfigFlags()))
"""

from .client import (
    ClientContext,
    ClusterConnector,
    Kr8sConnector,
    KubernetesClient,
    setup_kubernetes_client,
)
from .config import ClusterConfig, ConfigFlags
from .controldata import ControlDataRetriever, ExecutionRequest, get_pg_control_data
from .errors import (
    ClientConstructionError,
    ConfigResolutionError,
    ExecutionError,
    ManifestError,
    MaterializationError,
    NamespaceResolutionError,
    PluginError,
)
from .pod_exec import ExecResult, PodExecClient, PodReference
from .manifests import build_objects, load_manifests
from .materialize import (
    MaterializationMode,
    ObjectMaterializer,
    create_and_generate_objects,
)
from .utils import run_sync

__all__ = [
    # Client context
    "ClientContext",
    "ClusterConnector",
    "Kr8sConnector",
    "KubernetesClient",
    "setup_kubernetes_client",
    "ClusterConfig",
    "ConfigFlags",
    # Materialization
    "MaterializationMode",
    "ObjectMaterializer",
    "create_and_generate_objects",
    "build_objects",
    "load_manifests",
    # Exec
    "ControlDataRetriever",
    "ExecutionRequest",
    "ExecResult",
    "PodExecClient",
    "PodReference",
    "get_pg_control_data",
    # Errors
    "PluginError",
    "ConfigResolutionError",
    "ClientConstructionError",
    "NamespaceResolutionError",
    "ManifestError",
    "MaterializationError",
    "ExecutionError",
    # Utilities
    "run_sync",
]

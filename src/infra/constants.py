"""Plugin constants and configuration.

This module centralizes all magic strings, API groups and timeouts
used by the plugin's Kubernetes layer.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class PluginConstants:
    """Constants for the CloudNativePG plugin.

    All attributes are class-level and immutable.
    """

    # API groups
    CNPG_API_VERSION: str = "postgresql.cnpg.io/v1"
    SNAPSHOT_API_VERSION: str = "snapshot.storage.k8s.io/v1"

    # Namespace used when neither the flags nor the context provide one
    DEFAULT_NAMESPACE: str = "default"

    # Database pods
    POSTGRES_CONTAINER_NAME: str = "postgres"
    PG_CONTROLDATA_COMMAND: tuple[str, ...] = ("pg_controldata",)
    EXEC_TIMEOUT_SECONDS: float = 10.0

    # Render mode
    DOCUMENT_SEPARATOR: str = "---"

    # Kubeconfig discovery
    KUBECONFIG_ENV: str = "KUBECONFIG"
    DEFAULT_KUBECONFIG: Path = Path("~/.kube/config")

    # In-cluster service account
    SERVICE_HOST_ENV: str = "KUBERNETES_SERVICE_HOST"
    SERVICE_ACCOUNT_DIR: Path = Path("/var/run/secrets/kubernetes.io/serviceaccount")

    @property
    def service_account_token(self) -> Path:
        """Get path to the in-cluster service account token."""
        return self.SERVICE_ACCOUNT_DIR / "token"

    @property
    def service_account_namespace(self) -> Path:
        """Get path to the in-cluster service account namespace file."""
        return self.SERVICE_ACCOUNT_DIR / "namespace"


DEFAULT_CONSTANTS = PluginConstants()

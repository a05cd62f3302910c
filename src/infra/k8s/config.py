"""Cluster configuration resolution.

Turns the global connection flags into a concrete cluster configuration,
following the same lookup order kubectl uses:

1. ``--kubeconfig``
2. the ``KUBECONFIG`` environment variable (a path list)
3. ``~/.kube/config``
4. the in-cluster service account
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from loguru import logger
from pydantic import BaseModel

from src.infra.constants import DEFAULT_CONSTANTS

from .errors import ConfigResolutionError, NamespaceResolutionError


class ConfigFlags(BaseModel):
    """Global connection flags supplied on the command line."""

    kubeconfig: Path | None = None
    context: str | None = None
    namespace: str | None = None


@dataclass(frozen=True)
class ClusterConfig:
    """Connection configuration resolved from the flags.

    ``kubeconfig_paths`` holds every kubeconfig file that was found; they are
    merged the way kubectl merges a ``KUBECONFIG`` list.
    """

    kubeconfig_paths: tuple[Path, ...] = ()
    context: str | None = None
    context_namespace: str | None = None
    in_cluster: bool = False

    @property
    def kubeconfig(self) -> str | None:
        """The kubeconfig files as a single path list, or None when in-cluster."""
        if not self.kubeconfig_paths:
            return None
        return os.pathsep.join(str(p) for p in self.kubeconfig_paths)


# =============================================================================
# Kubeconfig loading
# =============================================================================


def _kubeconfig_candidates(flags: ConfigFlags) -> tuple[list[Path], bool]:
    """Return kubeconfig paths to consider and whether they were explicit."""
    if flags.kubeconfig is not None:
        return [flags.kubeconfig.expanduser()], True

    env_value = os.environ.get(DEFAULT_CONSTANTS.KUBECONFIG_ENV, "")
    if env_value:
        paths = [Path(p).expanduser() for p in env_value.split(os.pathsep) if p]
        return paths, False

    return [DEFAULT_CONSTANTS.DEFAULT_KUBECONFIG.expanduser()], False


def load_kubeconfig(path: Path) -> dict[str, Any]:
    """Load and validate a single kubeconfig file.

    Raises:
        ConfigResolutionError: If the file cannot be read or parsed
    """
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigResolutionError(
            f"Cannot read kubeconfig {path}", details=str(e)
        ) from e
    except yaml.YAMLError as e:
        raise ConfigResolutionError(
            f"Malformed kubeconfig {path}", details=str(e)
        ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigResolutionError(
            f"Malformed kubeconfig {path}",
            details="Top-level document must be a mapping",
        )
    return data


def _find_context(
    documents: list[tuple[Path, dict[str, Any]]], name: str
) -> tuple[Path, dict[str, Any]] | None:
    for path, data in documents:
        for entry in data.get("contexts") or []:
            if isinstance(entry, dict) and entry.get("name") == name:
                return path, entry.get("context") or {}
    return None


def _in_cluster_available() -> bool:
    return bool(
        os.environ.get(DEFAULT_CONSTANTS.SERVICE_HOST_ENV)
    ) and DEFAULT_CONSTANTS.service_account_token.exists()


def resolve_config(flags: ConfigFlags) -> ClusterConfig:
    """Resolve the cluster configuration for the given flags.

    Args:
        flags: Global connection flags

    Returns:
        ClusterConfig describing the kubeconfig files and context to use

    Raises:
        ConfigResolutionError: If no usable configuration can be found
    """
    candidates, explicit = _kubeconfig_candidates(flags)

    documents: list[tuple[Path, dict[str, Any]]] = []
    for path in candidates:
        if not path.exists():
            if explicit:
                raise ConfigResolutionError(f"Kubeconfig {path} does not exist")
            continue
        documents.append((path, load_kubeconfig(path)))

    if not documents:
        if _in_cluster_available():
            logger.debug("No kubeconfig found, using in-cluster configuration")
            return ClusterConfig(in_cluster=True)
        raise ConfigResolutionError(
            "No cluster configuration found",
            details="Set --kubeconfig or KUBECONFIG, or run inside a cluster",
        )

    context_name = flags.context
    if not context_name:
        context_name = next(
            (
                data["current-context"]
                for _, data in documents
                if data.get("current-context")
            ),
            None,
        )
    if not context_name:
        raise ConfigResolutionError(
            "No current context is set in the kubeconfig",
            details="Pass --context or run 'kubectl config use-context'",
        )

    found = _find_context(documents, context_name)
    if found is None:
        raise ConfigResolutionError(
            f"Context '{context_name}' not found in kubeconfig"
        )

    path, context = found
    logger.debug(f"Resolved context '{context_name}' from {path}")
    return ClusterConfig(
        kubeconfig_paths=tuple(p for p, _ in documents),
        context=context_name,
        context_namespace=context.get("namespace") or None,
    )


# =============================================================================
# Namespace resolution
# =============================================================================


def resolve_namespace(flags: ConfigFlags, config: ClusterConfig) -> tuple[str, bool]:
    """Resolve the working namespace.

    Returns:
        Tuple of (namespace, explicitly passed)

    Raises:
        NamespaceResolutionError: If the namespace is empty or unreadable
    """
    if flags.namespace is not None:
        namespace = flags.namespace.strip()
        if not namespace:
            raise NamespaceResolutionError("Namespace must not be empty")
        return namespace, True

    if config.context_namespace:
        return config.context_namespace, False

    if config.in_cluster:
        ns_file = DEFAULT_CONSTANTS.service_account_namespace
        if ns_file.exists():
            try:
                namespace = ns_file.read_text().strip()
            except OSError as e:
                raise NamespaceResolutionError(
                    f"Cannot read {ns_file}", details=str(e)
                ) from e
            if namespace:
                return namespace, False

    return DEFAULT_CONSTANTS.DEFAULT_NAMESPACE, False

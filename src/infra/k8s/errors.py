"""Errors raised by the plugin's Kubernetes layer."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .pod_exec import PodReference


class PluginError(Exception):
    """Base class for plugin failures surfaced to the CLI."""

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(message)


class ConfigResolutionError(PluginError):
    """Raised when the cluster configuration source is malformed or unreachable."""


class ClientConstructionError(PluginError):
    """Raised when the type registry or the API session cannot be built."""


class NamespaceResolutionError(PluginError):
    """Raised when no working namespace can be determined."""


class MaterializationError(PluginError):
    """Raised when an object cannot be rendered or created.

    Identifies the failing object by kind, name, namespace and its
    1-based position in the batch.
    """

    def __init__(
        self,
        message: str,
        *,
        kind: str,
        name: str,
        namespace: str | None = None,
        index: int | None = None,
        details: str | None = None,
    ):
        self.kind = kind
        self.name = name
        self.namespace = namespace
        self.index = index
        super().__init__(message, details)


class ExecutionError(PluginError):
    """Raised when a command executed inside a pod fails or times out."""

    def __init__(
        self,
        message: str,
        *,
        pod: PodReference,
        details: str | None = None,
    ):
        self.pod = pod
        super().__init__(message, details)


class ManifestError(PluginError):
    """Raised when a manifest stream cannot be parsed into objects."""

"""Type registry for the typed Kubernetes client.

Maps ``(apiVersion, kind)`` pairs to kr8s object classes so manifests can be
turned into typed objects. The registry is composed from three groups:
built-in Kubernetes kinds, CloudNativePG kinds and volume snapshot kinds.

Example:
    from src.infra.k8s.registry import build_type_registry

    registry = build_type_registry()
    cls = registry.lookup("postgresql.cnpg.io/v1", "Cluster")
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from cachetools.func import lru_cache  # type: ignore
from kr8s.asyncio.objects import (
    APIObject,
    ClusterRole,
    ClusterRoleBinding,
    ConfigMap,
    CronJob,
    Deployment,
    Job,
    Namespace,
    PersistentVolumeClaim,
    Pod,
    Role,
    RoleBinding,
    Secret,
    Service,
    ServiceAccount,
    StatefulSet,
    new_class,
)

from src.infra.constants import DEFAULT_CONSTANTS

BUILTIN_TYPES: tuple[type[APIObject], ...] = (
    Namespace,
    ConfigMap,
    Secret,
    Service,
    ServiceAccount,
    Pod,
    PersistentVolumeClaim,
    Role,
    RoleBinding,
    ClusterRole,
    ClusterRoleBinding,
    Deployment,
    StatefulSet,
    Job,
    CronJob,
)

# (kind, plural, namespaced)
CNPG_KINDS: tuple[tuple[str, str, bool], ...] = (
    ("Cluster", "clusters", True),
    ("Backup", "backups", True),
    ("ScheduledBackup", "scheduledbackups", True),
    ("Pooler", "poolers", True),
    ("Database", "databases", True),
    ("Publication", "publications", True),
    ("Subscription", "subscriptions", True),
    ("ImageCatalog", "imagecatalogs", True),
    ("ClusterImageCatalog", "clusterimagecatalogs", False),
)

SNAPSHOT_KINDS: tuple[tuple[str, str, bool], ...] = (
    ("VolumeSnapshot", "volumesnapshots", True),
    ("VolumeSnapshotContent", "volumesnapshotcontents", False),
    ("VolumeSnapshotClass", "volumesnapshotclasses", False),
)


@dataclass
class TypeRegistry:
    """Registry of object classes keyed by ``(apiVersion, kind)``.

    A frozen registry rejects further registrations.
    """

    _types: dict[tuple[str, str], type[APIObject]] = field(default_factory=dict)
    _frozen: bool = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> TypeRegistry:
        """Disallow further registrations and return the registry."""
        self._frozen = True
        return self

    def register(self, cls: type[APIObject]) -> None:
        """Register a single object class.

        Raises:
            ValueError: If the ``(apiVersion, kind)`` pair is already registered
            RuntimeError: If the registry is frozen
        """
        if self._frozen:
            raise RuntimeError("Type registry is frozen")
        key = (cls.version, cls.kind)
        if key in self._types:
            raise ValueError(f"{key[0]}/{key[1]} is already registered")
        self._types[key] = cls

    def register_all(self, classes: Iterable[type[APIObject]]) -> None:
        for cls in classes:
            self.register(cls)

    def lookup(self, api_version: str, kind: str) -> type[APIObject] | None:
        """Return the class registered for a kind, or None if unknown."""
        return self._types.get((api_version, kind))

    def __contains__(self, key: object) -> bool:
        return key in self._types

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self._types)

    def __len__(self) -> int:
        return len(self._types)


def _custom_types(
    api_version: str, kinds: Iterable[tuple[str, str, bool]]
) -> list[type[APIObject]]:
    return [
        new_class(
            kind=kind,
            version=api_version,
            asyncio=True,
            namespaced=namespaced,
            plural=plural,
        )
        for kind, plural, namespaced in kinds
    ]


def add_builtin_types(registry: TypeRegistry) -> None:
    """Add the built-in Kubernetes kinds to the registry."""
    registry.register_all(BUILTIN_TYPES)


def add_cnpg_types(registry: TypeRegistry) -> None:
    """Add the CloudNativePG kinds to the registry."""
    registry.register_all(
        _custom_types(DEFAULT_CONSTANTS.CNPG_API_VERSION, CNPG_KINDS)
    )


def add_snapshot_types(registry: TypeRegistry) -> None:
    """Add the CSI volume snapshot kinds to the registry."""
    registry.register_all(
        _custom_types(DEFAULT_CONSTANTS.SNAPSHOT_API_VERSION, SNAPSHOT_KINDS)
    )


@lru_cache(maxsize=1)
def build_type_registry() -> TypeRegistry:
    """Compose the registry used by the plugin's typed client.

    The registry is cached for the process and returned frozen.

    Raises:
        ValueError: If two groups register the same kind
    """
    registry = TypeRegistry()
    add_builtin_types(registry)
    add_cnpg_types(registry)
    add_snapshot_types(registry)
    return registry.freeze()

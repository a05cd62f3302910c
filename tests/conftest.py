"""Shared fixtures for the plugin test suite."""

from collections.abc import Callable
from pathlib import Path
from typing import Any
from unittest.mock import Mock

import pytest
import yaml

from src.infra.k8s.client import ClientContext, KubernetesClient
from src.infra.k8s.config import ClusterConfig
from src.infra.k8s.registry import TypeRegistry, build_type_registry
from tests.fakes import FakeObject


@pytest.fixture
def sample_objects() -> list[FakeObject]:
    """A namespace followed by a ConfigMap inside it."""
    return [
        FakeObject("Namespace", "ns-a"),
        FakeObject("ConfigMap", "cfg-a", "ns-a", data={"key": "value"}),
    ]


@pytest.fixture
def typed_client() -> KubernetesClient:
    """Typed client with the full registry and a mocked API session."""
    return KubernetesClient(Mock(), build_type_registry())


@pytest.fixture
def client_context(typed_client: KubernetesClient) -> ClientContext:
    return ClientContext(
        client=typed_client,
        exec_client=Mock(),
        namespace="db",
        namespace_explicit=True,
        config=ClusterConfig(context="test"),
    )


@pytest.fixture
def empty_client() -> KubernetesClient:
    return KubernetesClient(Mock(), TypeRegistry())


@pytest.fixture
def write_kubeconfig(tmp_path: Path) -> Callable[..., Path]:
    """Write a kubeconfig file and return its path."""

    def _write(
        name: str = "config",
        *,
        current_context: str | None = "dev",
        contexts: dict[str, str | None] | None = None,
    ) -> Path:
        if contexts is None:
            contexts = {"dev": "dev-ns"}
        data: dict[str, Any] = {
            "apiVersion": "v1",
            "kind": "Config",
            "clusters": [
                {"name": "local", "cluster": {"server": "https://127.0.0.1:6443"}}
            ],
            "users": [{"name": "admin", "user": {"token": "secret"}}],
            "contexts": [
                {
                    "name": ctx_name,
                    "context": {
                        "cluster": "local",
                        "user": "admin",
                        **({"namespace": ns} if ns else {}),
                    },
                }
                for ctx_name, ns in contexts.items()
            ],
        }
        if current_context:
            data["current-context"] = current_context

        path = tmp_path / name
        path.write_text(yaml.safe_dump(data))
        return path

    return _write

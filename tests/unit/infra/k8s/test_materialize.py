"""Tests for object materialization (render and create modes)."""

import io
from unittest.mock import AsyncMock, Mock

import pytest
import yaml

from src.infra.k8s.client import KubernetesClient
from src.infra.k8s.errors import MaterializationError
from src.infra.k8s.materialize import (
    MaterializationMode,
    ObjectMaterializer,
    create_and_generate_objects,
    render_object,
)
from tests.fakes import FakeObject


@pytest.fixture
def out() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def forbidden_client() -> Mock:
    """Client that fails the test if the cluster is contacted."""
    client = Mock(spec=KubernetesClient)
    client.create = AsyncMock(side_effect=AssertionError("cluster contacted"))
    return client


# =============================================================================
# Render mode
# =============================================================================


@pytest.mark.asyncio
async def test_render_writes_one_document_per_object(
    sample_objects, forbidden_client, out
):
    materializer = ObjectMaterializer(forbidden_client, out)

    await materializer.materialize(sample_objects, MaterializationMode.RENDER)

    output = out.getvalue()
    assert output.count("---\n") == 2
    assert output.endswith("---\n")
    documents = [d for d in yaml.safe_load_all(output) if d is not None]
    assert [(d["kind"], d["metadata"]["name"]) for d in documents] == [
        ("Namespace", "ns-a"),
        ("ConfigMap", "cfg-a"),
    ]
    assert documents[1]["data"] == {"key": "value"}


@pytest.mark.asyncio
async def test_render_never_contacts_cluster(sample_objects, forbidden_client, out):
    await ObjectMaterializer(forbidden_client, out).materialize(
        sample_objects, MaterializationMode.RENDER
    )

    forbidden_client.create.assert_not_called()
    for obj in sample_objects:
        obj.create.assert_not_called()


@pytest.mark.asyncio
async def test_render_failure_stops_processing(forbidden_client, out):
    objects = [
        FakeObject("ConfigMap", "good", "db"),
        FakeObject("ConfigMap", "bad", "db", data={"key": object()}),
        FakeObject("ConfigMap", "never", "db"),
    ]

    with pytest.raises(MaterializationError) as excinfo:
        await ObjectMaterializer(forbidden_client, out).materialize(
            objects, MaterializationMode.RENDER
        )

    assert excinfo.value.name == "bad"
    assert excinfo.value.index == 2
    assert out.getvalue().count("---\n") == 1
    assert "never" not in out.getvalue()


def test_render_object_preserves_key_order():
    obj = FakeObject("ConfigMap", "cfg-a", "ns-a", data={"b": "1", "a": "2"})

    document = render_object(obj)

    assert document.index("apiVersion") < document.index("kind")
    assert list(yaml.safe_load(document)["data"]) == ["b", "a"]


# =============================================================================
# Create mode
# =============================================================================


@pytest.mark.asyncio
async def test_create_reports_each_object(sample_objects, empty_client, out):
    await ObjectMaterializer(empty_client, out).materialize(
        sample_objects, MaterializationMode.CREATE
    )

    assert out.getvalue() == "Namespace/ns-a created\nConfigMap/cfg-a created\n"
    for obj in sample_objects:
        obj.create.assert_awaited_once()


@pytest.mark.asyncio
async def test_create_rejection_identifies_failed_object(empty_client, out):
    objects = [
        FakeObject("Namespace", "ns-a"),
        FakeObject(
            "ConfigMap",
            "cfg-a",
            "ns-a",
            error=RuntimeError('configmaps "cfg-a" already exists'),
        ),
    ]

    with pytest.raises(MaterializationError) as excinfo:
        await ObjectMaterializer(empty_client, out).materialize(
            objects, MaterializationMode.CREATE
        )

    error = excinfo.value
    assert (error.kind, error.name, error.namespace, error.index) == (
        "ConfigMap",
        "cfg-a",
        "ns-a",
        2,
    )
    assert "already exists" in (error.details or "")
    assert isinstance(error.__cause__, RuntimeError)
    assert out.getvalue() == "Namespace/ns-a created\n"


@pytest.mark.asyncio
async def test_create_stops_at_first_failure(empty_client, out):
    objects = [FakeObject("ConfigMap", f"cfg-{i}", "db") for i in range(1, 6)]
    objects[2].create.side_effect = RuntimeError("admission webhook denied")

    with pytest.raises(MaterializationError) as excinfo:
        await ObjectMaterializer(empty_client, out).materialize(
            objects, MaterializationMode.CREATE
        )

    assert excinfo.value.index == 3
    for obj in objects[:3]:
        obj.create.assert_awaited_once()
    for obj in objects[3:]:
        obj.create.assert_not_called()


@pytest.mark.asyncio
async def test_create_with_no_objects_writes_nothing(empty_client, out):
    await ObjectMaterializer(empty_client, out).materialize(
        [], MaterializationMode.CREATE
    )

    assert out.getvalue() == ""


# =============================================================================
# create_and_generate_objects
# =============================================================================


@pytest.mark.asyncio
async def test_dry_run_renders(client_context, sample_objects, out):
    await create_and_generate_objects(client_context, sample_objects, True, out)

    assert out.getvalue().count("---\n") == 2
    for obj in sample_objects:
        obj.create.assert_not_called()


@pytest.mark.asyncio
async def test_without_dry_run_creates(client_context, sample_objects, out):
    await create_and_generate_objects(client_context, sample_objects, False, out)

    assert out.getvalue() == "Namespace/ns-a created\nConfigMap/cfg-a created\n"


@pytest.mark.asyncio
async def test_default_output_is_stdout(sample_objects, empty_client, capsys):
    await ObjectMaterializer(empty_client).materialize(
        sample_objects, MaterializationMode.CREATE
    )

    assert capsys.readouterr().out == (
        "Namespace/ns-a created\nConfigMap/cfg-a created\n"
    )

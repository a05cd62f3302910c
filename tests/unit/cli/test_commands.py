"""Tests for the plugin commands."""

from dataclasses import replace
from unittest.mock import AsyncMock, Mock, patch

import pytest
import yaml
from typer.testing import CliRunner

from src.cli import app
from src.infra.k8s.config import ConfigFlags
from src.infra.k8s.errors import ConfigResolutionError
from src.infra.k8s.pod_exec import ExecResult, PodExecClient, PodReference

MANIFEST = """\
apiVersion: v1
kind: Namespace
metadata:
  name: ns-a
---
apiVersion: v1
kind: ConfigMap
metadata:
  name: cfg-a
  namespace: ns-a
data:
  key: value
"""

runner = CliRunner()


@pytest.fixture
def manifest_file(tmp_path):
    path = tmp_path / "objects.yaml"
    path.write_text(MANIFEST)
    return path


# =============================================================================
# apply
# =============================================================================


def test_apply_dry_run_renders_manifests(client_context, manifest_file):
    with patch(
        "src.cli.commands.objects.setup_kubernetes_client",
        AsyncMock(return_value=client_context),
    ) as mock_setup:
        result = runner.invoke(
            app, ["-n", "db", "apply", str(manifest_file), "--dry-run"]
        )

    assert result.exit_code == 0, result.output
    assert result.stdout.count("---\n") == 2
    documents = [d for d in yaml.safe_load_all(result.stdout) if d]
    assert [d["metadata"]["name"] for d in documents] == ["ns-a", "cfg-a"]
    mock_setup.assert_awaited_once_with(ConfigFlags(namespace="db"))


def test_apply_creates_objects(client_context, manifest_file):
    with (
        patch(
            "src.cli.commands.objects.setup_kubernetes_client",
            AsyncMock(return_value=client_context),
        ),
        patch.object(client_context.client, "create", AsyncMock()) as mock_create,
    ):
        result = runner.invoke(app, ["apply", str(manifest_file)])

    assert result.exit_code == 0, result.output
    assert result.stdout == "Namespace/ns-a created\nConfigMap/cfg-a created\n"
    assert mock_create.await_count == 2


def test_apply_reads_stdin(client_context):
    with patch(
        "src.cli.commands.objects.setup_kubernetes_client",
        AsyncMock(return_value=client_context),
    ):
        result = runner.invoke(app, ["apply", "-", "--dry-run"], input=MANIFEST)

    assert result.exit_code == 0, result.output
    assert result.stdout.count("---\n") == 2


def test_apply_missing_file_fails(tmp_path):
    result = runner.invoke(app, ["apply", str(tmp_path / "missing.yaml")])

    assert result.exit_code == 1


def test_apply_setup_failure_exits_with_error(manifest_file):
    with patch(
        "src.cli.commands.objects.setup_kubernetes_client",
        AsyncMock(side_effect=ConfigResolutionError("No cluster configuration")),
    ):
        result = runner.invoke(app, ["apply", str(manifest_file)])

    assert result.exit_code == 1


def test_apply_malformed_manifest_exits_with_error(client_context, tmp_path):
    path = tmp_path / "objects.yaml"
    path.write_text("apiVersion: v1\nkind: ConfigMap\nmetadata:\n")

    with patch(
        "src.cli.commands.objects.setup_kubernetes_client",
        AsyncMock(return_value=client_context),
    ):
        result = runner.invoke(app, ["apply", str(path)])

    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert "created" not in result.output


# =============================================================================
# controldata
# =============================================================================


def test_controldata_prints_output(client_context):
    exec_client = Mock(spec=PodExecClient)
    exec_client.exec = AsyncMock(
        return_value=ExecResult(
            stdout="pg_control version number: 1300\n", stderr=""
        )
    )
    ctx = replace(client_context, exec_client=exec_client)

    with patch(
        "src.cli.commands.controldata.setup_kubernetes_client",
        AsyncMock(return_value=ctx),
    ):
        result = runner.invoke(app, ["controldata", "cluster-example-1"])

    assert result.exit_code == 0, result.output
    assert result.stdout == "pg_control version number: 1300\n"
    exec_client.exec.assert_awaited_once_with(
        PodReference(name="cluster-example-1", namespace="db"),
        "postgres",
        ("pg_controldata",),
        10.0,
    )


def test_controldata_timeout_exits_with_error(client_context):
    exec_client = Mock(spec=PodExecClient)
    exec_client.exec = AsyncMock(side_effect=TimeoutError())
    ctx = replace(client_context, exec_client=exec_client)

    with patch(
        "src.cli.commands.controldata.setup_kubernetes_client",
        AsyncMock(return_value=ctx),
    ):
        result = runner.invoke(app, ["controldata", "cluster-example-1"])

    assert result.exit_code == 1
    assert "version number" not in result.output

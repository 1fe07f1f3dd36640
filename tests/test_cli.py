"""Tests for the typer command-line interface."""

from __future__ import annotations

import pytest
from typer.testing import CliRunner

from homelab_manager.cli import app


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def env(tmp_path, monkeypatch):
    monkeypatch.setenv("HOMELAB_KUBECONFIG_PATH", str(tmp_path / ".kube" / "config"))
    monkeypatch.setenv("HOMELAB_DOCKER_READY_DELAY", "0")
    monkeypatch.setenv("HOMELAB_FLUX_MARKER_ROOT", str(tmp_path / "flux"))
    monkeypatch.setenv("GITHUB_USER", "octocat")
    monkeypatch.setenv("GITHUB_GITOPS_REPO", "home-ops")
    return tmp_path


def test_no_arguments_shows_help(runner):
    result = runner.invoke(app, [])
    assert "create" in result.output
    assert "delete" in result.output


def test_create_provisions_cluster(runner, host, env):
    result = runner.invoke(app, ["create", "--agents", "3"])
    assert result.exit_code == 0, result.output
    assert host.clusters["homelab"]["agents"] == 3
    assert (env / "flux" / "octocat" / "home-ops" / "gotk-components.yaml").exists()


def test_create_uses_cli_repository(runner, host, env):
    result = runner.invoke(app, ["create", "--github-repo", "fleet"])
    assert result.exit_code == 0, result.output
    bootstrap = [call for call in host.calls if call[:2] == ["flux", "bootstrap"]]
    assert "--repository=fleet" in bootstrap[0]


def test_create_exits_nonzero_on_prerequisite_failure(runner, host, env):
    host.flux_pre_ok = False
    result = runner.invoke(app, ["create"])
    assert result.exit_code == 1
    assert not any(call[:2] == ["flux", "bootstrap"] for call in host.calls)


def test_delete_removes_cluster(runner, host, env):
    host.add_cluster("homelab")
    result = runner.invoke(app, ["delete"])
    assert result.exit_code == 0, result.output
    assert host.clusters == {}


def test_delete_named_cluster_absent_succeeds(runner, host, env):
    result = runner.invoke(app, ["delete", "--cluster-name", "ghost"])
    assert result.exit_code == 0
    assert host.mutations == []


def test_status_exit_codes(runner, host, env):
    assert runner.invoke(app, ["status"]).exit_code == 3
    host.add_cluster("homelab")
    assert runner.invoke(app, ["status"]).exit_code == 0
    host.list_fails = True
    assert runner.invoke(app, ["status"]).exit_code == 1


def test_status_substring_match(runner, host, env):
    host.add_cluster("homelab-test")
    assert runner.invoke(app, ["status"]).exit_code == 3
    assert runner.invoke(app, ["status", "--substring-match"]).exit_code == 0


@pytest.mark.parametrize("args", [
    ["create", "--cluster-name", ""],
    ["create", "--servers", "20"],
    ["delete", "--cluster-name", ""],
])
def test_invalid_options_exit_without_touching_clusters(runner, host, env, args):
    result = runner.invoke(app, args)
    assert result.exit_code == 1
    assert host.mutations == []


def test_status_rejects_invalid_environment(runner, host, env, monkeypatch):
    monkeypatch.setenv("HOMELAB_SERVER_NODES", "0")
    result = runner.invoke(app, ["status"])
    assert result.exit_code == 1
    assert host.calls == []

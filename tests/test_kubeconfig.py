"""Tests for kubeconfig retrieval, directory creation and merge detection."""

from __future__ import annotations

import stat

import pytest
import yaml

from homelab_manager import kubeconfig
from homelab_manager.errors import CommandFailed


def test_ensure_kube_dir_creates_directory_with_mode(tmp_path):
    path = tmp_path / "home" / ".kube" / "config"
    assert kubeconfig.ensure_kube_dir(path) is True
    assert path.parent.is_dir()
    assert stat.S_IMODE(path.parent.stat().st_mode) == 0o755
    assert kubeconfig.ensure_kube_dir(path) is False


def test_get_kubeconfig_returns_k3d_output(host, cluster_cfg):
    host.add_cluster("homelab")
    text = kubeconfig.get_kubeconfig(cluster_cfg)
    assert yaml.safe_load(text)["current-context"] == "k3d-homelab"
    assert host.calls[-1] == ["k3d", "kubeconfig", "get", "homelab"]


def test_get_kubeconfig_for_missing_cluster_fails(host, cluster_cfg):
    with pytest.raises(CommandFailed, match="Failed to get kubeconfig for 'homelab'"):
        kubeconfig.get_kubeconfig(cluster_cfg)


def test_merge_kubeconfig_targets_configured_path(host, cluster_cfg):
    host.add_cluster("homelab")
    cluster_cfg.kubeconfig_path.parent.mkdir(parents=True)
    kubeconfig.merge_kubeconfig(cluster_cfg)
    assert host.calls[-1] == ["k3d", "kubeconfig", "merge", "homelab", "-o", str(cluster_cfg.kubeconfig_path)]
    assert cluster_cfg.kubeconfig_path.exists()


def test_already_merged_false_without_file(host, tmp_path):
    host.add_cluster("homelab")
    retrieved = yaml.safe_dump(host.kubeconfig_for("homelab"))
    assert kubeconfig.already_merged(retrieved, tmp_path / "missing") is False


def test_already_merged_true_after_merge(host, cluster_cfg):
    host.add_cluster("homelab")
    cluster_cfg.kubeconfig_path.parent.mkdir(parents=True)
    kubeconfig.merge_kubeconfig(cluster_cfg)
    retrieved = kubeconfig.get_kubeconfig(cluster_cfg)
    assert kubeconfig.already_merged(retrieved, cluster_cfg.kubeconfig_path) is True


def test_already_merged_keeps_unrelated_entries(host, cluster_cfg):
    path = cluster_cfg.kubeconfig_path
    path.parent.mkdir(parents=True)
    path.write_text(yaml.safe_dump({
        "clusters": [{"name": "work", "cluster": {"server": "https://work:6443"}}],
        "users": [{"name": "work", "user": {}}],
        "contexts": [{"name": "work", "context": {"cluster": "work", "user": "work"}}],
    }))
    host.add_cluster("homelab")
    kubeconfig.merge_kubeconfig(cluster_cfg)
    retrieved = kubeconfig.get_kubeconfig(cluster_cfg)
    assert kubeconfig.already_merged(retrieved, path) is True
    names = [c["name"] for c in yaml.safe_load(path.read_text())["contexts"]]
    assert names == ["work", "k3d-homelab"]


def test_already_merged_detects_recreated_cluster(host, cluster_cfg):
    host.add_cluster("homelab")
    cluster_cfg.kubeconfig_path.parent.mkdir(parents=True)
    kubeconfig.merge_kubeconfig(cluster_cfg)
    host.add_cluster("homelab")
    retrieved = kubeconfig.get_kubeconfig(cluster_cfg)
    assert kubeconfig.already_merged(retrieved, cluster_cfg.kubeconfig_path) is False


def test_already_merged_tolerates_garbage(tmp_path):
    path = tmp_path / "config"
    path.write_text(": not: valid: yaml: [")
    retrieved = yaml.safe_dump({"contexts": [{"name": "k3d-homelab", "context": {}}]})
    assert kubeconfig.already_merged(retrieved, path) is False
    assert kubeconfig.already_merged("", path) is False

"""Shared fixtures: a fake host standing in for k3d, flux and Docker."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest
import yaml

from homelab_manager import cluster, gitops, kubeconfig, runtime, tooling
from homelab_manager.config import ClusterConfig, GitOpsConfig
from homelab_manager.utils import CommandResult

MUTATING_PREFIXES = (
    ("k3d", "cluster", "create"),
    ("k3d", "cluster", "delete"),
    ("k3d", "kubeconfig", "merge"),
    ("flux", "bootstrap"),
)


class FakeHost:
    """In-memory model of the external tools a pipeline talks to."""

    def __init__(self) -> None:
        self.clusters: dict[str, dict] = {}
        self.generation = 0
        self.calls: list[list[str]] = []
        self.list_fails = False
        self.create_fails = False
        self.flux_pre_ok = True
        self.docker_up = True
        self.ready_after_launch: int | None = 1
        self.launches = 0
        self.probes_after_launch = 0

    # -- helpers --------------------------------------------------------

    def add_cluster(self, name: str, servers: int = 1, agents: int = 2) -> None:
        self.generation += 1
        self.clusters[name] = {"servers": servers, "agents": agents, "generation": self.generation}

    @property
    def mutations(self) -> list[list[str]]:
        return [call for call in self.calls if tuple(call[:3]) in MUTATING_PREFIXES
                or tuple(call[:2]) in MUTATING_PREFIXES]

    def kubeconfig_for(self, name: str) -> dict:
        ctx = f"k3d-{name}"
        generation = self.clusters[name]["generation"]
        return {
            "apiVersion": "v1",
            "kind": "Config",
            "clusters": [{"name": ctx, "cluster": {
                "server": "https://0.0.0.0:6443",
                "certificate-authority-data": f"ca-{name}-{generation}",
            }}],
            "users": [{"name": f"admin@{ctx}", "user": {"client-key-data": f"key-{name}-{generation}"}}],
            "contexts": [{"name": ctx, "context": {"cluster": ctx, "user": f"admin@{ctx}"}}],
            "current-context": ctx,
        }

    # -- fakes ----------------------------------------------------------

    def run(self, args, timeout=60, env=None) -> CommandResult:
        args = list(args)
        self.calls.append(args)
        cmd = tuple(args)
        if cmd[:3] == ("k3d", "cluster", "list"):
            if self.list_fails:
                return CommandResult(cmd, 1, "", "Cannot connect to the Docker daemon")
            listing = [
                {"name": name, "serversCount": c["servers"], "serversRunning": c["servers"],
                 "agentsCount": c["agents"], "agentsRunning": c["agents"]}
                for name, c in self.clusters.items()
            ]
            return CommandResult(cmd, 0, json.dumps(listing))
        if cmd[:3] == ("k3d", "cluster", "create"):
            name = cmd[3]
            if self.create_fails or name in self.clusters:
                return CommandResult(cmd, 1, "", f"failed to create cluster '{name}'")
            self.add_cluster(name, int(args[args.index("--servers") + 1]), int(args[args.index("--agents") + 1]))
            return CommandResult(cmd, 0, f"Cluster '{name}' created successfully!")
        if cmd[:3] == ("k3d", "cluster", "delete"):
            self.clusters.pop(cmd[3], None)
            return CommandResult(cmd, 0, f"Successfully deleted cluster {cmd[3]}!")
        if cmd[:3] == ("k3d", "kubeconfig", "get"):
            if cmd[3] not in self.clusters:
                return CommandResult(cmd, 1, "", f"cluster '{cmd[3]}' not found")
            return CommandResult(cmd, 0, yaml.safe_dump(self.kubeconfig_for(cmd[3])))
        if cmd[:3] == ("k3d", "kubeconfig", "merge"):
            self._merge(cmd[3], Path(args[args.index("-o") + 1]))
            return CommandResult(cmd, 0, args[args.index("-o") + 1])
        if cmd[:3] == ("flux", "check", "--pre"):
            if self.flux_pre_ok:
                return CommandResult(cmd, 0, "✔ prerequisites checks passed")
            return CommandResult(cmd, 1, "", "✗ Kubernetes version v1.20.0 does not match >=1.31.0-0")
        if cmd[:2] == ("flux", "bootstrap"):
            return CommandResult(cmd, 0, "✔ all components are healthy")
        return CommandResult(cmd, 127, "", f"{cmd[0]}: command not found")

    def _merge(self, name: str, path: Path) -> None:
        existing = yaml.safe_load(path.read_text()) if path.exists() else None
        existing = existing or {"apiVersion": "v1", "kind": "Config"}
        wanted = self.kubeconfig_for(name)
        for section in ("clusters", "users", "contexts"):
            names = {item["name"] for item in wanted[section]}
            kept = [item for item in existing.get(section) or [] if item["name"] not in names]
            existing[section] = kept + wanted[section]
        existing["current-context"] = wanted["current-context"]
        path.write_text(yaml.safe_dump(existing))

    def docker_probe(self) -> bool:
        if not self.docker_up and self.launches and self.ready_after_launch is not None:
            self.probes_after_launch += 1
            if self.probes_after_launch >= self.ready_after_launch:
                self.docker_up = True
        return self.docker_up

    def launch(self, app_path: str) -> bool:
        self.launches += 1
        return True


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("HOMELAB_") or key in ("GITHUB_USER", "GITHUB_GITOPS_REPO"):
            monkeypatch.delenv(key)


@pytest.fixture
def host(monkeypatch) -> FakeHost:
    fake = FakeHost()
    for module in (cluster, kubeconfig, gitops, tooling):
        monkeypatch.setattr(module, "run_command", fake.run)
    monkeypatch.setattr(runtime, "docker_reachable", fake.docker_probe)
    monkeypatch.setattr(runtime, "launch_docker_desktop", fake.launch)
    monkeypatch.setattr(tooling, "homebrew_supported", lambda: False)
    monkeypatch.setattr(tooling, "command_available", lambda cmd: True)
    return fake


@pytest.fixture
def cluster_cfg(tmp_path) -> ClusterConfig:
    return ClusterConfig().model_copy(update={
        "kubeconfig_path": tmp_path / ".kube" / "config",
        "docker_ready_retries": 3,
        "docker_ready_delay": 0,
    })


@pytest.fixture
def gitops_cfg(tmp_path) -> GitOpsConfig:
    return GitOpsConfig().model_copy(update={
        "owner": "octocat",
        "repository": "home-ops",
        "marker_root": tmp_path / "flux",
    })

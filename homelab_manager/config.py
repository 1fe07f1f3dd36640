# /*
# Copyright 2026 The Grove Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# */

"""Configuration classes and config resolution/display."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from rich.panel import Panel

from homelab_manager import console
from homelab_manager.constants import (
    DEFAULT_AGENT_NODES,
    DEFAULT_CLUSTER_CREATE_MAX_RETRIES,
    DEFAULT_CLUSTER_NAME,
    DEFAULT_DOCKER_APP_PATH,
    DEFAULT_FLUX_BRANCH,
    DEFAULT_FLUX_MARKER_ROOT,
    DEFAULT_K3S_IMAGE,
    DEFAULT_KUBECONFIG_PATH,
    DEFAULT_SERVER_NODES,
    DOCKER_READY_MAX_RETRIES,
    DOCKER_READY_POLL_INTERVAL_SECONDS,
    FLUX_COMPONENTS_FILE,
    K3D_CONTEXT_PREFIX,
)

MatchMode = Literal["exact", "substring"]


# ============================================================================
# Configuration classes
# ============================================================================

class ClusterConfig(BaseSettings):
    """k3d cluster configuration, auto-loaded from HOMELAB_* env vars.

    Attributes:
        cluster_name: Name of the k3d cluster.
        k3s_image: K3s Docker image for the cluster nodes.
        server_nodes: Number of server-role nodes.
        agent_nodes: Number of agent-role nodes.
        kubeconfig_path: Kubeconfig file the cluster credentials are merged into.
        docker_app_path: Docker Desktop application launched when the daemon is down.
        docker_ready_retries: Docker readiness probe attempts.
        docker_ready_delay: Seconds between Docker readiness probes.
        create_max_retries: Maximum cluster creation attempts.
        existence_match: How the cluster list output is searched for the name.
    """

    model_config = SettingsConfigDict(env_prefix="HOMELAB_", extra="ignore")

    cluster_name: str = Field(default=DEFAULT_CLUSTER_NAME, min_length=1)
    k3s_image: str = DEFAULT_K3S_IMAGE
    server_nodes: int = Field(default=DEFAULT_SERVER_NODES, ge=1, le=9)
    agent_nodes: int = Field(default=DEFAULT_AGENT_NODES, ge=0, le=50)
    kubeconfig_path: Path = DEFAULT_KUBECONFIG_PATH
    docker_app_path: str = DEFAULT_DOCKER_APP_PATH
    docker_ready_retries: int = Field(default=DOCKER_READY_MAX_RETRIES, ge=1)
    docker_ready_delay: float = Field(default=DOCKER_READY_POLL_INTERVAL_SECONDS, ge=0)
    create_max_retries: int = Field(default=DEFAULT_CLUSTER_CREATE_MAX_RETRIES, ge=1, le=10)
    existence_match: MatchMode = "exact"

    @field_validator("kubeconfig_path", mode="after")
    @classmethod
    def _expand_kubeconfig(cls, value: Path) -> Path:
        return value.expanduser()

    @property
    def context_name(self) -> str:
        return f"{K3D_CONTEXT_PREFIX}{self.cluster_name}"


class GitOpsConfig(BaseSettings):
    """Flux bootstrap target, read from GITHUB_* and HOMELAB_FLUX_* env vars.

    Attributes:
        owner: GitHub account owning the GitOps repository.
        repository: GitOps repository name.
        branch: Branch Flux reconciles from.
        personal: Whether the owner is a personal account rather than an org.
        marker_root: Directory under which the bootstrap marker is kept.
    """

    model_config = SettingsConfigDict(env_prefix="HOMELAB_FLUX_", extra="ignore")

    owner: str | None = Field(default=None, validation_alias="GITHUB_USER")
    repository: str | None = Field(default=None, validation_alias="GITHUB_GITOPS_REPO")
    branch: str = DEFAULT_FLUX_BRANCH
    personal: bool = True
    marker_root: Path = DEFAULT_FLUX_MARKER_ROOT

    @field_validator("marker_root", mode="after")
    @classmethod
    def _expand_marker_root(cls, value: Path) -> Path:
        return value.expanduser()

    @property
    def marker_path(self) -> Path | None:
        """Bootstrap marker file, or None while the target is incomplete."""
        if not self.owner or not self.repository:
            return None
        return self.marker_root / self.owner / self.repository / FLUX_COMPONENTS_FILE


# ============================================================================
# Config resolution
# ============================================================================

def resolve_cluster_config(
    cluster_name: str | None = None,
    k3s_image: str | None = None,
    server_nodes: int | None = None,
    agent_nodes: int | None = None,
    kubeconfig_path: Path | None = None,
    substring_match: bool = False,
) -> ClusterConfig:
    """Merge CLI overrides, environment variables, and defaults.

    Resolution priority: CLI arguments > HOMELAB_* environment variables > defaults.
    """
    overrides: dict = {}
    if cluster_name is not None:
        overrides["cluster_name"] = cluster_name
    if k3s_image is not None:
        overrides["k3s_image"] = k3s_image
    if server_nodes is not None:
        overrides["server_nodes"] = server_nodes
    if agent_nodes is not None:
        overrides["agent_nodes"] = agent_nodes
    if kubeconfig_path is not None:
        overrides["kubeconfig_path"] = kubeconfig_path.expanduser()
    if substring_match:
        overrides["existence_match"] = "substring"
    # Init kwargs outrank the environment and go through field validation.
    return ClusterConfig(**overrides)


def resolve_gitops_config(owner: str | None = None, repository: str | None = None) -> GitOpsConfig:
    """Merge CLI overrides with the GITHUB_USER / GITHUB_GITOPS_REPO environment."""
    overrides: dict = {}
    # Keyed by alias, the same keys the environment source produces.
    if owner is not None:
        overrides["GITHUB_USER"] = owner
    if repository is not None:
        overrides["GITHUB_GITOPS_REPO"] = repository
    return GitOpsConfig(**overrides)


# ============================================================================
# Display
# ============================================================================

def display_config(cluster_cfg: ClusterConfig, gitops_cfg: GitOpsConfig | None = None) -> None:
    """Print the resolved configuration.

    Args:
        cluster_cfg: k3d cluster configuration.
        gitops_cfg: Flux bootstrap target, or None when not provisioning.
    """
    console.print(Panel.fit("Configuration", style="bold blue"))
    console.print("[yellow]k3d cluster:[/yellow]")
    console.print(f"  cluster_name    : {cluster_cfg.cluster_name}")
    if gitops_cfg is None:
        console.print(f"  existence_match : {cluster_cfg.existence_match}")
        return
    console.print(f"  k3s_image       : {cluster_cfg.k3s_image}")
    console.print(f"  server_nodes    : {cluster_cfg.server_nodes}")
    console.print(f"  agent_nodes     : {cluster_cfg.agent_nodes}")
    console.print(f"  kubeconfig      : {cluster_cfg.kubeconfig_path}")
    console.print(f"  existence_match : {cluster_cfg.existence_match}")
    console.print("[yellow]Flux:[/yellow]")
    console.print(f"  owner           : {gitops_cfg.owner or '(unset: GITHUB_USER)'}")
    console.print(f"  repository      : {gitops_cfg.repository or '(unset: GITHUB_GITOPS_REPO)'}")
    console.print(f"  branch          : {gitops_cfg.branch}")

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

"""create subcommand: provision the cluster and bootstrap Flux."""

from __future__ import annotations

from pathlib import Path

import typer
from pydantic import ValidationError
from rich.markup import escape

from homelab_manager import console
from homelab_manager.config import display_config, resolve_cluster_config, resolve_gitops_config
from homelab_manager.errors import HomelabError
from homelab_manager.orchestrator import provision


def create(
    cluster_name: str | None = typer.Option(
        None, "--cluster-name", help="k3d cluster name (overrides HOMELAB_CLUSTER_NAME)"),
    image: str | None = typer.Option(
        None, "--image", help="K3s image for the cluster nodes"),
    servers: int | None = typer.Option(
        None, "--servers", min=1, help="Number of server nodes"),
    agents: int | None = typer.Option(
        None, "--agents", min=0, help="Number of agent nodes"),
    kubeconfig: Path | None = typer.Option(
        None, "--kubeconfig", help="Kubeconfig file to merge credentials into"),
    github_user: str | None = typer.Option(
        None, "--github-user", help="GitOps repository owner (overrides GITHUB_USER)"),
    github_repo: str | None = typer.Option(
        None, "--github-repo", help="GitOps repository name (overrides GITHUB_GITOPS_REPO)"),
    substring_match: bool = typer.Option(
        False, "--substring-match", help="Match the cluster name anywhere in the list output"),
) -> None:
    """Provision the local k3d cluster and bootstrap Flux onto it."""
    try:
        cluster_cfg = resolve_cluster_config(
            cluster_name=cluster_name,
            k3s_image=image,
            server_nodes=servers,
            agent_nodes=agents,
            kubeconfig_path=kubeconfig,
            substring_match=substring_match,
        )
        gitops_cfg = resolve_gitops_config(owner=github_user, repository=github_repo)
        display_config(cluster_cfg, gitops_cfg)
        provision(cluster_cfg, gitops_cfg)
    except (HomelabError, ValidationError) as e:
        console.print(f"[red]\u274c {escape(str(e))}[/red]", highlight=False)
        raise typer.Exit(1) from e

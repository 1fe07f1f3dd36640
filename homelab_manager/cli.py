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

"""
cli.py - Provision and decommission the local k3d homelab cluster.

Subcommands:
    create   Ensure tools and Docker, create the cluster, merge kubeconfig, bootstrap Flux
    delete   Delete the cluster if it exists
    status   Show k3d clusters and whether the configured one exists

Environment Variables:
    HOMELAB_CLUSTER_NAME, HOMELAB_K3S_IMAGE, HOMELAB_SERVER_NODES,
    HOMELAB_AGENT_NODES, HOMELAB_KUBECONFIG_PATH, ... (see ClusterConfig)
    GITHUB_USER, GITHUB_GITOPS_REPO: Flux bootstrap target

Examples:
    # Create the default 'homelab' cluster and bootstrap Flux
    GITHUB_USER=me GITHUB_GITOPS_REPO=home-ops homelab-manager create

    # Delete it again
    homelab-manager delete
"""

from __future__ import annotations

import logging

import typer

from homelab_manager.commands import create_cmd, delete_cmd, status_cmd

app = typer.Typer(
    help="Provision and decommission the local k3d homelab cluster.",
    no_args_is_help=True,
)


@app.callback()
def _main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every external command"),
) -> None:
    """Initialize logging for all subcommands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )


app.command("create")(create_cmd.create)
app.command("delete")(delete_cmd.delete)
app.command("status")(status_cmd.status)


if __name__ == "__main__":
    app()

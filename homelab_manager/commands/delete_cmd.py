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

"""delete subcommand: remove the cluster if it exists."""

from __future__ import annotations

import typer
from pydantic import ValidationError
from rich.markup import escape

from homelab_manager import console
from homelab_manager.config import display_config, resolve_cluster_config
from homelab_manager.errors import HomelabError
from homelab_manager.orchestrator import decommission


def delete(
    cluster_name: str | None = typer.Option(None, "--cluster-name", help="k3d cluster name"),
    substring_match: bool = typer.Option(
        False, "--substring-match", help="Match the cluster name anywhere in the list output"),
) -> None:
    """Delete the local k3d cluster."""
    try:
        cluster_cfg = resolve_cluster_config(cluster_name=cluster_name, substring_match=substring_match)
        display_config(cluster_cfg)
        decommission(cluster_cfg)
    except (HomelabError, ValidationError) as e:
        console.print(f"[red]\u274c {escape(str(e))}[/red]", highlight=False)
        raise typer.Exit(1) from e

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

"""Flux prerequisite check and GitHub bootstrap."""

from __future__ import annotations

from rich.panel import Panel

from homelab_manager import console, logger
from homelab_manager.config import GitOpsConfig
from homelab_manager.constants import FLUX_BOOTSTRAP_TIMEOUT_SECONDS, FLUX_PROVIDER
from homelab_manager.errors import ConfigurationError, PrerequisiteError
from homelab_manager.utils import check_result, run_command


def check_prerequisites() -> None:
    """Run ``flux check --pre``.

    Raises:
        PrerequisiteError: If Flux reports unmet prerequisites.
    """
    console.print(Panel.fit("Checking Flux prerequisites", style="bold blue"))
    result = run_command(["flux", "check", "--pre"])
    if not result.ok:
        raise PrerequisiteError("Flux prerequisites are not met", result)
    console.print("[green]\u2705 Flux prerequisites satisfied[/green]")


def bootstrap_needed(gitops_cfg: GitOpsConfig) -> bool:
    """Return True unless the bootstrap marker for the target repository exists."""
    marker = gitops_cfg.marker_path
    if marker is not None and marker.exists():
        logger.debug("Bootstrap marker %s present", marker)
        return False
    return True


def bootstrap_command(gitops_cfg: GitOpsConfig) -> list[str]:
    """Build the ``flux bootstrap`` argument vector.

    Raises:
        ConfigurationError: If owner or repository is unset.
    """
    if not gitops_cfg.owner or not gitops_cfg.repository:
        raise ConfigurationError(
            "Flux bootstrap needs GITHUB_USER and GITHUB_GITOPS_REPO (or --github-user/--github-repo)"
        )
    args = [
        "flux", "bootstrap", FLUX_PROVIDER,
        f"--owner={gitops_cfg.owner}",
        f"--repository={gitops_cfg.repository}",
        f"--branch={gitops_cfg.branch}",
    ]
    if gitops_cfg.personal:
        args.append("--personal")
    return args


def bootstrap(gitops_cfg: GitOpsConfig) -> None:
    """Bootstrap Flux onto the current cluster and record the marker.

    Args:
        gitops_cfg: Flux bootstrap target.

    Raises:
        ConfigurationError: If owner or repository is unset.
        CommandFailed: If ``flux bootstrap`` fails.
    """
    args = bootstrap_command(gitops_cfg)
    console.print(Panel.fit(
        f"Bootstrapping Flux from {gitops_cfg.owner}/{gitops_cfg.repository}@{gitops_cfg.branch}",
        style="bold blue",
    ))
    with console.status("Running flux bootstrap..."):
        result = run_command(args, timeout=FLUX_BOOTSTRAP_TIMEOUT_SECONDS)
    check_result(result, "Flux bootstrap failed")

    marker = gitops_cfg.marker_path
    marker.parent.mkdir(parents=True, exist_ok=True)
    marker.touch()
    logger.debug("Recorded bootstrap marker %s", marker)
    console.print("[green]\u2705 Flux bootstrapped[/green]")

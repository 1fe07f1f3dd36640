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

"""Docker daemon reachability probe and Docker Desktop launch."""

from __future__ import annotations

import platform

import docker
import sh

from homelab_manager import console, logger
from homelab_manager.config import ClusterConfig
from homelab_manager.readiness import wait_until_ready

DOCKER_UNREACHABLE_HINT = (
    "Could not connect to the Docker daemon after attempting to open Docker Desktop.\n"
    "Please ensure Docker Desktop is running and accessible from your terminal.\n"
    "Try running 'docker info' or 'docker ps' manually to troubleshoot."
)
DOCKER_NOT_LAUNCHED_HINT = (
    "Docker Desktop could not be opened automatically on this host.\n"
    "Start the Docker daemon yourself and run the command again.\n"
    "Try running 'docker info' or 'docker ps' manually to troubleshoot."
)


def docker_reachable() -> bool:
    """Return True if the Docker daemon answers an ``info`` request."""
    try:
        client = docker.from_env()
    except docker.errors.DockerException as e:
        logger.debug("Docker client unavailable: %s", e)
        return False
    try:
        client.info()
        return True
    except docker.errors.DockerException as e:
        logger.debug("Docker daemon not reachable: %s", e)
        return False
    finally:
        client.close()


def launch_docker_desktop(app_path: str) -> bool:
    """Start Docker Desktop in the background without waiting for it.

    Args:
        app_path: Path of the Docker Desktop application bundle.

    Returns:
        True if a launch was issued, False when the host has no launcher.
    """
    if platform.system() != "Darwin":
        logger.warning("Automatic Docker Desktop launch is only supported on macOS")
        return False
    console.print(f"[yellow]\u2139\ufe0f  Opening {app_path}...[/yellow]")
    sh.open(app_path, _bg=True, _bg_exc=False)
    return True


def start_docker(cluster_cfg: ClusterConfig) -> int:
    """Launch Docker Desktop and block until the daemon answers.

    Args:
        cluster_cfg: Cluster configuration with the app path and wait budget.

    Returns:
        Number of probes it took to see the daemon.

    Raises:
        ReadinessTimeout: If the daemon never became reachable.
    """
    console.print("[yellow]\u26a0\ufe0f  Docker daemon is not accessible[/yellow]")
    launched = launch_docker_desktop(cluster_cfg.docker_app_path)
    with console.status("Waiting for the Docker daemon..."):
        attempts = wait_until_ready(
            docker_reachable,
            max_attempts=cluster_cfg.docker_ready_retries,
            interval=cluster_cfg.docker_ready_delay,
            description="Docker daemon",
            hint=DOCKER_UNREACHABLE_HINT if launched else DOCKER_NOT_LAUNCHED_HINT,
        )
    console.print(f"[green]\u2705 Docker daemon is ready (after {attempts} checks)[/green]")
    return attempts

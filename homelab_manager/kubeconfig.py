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

"""Kubeconfig retrieval and merge via k3d."""

from __future__ import annotations

from pathlib import Path

import yaml
from rich.panel import Panel

from homelab_manager import console, logger
from homelab_manager.config import ClusterConfig
from homelab_manager.constants import KUBE_DIR_MODE
from homelab_manager.utils import check_result, run_command

_SECTIONS = ("clusters", "users", "contexts")


def get_kubeconfig(cluster_cfg: ClusterConfig) -> str:
    """Fetch the cluster's kubeconfig from k3d.

    Raises:
        CommandFailed: If k3d cannot produce the kubeconfig.
    """
    result = run_command(["k3d", "kubeconfig", "get", cluster_cfg.cluster_name])
    check_result(result, f"Failed to get kubeconfig for '{cluster_cfg.cluster_name}'")
    return result.stdout


def ensure_kube_dir(kubeconfig_path: Path) -> bool:
    """Create the kubeconfig directory if it is missing.

    Returns:
        True if the directory was created.
    """
    kube_dir = kubeconfig_path.parent
    if kube_dir.is_dir():
        return False
    kube_dir.mkdir(mode=KUBE_DIR_MODE, parents=True)
    kube_dir.chmod(KUBE_DIR_MODE)
    logger.debug("Created %s", kube_dir)
    return True


def _load(text: str) -> dict:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        logger.debug("Ignoring unparseable kubeconfig: %s", e)
        return {}
    return data if isinstance(data, dict) else {}


def _entries(config: dict, section: str) -> dict[str, dict]:
    items = config.get(section) or []
    return {item["name"]: item for item in items if isinstance(item, dict) and "name" in item}


def already_merged(retrieved: str, kubeconfig_path: Path) -> bool:
    """Check whether every entry of *retrieved* is already in the kubeconfig file.

    Entries are compared by name and content, so a recreated cluster with
    fresh certificates is not mistaken for the old one.

    Args:
        retrieved: Kubeconfig YAML produced by ``k3d kubeconfig get``.
        kubeconfig_path: Target kubeconfig file.

    Returns:
        True only if the file holds identical clusters, users and contexts.
    """
    if not kubeconfig_path.is_file():
        return False
    wanted = _load(retrieved)
    if not _entries(wanted, "contexts"):
        return False
    existing = _load(kubeconfig_path.read_text())
    for section in _SECTIONS:
        have = _entries(existing, section)
        for name, entry in _entries(wanted, section).items():
            if have.get(name) != entry:
                return False
    return True


def merge_kubeconfig(cluster_cfg: ClusterConfig) -> None:
    """Merge the k3d kubeconfig into the configured kubeconfig file.

    Args:
        cluster_cfg: k3d cluster configuration with name and merge path.

    Raises:
        CommandFailed: If ``k3d kubeconfig merge`` fails.
    """
    console.print(Panel.fit("Configuring kubeconfig", style="bold blue"))
    path = cluster_cfg.kubeconfig_path
    result = run_command(["k3d", "kubeconfig", "merge", cluster_cfg.cluster_name, "-o", str(path)])
    check_result(result, f"Failed to merge kubeconfig into {path}")
    console.print(f"[green]  \u2713 Merged to {path}[/green]")

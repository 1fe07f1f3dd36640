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

"""Constants, dependency loading, and dep_value helper."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml


def load_dependencies() -> dict:
    """Load pinned tool versions and formulae from dependencies.yaml.

    Returns:
        Parsed YAML content as a nested dictionary.
    """
    deps_file = Path(__file__).resolve().parent / "dependencies.yaml"
    with open(deps_file) as f:
        return yaml.safe_load(f)


DEPENDENCIES = load_dependencies()


def dep_value(*keys: str, default: Any = None) -> Any:
    """Safely traverse the DEPENDENCIES dict by key path.

    Args:
        *keys: Sequence of dictionary keys to traverse.
        default: Value to return if any key is missing.

    Returns:
        The value at the nested key path, or *default* if not found.
    """
    node = DEPENDENCIES
    for key in keys:
        if not isinstance(node, dict):
            return default
        node = node.get(key)
        if node is None:
            return default
    return node


# -- Cluster defaults --
DEFAULT_CLUSTER_NAME = "homelab"
DEFAULT_K3S_IMAGE = dep_value("k3s", "image", default="rancher/k3s:v1.33.0-k3s1")
DEFAULT_SERVER_NODES = 1
DEFAULT_AGENT_NODES = 2
DEFAULT_CLUSTER_CREATE_MAX_RETRIES = 1
CLUSTER_CREATE_RETRY_WAIT_SECONDS = 10
K3D_CONTEXT_PREFIX = "k3d-"

# -- Kubeconfig --
KUBE_DIR_MODE = 0o755
DEFAULT_KUBECONFIG_PATH = Path.home() / ".kube" / "config"

# -- Docker --
DEFAULT_DOCKER_APP_PATH = "/Applications/Docker.app"
DOCKER_READY_MAX_RETRIES = 30
DOCKER_READY_POLL_INTERVAL_SECONDS = 5

# -- Homebrew --
HOMEBREW_INSTALL_SCRIPT = dep_value(
    "homebrew", "install_script",
    default="https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh",
)
HOMEBREW_PREFIXES = tuple(dep_value("homebrew", "prefixes", default=["/opt/homebrew/bin/brew", "/usr/local/bin/brew"]))
K3D_FORMULA = dep_value("homebrew", "formulae", "k3d", default="k3d")
FLUX_FORMULA = dep_value("homebrew", "formulae", "flux", default="fluxcd/tap/flux")

# -- Flux --
FLUX_PROVIDER = dep_value("flux", "provider", default="github")
DEFAULT_FLUX_BRANCH = dep_value("flux", "branch", default="main")
FLUX_COMPONENTS_FILE = dep_value("flux", "components_file", default="gotk-components.yaml")
DEFAULT_FLUX_MARKER_ROOT = Path.home() / ".config" / "flux"

# -- Command execution --
COMMAND_NOT_FOUND_EXIT = 127
DEFAULT_COMMAND_TIMEOUT_SECONDS = 60
CLUSTER_CREATE_TIMEOUT_SECONDS = 900
FLUX_BOOTSTRAP_TIMEOUT_SECONDS = 900

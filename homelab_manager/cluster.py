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

"""k3d cluster lifecycle and the cluster existence check."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum

from rich.panel import Panel
from tenacity import retry, stop_after_attempt, wait_fixed

from homelab_manager import console, logger
from homelab_manager.config import ClusterConfig, MatchMode
from homelab_manager.constants import CLUSTER_CREATE_RETRY_WAIT_SECONDS, CLUSTER_CREATE_TIMEOUT_SECONDS
from homelab_manager.utils import CommandResult, check_result, run_command


class Presence(str, Enum):
    """Outcome of the cluster existence check."""

    PRESENT = "present"
    ABSENT = "absent"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ClusterRecord:
    """One entry of ``k3d cluster list -o json``."""

    name: str
    servers_count: int = 0
    servers_running: int = 0
    agents_count: int = 0
    agents_running: int = 0


@dataclass(frozen=True)
class ExistenceCheck:
    """Result of querying the cluster list for one name.

    Attributes:
        name: Cluster name that was looked up.
        presence: PRESENT, ABSENT, or UNKNOWN when the query failed.
        result: Raw result of the list command.
        clusters: Parsed records, empty when the output was not parseable.
    """

    name: str
    presence: Presence
    result: CommandResult
    clusters: tuple[ClusterRecord, ...] = ()

    @property
    def succeeded(self) -> bool:
        return self.presence is not Presence.UNKNOWN


# ============================================================================
# Existence check
# ============================================================================

def parse_cluster_list(raw: str) -> list[ClusterRecord]:
    """Parse the JSON emitted by ``k3d cluster list -o json``.

    Args:
        raw: Standard output of the list command.

    Returns:
        One ClusterRecord per listed cluster.

    Raises:
        ValueError: If the output is not a JSON array of named objects.
    """
    data = json.loads(raw or "[]")
    if not isinstance(data, list):
        raise ValueError("cluster list output is not a JSON array")
    records = []
    for item in data:
        if not isinstance(item, dict) or not isinstance(item.get("name"), str):
            raise ValueError(f"unexpected cluster list entry: {item!r}")
        try:
            records.append(ClusterRecord(
                name=item["name"],
                servers_count=int(item.get("serversCount") or 0),
                servers_running=int(item.get("serversRunning") or 0),
                agents_count=int(item.get("agentsCount") or 0),
                agents_running=int(item.get("agentsRunning") or 0),
            ))
        except (TypeError, ValueError) as e:
            raise ValueError(f"unexpected node counts for cluster {item['name']!r}: {e}") from e
    return records


def check_cluster(name: str, match: MatchMode = "exact") -> ExistenceCheck:
    """Decide whether a k3d cluster named *name* exists.

    ``exact`` compares parsed cluster names for equality. ``substring``
    reproduces a plain text search of the raw list output, under which
    ``homelab`` is also reported present when only ``homelab-test`` exists.

    Args:
        name: Cluster name to look for.
        match: Matching mode, ``exact`` or ``substring``.

    Returns:
        ExistenceCheck whose presence is UNKNOWN if the query failed.
    """
    result = run_command(["k3d", "cluster", "list", "-o", "json"])
    if not result.ok:
        logger.warning("Cluster list failed (exit status %d); existence unknown", result.returncode)
        return ExistenceCheck(name, Presence.UNKNOWN, result)

    try:
        clusters = tuple(parse_cluster_list(result.stdout))
    except ValueError as err:
        if match == "substring":
            clusters = ()
        else:
            logger.warning("Unparseable cluster list output (%s); existence unknown", err)
            return ExistenceCheck(name, Presence.UNKNOWN, result)

    if match == "substring":
        found = name in result.stdout
    else:
        found = any(cluster.name == name for cluster in clusters)
    presence = Presence.PRESENT if found else Presence.ABSENT
    logger.debug("Cluster '%s' is %s (%s match)", name, presence.value, match)
    return ExistenceCheck(name, presence, result, clusters)


# ============================================================================
# Cluster operations
# ============================================================================

def create_cluster(cluster_cfg: ClusterConfig) -> None:
    """Create the k3d cluster and block until it is up.

    Args:
        cluster_cfg: k3d cluster configuration including retry count.

    Raises:
        CommandFailed: If the cluster cannot be created after all retries.
    """
    console.print(Panel.fit(f"Creating k3d cluster '{cluster_cfg.cluster_name}'", style="bold blue"))

    @retry(
        stop=stop_after_attempt(cluster_cfg.create_max_retries),
        wait=wait_fixed(CLUSTER_CREATE_RETRY_WAIT_SECONDS),
        reraise=True,
    )
    def _attempt() -> None:
        result = run_command(
            [
                "k3d", "cluster", "create", cluster_cfg.cluster_name,
                "--image", cluster_cfg.k3s_image,
                "--servers", str(cluster_cfg.server_nodes),
                "--agents", str(cluster_cfg.agent_nodes),
                "--wait",
            ],
            timeout=CLUSTER_CREATE_TIMEOUT_SECONDS,
        )
        check_result(result, f"Failed to create k3d cluster '{cluster_cfg.cluster_name}'")

    with console.status(f"Waiting for '{cluster_cfg.cluster_name}' to come up..."):
        _attempt()
    console.print("[green]\u2705 Cluster created successfully[/green]")


def delete_cluster(cluster_cfg: ClusterConfig) -> None:
    """Delete the k3d cluster.

    Args:
        cluster_cfg: k3d cluster configuration with the cluster name.

    Raises:
        CommandFailed: If k3d reports a failure.
    """
    console.print(f"[yellow]\u2139\ufe0f  Deleting k3d cluster '{cluster_cfg.cluster_name}'...[/yellow]")
    result = run_command(["k3d", "cluster", "delete", cluster_cfg.cluster_name],
                         timeout=CLUSTER_CREATE_TIMEOUT_SECONDS)
    check_result(result, f"Failed to delete k3d cluster '{cluster_cfg.cluster_name}'")

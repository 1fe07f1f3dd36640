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

"""Ordered guarded steps and the context threaded through them."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from rich.panel import Panel

from homelab_manager import console, logger
from homelab_manager.cluster import ExistenceCheck, Presence
from homelab_manager.config import ClusterConfig, GitOpsConfig


@dataclass
class PipelineContext:
    """State shared between the steps of one pipeline run.

    Attributes:
        cluster_cfg: Resolved cluster configuration.
        gitops_cfg: Flux bootstrap target, or None for decommissioning.
        existence: Outcome of the cluster existence check, once queried.
        created: Whether this run created the cluster.
        deleted: Whether this run attempted to delete the cluster.
        kubeconfig: Kubeconfig YAML fetched from k3d, once retrieved.
        actions: Mutating actions performed, in order.
        notices: Completion notices emitted, in order.
    """

    cluster_cfg: ClusterConfig
    gitops_cfg: GitOpsConfig | None = None
    existence: ExistenceCheck | None = None
    created: bool = False
    deleted: bool = False
    kubeconfig: str | None = None
    actions: list[str] = field(default_factory=list)
    notices: list[str] = field(default_factory=list)

    @property
    def presence(self) -> Presence:
        return self.existence.presence if self.existence is not None else Presence.UNKNOWN

    @property
    def kubeconfig_path(self) -> Path:
        return self.cluster_cfg.kubeconfig_path

    def record(self, action: str) -> None:
        """Note that a mutating action was performed."""
        logger.debug("Performed: %s", action)
        self.actions.append(action)

    def notify(self, message: str) -> None:
        """Emit a completion notice to the user."""
        console.print(Panel(message, style="green"))
        self.notices.append(message)


def always(_: PipelineContext) -> bool:
    return True


@dataclass(frozen=True)
class Step:
    """A named action guarded by a precondition.

    Attributes:
        name: Short description used in logs.
        action: Callable performing the step.
        when: Precondition queried against current state; the step is
            skipped when it returns False.
    """

    name: str
    action: Callable[[PipelineContext], None]
    when: Callable[[PipelineContext], bool] = always


def run_steps(steps: list[Step], ctx: PipelineContext) -> PipelineContext:
    """Evaluate *steps* in order, stopping at the first exception.

    Args:
        steps: Ordered guarded steps.
        ctx: Context passed to every precondition and action.

    Returns:
        The same context, updated by the actions that ran.
    """
    for step in steps:
        if not step.when(ctx):
            logger.debug("Skipping step: %s", step.name)
            continue
        logger.debug("Running step: %s", step.name)
        step.action(ctx)
    return ctx

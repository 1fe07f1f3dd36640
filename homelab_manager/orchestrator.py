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

"""Orchestration functions that compose domain modules into workflows."""

from __future__ import annotations

from rich.panel import Panel
from rich.table import Table

from homelab_manager import console, logger
from homelab_manager import cluster, gitops, kubeconfig, runtime, tooling
from homelab_manager.cluster import ExistenceCheck, Presence
from homelab_manager.config import ClusterConfig, GitOpsConfig
from homelab_manager.constants import FLUX_FORMULA, K3D_FORMULA
from homelab_manager.pipeline import PipelineContext, Step, run_steps

# ============================================================================
# Provisioning steps
# ============================================================================


def _install_homebrew(ctx: PipelineContext) -> None:
    tooling.install_homebrew()
    ctx.record("install-homebrew")


def _docker_unreachable(_: PipelineContext) -> bool:
    return not runtime.docker_reachable()


def _start_docker(ctx: PipelineContext) -> None:
    runtime.start_docker(ctx.cluster_cfg)
    ctx.record("start-docker")


def _install(command: str, formula: str) -> Step:
    def _action(ctx: PipelineContext) -> None:
        tooling.install_formula(formula)
        ctx.record(f"install-{command}")

    return Step(f"install {command}", _action, lambda _: tooling.install_needed(command, formula))


def _query_cluster(ctx: PipelineContext) -> None:
    ctx.existence = cluster.check_cluster(ctx.cluster_cfg.cluster_name, ctx.cluster_cfg.existence_match)


def _create_cluster(ctx: PipelineContext) -> None:
    cluster.create_cluster(ctx.cluster_cfg)
    ctx.created = True
    ctx.record("create-cluster")


def _oracle_succeeded(ctx: PipelineContext) -> bool:
    return ctx.existence is not None and ctx.existence.succeeded


def _get_kubeconfig(ctx: PipelineContext) -> None:
    ctx.kubeconfig = kubeconfig.get_kubeconfig(ctx.cluster_cfg)


def _create_kube_dir(ctx: PipelineContext) -> None:
    kubeconfig.ensure_kube_dir(ctx.kubeconfig_path)
    ctx.record("create-kube-dir")


def _merge_needed(ctx: PipelineContext) -> bool:
    if not _oracle_succeeded(ctx):
        return False
    if ctx.created or ctx.kubeconfig is None:
        return True
    return not kubeconfig.already_merged(ctx.kubeconfig, ctx.kubeconfig_path)


def _merge_kubeconfig(ctx: PipelineContext) -> None:
    kubeconfig.merge_kubeconfig(ctx.cluster_cfg)
    ctx.record("merge-kubeconfig")


def _cluster_ready(ctx: PipelineContext) -> bool:
    return ctx.created or ctx.presence is Presence.PRESENT


def _announce_ready(ctx: PipelineContext) -> None:
    cfg = ctx.cluster_cfg
    ctx.notify(
        f"k3d cluster '{cfg.cluster_name}' is ready.\n"
        f"Kubeconfig merged into: {cfg.kubeconfig_path}\n"
        f"You should now see the '{cfg.context_name}' context when you run "
        f"'kubectl config get-contexts'."
    )


def _check_flux(_: PipelineContext) -> None:
    gitops.check_prerequisites()


def _bootstrap_needed(ctx: PipelineContext) -> bool:
    # A marker left by an earlier cluster says nothing about a fresh one.
    if ctx.created:
        return True
    return gitops.bootstrap_needed(ctx.gitops_cfg)


def _bootstrap_flux(ctx: PipelineContext) -> None:
    gitops.bootstrap(ctx.gitops_cfg)
    ctx.record("bootstrap-flux")


def provisioning_steps() -> list[Step]:
    """Ordered steps of the provisioning workflow."""
    return [
        Step("install Homebrew", _install_homebrew, lambda _: tooling.homebrew_missing()),
        Step("start Docker", _start_docker, _docker_unreachable),
        _install("k3d", K3D_FORMULA),
        Step("query cluster", _query_cluster),
        Step("create cluster", _create_cluster, lambda ctx: ctx.presence is Presence.ABSENT),
        Step("get kubeconfig", _get_kubeconfig, _oracle_succeeded),
        Step("create kubeconfig directory", _create_kube_dir,
             lambda ctx: not ctx.kubeconfig_path.parent.is_dir()),
        Step("merge kubeconfig", _merge_kubeconfig, _merge_needed),
        Step("announce cluster", _announce_ready, _cluster_ready),
        _install("flux", FLUX_FORMULA),
        Step("check Flux prerequisites", _check_flux),
        Step("bootstrap Flux", _bootstrap_flux, _bootstrap_needed),
    ]


# ============================================================================
# Decommissioning steps
# ============================================================================


def _query_cluster_tolerant(ctx: PipelineContext) -> None:
    _query_cluster(ctx)
    if ctx.presence is Presence.UNKNOWN:
        console.print(
            f"[yellow]\u26a0\ufe0f  Could not list k3d clusters; treating '{ctx.cluster_cfg.cluster_name}' as absent[/yellow]"
        )


def _delete_cluster(ctx: PipelineContext) -> None:
    ctx.deleted = True
    cluster.delete_cluster(ctx.cluster_cfg)
    ctx.record("delete-cluster")


def _announce_deleted(ctx: PipelineContext) -> None:
    ctx.notify(f"k3d cluster '{ctx.cluster_cfg.cluster_name}' deleted.")


def decommissioning_steps() -> list[Step]:
    """Ordered steps of the decommissioning workflow."""
    return [
        Step("query cluster", _query_cluster_tolerant),
        Step("delete cluster", _delete_cluster, lambda ctx: ctx.presence is Presence.PRESENT),
        Step("announce deletion", _announce_deleted, lambda ctx: ctx.deleted),
    ]


# ============================================================================
# Public API
# ============================================================================


def provision(cluster_cfg: ClusterConfig, gitops_cfg: GitOpsConfig) -> PipelineContext:
    """Run the provisioning workflow: tools, Docker, cluster, kubeconfig, Flux.

    Every step is skipped when its precondition already holds, so a second
    run against a provisioned host performs no mutating action.

    Args:
        cluster_cfg: Resolved cluster configuration.
        gitops_cfg: Flux bootstrap target.

    Returns:
        The final pipeline context.

    Raises:
        ReadinessTimeout: If Docker never became reachable.
        PrerequisiteError: If ``flux check --pre`` failed.
        ConfigurationError: If bootstrap is needed but the target is unset.
        CommandFailed: If any other required command failed.
    """
    ctx = PipelineContext(cluster_cfg=cluster_cfg, gitops_cfg=gitops_cfg)
    run_steps(provisioning_steps(), ctx)
    if not ctx.actions:
        console.print("[green]\u2705 Nothing to do; everything is already provisioned[/green]")
    logger.info("Provisioning finished: %s", ", ".join(ctx.actions) or "no changes")
    return ctx


def decommission(cluster_cfg: ClusterConfig) -> PipelineContext:
    """Delete the cluster if it exists.

    A failed cluster listing is treated as "absent" rather than an error.

    Raises:
        CommandFailed: If ``k3d cluster delete`` failed.
    """
    ctx = PipelineContext(cluster_cfg=cluster_cfg)
    run_steps(decommissioning_steps(), ctx)
    if not ctx.deleted:
        logger.info("Cluster '%s' not present; nothing deleted", cluster_cfg.cluster_name)
    return ctx


def show_status(cluster_cfg: ClusterConfig) -> ExistenceCheck:
    """Print the k3d clusters and whether the configured one exists."""
    check = cluster.check_cluster(cluster_cfg.cluster_name, cluster_cfg.existence_match)
    console.print(Panel.fit("k3d clusters", style="bold blue"))
    if check.presence is Presence.UNKNOWN:
        console.print("[red]\u274c Could not list k3d clusters[/red]")
        detail = (check.result.stderr or check.result.stdout).strip()
        if detail:
            console.print(detail, markup=False)
        return check

    table = Table("Name", "Servers", "Agents")
    for record in check.clusters:
        table.add_row(
            record.name,
            f"{record.servers_running}/{record.servers_count}",
            f"{record.agents_running}/{record.agents_count}",
        )
    console.print(table)
    if check.presence is Presence.PRESENT:
        console.print(f"[green]\u2705 Cluster '{cluster_cfg.cluster_name}' exists[/green]")
    else:
        console.print(f"[yellow]\u2139\ufe0f  Cluster '{cluster_cfg.cluster_name}' does not exist[/yellow]")
    return check

"""Main CLI entry point for the restarter."""

import threading
from typing import Any

import click
from rich.console import Console

from restarter import __version__
from restarter.adapters.rollout_drivers import ApiRolloutDriver, KubectlRolloutDriver
from restarter.clients.kubectl import KubectlWrapper
from restarter.clients.kubernetes_client import KubernetesClient
from restarter.core.config import Driver, RestarterConfig, format_duration, parse_duration
from restarter.core.exceptions import (
    ConfigError,
    FetchError,
    ListError,
    RestartCancelledError,
    RestarterError,
    RestartError,
    WaitError,
)
from restarter.core.models import DeploymentRestart
from restarter.interfaces.rollout_driver import RolloutDriver
from restarter.rollout.orchestrator import RestartOrchestrator
from restarter.services.classifier import PodClassifier
from restarter.services.confirmation import ConfirmationGate
from restarter.services.version import VersionResolver
from restarter.utils.logging import get_logger, log_error, setup_logging

console = Console()
logger = get_logger(__name__)

OPERATIONS: dict[type[RestarterError], str] = {
    ConfigError: "configure",
    FetchError: "resolve_version",
    ListError: "list_pods",
    RestartError: "restart_deployment",
    WaitError: "wait_for_deletion",
    RestartCancelledError: "cancelled",
}


class DurationType(click.ParamType):
    """Go-style duration such as 10m, 1m30s or 90s; converted to seconds."""

    name = "duration"

    def convert(
        self, value: Any, param: click.Parameter | None, ctx: click.Context | None
    ) -> float:
        if isinstance(value, float):
            return value
        try:
            return parse_duration(value)
        except ValueError as e:
            self.fail(str(e), param, ctx)


DURATION = DurationType()


def build_driver(config: RestarterConfig, client: KubernetesClient) -> RolloutDriver:
    """Create the rollout driver selected in the configuration."""
    if config.rollout.driver == Driver.KUBECTL:
        return KubectlRolloutDriver(
            KubectlWrapper(
                kubeconfig_path=config.cluster.kubeconfig,
                context=config.cluster.context,
                namespace=config.linkerd.namespace,
            )
        )

    return ApiRolloutDriver(
        client,
        namespace=config.linkerd.namespace,
        poll_interval=config.rollout.poll_interval,
    )


def execute(
    config: RestarterConfig,
    cancel_event: threading.Event | None = None,
    dry_run: bool = False,
    client: KubernetesClient | None = None,
    driver: RolloutDriver | None = None,
) -> list[DeploymentRestart]:
    """Resolve, classify, confirm and restart.

    Args:
        config: Run configuration
        cancel_event: Token that stops the restart loop when set
        dry_run: Show the plan and stop
        client: Kubernetes client (built from config when omitted)
        driver: Rollout driver (built from config when omitted)

    Returns:
        Restart records; empty when nothing was restarted

    Raises:
        RestarterError: On the first failure of any step
    """
    if client is None:
        client = KubernetesClient(
            kubeconfig_path=config.cluster.kubeconfig,
            context=config.cluster.context,
        )

    version = VersionResolver.from_config(client, config.linkerd).resolve()
    console.print(f"Desired linkerd version: [bold]{version!r}[/bold]")

    plan = PodClassifier.from_config(client, config.linkerd).build_plan(version)
    gate = ConfirmationGate(console=console, assume_yes=config.rollout.assume_yes)

    if dry_run:
        if plan:
            gate.show(plan)
        console.print("[yellow]Dry-run: no deployments restarted[/yellow]")
        return []

    if not gate.should_continue(plan):
        if plan:
            console.print("[yellow]Aborted[/yellow]")
        else:
            console.print("Nothing to do")
        return []

    if driver is None:
        driver = build_driver(config, client)

    orchestrator = RestartOrchestrator(
        driver,
        timeout=config.rollout.timeout,
        sleep=config.rollout.sleep,
        cancel_event=cancel_event,
    )
    records = orchestrator.run(plan)

    for record in records:
        console.print(f"  [green]✓ {record.deployment} restarted[/green]")
    console.print(f"\n[bold]Restarted {len(records)} deployment(s)[/bold]")

    return records


@click.command()
@click.version_option(version=__version__)
@click.option(
    "--timeout",
    "-t",
    type=DURATION,
    default=None,
    help="How long to wait for a deployment's old pods to be deleted [default: 10m]",
)
@click.option(
    "--sleep",
    "-s",
    type=DURATION,
    default=None,
    help="How long to wait between deployment restarts [default: 1m]",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Path to YAML configuration file",
)
@click.option("--kubeconfig", default=None, help="Path to kubeconfig [default: $HOME/.kube/config]")
@click.option("--context", default=None, help="Kubernetes context to use")
@click.option("--namespace", "-n", default=None, help="Namespace to scan [default: default]")
@click.option(
    "--driver",
    type=click.Choice([d.value for d in Driver]),
    default=None,
    help="Restart through the Kubernetes API or by running kubectl [default: api]",
)
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Skip the prompt")
@click.option("--dry-run", is_flag=True, help="Show deployments that would be restarted")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
)
@click.option("--log-format", type=click.Choice(["console", "json"]), default=None)
@click.pass_context
def cli(
    ctx: click.Context,
    timeout: float | None,
    sleep: float | None,
    config_path: str | None,
    kubeconfig: str | None,
    context: str | None,
    namespace: str | None,
    driver: str | None,
    assume_yes: bool,
    dry_run: bool,
    log_level: str | None,
    log_format: str | None,
) -> None:
    """Restart deployments whose pods run an outdated Linkerd proxy."""
    cancel_event = threading.Event()
    setup_logging(level=log_level or "INFO", format=log_format or "console")

    try:
        base = RestarterConfig.from_file(config_path) if config_path else RestarterConfig()
        config = base.with_overrides(
            {
                "cluster": {"kubeconfig": kubeconfig, "context": context},
                "linkerd": {"namespace": namespace},
                "rollout": {
                    "timeout": timeout,
                    "sleep": sleep,
                    "driver": driver,
                    "assume_yes": assume_yes or None,
                },
                "logging": {"level": log_level, "format": log_format},
            }
        )
        setup_logging(
            level=config.logging.level,
            format=config.logging.format,
            output=config.logging.output,
        )

        logger.info(
            "restarter_started",
            namespace=config.linkerd.namespace,
            driver=config.rollout.driver.value,
            timeout=format_duration(config.rollout.timeout),
            sleep=format_duration(config.rollout.sleep),
        )
        execute(config, cancel_event=cancel_event, dry_run=dry_run)

    except KeyboardInterrupt:
        cancel_event.set()
        console.print("\n[red]Interrupted[/red]")
        logger.warning("restarter_interrupted")
        ctx.exit(130)
    except RestarterError as e:
        log_error(logger, e, operation=OPERATIONS.get(type(e)))
        console.print(f"[red]Error: {e}[/red]")
        ctx.exit(1)

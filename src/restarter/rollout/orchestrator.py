"""Sequential restart loop over a restart plan."""

import threading
from datetime import datetime, timezone

from restarter.core.exceptions import (
    KubectlError,
    KubernetesError,
    RestartCancelledError,
    RestartError,
    WaitError,
)
from restarter.core.models import DeploymentRestart, DeploymentState, RestartPlan
from restarter.interfaces.rollout_driver import RolloutDriver
from restarter.utils.logging import get_logger

logger = get_logger(__name__)

DRIVER_ERRORS = (KubernetesError, KubectlError)


class RestartOrchestrator:
    """Restarts deployments one at a time.

    Each deployment is restarted, then its old pods are waited on until deleted,
    then the loop pauses before the next deployment. The first failure aborts
    the run; later deployments are never touched and nothing is rolled back.
    """

    def __init__(
        self,
        driver: RolloutDriver,
        timeout: float = 600.0,
        sleep: float = 60.0,
        cancel_event: threading.Event | None = None,
    ):
        """Initialize restart orchestrator.

        Args:
            driver: Rollout driver issuing restarts and deletion waits
            timeout: Maximum seconds to wait for a deployment's pods to be deleted
            sleep: Seconds to pause between deployments
            cancel_event: Token that stops the run when set
        """
        self.driver = driver
        self.timeout = timeout
        self.sleep = sleep
        self.cancel_event = cancel_event or threading.Event()
        self.records: list[DeploymentRestart] = []

    def run(self, plan: RestartPlan) -> list[DeploymentRestart]:
        """Restart every deployment in the plan.

        Args:
            plan: Deployments and the pods to wait on for each

        Returns:
            One record per deployment, all in DONE state

        Raises:
            RestartError: If a restart cannot be issued
            WaitError: If pods are not deleted within the timeout
            RestartCancelledError: If the cancel token is set
        """
        self.records = []
        deployments = plan.deployments

        logger.info(
            "restart_run_started",
            namespace=plan.namespace,
            deployments=len(deployments),
            timeout=self.timeout,
            sleep=self.sleep,
        )

        for index, deployment in enumerate(deployments):
            self._check_cancelled()

            record = DeploymentRestart(
                deployment=deployment,
                namespace=plan.namespace,
                pods=plan.pods_for(deployment),
            )
            self.records.append(record)
            self._process(record)

            if index < len(deployments) - 1:
                self._pause()

        logger.info("restart_run_completed", namespace=plan.namespace, restarted=len(self.records))
        return self.records

    def _process(self, record: DeploymentRestart) -> None:
        record.started_at = datetime.now(timezone.utc)
        log = logger.bind(deployment=record.deployment, namespace=record.namespace)

        log.info("deployment_restart_started", pods=record.pods)
        try:
            self.driver.restart(record.deployment)
        except DRIVER_ERRORS as e:
            self._fail(record, e)
            raise RestartError(f"Failed to restart {record.deployment}: {e}") from e
        record.state = DeploymentState.RESTART_ISSUED

        record.state = DeploymentState.WAITING_FOR_DELETION
        log.info("waiting_for_pod_deletion", pods=record.pods, timeout=self.timeout)
        try:
            self.driver.wait_for_deletion(
                record.pods, timeout=self.timeout, cancel_event=self.cancel_event
            )
        except DRIVER_ERRORS as e:
            self._fail(record, e)
            if self.cancel_event.is_set():
                raise RestartCancelledError(
                    f"Cancelled while waiting for pods of {record.deployment}"
                ) from e
            raise WaitError(f"Failed to wait for pods {record.pods}: {e}") from e

        record.state = DeploymentState.DONE
        record.finished_at = datetime.now(timezone.utc)
        log.info("deployment_restart_finished", duration=record.duration_seconds)

    def _fail(self, record: DeploymentRestart, error: Exception) -> None:
        record.state = DeploymentState.FATAL
        record.error = str(error)
        record.finished_at = datetime.now(timezone.utc)

    def _pause(self) -> None:
        if self.sleep <= 0:
            return

        logger.info("pausing_before_next_deployment", seconds=self.sleep)
        if self.cancel_event.wait(self.sleep):
            raise RestartCancelledError("Cancelled while pausing between deployments")

    def _check_cancelled(self) -> None:
        if self.cancel_event.is_set():
            raise RestartCancelledError("Run cancelled before all deployments were restarted")

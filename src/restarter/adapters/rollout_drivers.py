"""Rollout drivers backed by the Kubernetes API or by kubectl."""

import threading

from restarter.clients.kubectl import KubectlWrapper
from restarter.clients.kubernetes_client import KubernetesClient
from restarter.interfaces.rollout_driver import RolloutDriver
from restarter.utils.logging import get_logger

logger = get_logger(__name__)


class ApiRolloutDriver(RolloutDriver):
    """Patches the pod template and polls pods through the Kubernetes API."""

    def __init__(self, client: KubernetesClient, namespace: str, poll_interval: float = 2.0):
        self.client = client
        self.namespace = namespace
        self.poll_interval = poll_interval

    def restart(self, deployment: str) -> None:
        self.client.restart_deployment(name=deployment, namespace=self.namespace)

    def wait_for_deletion(
        self,
        pod_names: list[str],
        timeout: float,
        cancel_event: threading.Event | None = None,
    ) -> None:
        self.client.wait_for_pods_deleted(
            pod_names,
            namespace=self.namespace,
            timeout=timeout,
            poll_interval=self.poll_interval,
            cancel_event=cancel_event,
        )


class KubectlRolloutDriver(RolloutDriver):
    """Shells out to ``kubectl rollout restart`` and ``kubectl wait --for=delete``.

    kubectl cannot be interrupted mid-wait, so ``cancel_event`` is only
    honoured between deployments.
    """

    def __init__(self, kubectl: KubectlWrapper):
        self.kubectl = kubectl

    def restart(self, deployment: str) -> None:
        self.kubectl.rollout_restart(deployment)

    def wait_for_deletion(
        self,
        pod_names: list[str],
        timeout: float,
        cancel_event: threading.Event | None = None,
    ) -> None:
        self.kubectl.wait_for_delete([f"pod/{name}" for name in pod_names], timeout=timeout)

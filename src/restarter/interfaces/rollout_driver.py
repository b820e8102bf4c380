"""Rollout driver interface for restart and deletion-wait operations."""

import threading
from abc import ABC, abstractmethod


class RolloutDriver(ABC):
    """Abstract interface for the two mutating steps of a restart.

    Implementations raise ``KubernetesError`` or ``KubectlError``; the
    orchestrator maps them onto ``RestartError`` and ``WaitError``.
    """

    @abstractmethod
    def restart(self, deployment: str) -> None:
        """Trigger a rollout restart of a deployment.

        Args:
            deployment: Deployment name
        """

    @abstractmethod
    def wait_for_deletion(
        self,
        pod_names: list[str],
        timeout: float,
        cancel_event: threading.Event | None = None,
    ) -> None:
        """Block until all pods are deleted.

        Args:
            pod_names: Bare pod names
            timeout: Maximum wait in seconds
            cancel_event: Stops the wait early when set
        """

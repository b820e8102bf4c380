"""Kubernetes client for cluster operations."""

import threading
from collections.abc import Iterable
from datetime import datetime, timezone

from kubernetes import client, config
from kubernetes.client.exceptions import ApiException
from kubernetes.client.models import V1Deployment, V1Pod
from tenacity import (
    RetryError,
    Retrying,
    retry_if_result,
    stop_before_delay,
    stop_when_event_set,
    wait_fixed,
)
from urllib3.exceptions import HTTPError

from restarter.core.exceptions import ConfigError, KubernetesError
from restarter.utils.logging import get_logger

logger = get_logger(__name__)

RESTARTED_AT_ANNOTATION = "kubectl.kubernetes.io/restartedAt"

# Raised by the transport when the API server cannot be reached
TRANSPORT_ERRORS = (HTTPError, OSError)


class KubernetesClient:
    """Kubernetes client wrapper."""

    def __init__(self, kubeconfig_path: str | None = None, context: str | None = None):
        """Initialize Kubernetes client.

        Args:
            kubeconfig_path: Path to kubeconfig file (client default when omitted)
            context: Kubernetes context to use (optional)

        Raises:
            ConfigError: If no usable cluster configuration is found
        """
        try:
            config.load_kube_config(config_file=kubeconfig_path, context=context)

            self.core_v1 = client.CoreV1Api()
            self.apps_v1 = client.AppsV1Api()

            logger.debug("k8s_client_initialized", kubeconfig=kubeconfig_path, context=context)

        except Exception as e:
            logger.error("k8s_client_initialization_failed", error=str(e))
            raise ConfigError(
                f"Failed to build Kubernetes client from {kubeconfig_path or 'default config'}: {e}"
            ) from e

    def get_pods(
        self, namespace: str = "default", label_selector: str | None = None
    ) -> list[V1Pod]:
        """Get pods in a namespace.

        Args:
            namespace: Namespace to query
            label_selector: Label selector (e.g., "app=web")

        Returns:
            List of V1Pod objects

        Raises:
            KubernetesError: If pods cannot be retrieved
        """
        try:
            logger.debug("getting_pods", namespace=namespace, selector=label_selector)

            response = self.core_v1.list_namespaced_pod(
                namespace=namespace, label_selector=label_selector
            )
            pods = response.items

            logger.info("pods_retrieved", namespace=namespace, count=len(pods))
            return pods

        except ApiException as e:
            logger.error(
                "get_pods_failed",
                namespace=namespace,
                status=e.status,
                reason=e.reason,
            )
            raise KubernetesError(f"Failed to get pods in {namespace}: {e.reason}") from e
        except TRANSPORT_ERRORS as e:
            logger.error("get_pods_failed", namespace=namespace, error=str(e))
            raise KubernetesError(f"Failed to get pods in {namespace}: {e}") from e

    def get_deployment(self, name: str, namespace: str = "default") -> V1Deployment:
        """Get a deployment.

        Args:
            name: Deployment name
            namespace: Namespace

        Returns:
            V1Deployment object

        Raises:
            KubernetesError: If deployment cannot be retrieved
        """
        try:
            logger.debug("getting_deployment", name=name, namespace=namespace)

            deployment = self.apps_v1.read_namespaced_deployment(name=name, namespace=namespace)

            logger.debug("deployment_retrieved", name=name, namespace=namespace)
            return deployment

        except ApiException as e:
            if e.status == 404:
                logger.warning("deployment_not_found", name=name, namespace=namespace)
                raise KubernetesError(f"Deployment {name} not found in {namespace}") from e

            logger.error(
                "get_deployment_failed",
                name=name,
                namespace=namespace,
                status=e.status,
            )
            raise KubernetesError(f"Failed to get deployment {name}: {e.reason}") from e
        except TRANSPORT_ERRORS as e:
            logger.error("get_deployment_failed", name=name, namespace=namespace, error=str(e))
            raise KubernetesError(f"Failed to get deployment {name}: {e}") from e

    def restart_deployment(self, name: str, namespace: str) -> bool:
        """Restart a deployment the way ``kubectl rollout restart`` does.

        Args:
            name: Deployment name
            namespace: Namespace

        Returns:
            True if restart was initiated successfully

        Raises:
            KubernetesError: If restart fails
        """
        try:
            logger.info("restarting_deployment", name=name, namespace=namespace)

            # Patch deployment with restart annotation
            now = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
            body = {
                "spec": {"template": {"metadata": {"annotations": {RESTARTED_AT_ANNOTATION: now}}}}
            }

            self.apps_v1.patch_namespaced_deployment(name=name, namespace=namespace, body=body)

            logger.info("deployment_restart_initiated", name=name, namespace=namespace)
            return True

        except ApiException as e:
            logger.error(
                "deployment_restart_failed",
                name=name,
                namespace=namespace,
                status=e.status,
                reason=e.reason,
            )
            raise KubernetesError(f"Failed to restart deployment {name}: {e.reason}") from e
        except TRANSPORT_ERRORS as e:
            logger.error(
                "deployment_restart_failed", name=name, namespace=namespace, error=str(e)
            )
            raise KubernetesError(f"Failed to restart deployment {name}: {e}") from e

    def pod_exists(self, name: str, namespace: str) -> bool:
        """Check whether a pod is still present.

        Args:
            name: Pod name
            namespace: Namespace

        Returns:
            False once the API answers 404 for the pod

        Raises:
            KubernetesError: On any other API or transport error
        """
        try:
            self.core_v1.read_namespaced_pod(name=name, namespace=namespace)
            return True
        except ApiException as e:
            if e.status == 404:
                return False
            logger.error(
                "get_pod_failed",
                name=name,
                namespace=namespace,
                status=e.status,
                reason=e.reason,
            )
            raise KubernetesError(f"Failed to get pod {name}: {e.reason}") from e
        except TRANSPORT_ERRORS as e:
            logger.error("get_pod_failed", name=name, namespace=namespace, error=str(e))
            raise KubernetesError(f"Failed to get pod {name}: {e}") from e

    def wait_for_pods_deleted(
        self,
        pod_names: Iterable[str],
        namespace: str,
        timeout: float,
        poll_interval: float = 2.0,
        cancel_event: threading.Event | None = None,
    ) -> None:
        """Block until every pod is gone, like ``kubectl wait --for=delete``.

        Args:
            pod_names: Pods to wait on
            namespace: Namespace
            timeout: Maximum wait in seconds
            poll_interval: Seconds between polls
            cancel_event: Stops the wait early when set

        Raises:
            KubernetesError: On timeout, cancellation or API error
        """
        cancel_event = cancel_event or threading.Event()
        remaining = list(pod_names)

        def _poll() -> list[str]:
            nonlocal remaining
            remaining = [name for name in remaining if self.pod_exists(name, namespace)]
            logger.debug("pods_pending_deletion", namespace=namespace, remaining=remaining)
            return remaining

        retryer = Retrying(
            retry=retry_if_result(bool),
            stop=stop_before_delay(timeout) | stop_when_event_set(cancel_event),
            wait=wait_fixed(poll_interval),
            sleep=cancel_event.wait,
        )

        try:
            retryer(_poll)
        except RetryError as e:
            if cancel_event.is_set():
                logger.warning(
                    "pod_deletion_wait_cancelled", namespace=namespace, remaining=remaining
                )
                raise KubernetesError(
                    f"Cancelled while waiting for pods {remaining} to be deleted"
                ) from e

            logger.error(
                "pod_deletion_wait_timed_out",
                namespace=namespace,
                timeout=timeout,
                remaining=remaining,
            )
            raise KubernetesError(
                f"Timed out after {timeout:g}s waiting for pods {remaining} to be deleted"
            ) from e

        logger.info("pods_deleted", namespace=namespace)

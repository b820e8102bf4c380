"""Desired Linkerd proxy version lookup."""

from restarter.clients.kubernetes_client import KubernetesClient
from restarter.core.config import LinkerdConfig
from restarter.core.exceptions import FetchError, KubernetesError
from restarter.utils.logging import get_logger

logger = get_logger(__name__)


class VersionResolver:
    """Reads the desired proxy version from the proxy-injector deployment label."""

    def __init__(
        self,
        client: KubernetesClient,
        namespace: str = "linkerd",
        deployment: str = "linkerd-proxy-injector",
        label: str = "app.kubernetes.io/version",
    ):
        self.client = client
        self.namespace = namespace
        self.deployment = deployment
        self.label = label

    @classmethod
    def from_config(cls, client: KubernetesClient, linkerd: LinkerdConfig) -> "VersionResolver":
        """Build a resolver from the linkerd config section."""
        return cls(
            client,
            namespace=linkerd.control_plane_namespace,
            deployment=linkerd.proxy_injector_deployment,
            label=linkerd.version_label,
        )

    def resolve(self) -> str:
        """Return the desired proxy version.

        A missing label resolves to an empty string.

        Raises:
            FetchError: If the deployment cannot be read
        """
        try:
            deployment = self.client.get_deployment(name=self.deployment, namespace=self.namespace)
        except KubernetesError as e:
            raise FetchError(
                f"Failed to get {self.deployment} deployment in {self.namespace}: {e}"
            ) from e

        labels = (deployment.metadata.labels if deployment.metadata else None) or {}
        version = labels.get(self.label, "")

        logger.info(
            "desired_version_resolved",
            version=version,
            deployment=self.deployment,
            namespace=self.namespace,
        )
        return version

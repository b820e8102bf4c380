"""Classify pods by injected proxy version."""

from kubernetes.client.models import V1Pod

from restarter.clients.kubernetes_client import KubernetesClient
from restarter.core.config import LinkerdConfig
from restarter.core.exceptions import KubernetesError, ListError
from restarter.core.models import PodRecord, RestartPlan
from restarter.utils.logging import get_logger

logger = get_logger(__name__)


def expected_created_by(prefix: str, desired_version: str) -> str:
    """Annotation value the current proxy injector writes."""
    return f"{prefix} {desired_version}"


def is_stale(created_by: str | None, expected: str) -> bool:
    """Return True when a pod was injected by a different proxy injector.

    Pods without the annotation are never stale.
    """
    return bool(created_by) and created_by != expected


class PodClassifier:
    """Lists pods and groups the stale ones by owning deployment."""

    def __init__(
        self,
        client: KubernetesClient,
        namespace: str = "default",
        app_label: str = "app",
        annotation: str = "linkerd.io/created-by",
        prefix: str = "linkerd/proxy-injector",
    ):
        self.client = client
        self.namespace = namespace
        self.app_label = app_label
        self.annotation = annotation
        self.prefix = prefix

    @classmethod
    def from_config(cls, client: KubernetesClient, linkerd: LinkerdConfig) -> "PodClassifier":
        """Build a classifier from the linkerd config section."""
        return cls(
            client,
            namespace=linkerd.namespace,
            app_label=linkerd.app_label,
            annotation=linkerd.created_by_annotation,
            prefix=linkerd.created_by_prefix,
        )

    def to_record(self, pod: V1Pod) -> PodRecord:
        """Extract the classification fields from a pod."""
        metadata = pod.metadata
        labels = metadata.labels or {}
        annotations = metadata.annotations or {}

        return PodRecord(
            name=metadata.name,
            namespace=metadata.namespace or self.namespace,
            app=labels.get(self.app_label) or None,
            created_by=annotations.get(self.annotation) or None,
        )

    def list_pods(self) -> list[PodRecord]:
        """Snapshot all pods in the namespace.

        Raises:
            ListError: If pods cannot be listed
        """
        try:
            pods = self.client.get_pods(namespace=self.namespace)
        except KubernetesError as e:
            raise ListError(f"Failed to list pods in {self.namespace}: {e}") from e

        return [self.to_record(pod) for pod in pods]

    def classify(self, records: list[PodRecord], desired_version: str) -> RestartPlan:
        """Group stale pods by the deployment named in their app label."""
        expected = expected_created_by(self.prefix, desired_version)
        plan = RestartPlan(namespace=self.namespace, desired_version=desired_version)

        for record in records:
            if not record.app:
                continue
            if not is_stale(record.created_by, expected):
                continue

            logger.debug(
                "stale_pod_found",
                pod=record.name,
                deployment=record.app,
                created_by=record.created_by,
                expected=expected,
            )
            plan.add(record.app, record.name)

        logger.info(
            "pods_classified",
            namespace=self.namespace,
            total=len(records),
            deployments=len(plan),
        )
        return plan

    def build_plan(self, desired_version: str) -> RestartPlan:
        """List pods and classify them in one step."""
        return self.classify(self.list_pods(), desired_version)

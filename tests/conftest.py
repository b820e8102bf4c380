"""Pytest configuration and shared fixtures."""

import io
from collections.abc import Callable
from unittest.mock import MagicMock

import pytest
from kubernetes.client.models import (
    V1Deployment,
    V1DeploymentSpec,
    V1LabelSelector,
    V1ObjectMeta,
    V1Pod,
    V1PodTemplateSpec,
)
from rich.console import Console

from restarter.core.config import RestarterConfig
from restarter.core.models import RestartPlan

PodFactory = Callable[..., V1Pod]
DeploymentFactory = Callable[..., V1Deployment]


@pytest.fixture
def make_pod() -> PodFactory:
    """Build V1Pod objects with the labels and annotations the classifier reads."""

    def _make_pod(
        name: str,
        app: str | None = None,
        created_by: str | None = None,
        namespace: str = "default",
    ) -> V1Pod:
        labels = {"app": app} if app is not None else None
        annotations = {"linkerd.io/created-by": created_by} if created_by is not None else None
        return V1Pod(
            metadata=V1ObjectMeta(
                name=name,
                namespace=namespace,
                labels=labels,
                annotations=annotations,
            )
        )

    return _make_pod


@pytest.fixture
def make_deployment() -> DeploymentFactory:
    """Build V1Deployment objects; newer client releases require a spec."""

    def _make_deployment(
        name: str, namespace: str = "default", labels: dict[str, str] | None = None
    ) -> V1Deployment:
        return V1Deployment(
            metadata=V1ObjectMeta(name=name, namespace=namespace, labels=labels),
            spec=V1DeploymentSpec(selector=V1LabelSelector(), template=V1PodTemplateSpec()),
        )

    return _make_deployment


@pytest.fixture
def proxy_injector_deployment(make_deployment: DeploymentFactory) -> V1Deployment:
    """Linkerd proxy injector deployment labelled with v2.3.0."""
    return make_deployment(
        "linkerd-proxy-injector",
        namespace="linkerd",
        labels={
            "app.kubernetes.io/version": "v2.3.0",
            "linkerd.io/control-plane-ns": "linkerd",
        },
    )


@pytest.fixture
def mock_kubernetes_client() -> MagicMock:
    """Mock KubernetesClient for testing."""
    client = MagicMock()
    client.get_pods.return_value = []
    return client


@pytest.fixture
def mock_driver() -> MagicMock:
    """Mock rollout driver for testing."""
    return MagicMock()


@pytest.fixture
def sample_config() -> RestarterConfig:
    """Configuration with no pauses so tests run instantly."""
    return RestarterConfig(
        cluster={"kubeconfig": "/tmp/kubeconfig"},
        rollout={"timeout": "5s", "sleep": 0, "poll_interval": 0},
    )


@pytest.fixture
def sample_plan() -> RestartPlan:
    """Plan with three deployments in insertion order."""
    plan = RestartPlan(namespace="default", desired_version="v2.3.0")
    plan.add("foo", "foo-6d4cf56db6-abcde")
    plan.add("foo", "foo-6d4cf56db6-fghij")
    plan.add("bar", "bar-7f9c8b5d4-klmno")
    plan.add("baz", "baz-5c7d9f8b6-pqrst")
    return plan


@pytest.fixture
def quiet_console() -> Console:
    """Rich console writing into a buffer."""
    return Console(file=io.StringIO(), width=120)

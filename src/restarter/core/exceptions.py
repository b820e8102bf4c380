"""Custom exceptions for the restarter."""


class RestarterError(Exception):
    """Base exception for all restarter errors."""


class ConfigError(RestarterError):
    """Cluster configuration or client construction failed."""


class KubernetesError(RestarterError):
    """Kubernetes API operation failed."""


class KubectlError(RestarterError):
    """kubectl invocation failed."""


class FetchError(RestarterError):
    """Desired proxy version could not be resolved."""


class ListError(RestarterError):
    """Pods could not be enumerated."""


class RestartError(RestarterError):
    """Rollout restart of a deployment failed."""


class WaitError(RestarterError):
    """Waiting for pod deletion failed or timed out."""


class RestartCancelledError(RestarterError):
    """Run was cancelled before all deployments were restarted."""

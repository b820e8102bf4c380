"""Core data models for the restarter."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class DeploymentState(str, Enum):
    """Progress of a single deployment through the restart loop."""

    PENDING = "pending"
    RESTART_ISSUED = "restart-issued"
    WAITING_FOR_DELETION = "waiting-for-deletion"
    DONE = "done"
    FATAL = "fatal"


class PodRecord(BaseModel):
    """Snapshot of the pod fields needed to classify it."""

    name: str
    namespace: str = "default"
    app: str | None = Field(None, description="Value of the owning-application label")
    created_by: str | None = Field(None, description="Value of the proxy injector annotation")


class RestartPlan(BaseModel):
    """Deployments to restart, each with the pods to wait on afterwards.

    Deployment order is insertion order of the pod listing.
    """

    namespace: str = "default"
    desired_version: str = ""
    pods_by_deployment: dict[str, list[str]] = Field(default_factory=dict)

    def add(self, deployment: str, pod_name: str) -> None:
        """Record a stale pod under its deployment."""
        self.pods_by_deployment.setdefault(deployment, []).append(pod_name)

    @property
    def deployments(self) -> list[str]:
        """Deployment names in plan order."""
        return list(self.pods_by_deployment)

    def pods_for(self, deployment: str) -> list[str]:
        """Pod names belonging to a deployment."""
        return list(self.pods_by_deployment.get(deployment, []))

    def __len__(self) -> int:
        return len(self.pods_by_deployment)

    def __bool__(self) -> bool:
        return bool(self.pods_by_deployment)


class DeploymentRestart(BaseModel):
    """Outcome record for one deployment."""

    deployment: str
    namespace: str
    pods: list[str] = Field(default_factory=list)
    state: DeploymentState = DeploymentState.PENDING
    started_at: datetime | None = None
    finished_at: datetime | None = None
    error: str | None = None

    @property
    def duration_seconds(self) -> float | None:
        """Wall-clock time spent on this deployment."""
        if self.started_at is None or self.finished_at is None:
            return None
        return (self.finished_at - self.started_at).total_seconds()

"""Pre-restart services: version lookup, pod classification and confirmation."""

from restarter.services.classifier import PodClassifier
from restarter.services.confirmation import ConfirmationGate
from restarter.services.version import VersionResolver

__all__ = [
    "ConfirmationGate",
    "PodClassifier",
    "VersionResolver",
]

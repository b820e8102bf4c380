"""Interface definitions for rollout drivers."""

from restarter.interfaces.rollout_driver import RolloutDriver

__all__ = [
    "RolloutDriver",
]

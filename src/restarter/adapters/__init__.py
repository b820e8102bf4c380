"""Rollout driver implementations."""

from restarter.adapters.rollout_drivers import ApiRolloutDriver, KubectlRolloutDriver

__all__ = [
    "ApiRolloutDriver",
    "KubectlRolloutDriver",
]

"""Linkerd Data-Plane Restarter.

Find Deployments whose Pods carry an outdated Linkerd proxy and roll them, one at a time.
"""

__version__ = "0.1.0"
__author__ = "Platform Engineering Team"
__license__ = "Apache-2.0"

"""Kubernetes access for the PodSet operator.

This package wraps the Kubernetes API behind the cluster store used by the reconciler.
"""

from podset_operator.kubernetes.connection import KubernetesConnection
from podset_operator.kubernetes.store import ClusterStore

__all__ = [
    "ClusterStore",
    "KubernetesConnection",
]

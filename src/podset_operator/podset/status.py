"""Observed state of a PodSet, derived from the pods it owns."""

from collections.abc import Iterable

from podset_operator.podset.models import ManagedPod, PodPhase, PodSetStatus

# Phases of a pod that counts towards the available replicas
AVAILABLE_PHASES = frozenset({PodPhase.PENDING, PodPhase.RUNNING})


def is_available(pod: ManagedPod) -> bool:
    """A pod is available when it is pending or running and not being deleted."""
    return not pod.is_terminating and pod.phase in AVAILABLE_PHASES


def available_pods(pods: Iterable[ManagedPod]) -> list[ManagedPod]:
    """Keep the available pods, in the order they were listed."""
    return [pod for pod in pods if is_available(pod)]


def compute_status(pods: Iterable[ManagedPod]) -> PodSetStatus:
    """Compute the observed state of a PodSet from its pods.

    Args:
        pods: The pods owned by the PodSet, as listed.

    Returns:
        The names and count of the available pods.
    """
    available = available_pods(pods)
    return PodSetStatus(
        pod_names=[pod.name for pod in available],
        available_replicas=len(available),
    )

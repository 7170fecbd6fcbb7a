"""Kubernetes events handling module.

This module provides functions for recording events on PodSet resources.
"""

import logging
from datetime import UTC, datetime

from kubernetes import client

from podset_operator.kubernetes.connection import KubernetesConnection
from podset_operator.podset.models import PODSET_API_VERSION, PODSET_KIND, PodSet

logger = logging.getLogger(__name__)

# Constants for event types
EVENT_TYPE_NORMAL = "Normal"
EVENT_TYPE_WARNING = "Warning"

# Constants for event reasons
EVENT_REASON_SCALED_UP = "ScaledUp"
EVENT_REASON_SCALED_DOWN = "ScaledDown"
EVENT_REASON_FAILED_CREATE = "FailedCreate"
EVENT_REASON_FAILED_DELETE = "FailedDelete"

# Constants for event actions
EVENT_ACTION_CREATE = "CreatePod"
EVENT_ACTION_DELETE = "DeletePod"

# Component name for events
EVENT_COMPONENT = "podset-operator"


def create_scale_up_event(connection: KubernetesConnection, podset: PodSet, pod_name: str) -> None:
    """Record the creation of a pod on its PodSet.

    Args:
        connection: The Kubernetes connection to use
        podset: The PodSet that was scaled up
        pod_name: Name of the created pod
    """
    _create_event(
        connection=connection,
        podset=podset,
        event_type=EVENT_TYPE_NORMAL,
        reason=EVENT_REASON_SCALED_UP,
        message=f"Created pod {pod_name}",
        action=EVENT_ACTION_CREATE,
    )


def create_scale_down_event(connection: KubernetesConnection, podset: PodSet, pod_names: list[str]) -> None:
    """Record the deletion of pods on their PodSet.

    Args:
        connection: The Kubernetes connection to use
        podset: The PodSet that was scaled down
        pod_names: Names of the deleted pods
    """
    _create_event(
        connection=connection,
        podset=podset,
        event_type=EVENT_TYPE_NORMAL,
        reason=EVENT_REASON_SCALED_DOWN,
        message=f"Deleted {len(pod_names)} pod(s): {', '.join(pod_names)}",
        action=EVENT_ACTION_DELETE,
    )


def create_scaling_failure_event(
    connection: KubernetesConnection,
    podset: PodSet,
    creating: bool,
    message: str,
) -> None:
    """Record a failed pod creation or deletion on a PodSet.

    Args:
        connection: The Kubernetes connection to use
        podset: The PodSet being reconciled
        creating: True for a failed creation, False for a failed deletion
        message: Detailed message for the event
    """
    _create_event(
        connection=connection,
        podset=podset,
        event_type=EVENT_TYPE_WARNING,
        reason=EVENT_REASON_FAILED_CREATE if creating else EVENT_REASON_FAILED_DELETE,
        message=message,
        action=EVENT_ACTION_CREATE if creating else EVENT_ACTION_DELETE,
    )


def _create_event(
    connection: KubernetesConnection,
    podset: PodSet,
    event_type: str,
    reason: str,
    message: str,
    action: str,
) -> None:
    """Create a Kubernetes event regarding a PodSet.

    Failures are logged and never raised.

    Args:
        connection: The Kubernetes connection to use
        podset: The PodSet the event is about
        event_type: Type of event (Normal or Warning)
        reason: Short reason for the event
        message: Detailed message for the event
        action: Action being performed
    """
    try:
        body = client.EventsV1Event(
            metadata=client.V1ObjectMeta(generate_name=f"{podset.name}-", namespace=podset.namespace),
            reason=reason,
            note=message,
            type=event_type,
            reporting_controller=EVENT_COMPONENT,
            reporting_instance=connection.hostname,
            action=action,
            regarding=client.V1ObjectReference(
                api_version=PODSET_API_VERSION,
                kind=PODSET_KIND,
                name=podset.name,
                namespace=podset.namespace,
                uid=podset.uid,
            ),
            event_time=datetime.now(UTC),
        )

        connection.events_v1_api.create_namespaced_event(namespace=podset.namespace, body=body)
        logger.debug(f"Created event for {PODSET_KIND} {podset.namespace}/{podset.name}: {reason}")

    except Exception as e:
        logger.warning(f"Failed to create event for {PODSET_KIND} {podset.namespace}/{podset.name}: {e}")

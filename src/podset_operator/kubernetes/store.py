"""Cluster store used by the reconciler.

The store is the only place where the reconciler touches the Kubernetes API.
It converts API objects into the operator's data model and API failures into
operator errors: a missing PodSet becomes NotFoundError, every other failure
becomes TransientError.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from kubernetes import client
from kubernetes.client.exceptions import ApiException
from urllib3.exceptions import HTTPError

from podset_operator.errors import NotFoundError, TransientError
from podset_operator.kubernetes.connection import KubernetesConnection
from podset_operator.kubernetes.resources.events import (
    create_scale_down_event,
    create_scale_up_event,
    create_scaling_failure_event,
)
from podset_operator.kubernetes.resources.pods import PodResource
from podset_operator.kubernetes.resources.podsets import PodSetResource
from podset_operator.podset.models import PODSET_KIND, ManagedPod, PodSet, PodSetStatus

logger = logging.getLogger(__name__)


@contextmanager
def _store_call(operation: str, target: str) -> Iterator[None]:
    """Turn API and connection failures of a store call into TransientError."""
    try:
        yield
    except ApiException as e:
        logger.error(f"{operation} failed for {target}: {e.status} {e.reason}")
        raise TransientError(operation, f"{target}: {e.status} {e.reason}") from e
    except (HTTPError, OSError) as e:
        logger.error(f"{operation} failed for {target}: {e}")
        raise TransientError(operation, f"{target}: {e}") from e


class ClusterStore:
    """Access to PodSets and their pods in the cluster.

    Attributes:
        connection: The Kubernetes connection in use.
        podsets: Handler for PodSet custom resources.
        pods: Handler for pods.
    """

    def __init__(self, connection: KubernetesConnection, request_timeout: float | None = None):
        """Initialize the store.

        Args:
            connection: The Kubernetes connection to use
            request_timeout: Timeout in seconds applied to every API call
        """
        self.connection = connection
        self.podsets = PodSetResource(connection, request_timeout)
        self.pods = PodResource(connection, request_timeout)

    def get_podset(self, namespace: str, name: str) -> PodSet:
        """Fetch a PodSet.

        Raises:
            NotFoundError: If the PodSet does not exist.
            TransientError: If the API call failed.
        """
        with _store_call("get_podset", f"{PODSET_KIND} {namespace}/{name}"):
            try:
                obj = self.podsets.get_resource(name, namespace)
            except ApiException as e:
                if e.status == 404:
                    raise NotFoundError(PODSET_KIND, namespace, name) from e
                raise
        return PodSet.from_dict(obj)

    def list_podsets(self, namespace: str | None = None) -> list[PodSet]:
        """List all PodSets in a namespace, or in all namespaces when namespace is None.

        Raises:
            TransientError: If the API call failed.
        """
        with _store_call("list_podsets", f"namespace {namespace or '<all>'}"):
            return [PodSet.from_dict(obj) for obj in self.podsets.iter_resources(namespace=namespace)]

    def list_pods(self, namespace: str, label_selector: str) -> list[ManagedPod]:
        """List the pods of a namespace matching a label selector, in API order.

        Raises:
            TransientError: If the API call failed.
        """
        with _store_call("list_pods", f"pods {namespace} ({label_selector})"):
            return [
                ManagedPod.from_v1_pod(pod)
                for pod in self.pods.iter_resources(namespace=namespace, label_selector=label_selector)
            ]

    def create_pod(self, pod: client.V1Pod) -> ManagedPod:
        """Create a pod.

        Raises:
            TransientError: If the API call failed.
        """
        target = f"pod {pod.metadata.namespace}/{pod.metadata.name or pod.metadata.generate_name}"
        with _store_call("create_pod", target):
            created = self.pods.create_resource(pod)
        return ManagedPod.from_v1_pod(created)

    def delete_pod(self, pod: ManagedPod) -> None:
        """Delete a pod. A pod that is already gone counts as deleted.

        Raises:
            TransientError: If the API call failed.
        """
        with _store_call("delete_pod", f"pod {pod.namespace}/{pod.name}"):
            try:
                self.pods.delete_resource(pod.name, pod.namespace)
            except ApiException as e:
                if e.status != 404:
                    raise
                logger.debug(f"Pod {pod.namespace}/{pod.name} was already deleted")

    def update_status(self, podset: PodSet, status: PodSetStatus) -> None:
        """Publish the observed state of a PodSet.

        Raises:
            TransientError: If the API call failed.
        """
        with _store_call("update_status", f"{PODSET_KIND} {podset.namespace}/{podset.name}"):
            self.podsets.patch_status(podset.name, podset.namespace, status.to_dict())

    def record_scale_up(self, podset: PodSet, pod_name: str) -> None:
        create_scale_up_event(self.connection, podset, pod_name)

    def record_scale_down(self, podset: PodSet, pod_names: list[str]) -> None:
        create_scale_down_event(self.connection, podset, pod_names)

    def record_failure(self, podset: PodSet, creating: bool, message: str) -> None:
        create_scaling_failure_event(self.connection, podset, creating, message)

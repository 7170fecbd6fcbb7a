"""Kubernetes Pods handling module.

This module provides the pod operations needed to converge a PodSet.
"""

import logging
from typing import Any

from kubernetes import client

from podset_operator.kubernetes.base import KubernetesResource
from podset_operator.kubernetes.connection import KubernetesConnection

logger = logging.getLogger(__name__)


class PodResource(KubernetesResource[client.V1Pod]):
    """Handler for Kubernetes Pod resources."""

    def __init__(self, connection: KubernetesConnection, request_timeout: float | None = None):
        """Initialize the Pod resource handler.

        Args:
            connection: The Kubernetes connection to use
            request_timeout: Timeout in seconds applied to every API call
        """
        super().__init__(connection, request_timeout)
        self.api = connection.core_v1_api

    def list_namespaced_resources(self, namespace: str, **kwargs) -> Any:
        """List pods in a specific namespace.

        Args:
            namespace: The namespace to list pods in.
            **kwargs: Additional arguments to pass to the API call.

        Returns:
            The API response containing the list of pods.
        """
        return self.api.list_namespaced_pod(namespace, **kwargs)

    def list_all_namespaces_resources(self, **kwargs) -> Any:
        """List pods across all namespaces.

        Args:
            **kwargs: Additional arguments to pass to the API call.

        Returns:
            The API response containing the list of pods.
        """
        return self.api.list_pod_for_all_namespaces(**kwargs)

    def create_resource(self, pod: client.V1Pod) -> client.V1Pod:
        """Create a pod.

        Args:
            pod: The pod to create. Its namespace is taken from its metadata.

        Returns:
            The created pod, with the name generated by the API server.
        """
        return self.api.create_namespaced_pod(pod.metadata.namespace, pod, **self._call_kwargs())

    def delete_resource(self, name: str, namespace: str) -> None:
        """Delete a pod.

        Args:
            name: Name of the pod.
            namespace: Namespace of the pod.
        """
        self.api.delete_namespaced_pod(name, namespace, **self._call_kwargs())

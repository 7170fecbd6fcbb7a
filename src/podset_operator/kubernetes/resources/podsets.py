"""PodSet custom resources handling module.

This module provides access to the PodSet custom resources through the custom objects API.
"""

import logging
from typing import Any

from podset_operator.kubernetes.base import KubernetesResource
from podset_operator.podset.models import (
    PODSET_GROUP,
    PODSET_KIND,
    PODSET_PLURAL,
    PODSET_VERSION,
)

logger = logging.getLogger(__name__)


class PodSetResource(KubernetesResource[dict[str, Any]]):
    """Handler for PodSet custom resources."""

    def get_resource(self, name: str, namespace: str) -> dict[str, Any]:
        """Get a specific PodSet by name.

        Args:
            name: Name of the PodSet
            namespace: Namespace of the PodSet

        Returns:
            The PodSet custom object
        """
        return self.connection.custom_objects_api.get_namespaced_custom_object(
            **self._call_kwargs(
                group=PODSET_GROUP,
                version=PODSET_VERSION,
                namespace=namespace,
                plural=PODSET_PLURAL,
                name=name,
            )
        )

    def list_namespaced_resources(self, namespace: str, **kwargs) -> Any:
        """List PodSets in a namespace.

        Args:
            namespace: The namespace to list resources in
            **kwargs: Additional arguments to pass to the API call

        Returns:
            The API response containing PodSet resources
        """
        return self.connection.custom_objects_api.list_namespaced_custom_object(
            group=PODSET_GROUP,
            version=PODSET_VERSION,
            namespace=namespace,
            plural=PODSET_PLURAL,
            **kwargs,
        )

    def list_all_namespaces_resources(self, **kwargs) -> Any:
        """List PodSets across all namespaces.

        Args:
            **kwargs: Additional arguments to pass to the API call

        Returns:
            The API response containing PodSet resources
        """
        return self.connection.custom_objects_api.list_cluster_custom_object(
            group=PODSET_GROUP,
            version=PODSET_VERSION,
            plural=PODSET_PLURAL,
            **kwargs,
        )

    def get_items(self, result: Any) -> list[dict[str, Any]]:
        return result.get("items", [])

    def get_continue_token(self, result: Any) -> str | None:
        return (result.get("metadata") or {}).get("continue")

    def patch_status(self, name: str, namespace: str, status: dict[str, Any]) -> dict[str, Any]:
        """Replace the status of a PodSet through its status subresource.

        Args:
            name: Name of the PodSet
            namespace: Namespace of the PodSet
            status: The new status, in wire format

        Returns:
            The updated PodSet custom object
        """
        result = self.connection.custom_objects_api.patch_namespaced_custom_object_status(
            **self._call_kwargs(
                group=PODSET_GROUP,
                version=PODSET_VERSION,
                namespace=namespace,
                plural=PODSET_PLURAL,
                name=name,
                body={"status": status},
            )
        )
        logger.debug(f"Patched status of {PODSET_KIND} {namespace}/{name}: {status}")
        return result

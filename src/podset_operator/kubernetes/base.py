"""Base module for Kubernetes resources.

This module provides the base class of the resource handlers used by the cluster store.
"""

import abc
import logging
from collections.abc import Iterator
from typing import Any, Generic, TypeVar

from podset_operator.kubernetes.connection import KubernetesConnection

logger = logging.getLogger(__name__)

# Type variable for resource types
T = TypeVar("T")


class KubernetesResource(Generic[T], abc.ABC):
    """Base class for the Kubernetes resources the operator reads and writes.

    Handlers do not catch API errors: the cluster store translates them into
    operator errors, so that a failed listing is never mistaken for an empty one.
    """

    def __init__(self, connection: KubernetesConnection, request_timeout: float | None = None):
        """Initialize the resource handler.

        Args:
            connection: The Kubernetes connection to use
            request_timeout: Timeout in seconds applied to every API call. None means no timeout.
        """
        self.connection = connection
        self.request_timeout = request_timeout

    def _call_kwargs(self, **kwargs) -> dict[str, Any]:
        """Add the request timeout to the keyword arguments of an API call."""
        if self.request_timeout is not None:
            kwargs["_request_timeout"] = self.request_timeout
        return kwargs

    def iter_resources(
        self, namespace: str | None = None, batch_size: int = 100, **kwargs
    ) -> Iterator[T]:
        """Iterate over all resources in a namespace or across all namespaces.

        Uses pagination to fetch resources in batches and yield them one by one
        to limit memory usage.

        Args:
            namespace: Namespace to get resources from. If None, all namespaces are listed.
            batch_size: Number of resources to fetch per API call.
            **kwargs: Additional arguments to pass to the API call, e.g. label_selector.

        Yields:
            Resources, one at a time.
        """
        continue_token = None

        while True:
            if namespace:
                result = self.list_namespaced_resources(
                    namespace, **self._call_kwargs(limit=batch_size, _continue=continue_token, **kwargs)
                )
            else:
                result = self.list_all_namespaces_resources(
                    **self._call_kwargs(limit=batch_size, _continue=continue_token, **kwargs)
                )

            yield from self.get_items(result)

            continue_token = self.get_continue_token(result)
            if not continue_token:
                break

    def get_items(self, result: Any) -> list[T]:
        """Extract the items of a list response."""
        return result.items

    def get_continue_token(self, result: Any) -> str | None:
        """Extract the pagination token of a list response."""
        return result.metadata._continue

    @abc.abstractmethod
    def list_namespaced_resources(self, namespace: str, **kwargs) -> Any:
        """List resources in a specific namespace.

        Args:
            namespace: The namespace to list resources in.
            **kwargs: Additional arguments to pass to the API call.

        Returns:
            The API response containing the list of resources.
        """
        pass

    @abc.abstractmethod
    def list_all_namespaces_resources(self, **kwargs) -> Any:
        """List resources across all namespaces.

        Args:
            **kwargs: Additional arguments to pass to the API call.

        Returns:
            The API response containing the list of resources.
        """
        pass

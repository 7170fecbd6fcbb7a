"""Reconcile triggers of the PodSet operator.

Each subscription names a watchable list call and how its objects map to the
PodSet keys to reconcile. The dispatcher starts one watch per subscription;
nothing in the reconciler knows about watches.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from kubernetes import client

from podset_operator.kubernetes.connection import KubernetesConnection
from podset_operator.podset.models import (
    PODSET_GROUP,
    PODSET_KIND,
    PODSET_PLURAL,
    PODSET_VERSION,
    VERSION_LABEL,
    VERSION_LABEL_VALUE,
    ReconcileKey,
)

logger = logging.getLogger(__name__)

ListCall = tuple[Callable[..., Any], dict[str, Any]]


@dataclass(frozen=True)
class Subscription:
    """A watched resource and how its events map to PodSet keys.

    Attributes:
        name: Name used in logs.
        list_call: Returns the list function to watch and its keyword arguments,
            for a namespace (None for all namespaces).
        map_to_keys: Returns the keys of the PodSets to reconcile for an object.
    """
    name: str
    list_call: Callable[[KubernetesConnection, str | None], ListCall]
    map_to_keys: Callable[[Any], list[ReconcileKey]]


def podset_list_call(connection: KubernetesConnection, namespace: str | None) -> ListCall:
    """List call watching PodSets."""
    api = connection.custom_objects_api
    kwargs = {"group": PODSET_GROUP, "version": PODSET_VERSION, "plural": PODSET_PLURAL}
    if namespace:
        return api.list_namespaced_custom_object, {**kwargs, "namespace": namespace}
    return api.list_cluster_custom_object, kwargs


def owned_pod_list_call(connection: KubernetesConnection, namespace: str | None) -> ListCall:
    """List call watching the pods created by the operator."""
    api = connection.core_v1_api
    kwargs = {"label_selector": f"{VERSION_LABEL}={VERSION_LABEL_VALUE}"}
    if namespace:
        return api.list_namespaced_pod, {**kwargs, "namespace": namespace}
    return api.list_pod_for_all_namespaces, kwargs


def podset_keys(obj: dict[str, Any]) -> list[ReconcileKey]:
    """A PodSet event reconciles the PodSet itself."""
    metadata = obj.get("metadata") or {}
    if not metadata.get("name") or not metadata.get("namespace"):
        return []
    return [ReconcileKey(metadata["namespace"], metadata["name"])]


def owner_keys(pod: client.V1Pod) -> list[ReconcileKey]:
    """A pod event reconciles the PodSet controlling the pod, if any."""
    metadata = pod.metadata
    for ref in metadata.owner_references or []:
        if ref.kind == PODSET_KIND and ref.controller and (ref.api_version or "").startswith(f"{PODSET_GROUP}/"):
            return [ReconcileKey(metadata.namespace, ref.name)]
    return []


PODSET_SUBSCRIPTION = Subscription(name="podsets", list_call=podset_list_call, map_to_keys=podset_keys)
OWNED_POD_SUBSCRIPTION = Subscription(name="owned-pods", list_call=owned_pod_list_call, map_to_keys=owner_keys)

DEFAULT_SUBSCRIPTIONS = (PODSET_SUBSCRIPTION, OWNED_POD_SUBSCRIPTION)

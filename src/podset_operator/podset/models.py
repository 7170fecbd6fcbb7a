"""Data model of the PodSet operator.

A PodSet declares a desired number of fungible pods; ManagedPods are the pods
it owns. Both are plain pydantic models built from what the Kubernetes API
returns, so the reconciliation logic never touches raw API objects.
"""

from datetime import datetime
from enum import Enum
from typing import Any, NamedTuple

from kubernetes import client
from pydantic import BaseModel, ConfigDict, Field

# Custom resource coordinates
PODSET_GROUP = "podset.example.com"
PODSET_VERSION = "v1alpha1"
PODSET_PLURAL = "podsets"
PODSET_KIND = "PodSet"
PODSET_API_VERSION = f"{PODSET_GROUP}/{PODSET_VERSION}"

# Bounds of spec.replicaCount, enforced by the CRD schema
MIN_REPLICAS = 1
MAX_REPLICAS = 10

# Label pair shared by every pod a PodSet owns
OWNER_LABEL = "app"
VERSION_LABEL = "version"
VERSION_LABEL_VALUE = "v0.1"


def ownership_labels(podset_name: str) -> dict[str, str]:
    """Return the labels identifying the pods owned by a PodSet.

    Args:
        podset_name: Name of the owning PodSet.

    Returns:
        The label pair used both when creating and when listing pods.
    """
    return {OWNER_LABEL: podset_name, VERSION_LABEL: VERSION_LABEL_VALUE}


def label_selector(labels: dict[str, str]) -> str:
    """Render a label dict as an equality-based label selector."""
    return ",".join(f"{key}={value}" for key, value in labels.items())


class ReconcileKey(NamedTuple):
    """Identity of a PodSet to reconcile."""
    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"

    @classmethod
    def parse(cls, key: str) -> "ReconcileKey":
        """Parse a "namespace/name" string.

        Raises:
            ValueError: If the string is not of the form namespace/name.
        """
        namespace, sep, name = key.partition("/")
        if not sep or not namespace or not name or "/" in name:
            raise ValueError(f"Invalid PodSet key: {key!r}, expected namespace/name")
        return cls(namespace, name)


class PodPhase(str, Enum):
    """Lifecycle phase of a pod."""
    PENDING = "Pending"
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, value: str | None) -> "PodPhase":
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


class PodSetSpec(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    replica_count: int = Field(default=0, alias="replicaCount")


class PodSetStatus(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    pod_names: list[str] = Field(default_factory=list, alias="podNames")
    available_replicas: int = Field(default=0, alias="availableReplicas")

    def to_dict(self) -> dict[str, Any]:
        """Serialize the status in its wire format."""
        return self.model_dump(by_alias=True)


class PodSet(BaseModel):
    """A PodSet custom resource.

    Attributes:
        name: Name of the PodSet.
        namespace: Namespace of the PodSet.
        uid: UID assigned by the API server, used for owner references.
        resource_version: Version of the object when it was read.
        spec: Desired state.
        status: Last observed state published by the operator.
    """
    name: str
    namespace: str
    uid: str | None = None
    resource_version: str | None = None
    spec: PodSetSpec = Field(default_factory=PodSetSpec)
    status: PodSetStatus = Field(default_factory=PodSetStatus)

    @property
    def key(self) -> ReconcileKey:
        return ReconcileKey(self.namespace, self.name)

    @property
    def labels(self) -> dict[str, str]:
        return ownership_labels(self.name)

    @classmethod
    def from_dict(cls, obj: dict[str, Any]) -> "PodSet":
        """Build a PodSet from the custom object returned by the API.

        Args:
            obj: The custom object as returned by CustomObjectsApi.

        Returns:
            The parsed PodSet.
        """
        metadata = obj.get("metadata") or {}
        return cls(
            name=metadata["name"],
            namespace=metadata["namespace"],
            uid=metadata.get("uid"),
            resource_version=metadata.get("resourceVersion"),
            spec=PodSetSpec.model_validate(obj.get("spec") or {}),
            status=PodSetStatus.model_validate(obj.get("status") or {}),
        )


class ManagedPod(BaseModel):
    """A pod owned by a PodSet, reduced to what reconciliation needs."""
    name: str
    namespace: str
    phase: PodPhase = PodPhase.UNKNOWN
    deletion_timestamp: datetime | None = None
    creation_timestamp: datetime | None = None
    owner_name: str | None = None

    @property
    def is_terminating(self) -> bool:
        return self.deletion_timestamp is not None

    @classmethod
    def from_v1_pod(cls, pod: client.V1Pod) -> "ManagedPod":
        """Build a ManagedPod from a pod returned by CoreV1Api.

        The owner is taken from the controller owner reference of kind PodSet,
        falling back to the ownership label.
        """
        metadata = pod.metadata
        owner_name = None
        for ref in metadata.owner_references or []:
            if ref.kind == PODSET_KIND and ref.controller:
                owner_name = ref.name
                break
        if owner_name is None and metadata.labels:
            owner_name = metadata.labels.get(OWNER_LABEL)

        return cls(
            name=metadata.name,
            namespace=metadata.namespace,
            phase=PodPhase.parse(pod.status.phase if pod.status else None),
            deletion_timestamp=metadata.deletion_timestamp,
            creation_timestamp=metadata.creation_timestamp,
            owner_name=owner_name,
        )

"""Configuration module for the PodSet operator.

This module handles the configuration of the operator through environment variables.
"""
import os
from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator


class VictimPolicy(str, Enum):
    """Strategy used to choose which pods are deleted when scaling down."""
    FIRST_LISTED = "first-listed"
    OLDEST_FIRST = "oldest-first"
    NEWEST_FIRST = "newest-first"


DEFAULT_POD_IMAGE = "busybox"
DEFAULT_POD_COMMAND = ["sleep", "3600"]


class OperatorConfig(BaseModel):
    """Configuration class for the PodSet operator.

    Attributes:
        namespace: Namespace to watch. If None, PodSets in all namespaces are reconciled.
        workers: Number of worker threads reconciling PodSets concurrently.
        resync_interval: Seconds between two full re-listings of all PodSets.
        requeue_delay: Seconds to wait before re-running a pass that asked to be requeued.
        backoff_base_delay: First retry delay after a transient failure.
        backoff_max_delay: Upper bound of the exponential retry delay.
        request_timeout: Timeout in seconds of every Kubernetes API call.
        victim_policy: How pods are chosen when scaling down.
        pod_image: Container image of the pods created for a PodSet.
        pod_command: Command of the container of the pods created for a PodSet.
        max_passes: Maximum passes per PodSet when reconciling once.
    """
    namespace: str | None = Field(default=None)
    workers: int = Field(default=2, ge=1)
    resync_interval: int = Field(default=300, gt=0)
    requeue_delay: float = Field(default=1.0, ge=0)
    backoff_base_delay: float = Field(default=0.5, gt=0)
    backoff_max_delay: float = Field(default=60.0, gt=0)
    request_timeout: float = Field(default=30.0, gt=0)
    victim_policy: VictimPolicy = Field(default=VictimPolicy.FIRST_LISTED)
    pod_image: str = Field(default=DEFAULT_POD_IMAGE, min_length=1)
    pod_command: list[str] = Field(default_factory=lambda: list(DEFAULT_POD_COMMAND))
    max_passes: int = Field(default=20, ge=1)

    @field_validator("pod_command")
    def validate_pod_command(cls, v):
        """Validate that the pod command is not empty"""
        if not v:
            raise ValueError("Pod command must not be empty")
        return v

    @model_validator(mode="after")
    def validate_backoff(self):
        """Validate that the backoff bounds are ordered"""
        if self.backoff_max_delay < self.backoff_base_delay:
            raise ValueError("backoff_max_delay must be greater than or equal to backoff_base_delay")
        return self

    @classmethod
    def from_env(cls):
        """Create a config instance from environment variables."""
        victim_policy = os.getenv("PODSET_VICTIM_POLICY", VictimPolicy.FIRST_LISTED.value)
        pod_command = os.getenv("PODSET_POD_COMMAND")

        return cls(
            namespace=os.getenv("PODSET_NAMESPACE") or None,
            workers=int(os.getenv("PODSET_WORKERS", "2")),
            resync_interval=int(os.getenv("PODSET_RESYNC_INTERVAL", "300")),
            requeue_delay=float(os.getenv("PODSET_REQUEUE_DELAY", "1.0")),
            backoff_base_delay=float(os.getenv("PODSET_BACKOFF_BASE_DELAY", "0.5")),
            backoff_max_delay=float(os.getenv("PODSET_BACKOFF_MAX_DELAY", "60")),
            request_timeout=float(os.getenv("PODSET_REQUEST_TIMEOUT", "30")),
            victim_policy=VictimPolicy(victim_policy.strip().lower()),
            pod_image=os.getenv("PODSET_POD_IMAGE", DEFAULT_POD_IMAGE),
            pod_command=pod_command.split() if pod_command is not None else list(DEFAULT_POD_COMMAND),
            max_passes=int(os.getenv("PODSET_MAX_PASSES", "20")),
        )

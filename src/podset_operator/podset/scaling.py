"""Scaling decision for a PodSet.

Compares the available pods with the desired replica count and picks a single
corrective action. Scaling up creates one pod per pass and relies on the
requeue to create the next one; scaling down removes the whole excess at once.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone

from podset_operator.config import VictimPolicy
from podset_operator.podset.models import ManagedPod

logger = logging.getLogger(__name__)

VictimSelector = Callable[[Sequence[ManagedPod], int], list[ManagedPod]]


@dataclass(frozen=True)
class NoAction:
    """Observed state matches the desired state."""


@dataclass(frozen=True)
class CreateOne:
    """One more pod is needed."""


@dataclass(frozen=True)
class DeleteSet:
    """These pods are in excess and must be deleted."""
    pods: tuple[ManagedPod, ...] = field(default_factory=tuple)


Action = NoAction | CreateOne | DeleteSet


def select_first_listed(pods: Sequence[ManagedPod], count: int) -> list[ManagedPod]:
    """Take the first pods in listing order."""
    return list(pods[:count])


def _creation_key(pod: ManagedPod) -> tuple[bool, datetime]:
    # Pods without a creation timestamp sort after the others
    if pod.creation_timestamp is None:
        return (True, datetime.max.replace(tzinfo=timezone.utc))
    ts = pod.creation_timestamp
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return (False, ts)


def select_oldest_first(pods: Sequence[ManagedPod], count: int) -> list[ManagedPod]:
    """Take the pods created first. Ties keep listing order."""
    return sorted(pods, key=_creation_key)[:count]


def select_newest_first(pods: Sequence[ManagedPod], count: int) -> list[ManagedPod]:
    """Take the pods created last. Pods without a timestamp still come last."""
    timestamped = [pod for pod in pods if pod.creation_timestamp is not None]
    untimestamped = [pod for pod in pods if pod.creation_timestamp is None]
    # sorted() is stable, so reverse=True keeps listing order among equal timestamps
    newest = sorted(timestamped, key=_creation_key, reverse=True)
    return (newest + untimestamped)[:count]


VICTIM_SELECTORS: dict[VictimPolicy, VictimSelector] = {
    VictimPolicy.FIRST_LISTED: select_first_listed,
    VictimPolicy.OLDEST_FIRST: select_oldest_first,
    VictimPolicy.NEWEST_FIRST: select_newest_first,
}


def get_victim_selector(policy: VictimPolicy | str) -> VictimSelector:
    """Return the selector implementing a victim policy.

    Raises:
        ValueError: If the policy is unknown.
    """
    return VICTIM_SELECTORS[VictimPolicy(policy)]


def decide(
    available: Sequence[ManagedPod],
    desired: int,
    select_victims: VictimSelector = select_first_listed,
) -> Action:
    """Decide which action brings the available pods closer to the desired count.

    Args:
        available: The available pods, in listing order.
        desired: The desired replica count. Negative values count as zero.
        select_victims: Picks the pods to delete when there are too many.

    Returns:
        NoAction, CreateOne or DeleteSet. Never both a creation and a deletion.
    """
    desired = max(desired, 0)
    num_available = len(available)

    if num_available > desired:
        excess = num_available - desired
        victims = select_victims(available, excess)
        if len(victims) != excess:
            raise ValueError(f"Victim selector returned {len(victims)} pods, expected {excess}")
        logger.debug(f"Scaling down: {num_available} available, {desired} desired")
        return DeleteSet(pods=tuple(victims))

    if num_available < desired:
        logger.debug(f"Scaling up: {num_available} available, {desired} desired")
        return CreateOne()

    return NoAction()

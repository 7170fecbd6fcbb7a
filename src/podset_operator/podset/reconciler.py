"""Reconciler for PodSet resources.

A reconcile pass is level-triggered: it fetches the PodSet and its pods,
recomputes the observed state from scratch, publishes it when it changed, and
applies at most one corrective action. Nothing is remembered between passes.
"""

import enum
import logging

from podset_operator.config import DEFAULT_POD_COMMAND, DEFAULT_POD_IMAGE, VictimPolicy
from podset_operator.errors import NotFoundError, TransientError
from podset_operator.kubernetes.store import ClusterStore
from podset_operator.podset.models import PodSet, ReconcileKey, label_selector
from podset_operator.podset.pod_factory import build_pod, set_controller_reference
from podset_operator.podset.scaling import CreateOne, DeleteSet, decide, get_victim_selector
from podset_operator.podset.status import available_pods, compute_status

logger = logging.getLogger(__name__)


class ReconcileResult(enum.Enum):
    """Outcome of a successful reconcile pass."""
    DONE = "done"
    REQUEUE = "requeue"


class PodSetReconciler:
    """Converges the pods of a PodSet towards its desired replica count."""

    def __init__(
        self,
        store: ClusterStore,
        victim_policy: VictimPolicy = VictimPolicy.FIRST_LISTED,
        pod_image: str = DEFAULT_POD_IMAGE,
        pod_command: list[str] | None = None,
    ):
        """Initialize the reconciler.

        Args:
            store: The cluster store to read from and write to.
            victim_policy: How pods are chosen when scaling down.
            pod_image: Container image of the created pods.
            pod_command: Container command of the created pods.
        """
        self.store = store
        self.select_victims = get_victim_selector(victim_policy)
        self.pod_image = pod_image
        self.pod_command = list(pod_command or DEFAULT_POD_COMMAND)

    def reconcile(self, key: ReconcileKey) -> ReconcileResult:
        """Run one reconcile pass for a PodSet.

        Args:
            key: Namespace and name of the PodSet.

        Returns:
            DONE when nothing is left to do, REQUEUE when an action was taken
            and another pass is needed to observe its effect.

        Raises:
            TransientError: If a store operation failed. The pass should be retried.
        """
        try:
            podset = self.store.get_podset(key.namespace, key.name)
        except NotFoundError:
            logger.debug(f"PodSet {key} not found, assuming it was deleted")
            return ReconcileResult.DONE

        pods = self.store.list_pods(podset.namespace, label_selector(podset.labels))
        available = available_pods(pods)

        status = compute_status(pods)
        if status != podset.status:
            logger.info(
                f"Updating status of PodSet {key}: "
                f"{status.available_replicas} available replica(s) {status.pod_names}"
            )
            self.store.update_status(podset, status)

        desired = podset.spec.replica_count
        action = decide(available, desired, self.select_victims)

        if isinstance(action, DeleteSet):
            self._delete_pods(podset, action)
            return ReconcileResult.REQUEUE

        if isinstance(action, CreateOne):
            logger.info(f"Scaling up PodSet {key}: {len(available)} available, {desired} required")
            self._create_pod(podset)
            return ReconcileResult.REQUEUE

        logger.debug(f"PodSet {key} has the desired {desired} replica(s)")
        return ReconcileResult.DONE

    def _delete_pods(self, podset: PodSet, action: DeleteSet) -> None:
        """Delete the selected pods, stopping at the first failure."""
        names = [pod.name for pod in action.pods]
        logger.info(f"Scaling down PodSet {podset.key}: deleting {len(names)} pod(s) {names}")

        deleted = []
        for pod in action.pods:
            try:
                self.store.delete_pod(pod)
            except TransientError as e:
                logger.error(f"Failed to delete pod {pod.namespace}/{pod.name}: {e}")
                self.store.record_failure(podset, creating=False, message=f"Failed to delete pod {pod.name}: {e}")
                if deleted:
                    self.store.record_scale_down(podset, deleted)
                raise
            deleted.append(pod.name)

        self.store.record_scale_down(podset, deleted)

    def _create_pod(self, podset: PodSet) -> None:
        """Create one pod owned by the PodSet."""
        pod = build_pod(podset, image=self.pod_image, command=self.pod_command)
        set_controller_reference(pod, podset)

        try:
            created = self.store.create_pod(pod)
        except TransientError as e:
            logger.error(f"Failed to create pod for PodSet {podset.key}: {e}")
            self.store.record_failure(podset, creating=True, message=f"Failed to create pod: {e}")
            raise

        logger.info(f"Created pod {created.namespace}/{created.name} for PodSet {podset.key}")
        self.store.record_scale_up(podset, created.name)

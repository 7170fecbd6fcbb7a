"""Dispatcher module for the PodSet operator.

This module feeds PodSet keys to the reconciler: it watches the subscribed
resources, periodically re-lists all PodSets, and runs a pool of workers that
honor the requeue and retry outcomes of each reconcile pass.
"""

import logging
import threading
from collections.abc import Sequence

from kubernetes import watch

from podset_operator.config import OperatorConfig
from podset_operator.errors import TransientError
from podset_operator.kubernetes.connection import KubernetesConnection
from podset_operator.kubernetes.store import ClusterStore
from podset_operator.podset.models import ReconcileKey
from podset_operator.podset.reconciler import PodSetReconciler, ReconcileResult
from podset_operator.watches import DEFAULT_SUBSCRIPTIONS, Subscription
from podset_operator.workqueue import WorkQueue

logger = logging.getLogger(__name__)

# Server-side timeout of a watch request, after which the watch is re-established
WATCH_TIMEOUT_SECONDS = 300
# Delay before re-establishing a watch that failed
WATCH_RETRY_DELAY = 5.0
# How long an idle worker blocks on the queue before checking for shutdown
WORKER_POLL_INTERVAL = 1.0


class Dispatcher:
    """Runs reconcile passes for PodSets, one worker per key at a time."""

    def __init__(
        self,
        config: OperatorConfig,
        store: ClusterStore,
        reconciler: PodSetReconciler,
        connection: KubernetesConnection | None = None,
        subscriptions: Sequence[Subscription] = DEFAULT_SUBSCRIPTIONS,
        queue: WorkQueue | None = None,
    ):
        """Initialize the dispatcher.

        Args:
            config: The operator configuration.
            store: The cluster store, used to list PodSets on resync.
            reconciler: The reconciler to run for each key.
            connection: The Kubernetes connection used by watches. Defaults to the store's.
            subscriptions: The resources to watch for reconcile triggers.
            queue: The work queue. Defaults to one using the configured backoff.
        """
        self.config = config
        self.store = store
        self.reconciler = reconciler
        self.connection = connection or store.connection
        self.subscriptions = list(subscriptions)
        self.queue = queue if queue is not None else WorkQueue(
            base_delay=config.backoff_base_delay,
            max_delay=config.backoff_max_delay,
        )
        self._stop = threading.Event()
        self._threads: list[threading.Thread] = []

    def resync(self) -> int:
        """Enqueue every PodSet.

        Returns:
            The number of PodSets enqueued. Zero when listing failed.
        """
        try:
            podsets = self.store.list_podsets(self.config.namespace)
        except TransientError as e:
            logger.warning(f"Resync failed, will retry at the next interval: {e}")
            return 0

        for podset in podsets:
            self.queue.add(podset.key)
        logger.debug(f"Resync enqueued {len(podsets)} PodSet(s)")
        return len(podsets)

    def process_next(self, timeout: float | None = None) -> bool:
        """Take one key from the queue and reconcile it.

        Args:
            timeout: Seconds to wait for a key.

        Returns:
            True if a key was processed, False on timeout or shutdown.
        """
        key = self.queue.get(timeout=timeout)
        if key is None:
            return False

        try:
            result = self.reconciler.reconcile(key)
        except TransientError as e:
            delay = self.queue.add_rate_limited(key)
            logger.warning(f"Reconcile of PodSet {key} failed, retrying in {delay:.1f}s: {e}")
        except Exception as e:
            delay = self.queue.add_rate_limited(key)
            logger.exception(f"Unexpected error reconciling PodSet {key}, retrying in {delay:.1f}s: {e}")
        else:
            self.queue.forget(key)
            if result is ReconcileResult.REQUEUE:
                self.queue.add_after(key, self.config.requeue_delay)
        finally:
            self.queue.done(key)

        return True

    def run_once(self, keys: Sequence[ReconcileKey] | None = None) -> int:
        """Reconcile PodSets until they converge, then return.

        Each PodSet gets at most max_passes passes. A transient failure ends
        the passes of that PodSet.

        Args:
            keys: The PodSets to reconcile. Defaults to every PodSet of the
                configured namespace.

        Returns:
            The number of PodSets that did not converge.
        """
        if not keys:
            keys = [podset.key for podset in self.store.list_podsets(self.config.namespace)]
        logger.info(f"Reconciling {len(keys)} PodSet(s) once")

        unconverged = 0
        for key in keys:
            if not self._converge(key):
                unconverged += 1

        logger.info(f"Reconciled {len(keys)} PodSet(s), {unconverged} did not converge")
        return unconverged

    def _converge(self, key: ReconcileKey) -> bool:
        """Run passes for one PodSet until it reports DONE."""
        for attempt in range(1, self.config.max_passes + 1):
            try:
                result = self.reconciler.reconcile(key)
            except TransientError as e:
                logger.error(f"Reconcile of PodSet {key} failed on pass {attempt}: {e}")
                return False
            if result is ReconcileResult.DONE:
                logger.debug(f"PodSet {key} converged after {attempt} pass(es)")
                return True
            if self._stop.wait(self.config.requeue_delay):
                return False

        logger.warning(f"PodSet {key} did not converge after {self.config.max_passes} passes")
        return False

    def _worker_loop(self) -> None:
        while not self._stop.is_set():
            try:
                self.process_next(timeout=WORKER_POLL_INTERVAL)
            except Exception as e:
                logger.exception(f"Worker {threading.current_thread().name} failed to process a key: {e}")

    def _resync_loop(self) -> None:
        while not self._stop.wait(self.config.resync_interval):
            logger.info("Running periodic resync")
            self.resync()

    def _watch_loop(self, subscription: Subscription) -> None:
        """Watch a subscribed resource and enqueue the keys its events map to.

        The watch is re-established when the server closes it or when it fails.
        """
        while not self._stop.is_set():
            func, kwargs = subscription.list_call(self.connection, self.config.namespace)
            w = watch.Watch()
            try:
                logger.debug(f"Starting watch on {subscription.name}")
                for event in w.stream(func, timeout_seconds=WATCH_TIMEOUT_SECONDS, **kwargs):
                    if self._stop.is_set():
                        break
                    obj = event.get("object")
                    if obj is None or event.get("type") in ("ERROR", "BOOKMARK"):
                        continue
                    for key in subscription.map_to_keys(obj):
                        self.queue.add(key)
            except Exception as e:
                logger.warning(
                    f"Watch on {subscription.name} closed ({e}), reconnecting in {WATCH_RETRY_DELAY}s"
                )
                self._stop.wait(WATCH_RETRY_DELAY)
            finally:
                w.stop()

    def _start_thread(self, name: str, target, *args) -> None:
        thread = threading.Thread(target=target, args=args, name=name, daemon=True)
        thread.start()
        self._threads.append(thread)

    def start(self) -> None:
        """Start the workers, the watches and the periodic resync in background threads."""
        logger.info(
            f"Starting dispatcher with {self.config.workers} worker(s), "
            f"resync every {self.config.resync_interval}s, "
            f"namespace={self.config.namespace or 'all'}"
        )
        self.resync()

        for i in range(self.config.workers):
            self._start_thread(f"worker-{i}", self._worker_loop)
        for subscription in self.subscriptions:
            self._start_thread(f"watch-{subscription.name}", self._watch_loop, subscription)
        self._start_thread("resync", self._resync_loop)

    def stop(self, timeout: float | None = 5.0) -> None:
        """Stop all background threads."""
        self._stop.set()
        self.queue.shut_down()
        for thread in self._threads:
            thread.join(timeout=timeout)
        self._threads.clear()
        logger.info("Dispatcher stopped")

    def run(self) -> None:
        """Run the dispatcher until interrupted."""
        self.start()
        try:
            while not self._stop.wait(WORKER_POLL_INTERVAL):
                pass
        except KeyboardInterrupt:
            logger.info("Dispatcher interrupted, shutting down")
        finally:
            self.stop()

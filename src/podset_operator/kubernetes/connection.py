"""Kubernetes connection management.

This module loads the cluster credentials and builds the API clients shared by
the store, the event recorder and the watches.
"""
import logging
import os
import socket

from kubernetes import client, config

logger = logging.getLogger(__name__)


class KubernetesConnection:
    """API clients of one Kubernetes cluster.

    Attributes:
        core_v1_api: Client for pods.
        custom_objects_api: Client for PodSet custom resources.
        events_v1_api: Client for events recorded on PodSets.
        host: URL of the API server.
        hostname: Name reported as the instance recording events.
    """

    def __init__(self):
        """Connect to the cluster the operator runs in, or to the current kubeconfig context.

        Raises:
            RuntimeError: If neither configuration can be loaded.
        """
        self._load_configuration()
        self.core_v1_api = client.CoreV1Api()
        self.custom_objects_api = client.CustomObjectsApi()
        self.events_v1_api = client.EventsV1Api()
        self.host = self.core_v1_api.api_client.configuration.host
        # The pod name when running in-cluster
        self.hostname = os.environ.get("HOSTNAME") or socket.gethostname()
        logger.debug(f"Connected to Kubernetes API at {self.host} as {self.hostname}")

    @staticmethod
    def _load_configuration() -> None:
        try:
            config.load_incluster_config()
            logger.info("Using in-cluster configuration")
            return
        except config.ConfigException:
            logger.debug("No in-cluster configuration, trying kubeconfig")

        try:
            config.load_kube_config()
            logger.info("Using kubeconfig configuration")
        except config.ConfigException as e:
            logger.error("Failed to load Kubernetes configuration: not running in a cluster and no usable kubeconfig")
            raise RuntimeError("Kubernetes configuration error: kubeconfig file is missing or invalid.") from e

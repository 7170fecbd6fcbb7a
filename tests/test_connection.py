"""Tests for the Kubernetes connection."""

import unittest
from unittest import mock

from kubernetes import config

from podset_operator.kubernetes.connection import KubernetesConnection


@mock.patch("podset_operator.kubernetes.connection.client")
@mock.patch("kubernetes.config.load_kube_config")
@mock.patch("kubernetes.config.load_incluster_config")
class TestKubernetesConnection(unittest.TestCase):
    """Test cases for the KubernetesConnection class."""

    def test_in_cluster_config(self, mock_incluster, mock_kube_config, mock_client):
        connection = KubernetesConnection()

        mock_incluster.assert_called_once()
        mock_kube_config.assert_not_called()
        self.assertIs(connection.core_v1_api, mock_client.CoreV1Api.return_value)
        self.assertIs(connection.custom_objects_api, mock_client.CustomObjectsApi.return_value)
        self.assertIs(connection.events_v1_api, mock_client.EventsV1Api.return_value)

    def test_hostname_from_environment(self, mock_incluster, mock_kube_config, mock_client):
        with mock.patch.dict("os.environ", {"HOSTNAME": "podset-operator-abc"}):
            connection = KubernetesConnection()

        self.assertEqual(connection.hostname, "podset-operator-abc")

    def test_falls_back_to_kubeconfig(self, mock_incluster, mock_kube_config, mock_client):
        mock_incluster.side_effect = config.ConfigException()

        KubernetesConnection()

        mock_kube_config.assert_called_once()

    def test_no_configuration(self, mock_incluster, mock_kube_config, mock_client):
        mock_incluster.side_effect = config.ConfigException()
        mock_kube_config.side_effect = config.ConfigException()

        with self.assertLogs("podset_operator.kubernetes.connection", level="ERROR"):
            with self.assertRaises(RuntimeError):
                KubernetesConnection()


if __name__ == "__main__":
    unittest.main()

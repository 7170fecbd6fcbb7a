"""Tests for the watch subscriptions."""

import unittest
from unittest import mock

from kubernetes import client

from podset_operator.kubernetes.connection import KubernetesConnection
from podset_operator.podset.models import ReconcileKey
from podset_operator.watches import (
    DEFAULT_SUBSCRIPTIONS,
    owned_pod_list_call,
    owner_keys,
    podset_keys,
    podset_list_call,
)


def pod_with_owners(*owner_references, namespace="default"):
    return client.V1Pod(
        metadata=client.V1ObjectMeta(name="web-pod1", namespace=namespace, owner_references=list(owner_references))
    )


def owner_reference(kind="PodSet", name="web", api_version="podset.example.com/v1alpha1", controller=True):
    return client.V1OwnerReference(
        api_version=api_version, kind=kind, name=name, uid=f"uid-{name}", controller=controller
    )


class TestListCalls(unittest.TestCase):
    """Test cases for the watched list calls."""

    def setUp(self):
        self.connection = mock.MagicMock(spec=KubernetesConnection)
        self.connection.custom_objects_api = mock.MagicMock()
        self.connection.core_v1_api = mock.MagicMock()

    def test_podset_list_call_namespaced(self):
        func, kwargs = podset_list_call(self.connection, "default")

        self.assertIs(func, self.connection.custom_objects_api.list_namespaced_custom_object)
        self.assertEqual(kwargs, {
            "group": "podset.example.com",
            "version": "v1alpha1",
            "plural": "podsets",
            "namespace": "default",
        })

    def test_podset_list_call_all_namespaces(self):
        func, kwargs = podset_list_call(self.connection, None)

        self.assertIs(func, self.connection.custom_objects_api.list_cluster_custom_object)
        self.assertNotIn("namespace", kwargs)

    def test_owned_pod_list_call(self):
        func, kwargs = owned_pod_list_call(self.connection, "default")

        self.assertIs(func, self.connection.core_v1_api.list_namespaced_pod)
        self.assertEqual(kwargs, {"label_selector": "version=v0.1", "namespace": "default"})

    def test_owned_pod_list_call_all_namespaces(self):
        func, kwargs = owned_pod_list_call(self.connection, None)

        self.assertIs(func, self.connection.core_v1_api.list_pod_for_all_namespaces)
        self.assertEqual(kwargs, {"label_selector": "version=v0.1"})

    def test_default_subscriptions(self):
        self.assertEqual([s.name for s in DEFAULT_SUBSCRIPTIONS], ["podsets", "owned-pods"])


class TestKeyMapping(unittest.TestCase):
    """Test cases for mapping watched objects to PodSet keys."""

    def test_podset_keys(self):
        obj = {"metadata": {"name": "web", "namespace": "default"}, "spec": {"replicaCount": 2}}
        self.assertEqual(podset_keys(obj), [ReconcileKey("default", "web")])

    def test_podset_keys_incomplete_metadata(self):
        self.assertEqual(podset_keys({}), [])
        self.assertEqual(podset_keys({"metadata": {"name": "web"}}), [])

    def test_owner_keys(self):
        """Test that a pod maps to the PodSet controlling it."""
        pod = pod_with_owners(owner_reference(), namespace="apps")
        self.assertEqual(owner_keys(pod), [ReconcileKey("apps", "web")])

    def test_owner_keys_without_owner(self):
        self.assertEqual(owner_keys(pod_with_owners()), [])
        pod = client.V1Pod(metadata=client.V1ObjectMeta(name="web-pod1", namespace="default"))
        self.assertEqual(owner_keys(pod), [])

    def test_owner_keys_ignores_other_controllers(self):
        pods = [
            pod_with_owners(owner_reference(kind="ReplicaSet", api_version="apps/v1")),
            pod_with_owners(owner_reference(api_version="other.example.com/v1")),
            pod_with_owners(owner_reference(controller=False)),
        ]
        for pod in pods:
            with self.subTest(owner=pod.metadata.owner_references[0]):
                self.assertEqual(owner_keys(pod), [])

    def test_owner_keys_without_api_version(self):
        """Test that an owner reference missing its apiVersion is ignored."""
        ref = mock.Mock(spec=client.V1OwnerReference, kind="PodSet", controller=True, api_version=None)
        ref.name = "web"

        self.assertEqual(owner_keys(pod_with_owners(ref)), [])

    def test_owner_keys_picks_podset_controller(self):
        pod = pod_with_owners(owner_reference(controller=False, name="other"), owner_reference())
        self.assertEqual(owner_keys(pod), [ReconcileKey("default", "web")])


if __name__ == "__main__":
    unittest.main()

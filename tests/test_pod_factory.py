"""Tests for the pod factory."""

import unittest

from kubernetes import client

from podset_operator.podset.models import PodSet, PodSetSpec, label_selector
from podset_operator.podset.pod_factory import build_pod, set_controller_reference


class TestBuildPod(unittest.TestCase):
    """Test cases for build_pod."""

    def setUp(self):
        self.podset = PodSet(name="web", namespace="team-a", uid="uid-1", spec=PodSetSpec(replica_count=3))

    def test_metadata(self):
        """Test that the pod is named after and labeled for its PodSet."""
        pod = build_pod(self.podset)

        self.assertIsNone(pod.metadata.name)
        self.assertEqual(pod.metadata.generate_name, "web-pod")
        self.assertEqual(pod.metadata.namespace, "team-a")
        self.assertEqual(pod.metadata.labels, {"app": "web", "version": "v0.1"})

    def test_labels_match_listing_selector(self):
        """Test that created pods are found by the selector used to list them."""
        pod = build_pod(self.podset)
        self.assertEqual(label_selector(pod.metadata.labels), label_selector(self.podset.labels))

    def test_container(self):
        """Test the default container."""
        pod = build_pod(self.podset)

        self.assertEqual(len(pod.spec.containers), 1)
        container = pod.spec.containers[0]
        self.assertEqual(container.name, "busybox")
        self.assertEqual(container.image, "busybox")
        self.assertEqual(container.command, ["sleep", "3600"])

    def test_custom_image_and_command(self):
        pod = build_pod(self.podset, image="alpine:3.19", command=["sleep", "60"])

        self.assertEqual(pod.spec.containers[0].image, "alpine:3.19")
        self.assertEqual(pod.spec.containers[0].command, ["sleep", "60"])

    def test_deterministic(self):
        """Test that two pods built for the same PodSet are identical."""
        self.assertEqual(build_pod(self.podset), build_pod(self.podset))

    def test_no_owner_reference(self):
        self.assertIsNone(build_pod(self.podset).metadata.owner_references)


class TestSetControllerReference(unittest.TestCase):
    """Test cases for set_controller_reference."""

    def setUp(self):
        self.podset = PodSet(name="web", namespace="team-a", uid="uid-1")

    def test_sets_controller_reference(self):
        pod = set_controller_reference(build_pod(self.podset), self.podset)

        self.assertEqual(len(pod.metadata.owner_references), 1)
        ref = pod.metadata.owner_references[0]
        self.assertEqual(ref.api_version, "podset.example.com/v1alpha1")
        self.assertEqual(ref.kind, "PodSet")
        self.assertEqual(ref.name, "web")
        self.assertEqual(ref.uid, "uid-1")
        self.assertTrue(ref.controller)
        self.assertTrue(ref.block_owner_deletion)

    def test_idempotent(self):
        pod = build_pod(self.podset)
        set_controller_reference(pod, self.podset)
        set_controller_reference(pod, self.podset)
        self.assertEqual(len(pod.metadata.owner_references), 1)

    def test_keeps_other_owners(self):
        pod = build_pod(self.podset)
        other = client.V1OwnerReference(api_version="v1", kind="ConfigMap", name="cfg", uid="uid-2")
        pod.metadata.owner_references = [other]

        set_controller_reference(pod, self.podset)

        self.assertEqual([ref.uid for ref in pod.metadata.owner_references], ["uid-2", "uid-1"])

    def test_rejects_other_controller(self):
        pod = build_pod(self.podset)
        pod.metadata.owner_references = [
            client.V1OwnerReference(api_version="apps/v1", kind="ReplicaSet", name="rs", uid="uid-3", controller=True)
        ]
        with self.assertRaises(ValueError):
            set_controller_reference(pod, self.podset)

    def test_requires_uid(self):
        podset = PodSet(name="web", namespace="team-a")
        with self.assertRaises(ValueError):
            set_controller_reference(build_pod(podset), podset)


if __name__ == "__main__":
    unittest.main()

"""Tests for the PodSet data model."""

import unittest
from datetime import UTC, datetime

from kubernetes import client

from podset_operator.podset.models import (
    ManagedPod,
    PodPhase,
    PodSet,
    PodSetStatus,
    ReconcileKey,
    label_selector,
    ownership_labels,
)


class TestReconcileKey(unittest.TestCase):
    """Test cases for ReconcileKey."""

    def test_str(self):
        self.assertEqual(str(ReconcileKey("default", "web")), "default/web")

    def test_parse(self):
        self.assertEqual(ReconcileKey.parse("default/web"), ReconcileKey("default", "web"))

    def test_parse_invalid(self):
        for value in ("web", "/web", "default/", "a/b/c", ""):
            with self.subTest(value=value):
                with self.assertRaises(ValueError):
                    ReconcileKey.parse(value)


class TestLabels(unittest.TestCase):
    """Test cases for the ownership labels."""

    def test_ownership_labels(self):
        self.assertEqual(ownership_labels("web"), {"app": "web", "version": "v0.1"})

    def test_label_selector(self):
        self.assertEqual(label_selector(ownership_labels("web")), "app=web,version=v0.1")


class TestPodPhase(unittest.TestCase):
    """Test cases for PodPhase."""

    def test_parse_known(self):
        self.assertEqual(PodPhase.parse("Running"), PodPhase.RUNNING)
        self.assertEqual(PodPhase.parse("Failed"), PodPhase.FAILED)

    def test_parse_unknown(self):
        self.assertEqual(PodPhase.parse(None), PodPhase.UNKNOWN)
        self.assertEqual(PodPhase.parse("Exploded"), PodPhase.UNKNOWN)


class TestPodSet(unittest.TestCase):
    """Test cases for PodSet parsing."""

    def test_from_dict(self):
        """Test parsing a complete custom object."""
        podset = PodSet.from_dict({
            "apiVersion": "podset.example.com/v1alpha1",
            "kind": "PodSet",
            "metadata": {"name": "web", "namespace": "default", "uid": "uid-1", "resourceVersion": "42"},
            "spec": {"replicaCount": 3},
            "status": {"podNames": ["web-pod1"], "availableReplicas": 1},
        })

        self.assertEqual(podset.key, ReconcileKey("default", "web"))
        self.assertEqual(podset.uid, "uid-1")
        self.assertEqual(podset.resource_version, "42")
        self.assertEqual(podset.spec.replica_count, 3)
        self.assertEqual(podset.status, PodSetStatus(pod_names=["web-pod1"], available_replicas=1))
        self.assertEqual(podset.labels, {"app": "web", "version": "v0.1"})

    def test_from_dict_without_status(self):
        """Test that a PodSet never reconciled has an empty status."""
        podset = PodSet.from_dict({
            "metadata": {"name": "web", "namespace": "default"},
            "spec": {"replicaCount": 2},
        })

        self.assertEqual(podset.status.pod_names, [])
        self.assertEqual(podset.status.available_replicas, 0)

    def test_from_dict_without_replica_count(self):
        """Test that a PodSet without replicaCount wants no pods."""
        podset = PodSet.from_dict({"metadata": {"name": "web", "namespace": "default"}, "spec": {}})
        self.assertEqual(podset.spec.replica_count, 0)

        podset = PodSet.from_dict({"metadata": {"name": "web", "namespace": "default"}})
        self.assertEqual(podset.spec.replica_count, 0)

    def test_status_to_dict(self):
        """Test the wire format of the status."""
        status = PodSetStatus(pod_names=["a", "b"], available_replicas=2)
        self.assertEqual(status.to_dict(), {"podNames": ["a", "b"], "availableReplicas": 2})


class TestManagedPod(unittest.TestCase):
    """Test cases for ManagedPod conversion."""

    def _pod(self, phase="Running", deletion_timestamp=None, owner_references=None, labels=None):
        return client.V1Pod(
            metadata=client.V1ObjectMeta(
                name="web-podabc",
                namespace="default",
                labels=labels,
                owner_references=owner_references,
                deletion_timestamp=deletion_timestamp,
                creation_timestamp=datetime(2024, 1, 1, tzinfo=UTC),
            ),
            status=client.V1PodStatus(phase=phase),
        )

    def test_from_v1_pod_with_owner_reference(self):
        owner = client.V1OwnerReference(
            api_version="podset.example.com/v1alpha1", kind="PodSet", name="web", uid="uid-1", controller=True
        )
        pod = ManagedPod.from_v1_pod(self._pod(owner_references=[owner]))

        self.assertEqual(pod.name, "web-podabc")
        self.assertEqual(pod.namespace, "default")
        self.assertEqual(pod.phase, PodPhase.RUNNING)
        self.assertEqual(pod.owner_name, "web")
        self.assertFalse(pod.is_terminating)
        self.assertEqual(pod.creation_timestamp, datetime(2024, 1, 1, tzinfo=UTC))

    def test_from_v1_pod_owner_from_label(self):
        pod = ManagedPod.from_v1_pod(self._pod(labels={"app": "web", "version": "v0.1"}))
        self.assertEqual(pod.owner_name, "web")

    def test_from_v1_pod_terminating(self):
        pod = ManagedPod.from_v1_pod(self._pod(deletion_timestamp=datetime(2024, 1, 2, tzinfo=UTC)))
        self.assertTrue(pod.is_terminating)

    def test_from_v1_pod_without_status(self):
        v1_pod = self._pod()
        v1_pod.status = None
        self.assertEqual(ManagedPod.from_v1_pod(v1_pod).phase, PodPhase.UNKNOWN)


if __name__ == "__main__":
    unittest.main()

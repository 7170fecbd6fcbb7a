"""Pod template for the pods owned by a PodSet."""

from kubernetes import client

from podset_operator.config import DEFAULT_POD_COMMAND, DEFAULT_POD_IMAGE
from podset_operator.podset.models import PODSET_API_VERSION, PODSET_KIND, PodSet

CONTAINER_NAME = "busybox"


def build_pod(
    podset: PodSet,
    image: str = DEFAULT_POD_IMAGE,
    command: list[str] | None = None,
) -> client.V1Pod:
    """Build a new pod for a PodSet.

    The pod name is generated by the API server from the PodSet name, and the
    pod carries the same ownership labels the reconciler lists pods with.

    Args:
        podset: The owning PodSet.
        image: Container image to run.
        command: Container command. Defaults to sleeping for an hour.

    Returns:
        The pod to create, without owner reference.
    """
    return client.V1Pod(
        api_version="v1",
        kind="Pod",
        metadata=client.V1ObjectMeta(
            generate_name=f"{podset.name}-pod",
            namespace=podset.namespace,
            labels=podset.labels,
        ),
        spec=client.V1PodSpec(
            containers=[
                client.V1Container(
                    name=CONTAINER_NAME,
                    image=image,
                    command=list(command or DEFAULT_POD_COMMAND),
                )
            ]
        ),
    )


def set_controller_reference(pod: client.V1Pod, podset: PodSet) -> client.V1Pod:
    """Make a PodSet the controlling owner of a pod.

    With this reference set, deleting the PodSet garbage-collects the pod.

    Args:
        pod: The pod to update in place.
        podset: The owning PodSet. Must have a UID.

    Returns:
        The same pod, for chaining.

    Raises:
        ValueError: If the PodSet has no UID or the pod is already controlled by another owner.
    """
    if not podset.uid:
        raise ValueError(f"{PODSET_KIND} {podset.namespace}/{podset.name} has no UID")

    owner_ref = client.V1OwnerReference(
        api_version=PODSET_API_VERSION,
        kind=PODSET_KIND,
        name=podset.name,
        uid=podset.uid,
        controller=True,
        block_owner_deletion=True,
    )

    refs = [ref for ref in pod.metadata.owner_references or [] if ref.uid != podset.uid]
    for ref in refs:
        if ref.controller:
            raise ValueError(
                f"Pod {pod.metadata.namespace}/{pod.metadata.name or pod.metadata.generate_name} "
                f"is already controlled by {ref.kind} {ref.name}"
            )
    refs.append(owner_ref)
    pod.metadata.owner_references = refs
    return pod

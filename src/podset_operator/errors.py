"""Error types raised by the PodSet operator.

Every failure talking to the cluster is considered transient: the dispatcher
retries the reconcile pass with its own backoff. There is no fatal category.
"""


class PodSetOperatorError(Exception):
    """Base class for all operator errors."""


class NotFoundError(PodSetOperatorError):
    """The requested resource does not exist (anymore)."""

    def __init__(self, kind: str, namespace: str, name: str):
        self.kind = kind
        self.namespace = namespace
        self.name = name
        super().__init__(f"{kind} {namespace}/{name} not found")


class TransientError(PodSetOperatorError):
    """A cluster store operation failed and the pass should be retried.

    Attributes:
        operation: Short name of the failed store operation (e.g. "list_pods").
    """

    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(f"{operation} failed: {message}")

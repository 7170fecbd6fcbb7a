"""Resources package for Kubernetes resource handlers.

This package contains specialized handlers for the resource types the operator uses.
"""

from podset_operator.kubernetes.resources.events import (
    create_scale_down_event,
    create_scale_up_event,
    create_scaling_failure_event,
)

__all__ = [
    "create_scale_up_event",
    "create_scale_down_event",
    "create_scaling_failure_event",
]

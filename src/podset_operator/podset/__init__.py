"""PodSet reconciliation logic.

This package contains the pure building blocks of a reconcile pass (pod
template, status computation, scaling decision) and the reconciler that
drives them against the cluster store.
"""

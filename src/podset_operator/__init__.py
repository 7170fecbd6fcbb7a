__version__ = "0.1.0"
__description__ = (
    "Kubernetes operator that keeps the number of running pods of a PodSet custom resource "
    "in line with its declared replica count"
)

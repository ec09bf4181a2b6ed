"""
GroupRemover Boundary Module

HashiCorp Boundary controller API access.

Components:
- client: Authenticate, read group version, remove member
- classifier: Map failed responses to retryable/fatal errors
"""

from groupremover.boundary.classifier import (
    Operation,
    classify_failure,
    raise_for_status,
    wrap_unexpected,
)
from groupremover.boundary.client import BoundaryClient

__all__ = [
    "BoundaryClient",
    "Operation",
    "classify_failure",
    "raise_for_status",
    "wrap_unexpected",
]

"""
GroupRemover Transport Module

HTTP client construction for the Boundary controller API.
"""

from groupremover.transport.http import build_http_client, truncate_body

__all__ = [
    "build_http_client",
    "truncate_body",
]

"""
Client layer - User-facing API.

This module provides:
- PylonClient: Main entry point (deployment lookup, KV, console streams)
- PylonClientBuilder: Fluent configuration
"""

from pylon_client.client.builder import PylonClientBuilder
from pylon_client.client.core import PylonClient

__all__ = [
    "PylonClient",
    "PylonClientBuilder",
]

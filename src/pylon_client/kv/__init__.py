"""
Key-value namespace access.
"""

from pylon_client.kv.namespace import UNSET, KVNamespace, paginate

__all__ = [
    "UNSET",
    "KVNamespace",
    "paginate",
]

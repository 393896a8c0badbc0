"""
Remote synchronization for graded results.

Results are queued locally and forwarded to a remote scoring log when the
network allows; problems can be fetched from the same endpoint.
"""

from src.sync.client import ProblemClient, RemoteError, post_json
from src.sync.queue import RemoteEndpoint, SyncQueue

__all__ = [
    "ProblemClient",
    "RemoteEndpoint",
    "RemoteError",
    "SyncQueue",
    "post_json",
]

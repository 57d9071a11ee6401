"""Submission collaborators (storage-backed and HTTP webhook)."""

from .lib import EventTracker, StorageSubmitter, Submitter, WebhookSubmitter

__all__ = [
    # Protocols
    "Submitter",
    "EventTracker",
    # Implementations
    "StorageSubmitter",
    "WebhookSubmitter",
]

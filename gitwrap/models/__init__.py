"""Models for gitwrap."""

from gitwrap.models.progress import CheckoutProgress, ProgressEvent

__all__ = [
    "CheckoutProgress",
    "ProgressEvent",
]

"""Progress parsing and reporting for git operations."""

from gitwrap.core.progress.adapter import AdapterState, ProgressAdapter
from gitwrap.core.progress.parser import (
    CheckoutProgressParser,
    Progress,
    ProgressParser,
    ProgressRecord,
    ProgressStep,
    StepProgressParser,
    Unknown,
)

__all__ = [
    "AdapterState",
    "CheckoutProgressParser",
    "Progress",
    "ProgressAdapter",
    "ProgressParser",
    "ProgressRecord",
    "ProgressStep",
    "StepProgressParser",
    "Unknown",
]

"""Reading progress log and page-update tracking."""

from .progress import (
    ProgressLog,
    ProgressResult,
    ProgressTracker,
)

__all__ = [
    "ProgressLog",
    "ProgressResult",
    "ProgressTracker",
]

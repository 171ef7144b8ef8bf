"""Reading item registry."""

from .registry import ItemRegistry, compute_pages_read

__all__ = [
    "ItemRegistry",
    "compute_pages_read",
]

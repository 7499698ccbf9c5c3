"""
Shared Utility Functions

Common helper functions used across multiple modules.
"""

import logging
from typing import Any, List, Optional, TypeVar

from app.errors import PreconditionFailed

logger = logging.getLogger(__name__)

T = TypeVar("T")


def chunk_list(items: List[T], chunk_size: int) -> List[List[T]]:
    """
    Split a list into consecutive fixed-size chunks, preserving order.

    The last chunk holds the remainder:
    - chunk_list([1, 2, 3, 4, 5], 2) → [[1, 2], [3, 4], [5]]
    - chunk_list([], 2) → []

    Args:
        items: Items to partition
        chunk_size: Maximum items per chunk (must be positive)

    Returns:
        List of chunks
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")

    return [items[i : i + chunk_size] for i in range(0, len(items), chunk_size)]


def split_emails(raw: Optional[str]) -> List[str]:
    """
    Split a comma-separated member list as typed into the UI.

    Entries are trimmed and blanks dropped:
    - "a@x.com, b@x.com,," → ["a@x.com", "b@x.com"]
    - None → []
    """
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


def require(value: Any, message: str) -> None:
    """
    Raise PreconditionFailed when a required value is missing or blank.

    Strings are blank when empty after stripping; collections when empty.
    """
    if value is None:
        raise PreconditionFailed(message)
    if isinstance(value, str) and not value.strip():
        raise PreconditionFailed(message)
    if isinstance(value, (list, tuple, set)) and len(value) == 0:
        raise PreconditionFailed(message)

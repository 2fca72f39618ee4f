"""
Pagination
MCP-style opaque cursors over list results.

A cursor is the base64 encoding of the JSON integer offset of the next page.
"""

import base64
import binascii
import json
from dataclasses import dataclass
from typing import Generic, List, Optional, Sequence, TypeVar

from mcp_forge.registry.errors import InvalidCursor

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 50


@dataclass
class Page(Generic[T]):
    items: List[T]
    next_cursor: Optional[str] = None


def encode_cursor(offset: int) -> str:
    return base64.b64encode(json.dumps(offset).encode("utf-8")).decode("ascii")


def decode_cursor(cursor: str) -> int:
    """
    Decode a cursor into a non-negative offset.

    Raises:
        InvalidCursor: Not base64, not JSON, or not a non-negative integer
    """
    try:
        offset = json.loads(base64.b64decode(cursor, validate=True).decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        raise InvalidCursor(cursor) from e

    # bool is an int subclass
    if not isinstance(offset, int) or isinstance(offset, bool) or offset < 0:
        raise InvalidCursor(cursor)
    return offset


def paginate_with_cursor(
    items: Sequence[T],
    cursor: Optional[str] = None,
    page_size: int = DEFAULT_PAGE_SIZE
) -> Page[T]:
    """
    Slice one page out of items.

    Args:
        items: Full result list
        cursor: Cursor from a previous page (None for the first page)
        page_size: Items per page

    Returns:
        Page with the items and the cursor of the next page, if any
    """
    if page_size < 1:
        raise ValueError(f"page_size must be positive, got {page_size}")

    start = decode_cursor(cursor) if cursor else 0
    end = start + page_size
    next_cursor = encode_cursor(end) if end < len(items) else None
    return Page(items=list(items[start:end]), next_cursor=next_cursor)

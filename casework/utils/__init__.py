"""Utility modules."""

from casework.utils.normalization import (
    blank_to_none,
    normalize_email,
    normalize_name,
    validate_phone,
)
from casework.utils.pagination import (
    CursorPage,
    decode_cursor,
    encode_cursor,
    paginate_by_created_at,
)

__all__ = [
    "blank_to_none",
    "normalize_email",
    "normalize_name",
    "validate_phone",
    "CursorPage",
    "decode_cursor",
    "encode_cursor",
    "paginate_by_created_at",
]

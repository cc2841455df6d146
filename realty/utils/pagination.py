"""
Pagination helpers for the owner's listing index.
"""

import math
import re
from typing import Optional

PAGE_TOKEN_PATTERN = re.compile(r"^[1-9][0-9]*$")


def parse_page_token(token: Optional[str]) -> Optional[int]:
    """
    Parse a 1-based page number from a query string value.

    Returns:
        The page number, or None when the token is missing, non-numeric or not positive
    """
    if token is None or not PAGE_TOKEN_PATTERN.fullmatch(token):
        return None
    return int(token)


def page_offset(page: int, page_size: int) -> int:
    return (page - 1) * page_size


def page_count(total: int, page_size: int) -> int:
    return math.ceil(total / page_size) if total > 0 else 0

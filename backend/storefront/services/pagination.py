import math
from typing import Tuple

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def page_bounds(page, limit) -> Tuple[int, int]:
    """Clamp page to >= 1 and limit to 1..MAX_PAGE_SIZE."""
    page = max(int(page or 1), 1)
    limit = min(max(int(limit or DEFAULT_PAGE_SIZE), 1), MAX_PAGE_SIZE)
    return page, limit


def page_result(items: list, total: int, page: int, limit: int) -> dict:
    return {
        "list": items,
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": math.ceil(total / limit) if total else 0,
    }

"""
Page/limit pagination used by list endpoints.
"""

import math

DEFAULT_LIMIT = 20
MAX_LIMIT = 100


def parse_page_params(params) -> tuple:
    """Read ?page=&limit= from a QueryDict, falling back to defaults on bad input."""
    try:
        page = int(params.get('page', 1))
    except (TypeError, ValueError):
        page = 1
    try:
        limit = int(params.get('limit', DEFAULT_LIMIT))
    except (TypeError, ValueError):
        limit = DEFAULT_LIMIT
    return max(page, 1), min(max(limit, 1), MAX_LIMIT)


def paginate(items, page: int = 1, limit: int = DEFAULT_LIMIT):
    """
    Slice a queryset or list.

    Returns:
        (page_items, meta) where meta has page, limit, total and totalPages
    """
    page = max(page, 1)
    limit = min(max(limit, 1), MAX_LIMIT)
    total = items.count() if hasattr(items, 'count') and not isinstance(items, list) else len(items)
    offset = (page - 1) * limit
    page_items = list(items[offset:offset + limit])
    return page_items, {
        'page': page,
        'limit': limit,
        'total': total,
        'totalPages': math.ceil(total / limit) if total else 0,
        'offset': offset,
    }

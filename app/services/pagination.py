# app/services/pagination.py
from app.core import config


def paginate(query, page: int = 1, limit: int = None):
    """Run an ordered query for one page.

    Returns a dict with `items`, `total`, `page`, `limit` and `has_more`.
    """
    limit = min(limit or config.DEFAULT_PAGE_SIZE, config.MAX_PAGE_SIZE)
    page = max(page, 1)
    skip = (page - 1) * limit

    total = query.order_by(None).count()
    items = query.offset(skip).limit(limit).all()
    return {
        "items": items,
        "total": total,
        "page": page,
        "limit": limit,
        "has_more": skip + len(items) < total,
    }

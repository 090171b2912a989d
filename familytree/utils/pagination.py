import math

from sqlalchemy.orm import Query


def paginate(query: Query, page: int, limit: int):
    """
    Returns (items, pagination_dict) for a 1-based page.
    """
    total = query.count()
    items = query.offset((page - 1) * limit).limit(limit).all()

    return items, {
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": math.ceil(total / limit) if limit else 0,
    }

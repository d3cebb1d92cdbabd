from typing import Any, Callable, Optional

from sqlalchemy import func
from sqlmodel import select


def paginate(
    *,
    session,
    query,
    page: int = 1,
    limit: int = 20,
    serialize: Optional[Callable[[Any], Any]] = None,
):
    page = max(page, 1)
    limit = limit if limit >= 1 else 20

    total = session.exec(
        select(func.count()).select_from(query.subquery())
    ).one()

    rows = session.exec(
        query.offset((page - 1) * limit).limit(limit)
    ).all()

    return {
        "total_items": total,
        "total_pages": (total + limit - 1) // limit,
        "current_page": page,
        "limit": limit,
        "results": [serialize(r) for r in rows] if serialize else rows,
    }

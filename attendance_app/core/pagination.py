"""
Pagination and response envelope helpers.

Every handler answers with `{success, data?, message?}`; paginated lists add
`pagination: {page, limit, totalCount, totalPages}`.
"""

import math
from typing import Any, Dict, List, Optional, Tuple

from fastapi import Query
from sqlalchemy.orm import Query as OrmQuery

DEFAULT_LIMIT = 50
MAX_LIMIT = 200


def pagination_meta(page: int, limit: int, total_count: int) -> Dict[str, int]:
    return {
        "page": page,
        "limit": limit,
        "totalCount": total_count,
        "totalPages": math.ceil(total_count / limit) if total_count else 0,
    }


class PaginationParams:
    """Query dependency for `?page=&limit=`"""

    def __init__(
        self,
        page: int = Query(1, ge=1),
        limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    ):
        self.page = page
        self.limit = limit

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def paginate(self, query: OrmQuery) -> Tuple[List[Any], Dict[str, int]]:
        """Run `query` for one page; the count uses the same filters"""
        total_count = query.order_by(None).count()
        items = query.offset(self.offset).limit(self.limit).all()
        return items, pagination_meta(self.page, self.limit, total_count)


def ok(data: Any = None, message: Optional[str] = None, **extra: Any) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    if message:
        body["message"] = message
    body.update(extra)
    return body

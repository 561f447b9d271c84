import math
from dataclasses import dataclass
from typing import Any, Dict, Optional

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10


@dataclass(frozen=True)
class PageRequest:
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @classmethod
    def from_query(cls, page: Optional[int] = None, limit: Optional[int] = None) -> "PageRequest":
        page = DEFAULT_PAGE if page is None else page
        limit = DEFAULT_LIMIT if limit is None else limit
        return cls(page=max(1, int(page)), limit=max(1, int(limit)))

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


def page_meta(request: PageRequest, total: int) -> Dict[str, Any]:
    return {
        "page": request.page,
        "limit": request.limit,
        "total": total,
        "totalPages": math.ceil(total / request.limit),
    }

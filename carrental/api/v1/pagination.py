"""
Page/offset helpers shared by listing endpoints.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from fastapi import Query

from carrental.core.config import settings


@dataclass(frozen=True)
class PageParams:
    page: int = 1
    page_size: int = settings.DEFAULT_PAGE_SIZE

    @property
    def offset(self) -> int:
        return get_offset(self.page, self.page_size)


def get_offset(page: int, page_size: int) -> int:
    return (page - 1) * page_size


def build_pagination(page: int, page_size: int, count: int) -> dict[str, int]:
    """Summary block returned under ``meta.pagination``."""
    return {
        "page": page,
        "pageCount": math.ceil(count / page_size),
        "pageSize": page_size,
        "count": count,
    }


def page_params(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(
        default=settings.DEFAULT_PAGE_SIZE, alias="pageSize", ge=1, le=settings.MAX_PAGE_SIZE
    ),
) -> PageParams:
    """FastAPI dependency reading ``?page=&pageSize=``."""
    return PageParams(page=page, page_size=page_size)

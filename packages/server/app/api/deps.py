"""
Shared FastAPI dependencies for the v1 routers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Query

from app.core.config import get_settings

settings = get_settings()


@dataclass
class Page:
    page: int
    per_page: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page


def pagination(
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(None, ge=1, le=settings.max_page_size),
) -> Page:
    return Page(page=page, per_page=per_page or settings.default_page_size)

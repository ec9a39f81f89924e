from dataclasses import dataclass, field
from math import ceil
from typing import Generic, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from ..core.constants import MAX_PAGE_SIZE
from ..core.errors import BadRequestError

T = TypeVar("T")

SORT_ORDERS = ("asc", "desc")


@dataclass(slots=True)
class Page(Generic[T]):
    items: list[T]
    total: int
    page: int
    limit: int
    extra: dict = field(default_factory=dict)

    @property
    def total_pages(self) -> int:
        return ceil(self.total / self.limit) if self.limit else 0


def check_page(page: int, limit: int) -> None:
    if page < 1:
        raise BadRequestError("page must be at least 1")
    if limit < 1 or limit > MAX_PAGE_SIZE:
        raise BadRequestError(f"limit must be between 1 and {MAX_PAGE_SIZE}")


def order_by(column, order: str):
    if order not in SORT_ORDERS:
        raise BadRequestError("order must be 'asc' or 'desc'")
    return column.asc() if order == "asc" else column.desc()


def paginate(db: Session, stmt: Select, page: int, limit: int) -> Page:
    check_page(page, limit)
    total = db.scalar(select(func.count()).select_from(stmt.order_by(None).subquery()))
    items = list(db.execute(stmt.offset((page - 1) * limit).limit(limit)).scalars().all())
    return Page(items=items, total=int(total or 0), page=page, limit=limit)

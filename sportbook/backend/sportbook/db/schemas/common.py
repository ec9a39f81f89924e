from pydantic import BaseModel

from ...services.pagination import Page


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int

    @classmethod
    def from_page(cls, page: Page) -> "Pagination":
        return cls(total=page.total, page=page.page, limit=page.limit, total_pages=page.total_pages)

from pydantic import BaseModel


class PaginationOut(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int

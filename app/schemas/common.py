"""Response envelope shared by every endpoint."""

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Pagination(BaseModel):
    page: int
    page_size: int
    total: int
    total_pages: int


class ApiResponse(BaseModel, Generic[T]):
    """``success`` plus either ``data`` (and optional ``message``) or ``error``."""

    success: bool = True
    data: T | None = None
    error: str | None = None
    message: str | None = None


class PaginatedResponse(ApiResponse[T], Generic[T]):
    pagination: Pagination | None = None

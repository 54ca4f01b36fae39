# app/api/v1/envelope.py
"""
Every v1 response is wrapped as::

    {"status": "ok" | "error", "data": ..., "message": ..., "errors": [{"code", "message"}]}

List endpoints put a ``Page`` in ``data``.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ErrorDetail(BaseModel):
    code: str
    message: str


class ApiResponse(BaseModel, Generic[T]):
    status: str = "ok"
    data: T | None = None
    message: str | None = None
    errors: list[ErrorDetail] | None = None


class Page(BaseModel, Generic[T]):
    items: list[T]
    total: int
    limit: int
    offset: int
    has_more: bool


class PaginationParams(BaseModel):
    """``?limit=&offset=`` for list endpoints (use as Depends)."""

    limit: int = Field(default=50, ge=1, le=200)
    offset: int = Field(default=0, ge=0)

    def page(self, items: list) -> Page:
        end = self.offset + self.limit
        return Page(
            items=items[self.offset:end],
            total=len(items),
            limit=self.limit,
            offset=self.offset,
            has_more=end < len(items),
        )


def ok(data: Any = None, message: str | None = None) -> dict:
    return ApiResponse(data=data, message=message).model_dump()


def error(message: str, errors: list[dict[str, Any]] | None = None) -> dict:
    details = [ErrorDetail(**e) for e in errors] if errors else None
    return ApiResponse(status="error", message=message, errors=details).model_dump()


def paginated(items: list, params: PaginationParams) -> dict:
    return ok(data=params.page(items))

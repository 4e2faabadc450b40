"""Response envelopes shared by every router: ``{success, data, ...}``."""
from typing import Generic, Optional, TypeVar
from pydantic import BaseModel

T = TypeVar("T")


class DataResponse(BaseModel, Generic[T]):
    success: bool = True
    message: Optional[str] = None
    data: T


class ListResponse(BaseModel, Generic[T]):
    success: bool = True
    count: int
    data: list[T]


class PageResponse(BaseModel, Generic[T]):
    success: bool = True
    count: int
    total: int
    total_pages: int
    current_page: int
    data: list[T]


class MessageResponse(BaseModel):
    success: bool = True
    message: str

"""Common Pydantic schemas shared across the API."""

from datetime import datetime
from typing import Generic, TypeVar, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.config import settings
from database.models import AttachmentType


T = TypeVar("T")


class PaginationParams(BaseModel):
    """Pagination query parameters."""

    page: int = Field(default=1, ge=1, description="Page number (1-indexed)")
    page_size: int = Field(
        default=settings.default_page_size, ge=1, description="Items per page"
    )

    @field_validator("page_size")
    @classmethod
    def validate_page_size(cls, v: int) -> int:
        """Ensure page_size is within the configured bound."""
        if v > settings.max_page_size:
            raise ValueError(f"Page size cannot exceed {settings.max_page_size}")
        return v

    @property
    def offset(self) -> int:
        """Calculate offset from page and page_size."""
        return (self.page - 1) * self.page_size


class PaginatedResponse(BaseModel, Generic[T]):
    """Paginated response wrapper."""

    items: list[T] = Field(description="List of items for this page")
    total: int = Field(ge=0, description="Total number of items across all pages")
    page: int = Field(ge=1, description="Current page number")
    page_size: int = Field(ge=1, description="Items per page")
    total_pages: int = Field(ge=0, description="Total number of pages")
    has_next: bool = Field(description="Whether a later page exists")
    has_prev: bool = Field(description="Whether an earlier page exists")

    @classmethod
    def create(
        cls,
        items: list[T],
        total: int,
        pagination: PaginationParams,
    ) -> "PaginatedResponse[T]":
        """Create a paginated response."""
        total_pages = (total + pagination.page_size - 1) // pagination.page_size
        return cls(
            items=items,
            total=total,
            page=pagination.page,
            page_size=pagination.page_size,
            total_pages=total_pages,
            has_next=pagination.page < total_pages,
            has_prev=pagination.page > 1,
        )


class APIResponse(BaseModel, Generic[T]):
    """Success envelope returned by every route."""

    success: bool = True
    data: Optional[T] = None
    message: Optional[str] = None


class MessageResponse(BaseModel):
    """Envelope for operations that return no entity (deletes)."""

    success: bool = True
    message: str


class AttachmentCreate(BaseModel):
    """Reference to a file already stored by the upload service."""

    url: str = Field(..., min_length=1, max_length=1000)
    filename: str = Field(..., min_length=1, max_length=255)
    file_type: AttachmentType = AttachmentType.OTHER
    mime_type: Optional[str] = Field(None, max_length=100)

    @field_validator("url", "filename", mode="before")
    @classmethod
    def strip_whitespace(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v


class AttachmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    url: str
    filename: str
    file_type: AttachmentType
    mime_type: Optional[str] = None
    created_at: datetime

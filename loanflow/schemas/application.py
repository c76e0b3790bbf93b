from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from loanflow.models.enums import ApplicationStatus, Role


class DocumentCreate(BaseModel):
    file_name: str = Field(..., min_length=1, max_length=255)
    content_type: str | None = Field(None, max_length=100)
    storage_path: str | None = Field(None, max_length=1024)


class ApplicationCreate(BaseModel):
    # Presence is enforced by the service so a missing id is a 400, not a schema error.
    applicant_id: UUID | None = None
    product_id: UUID | None = None

    documents: list[DocumentCreate] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)


class StatusChange(BaseModel):
    status: str | None = None


class DocumentRead(BaseModel):
    id: UUID
    file_name: str
    content_type: str | None
    storage_path: str | None

    class Config:
        from_attributes = True


class ApplicationRead(BaseModel):
    id: UUID
    applicant_id: UUID
    product_id: UUID
    status: ApplicationStatus

    created_at: datetime
    updated_at: datetime | None = None

    documents: list[DocumentRead] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)

    @field_validator("tags", mode="before")
    @classmethod
    def _tag_names(cls, value: Any) -> Any:
        # ORM rows carry ApplicationTag links; the API exposes names only.
        if isinstance(value, list):
            return [getattr(t, "name", t) for t in value]
        return value

    class Config:
        from_attributes = True


class ApplicationListResponse(BaseModel):
    items: list[ApplicationRead]
    total: int
    page: int
    page_size: int


class ApplicationCursorPage(BaseModel):
    items: list[ApplicationRead]
    next_cursor: str | None = None


class ApplicationHistoryRead(BaseModel):
    id: UUID
    application_id: UUID
    old_status: ApplicationStatus | None
    new_status: ApplicationStatus
    changed_by_role: Role
    changed_at: datetime

    class Config:
        from_attributes = True

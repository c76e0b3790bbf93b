from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class TagRead(BaseModel):
    id: UUID
    name: str
    created_at: datetime | None = None

    class Config:
        from_attributes = True

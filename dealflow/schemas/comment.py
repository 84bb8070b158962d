"""Comment Pydantic schemas."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CommentCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    company_id: uuid.UUID
    content: str = Field(..., min_length=1)
    author: str | None = Field(None, max_length=150)


class CommentRow(BaseModel):
    """Single comment on a company, newest first when listed."""

    id: str
    company_id: str
    content: str
    author: str | None = None
    created_time: datetime

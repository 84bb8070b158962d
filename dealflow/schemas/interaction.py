"""Interaction Pydantic schemas."""

from __future__ import annotations

import datetime as dt
import uuid

from pydantic import BaseModel, ConfigDict

from dealflow.schemas.vocabulary import InteractionType


class InteractionCreate(BaseModel):
    """A call, email or meeting to log against a company."""

    model_config = ConfigDict(str_strip_whitespace=True)

    company_id: uuid.UUID
    date: dt.date
    type: InteractionType
    notes: str | None = None


class InteractionUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    date: dt.date | None = None
    type: InteractionType | None = None
    notes: str | None = None


class InteractionRow(BaseModel):
    """Single logged interaction."""

    id: str
    company_id: str
    date: dt.date
    type: InteractionType
    notes: str | None = None
    created_time: dt.datetime

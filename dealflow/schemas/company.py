"""Company-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator

from dealflow.schemas.vocabulary import SECTORS, ApprovalStatus, CompanyRating, CompanyStatus


class CompanyRecord(BaseModel):
    """Canonical in-memory company, as held in a snapshot.

    Instances are frozen: the query and aggregation engines only ever read
    them and build new result structures.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = Field(..., min_length=1)
    sector: str | None = None
    status: CompanyStatus = CompanyStatus.CONTACTED
    rating: CompanyRating | None = None
    approval_status: ApprovalStatus | None = None
    estimated_revenue: float | None = Field(None, ge=0)
    location: str | None = None
    website: str | None = None
    notes: str | None = None
    created_time: datetime

    @field_validator("created_time")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        # SQLite hands back naive timestamps; the store always writes UTC.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def effective_rating(self) -> CompanyRating:
        return self.rating or CompanyRating.NOT_RATED

    @property
    def effective_approval(self) -> ApprovalStatus:
        return self.approval_status or ApprovalStatus.UNDER_REVIEW


def _check_sector(value: str | None) -> str | None:
    if value is None or value == "":
        return None
    if value not in SECTORS:
        raise ValueError(f"sector must be one of {list(SECTORS)}")
    return value


class CompanyCreate(BaseModel):
    """Payload accepted when adding a company to the pipeline."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255)
    sector: str | None = None
    status: CompanyStatus = CompanyStatus.CONTACTED
    rating: CompanyRating | None = None
    approval_status: ApprovalStatus | None = None
    estimated_revenue: float | None = Field(None, ge=0)
    location: str | None = None
    website: str | None = None
    notes: str | None = None

    @field_validator("sector")
    @classmethod
    def known_sector(cls, value: str | None) -> str | None:
        return _check_sector(value)


class CompanyUpdate(BaseModel):
    """Partial update – only fields explicitly supplied are written."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str | None = Field(None, min_length=1, max_length=255)
    sector: str | None = None
    status: CompanyStatus | None = None
    rating: CompanyRating | None = None
    approval_status: ApprovalStatus | None = None
    estimated_revenue: float | None = Field(None, ge=0)
    location: str | None = None
    website: str | None = None
    notes: str | None = None

    @field_validator("sector")
    @classmethod
    def known_sector(cls, value: str | None) -> str | None:
        return _check_sector(value)

    @field_validator("name", "status")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("field cannot be cleared")
        return value

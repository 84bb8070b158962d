"""Facet constraints for the company list and the dashboard aggregate."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Annotated

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    field_validator,
)

# Query-string keys accepted for each facet (camelCase kept for URL compatibility).
_FACET_KEYS: dict[str, tuple[str, ...]] = {
    "status": ("status",),
    "sector": ("sector",),
    "rating": ("rating",),
    "approval_status": ("approval_status", "approvalStatus"),
    "search": ("search",),
}


class FacetConstraints(BaseModel):
    """Active filters for the company list.

    Each facet holds at most one value; ``None`` means "no constraint".
    Blank strings are normalised to ``None`` so an emptied search box or a
    cleared select behaves like an absent query parameter.
    """

    model_config = ConfigDict(frozen=True)

    status: str | None = None
    sector: str | None = None
    rating: str | None = None
    approval_status: str | None = None
    search: str | None = None

    @field_validator("status", "sector", "rating", "approval_status", "search", mode="before")
    @classmethod
    def blank_is_unset(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @classmethod
    def from_query(cls, params: Mapping[str, str | None]) -> FacetConstraints:
        """Build constraints from query-string style parameters."""
        values: dict[str, str | None] = {}
        for field, keys in _FACET_KEYS.items():
            for key in keys:
                value = params.get(key)
                if value is not None and str(value).strip():
                    values[field] = value
                    break
        return cls(**values)

    def is_empty(self) -> bool:
        return all(
            v is None
            for v in (self.status, self.sector, self.rating, self.approval_status, self.search)
        )


# Read-only once validated; dumps back to a plain dict.
CountMap = Annotated[
    Mapping[str, int],
    AfterValidator(lambda counts: MappingProxyType(dict(counts))),
    PlainSerializer(lambda counts: dict(counts), return_type=dict[str, int]),
]


class DashboardStats(BaseModel):
    """Aggregate summary of a whole company snapshot.

    Frozen, and the count maps are read-only views.
    """

    model_config = ConfigDict(frozen=True)

    total: int = 0
    status_counts: CountMap = Field(default_factory=lambda: MappingProxyType({}))
    sector_counts: CountMap = Field(default_factory=lambda: MappingProxyType({}))
    rating_counts: CountMap = Field(default_factory=lambda: MappingProxyType({}))
    approval_counts: CountMap = Field(default_factory=lambda: MappingProxyType({}))
    top_sector: str | None = None
    top_rated_count: int = 0
    approval_rate: int = Field(0, ge=0, le=100, description="Approved share, whole percent")
    recent_activity_count: int = 0

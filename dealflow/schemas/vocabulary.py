"""Enumerated vocabularies shared by the pipeline records."""

from __future__ import annotations

from enum import Enum


class CompanyStatus(str, Enum):
    """Pipeline stage, in pipeline order."""

    CONTACTED = "Contacted"
    IN_ANALYSIS = "In Analysis"
    LOI_SENT = "LOI Sent"
    DUE_DILIGENCE = "Due Diligence"
    CLOSED = "Closed"
    ARCHIVED = "Archived"


class CompanyRating(str, Enum):
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    NOT_RATED = "Not Rated"


class ApprovalStatus(str, Enum):
    APPROVED = "Approved"
    NOT_APPROVED = "Not Approved"
    UNDER_REVIEW = "Under Review"


class InteractionType(str, Enum):
    CALL = "Call"
    EMAIL = "Email"
    MEETING = "Meeting"
    OTHER = "Other"


SECTORS: tuple[str, ...] = (
    "Technology",
    "Manufacturing",
    "Healthcare",
    "Financial Services",
    "Consumer Goods",
    "Retail",
    "Transportation",
    "Energy",
    "Education",
    "Real Estate",
    "Other",
)

RATING_LABELS: dict[str, str] = {
    "A": "A - Excellent",
    "B": "B - Good",
    "C": "C - Average",
    "D": "D - Poor",
    "Not Rated": "Not Rated",
}

# Ratings used for the "top rated" dashboard card.
TOP_RATINGS: tuple[CompanyRating, ...] = (CompanyRating.A, CompanyRating.B)


def vocabulary() -> dict[str, list[str]]:
    """Every enumerated vocabulary as plain strings (for clients building filters)."""
    return {
        "statuses": [s.value for s in CompanyStatus],
        "sectors": list(SECTORS),
        "ratings": [r.value for r in CompanyRating],
        "approval_statuses": [a.value for a in ApprovalStatus],
        "interaction_types": [t.value for t in InteractionType],
    }

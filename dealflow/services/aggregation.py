"""Dashboard aggregation over a full company snapshot (filters never apply)."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta, timezone

from dealflow.config import settings
from dealflow.schemas.company import CompanyRecord
from dealflow.schemas.query import DashboardStats
from dealflow.schemas.vocabulary import TOP_RATINGS, ApprovalStatus, CompanyStatus
from dealflow.services.metrics import approval_rate, top_key, within_window


def aggregate_companies(
    snapshot: Iterable[CompanyRecord],
    now: datetime | None = None,
    recent_days: int | None = None,
) -> DashboardStats:
    """Count every company once per dimension and derive the dashboard metrics.

    Status counts always carry all six stages.  Sector, rating and approval
    counts only carry the keys actually observed; absent ratings count as
    "Not Rated" and absent approvals as "Under Review".  The derived figures
    are read off the count maps, so the snapshot is scanned exactly once.

    Args:
        snapshot: Companies to summarise.  An empty snapshot yields a
            zero-valued result.
        now: Reference instant for the recent-activity window.  Defaults to
            the wall clock at call time.
        recent_days: Window length; defaults to ``settings.recent_activity_days``.
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    window = timedelta(days=settings.recent_activity_days if recent_days is None else recent_days)

    status_counts: dict[str, int] = {s.value: 0 for s in CompanyStatus}
    sector_counts: dict[str, int] = {}
    rating_counts: dict[str, int] = {}
    approval_counts: dict[str, int] = {}
    total = 0
    recent = 0

    for company in snapshot:
        total += 1
        status_counts[company.status.value] += 1
        if company.sector:
            sector_counts[company.sector] = sector_counts.get(company.sector, 0) + 1
        rating = company.effective_rating.value
        rating_counts[rating] = rating_counts.get(rating, 0) + 1
        approval = company.effective_approval.value
        approval_counts[approval] = approval_counts.get(approval, 0) + 1
        if within_window(company.created_time, now, window):
            recent += 1

    return DashboardStats(
        total=total,
        status_counts=status_counts,
        sector_counts=sector_counts,
        rating_counts=rating_counts,
        approval_counts=approval_counts,
        top_sector=top_key(sector_counts),
        top_rated_count=sum(rating_counts.get(r.value, 0) for r in TOP_RATINGS),
        approval_rate=approval_rate(
            approval_counts.get(ApprovalStatus.APPROVED.value, 0),
            approval_counts.get(ApprovalStatus.NOT_APPROVED.value, 0),
            approval_counts.get(ApprovalStatus.UNDER_REVIEW.value, 0),
        ),
        recent_activity_count=recent,
    )


def pipeline_counts(stats: DashboardStats) -> list[dict]:
    """Status counts in pipeline order, without archived deals (pipeline chart rows)."""
    return [
        {"status": s.value, "count": stats.status_counts.get(s.value, 0)}
        for s in CompanyStatus
        if s is not CompanyStatus.ARCHIVED
    ]

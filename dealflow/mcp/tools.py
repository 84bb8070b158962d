"""MCP tool handlers – the bridge between MCP protocol and service layer.

Every handler returns a ``ToolResponse`` dict.  User-facing problems (bad
input, unknown ids, an unreachable store) are reported here, after the
service or engine call returns; the engines themselves never notify.
"""

from __future__ import annotations

import logging
import time

from pydantic import ValidationError

from dealflow.db import async_session_factory
from dealflow.middleware.rate_limit import rate_limiter, TOOL_RATE_LIMITS
from dealflow.schemas.comment import CommentCreate
from dealflow.schemas.common import ErrorDetail, Meta, ToolResponse
from dealflow.schemas.company import CompanyCreate, CompanyUpdate
from dealflow.schemas.interaction import InteractionCreate, InteractionUpdate
from dealflow.schemas.query import FacetConstraints
from dealflow.services import comment_service, company_service, interaction_service
from dealflow.services.aggregation import aggregate_companies, pipeline_counts
from dealflow.services.query_engine import filter_companies, rank_companies, recent_companies
from dealflow.services.snapshot import snapshot_provider

logger = logging.getLogger("dealflow.tools")

MAX_LIST_LIMIT = 50

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _elapsed(t0: float) -> float:
    return round((time.perf_counter() - t0) * 1000, 2)


def _not_found(tool: str, kind: str, record_id: str, elapsed: float) -> dict:
    return ToolResponse(
        tool=tool,
        ok=False,
        data=None,
        error=ErrorDetail(
            error_code="NOT_FOUND",
            message=f"No {kind} found with id '{record_id}'",
            hint=(
                "Use list_companies to find valid company ids."
                if kind == "company"
                else f"List the company's {kind}s to find valid ids."
            ),
        ),
        meta=Meta(execution_ms=elapsed, row_count=0),
    ).model_dump()


def _error_response(
    tool: str, code: str, message: str, elapsed: float, hint: str | None = None
) -> dict:
    return ToolResponse(
        tool=tool,
        ok=False,
        data=None,
        error=ErrorDetail(error_code=code, message=message, hint=hint),
        meta=Meta(execution_ms=elapsed, row_count=0),
    ).model_dump()


def _invalid_input(tool: str, exc: ValidationError, elapsed: float) -> dict:
    problems = [
        f"{'.'.join(str(p) for p in err['loc']) or 'input'}: {err['msg']}" for err in exc.errors()
    ]
    return _error_response(tool, "INVALID_INPUT", "; ".join(problems), elapsed)


def _malformed(tool: str, exc: company_service.MalformedRecordError, elapsed: float) -> dict:
    return _error_response(
        tool,
        "MALFORMED_RECORD",
        str(exc),
        elapsed,
        hint="Fix the stored row with update_company using vocabulary values.",
    )


def _ok(
    tool: str,
    data,
    elapsed: float,
    row_count: int | None = None,
    warnings: list[str] | None = None,
) -> dict:
    return ToolResponse(
        tool=tool,
        ok=True,
        data=data,
        error=None,
        warnings=warnings or [],
        meta=Meta(execution_ms=elapsed, row_count=row_count),
    ).model_dump()


def _snapshot_warnings(error: str | None) -> list[str]:
    if error is None:
        return []
    return [f"Company data could not be loaded; showing empty results. ({error})"]


def _parse_limit(arguments: dict, default: int) -> int:
    """Read ``limit`` as an int clamped to 1..MAX_LIST_LIMIT.

    Raises:
        ValueError: the value is not an integer.
    """
    limit = int(arguments.get("limit", default))
    return max(1, min(limit, MAX_LIST_LIMIT))


def _required_id(arguments: dict, key: str) -> str | None:
    value = arguments.get(key)
    if value is None or not str(value).strip():
        return None
    return str(value).strip()


async def _check_rate_limit(tool_name: str, t0: float) -> dict | None:
    """Check rate limit for a tool.  Returns an error dict if blocked, else None."""
    limits = TOOL_RATE_LIMITS.get(tool_name, {})
    allowed, error_msg = await rate_limiter.check_rate_limit(
        tool_name,
        max_requests=limits.get("max_requests"),
        window_seconds=limits.get("window_seconds"),
    )
    if not allowed:
        return _error_response(
            tool_name,
            "RATE_LIMIT_EXCEEDED",
            error_msg or "Rate limit exceeded",
            _elapsed(t0),
            hint="Wait before retrying.",
        )
    return None


# ---------------------------------------------------------------------------
# Company list & dashboard (snapshot engines)
# ---------------------------------------------------------------------------


async def handle_list_companies(arguments: dict) -> dict:
    """Filtered, name-sorted company list.

    Args:
        arguments: {"status": str, "sector": str, "rating": str,
                    "approval_status": str, "search": str} – all optional;
                    empty strings mean "no constraint".
    """
    tool = "list_companies"
    t0 = time.perf_counter()

    rate_error = await _check_rate_limit(tool, t0)
    if rate_error:
        return rate_error

    try:
        constraints = FacetConstraints.from_query(arguments)
    except ValidationError as exc:
        return _invalid_input(tool, exc, _elapsed(t0))

    snapshot, fetch_error = await snapshot_provider.snapshot_or_empty()
    companies = filter_companies(snapshot, constraints)

    elapsed = _elapsed(t0)
    logger.info(
        "list_companies filters=%s results=%d/%d ms=%.1f",
        constraints.model_dump(exclude_none=True),
        len(companies),
        len(snapshot),
        elapsed,
    )
    return _ok(
        tool,
        {
            "companies": [c.model_dump(mode="json") for c in companies],
            "total": len(companies),
            "filtered": not constraints.is_empty(),
        },
        elapsed,
        row_count=len(companies),
        warnings=_snapshot_warnings(fetch_error),
    )


async def handle_get_dashboard_stats(arguments: dict) -> dict:
    """Aggregate counts and derived metrics over every company (filters never apply)."""
    tool = "get_dashboard_stats"
    t0 = time.perf_counter()

    rate_error = await _check_rate_limit(tool, t0)
    if rate_error:
        return rate_error

    snapshot, fetch_error = await snapshot_provider.snapshot_or_empty()
    stats = aggregate_companies(snapshot)

    data = stats.model_dump()
    data["pipeline"] = pipeline_counts(stats)

    elapsed = _elapsed(t0)
    logger.info("get_dashboard_stats total=%d ms=%.1f", stats.total, elapsed)
    return _ok(tool, data, elapsed, row_count=stats.total, warnings=_snapshot_warnings(fetch_error))


async def handle_get_recent_companies(arguments: dict) -> dict:
    """Most recently added companies.

    Args:
        arguments: {"limit": int (default 5, max 50)}
    """
    tool = "get_recent_companies"
    t0 = time.perf_counter()

    rate_error = await _check_rate_limit(tool, t0)
    if rate_error:
        return rate_error

    try:
        limit = _parse_limit(arguments, 5)
    except (TypeError, ValueError):
        return _error_response(tool, "INVALID_INPUT", "limit must be an integer", _elapsed(t0))

    snapshot, fetch_error = await snapshot_provider.snapshot_or_empty()
    companies = recent_companies(snapshot, limit)

    elapsed = _elapsed(t0)
    logger.info("get_recent_companies limit=%d results=%d ms=%.1f", limit, len(companies), elapsed)
    return _ok(
        tool,
        {"companies": [c.model_dump(mode="json") for c in companies]},
        elapsed,
        row_count=len(companies),
        warnings=_snapshot_warnings(fetch_error),
    )


async def handle_get_company_ranking(arguments: dict) -> dict:
    """Best-rated companies, A first.

    Args:
        arguments: {"limit": int (default 5, max 50)}
    """
    tool = "get_company_ranking"
    t0 = time.perf_counter()

    rate_error = await _check_rate_limit(tool, t0)
    if rate_error:
        return rate_error

    try:
        limit = _parse_limit(arguments, 5)
    except (TypeError, ValueError):
        return _error_response(tool, "INVALID_INPUT", "limit must be an integer", _elapsed(t0))

    snapshot, fetch_error = await snapshot_provider.snapshot_or_empty()
    ranked = rank_companies(snapshot, limit)

    elapsed = _elapsed(t0)
    logger.info("get_company_ranking limit=%d results=%d ms=%.1f", limit, len(ranked), elapsed)
    return _ok(
        tool,
        {"companies": [c.model_dump(mode="json") for c in ranked]},
        elapsed,
        row_count=len(ranked),
        warnings=_snapshot_warnings(fetch_error),
    )


# ---------------------------------------------------------------------------
# Company CRUD
# ---------------------------------------------------------------------------


async def handle_get_company(arguments: dict) -> dict:
    """Full record for one company.

    Args:
        arguments: {"company_id": str}
    """
    tool = "get_company"
    t0 = time.perf_counter()

    rate_error = await _check_rate_limit(tool, t0)
    if rate_error:
        return rate_error

    company_id = _required_id(arguments, "company_id")
    if company_id is None:
        return _error_response(tool, "INVALID_INPUT", "company_id is required", _elapsed(t0))

    try:
        async with async_session_factory() as session:
            company = await company_service.get_company(session, company_id)
    except company_service.MalformedRecordError as exc:
        return _malformed(tool, exc, _elapsed(t0))

    elapsed = _elapsed(t0)
    if company is None:
        return _not_found(tool, "company", company_id, elapsed)

    logger.info("get_company id=%s ms=%.1f", company_id, elapsed)
    return _ok(tool, company.model_dump(mode="json"), elapsed, row_count=1)


async def handle_create_company(arguments: dict) -> dict:
    """Add a company to the pipeline.

    Args:
        arguments: {"name": str, "sector": str, "status": str, "rating": str,
                    "approval_status": str, "estimated_revenue": float,
                    "location": str, "website": str, "notes": str}
    """
    tool = "create_company"
    t0 = time.perf_counter()

    rate_error = await _check_rate_limit(tool, t0)
    if rate_error:
        return rate_error

    try:
        payload = CompanyCreate.model_validate(arguments)
    except ValidationError as exc:
        return _invalid_input(tool, exc, _elapsed(t0))

    try:
        async with async_session_factory() as session:
            company = await company_service.create_company(session, payload)
    except company_service.MalformedRecordError as exc:
        return _malformed(tool, exc, _elapsed(t0))
    finally:
        snapshot_provider.invalidate()

    elapsed = _elapsed(t0)
    logger.info("create_company id=%s name=%s ms=%.1f", company.id, company.name, elapsed)
    return _ok(tool, company.model_dump(mode="json"), elapsed, row_count=1)


async def handle_update_company(arguments: dict) -> dict:
    """Change some fields of a company.

    Args:
        arguments: {"company_id": str, <any create_company field>}
    """
    tool = "update_company"
    t0 = time.perf_counter()

    rate_error = await _check_rate_limit(tool, t0)
    if rate_error:
        return rate_error

    company_id = _required_id(arguments, "company_id")
    if company_id is None:
        return _error_response(tool, "INVALID_INPUT", "company_id is required", _elapsed(t0))

    fields = {k: v for k, v in arguments.items() if k != "company_id"}
    if not fields:
        return _error_response(
            tool, "INVALID_INPUT", "Provide at least one field to update", _elapsed(t0)
        )
    try:
        payload = CompanyUpdate.model_validate(fields)
    except ValidationError as exc:
        return _invalid_input(tool, exc, _elapsed(t0))

    try:
        async with async_session_factory() as session:
            company = await company_service.update_company(session, company_id, payload)
    except company_service.MalformedRecordError as exc:
        snapshot_provider.invalidate()
        return _malformed(tool, exc, _elapsed(t0))

    elapsed = _elapsed(t0)
    if company is None:
        return _not_found(tool, "company", company_id, elapsed)
    snapshot_provider.invalidate()

    logger.info("update_company id=%s fields=%s ms=%.1f", company_id, sorted(fields), elapsed)
    return _ok(tool, company.model_dump(mode="json"), elapsed, row_count=1)


async def handle_delete_company(arguments: dict) -> dict:
    """Remove a company and its interactions and comments.

    Args:
        arguments: {"company_id": str}
    """
    tool = "delete_company"
    t0 = time.perf_counter()

    rate_error = await _check_rate_limit(tool, t0)
    if rate_error:
        return rate_error

    company_id = _required_id(arguments, "company_id")
    if company_id is None:
        return _error_response(tool, "INVALID_INPUT", "company_id is required", _elapsed(t0))

    async with async_session_factory() as session:
        deleted = await company_service.delete_company(session, company_id)

    elapsed = _elapsed(t0)
    if not deleted:
        return _not_found(tool, "company", company_id, elapsed)
    snapshot_provider.invalidate()

    logger.info("delete_company id=%s ms=%.1f", company_id, elapsed)
    return _ok(tool, {"deleted": True, "company_id": company_id}, elapsed, row_count=1)


# ---------------------------------------------------------------------------
# Interactions
# ---------------------------------------------------------------------------


async def handle_list_interactions(arguments: dict) -> dict:
    """Interaction history of a company, most recent first.

    Args:
        arguments: {"company_id": str}
    """
    tool = "list_interactions"
    t0 = time.perf_counter()

    rate_error = await _check_rate_limit(tool, t0)
    if rate_error:
        return rate_error

    company_id = _required_id(arguments, "company_id")
    if company_id is None:
        return _error_response(tool, "INVALID_INPUT", "company_id is required", _elapsed(t0))

    async with async_session_factory() as session:
        rows = await interaction_service.list_interactions(session, company_id)

    elapsed = _elapsed(t0)
    if rows is None:
        return _not_found(tool, "company", company_id, elapsed)

    logger.info("list_interactions company=%s rows=%d ms=%.1f", company_id, len(rows), elapsed)
    return _ok(
        tool,
        {"interactions": [r.model_dump(mode="json") for r in rows]},
        elapsed,
        row_count=len(rows),
    )


async def handle_log_interaction(arguments: dict) -> dict:
    """Record a call, email, meeting or other contact.

    Args:
        arguments: {"company_id": str, "date": "YYYY-MM-DD",
                    "type": "Call" | "Email" | "Meeting" | "Other", "notes": str}
    """
    tool = "log_interaction"
    t0 = time.perf_counter()

    rate_error = await _check_rate_limit(tool, t0)
    if rate_error:
        return rate_error

    try:
        payload = InteractionCreate.model_validate(arguments)
    except ValidationError as exc:
        return _invalid_input(tool, exc, _elapsed(t0))

    async with async_session_factory() as session:
        row = await interaction_service.create_interaction(session, payload)

    elapsed = _elapsed(t0)
    if row is None:
        return _not_found(tool, "company", str(payload.company_id), elapsed)

    logger.info("log_interaction company=%s type=%s ms=%.1f", row.company_id, row.type.value, elapsed)
    return _ok(tool, row.model_dump(mode="json"), elapsed, row_count=1)


async def handle_update_interaction(arguments: dict) -> dict:
    """Correct the date, type or notes of a logged interaction.

    Args:
        arguments: {"interaction_id": str, "date": str, "type": str, "notes": str}
    """
    tool = "update_interaction"
    t0 = time.perf_counter()

    rate_error = await _check_rate_limit(tool, t0)
    if rate_error:
        return rate_error

    interaction_id = _required_id(arguments, "interaction_id")
    if interaction_id is None:
        return _error_response(tool, "INVALID_INPUT", "interaction_id is required", _elapsed(t0))

    try:
        payload = InteractionUpdate.model_validate(
            {k: v for k, v in arguments.items() if k != "interaction_id"}
        )
    except ValidationError as exc:
        return _invalid_input(tool, exc, _elapsed(t0))

    async with async_session_factory() as session:
        row = await interaction_service.update_interaction(session, interaction_id, payload)

    elapsed = _elapsed(t0)
    if row is None:
        return _not_found(tool, "interaction", interaction_id, elapsed)

    logger.info("update_interaction id=%s ms=%.1f", interaction_id, elapsed)
    return _ok(tool, row.model_dump(mode="json"), elapsed, row_count=1)


async def handle_delete_interaction(arguments: dict) -> dict:
    """Args: {"interaction_id": str}"""
    tool = "delete_interaction"
    t0 = time.perf_counter()

    rate_error = await _check_rate_limit(tool, t0)
    if rate_error:
        return rate_error

    interaction_id = _required_id(arguments, "interaction_id")
    if interaction_id is None:
        return _error_response(tool, "INVALID_INPUT", "interaction_id is required", _elapsed(t0))

    async with async_session_factory() as session:
        deleted = await interaction_service.delete_interaction(session, interaction_id)

    elapsed = _elapsed(t0)
    if not deleted:
        return _not_found(tool, "interaction", interaction_id, elapsed)

    logger.info("delete_interaction id=%s ms=%.1f", interaction_id, elapsed)
    return _ok(tool, {"deleted": True, "interaction_id": interaction_id}, elapsed, row_count=1)


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------


async def handle_list_comments(arguments: dict) -> dict:
    """Comments on a company, newest first.

    Args:
        arguments: {"company_id": str}
    """
    tool = "list_comments"
    t0 = time.perf_counter()

    rate_error = await _check_rate_limit(tool, t0)
    if rate_error:
        return rate_error

    company_id = _required_id(arguments, "company_id")
    if company_id is None:
        return _error_response(tool, "INVALID_INPUT", "company_id is required", _elapsed(t0))

    async with async_session_factory() as session:
        rows = await comment_service.list_comments(session, company_id)

    elapsed = _elapsed(t0)
    if rows is None:
        return _not_found(tool, "company", company_id, elapsed)

    logger.info("list_comments company=%s rows=%d ms=%.1f", company_id, len(rows), elapsed)
    return _ok(
        tool,
        {"comments": [r.model_dump(mode="json") for r in rows]},
        elapsed,
        row_count=len(rows),
    )


async def handle_add_comment(arguments: dict) -> dict:
    """Args: {"company_id": str, "content": str, "author": str (optional)}"""
    tool = "add_comment"
    t0 = time.perf_counter()

    rate_error = await _check_rate_limit(tool, t0)
    if rate_error:
        return rate_error

    try:
        payload = CommentCreate.model_validate(arguments)
    except ValidationError as exc:
        return _invalid_input(tool, exc, _elapsed(t0))

    async with async_session_factory() as session:
        row = await comment_service.create_comment(session, payload)

    elapsed = _elapsed(t0)
    if row is None:
        return _not_found(tool, "company", str(payload.company_id), elapsed)

    logger.info("add_comment company=%s ms=%.1f", row.company_id, elapsed)
    return _ok(tool, row.model_dump(mode="json"), elapsed, row_count=1)


async def handle_delete_comment(arguments: dict) -> dict:
    """Args: {"comment_id": str}"""
    tool = "delete_comment"
    t0 = time.perf_counter()

    rate_error = await _check_rate_limit(tool, t0)
    if rate_error:
        return rate_error

    comment_id = _required_id(arguments, "comment_id")
    if comment_id is None:
        return _error_response(tool, "INVALID_INPUT", "comment_id is required", _elapsed(t0))

    async with async_session_factory() as session:
        deleted = await comment_service.delete_comment(session, comment_id)

    elapsed = _elapsed(t0)
    if not deleted:
        return _not_found(tool, "comment", comment_id, elapsed)

    logger.info("delete_comment id=%s ms=%.1f", comment_id, elapsed)
    return _ok(tool, {"deleted": True, "comment_id": comment_id}, elapsed, row_count=1)

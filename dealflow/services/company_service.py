"""Company store service – CRUD plus the snapshot fetch used by the engines.

This is the only module that knows the relational column layout; every
other layer works with :class:`CompanyRecord`.
"""

from __future__ import annotations

import uuid
from enum import Enum

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from dealflow.models.company import Company
from dealflow.schemas.company import CompanyCreate, CompanyRecord, CompanyUpdate


class SnapshotFetchError(Exception):
    """The company snapshot could not be loaded from the store."""


class MalformedRecordError(Exception):
    """A stored company row does not fit the company vocabulary."""


def parse_id(value: str | uuid.UUID) -> uuid.UUID | None:
    """Parse an opaque company id; returns None when it cannot be a stored id."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


def to_record(row: Company) -> CompanyRecord:
    """Map an ORM row onto the canonical in-memory company.

    Raises:
        MalformedRecordError: a stored value is outside the vocabulary.
    """
    try:
        return CompanyRecord(
            id=str(row.id),
            name=row.name,
            sector=row.sector or None,
            status=row.status,
            rating=row.rating or None,
            approval_status=row.approval_status or None,
            estimated_revenue=(
                float(row.estimated_revenue) if row.estimated_revenue is not None else None
            ),
            location=row.location,
            website=row.website,
            notes=row.notes,
            created_time=row.created_at,
        )
    except ValidationError as exc:
        raise MalformedRecordError(f"Company {row.id} is malformed: {exc}") from exc


def _to_columns(data: dict) -> dict:
    """Enum members become their stored string values."""
    return {k: (v.value if isinstance(v, Enum) else v) for k, v in data.items()}


async def fetch_all_companies(session: AsyncSession) -> list[CompanyRecord]:
    """Load every company as a snapshot.

    Raises:
        SnapshotFetchError: the query failed or a stored row is malformed.
    """
    try:
        result = await session.execute(select(Company).order_by(Company.created_at))
        return [to_record(row) for row in result.scalars().all()]
    except (SQLAlchemyError, MalformedRecordError, OSError) as exc:
        raise SnapshotFetchError(str(exc)) from exc


async def get_company(session: AsyncSession, company_id: str) -> CompanyRecord | None:
    """Return one company, or None when the id is unknown."""
    pk = parse_id(company_id)
    if pk is None:
        return None
    row = await session.get(Company, pk)
    return to_record(row) if row is not None else None


async def create_company(session: AsyncSession, data: CompanyCreate) -> CompanyRecord:
    """Insert a company; status defaults to Contacted."""
    row = Company(id=uuid.uuid4(), **_to_columns(data.model_dump()))
    session.add(row)
    await session.commit()
    await session.refresh(row)
    return to_record(row)


async def update_company(
    session: AsyncSession,
    company_id: str,
    data: CompanyUpdate,
) -> CompanyRecord | None:
    """Apply the fields present in *data*; returns None when the id is unknown."""
    pk = parse_id(company_id)
    if pk is None:
        return None
    row = await session.get(Company, pk)
    if row is None:
        return None
    for field, value in _to_columns(data.model_dump(exclude_unset=True)).items():
        setattr(row, field, value)
    await session.commit()
    await session.refresh(row)
    return to_record(row)


async def delete_company(session: AsyncSession, company_id: str) -> bool:
    """Delete a company together with its interactions and comments."""
    pk = parse_id(company_id)
    if pk is None:
        return False
    row = await session.get(Company, pk)
    if row is None:
        return False
    await session.delete(row)
    await session.commit()
    return True

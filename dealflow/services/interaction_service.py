"""Interaction log service."""

from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dealflow.models.company import Company
from dealflow.models.interaction import Interaction
from dealflow.schemas.interaction import InteractionCreate, InteractionRow, InteractionUpdate
from dealflow.services.company_service import parse_id


def _to_row(r: Interaction) -> InteractionRow:
    return InteractionRow(
        id=str(r.id),
        company_id=str(r.company_id),
        date=r.occurred_on,
        type=r.type,
        notes=r.notes,
        created_time=r.created_at,
    )


async def list_interactions(session: AsyncSession, company_id: str) -> list[InteractionRow] | None:
    """Interactions for a company, most recent date first.

    Returns None when the company does not exist.
    """
    pk = parse_id(company_id)
    if pk is None or await session.get(Company, pk) is None:
        return None
    stmt = (
        select(Interaction)
        .where(Interaction.company_id == pk)
        .order_by(Interaction.occurred_on.desc(), Interaction.created_at.desc())
    )
    result = await session.execute(stmt)
    return [_to_row(r) for r in result.scalars().all()]


async def create_interaction(
    session: AsyncSession,
    data: InteractionCreate,
) -> InteractionRow | None:
    """Log an interaction; returns None when the company does not exist."""
    if await session.get(Company, data.company_id) is None:
        return None
    row = Interaction(
        id=uuid.uuid4(),
        company_id=data.company_id,
        occurred_on=data.date,
        type=data.type.value,
        notes=data.notes,
    )
    session.add(row)
    await session.commit()
    await session.refresh(row)
    return _to_row(row)


async def update_interaction(
    session: AsyncSession,
    interaction_id: str,
    data: InteractionUpdate,
) -> InteractionRow | None:
    pk = parse_id(interaction_id)
    row = await session.get(Interaction, pk) if pk is not None else None
    if row is None:
        return None
    changes = data.model_dump(exclude_unset=True)
    if changes.get("date") is not None:
        row.occurred_on = changes["date"]
    if changes.get("type") is not None:
        row.type = changes["type"].value
    if "notes" in changes:
        row.notes = changes["notes"]
    await session.commit()
    await session.refresh(row)
    return _to_row(row)


async def delete_interaction(session: AsyncSession, interaction_id: str) -> bool:
    pk = parse_id(interaction_id)
    row = await session.get(Interaction, pk) if pk is not None else None
    if row is None:
        return False
    await session.delete(row)
    await session.commit()
    return True

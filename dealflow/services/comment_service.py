"""Comment service."""

from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dealflow.models.comment import Comment
from dealflow.models.company import Company
from dealflow.schemas.comment import CommentCreate, CommentRow
from dealflow.services.company_service import parse_id


def _to_row(r: Comment) -> CommentRow:
    return CommentRow(
        id=str(r.id),
        company_id=str(r.company_id),
        content=r.content,
        author=r.author,
        created_time=r.created_at,
    )


async def list_comments(session: AsyncSession, company_id: str) -> list[CommentRow] | None:
    """Comments for a company, newest first; None when the company does not exist."""
    pk = parse_id(company_id)
    if pk is None or await session.get(Company, pk) is None:
        return None
    stmt = select(Comment).where(Comment.company_id == pk).order_by(Comment.created_at.desc())
    result = await session.execute(stmt)
    return [_to_row(r) for r in result.scalars().all()]


async def create_comment(session: AsyncSession, data: CommentCreate) -> CommentRow | None:
    if await session.get(Company, data.company_id) is None:
        return None
    row = Comment(
        id=uuid.uuid4(),
        company_id=data.company_id,
        content=data.content,
        author=data.author or None,
    )
    session.add(row)
    await session.commit()
    await session.refresh(row)
    return _to_row(row)


async def delete_comment(session: AsyncSession, comment_id: str) -> bool:
    pk = parse_id(comment_id)
    row = await session.get(Comment, pk) if pk is not None else None
    if row is None:
        return False
    await session.delete(row)
    await session.commit()
    return True

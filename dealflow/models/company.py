"""Company ORM model."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, Numeric, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Shared declarative base for all models."""

    pass


class Company(Base):
    __tablename__ = "companies"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    sector: Mapped[str | None] = mapped_column(String(100), nullable=True)
    status: Mapped[str] = mapped_column(String(30), nullable=False, default="Contacted")
    rating: Mapped[str | None] = mapped_column(String(20), nullable=True)
    approval_status: Mapped[str | None] = mapped_column(String(30), nullable=True)
    estimated_revenue: Mapped[float | None] = mapped_column(Numeric(20, 2), nullable=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    website: Mapped[str | None] = mapped_column(String(255), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    # Child records are removed with the company (ORM-side cascade so SQLite
    # behaves like Postgres' ON DELETE CASCADE).
    interactions = relationship(
        "Interaction",
        back_populates="company",
        lazy="select",
        cascade="all, delete-orphan",
    )
    comments = relationship(
        "Comment",
        back_populates="company",
        lazy="select",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("ix_companies_name", "name"),
        Index("ix_companies_status", "status"),
        Index("ix_companies_sector", "sector"),
    )

    def __repr__(self) -> str:
        return f"<Company {self.name} – {self.status}>"

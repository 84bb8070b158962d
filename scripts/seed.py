#!/usr/bin/env python3
"""Seed script – populates the database with a realistic dummy deal pipeline.

Run after migrations:
    python -m scripts.seed
"""

from __future__ import annotations

import random
import uuid
from datetime import datetime, timedelta, timezone

from faker import Faker
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from dealflow.config import settings
from dealflow.models import Base, Comment, Company, Interaction
from dealflow.schemas.vocabulary import (
    SECTORS,
    ApprovalStatus,
    CompanyRating,
    CompanyStatus,
    InteractionType,
)

fake = Faker()
Faker.seed(42)
random.seed(42)

N_COMPANIES = 40

# Later stages are rarer.
STATUS_WEIGHTS = {
    CompanyStatus.CONTACTED: 10,
    CompanyStatus.IN_ANALYSIS: 8,
    CompanyStatus.LOI_SENT: 5,
    CompanyStatus.DUE_DILIGENCE: 4,
    CompanyStatus.CLOSED: 2,
    CompanyStatus.ARCHIVED: 3,
}


def _maybe(value, probability: float = 0.8):
    return value if random.random() < probability else None


# ---------------------------------------------------------------------------
# Seed functions
# ---------------------------------------------------------------------------


def seed_companies(session: Session) -> list[Company]:
    """Create N_COMPANIES companies spread over the last 90 days."""
    now = datetime.now(timezone.utc)
    statuses = list(STATUS_WEIGHTS)
    weights = list(STATUS_WEIGHTS.values())

    companies: list[Company] = []
    for _ in range(N_COMPANIES):
        rating = _maybe(random.choice(list(CompanyRating)), 0.85)
        approval = _maybe(random.choice(list(ApprovalStatus)), 0.75)
        company = Company(
            id=uuid.uuid4(),
            name=fake.unique.company(),
            sector=_maybe(random.choice(SECTORS), 0.9),
            status=random.choices(statuses, weights)[0].value,
            rating=rating.value if rating else None,
            approval_status=approval.value if approval else None,
            estimated_revenue=_maybe(round(random.uniform(250_000, 75_000_000), 2)),
            location=_maybe(f"{fake.city()}, {fake.country()}"),
            website=_maybe(fake.url(), 0.6),
            notes=_maybe(fake.paragraph(nb_sentences=2), 0.5),
            created_at=now - timedelta(days=random.uniform(0, 90)),
        )
        session.add(company)
        companies.append(company)
    session.flush()
    return companies


def seed_interactions(session: Session, companies: list[Company]) -> int:
    """0–6 interactions per company, dated after the company was added."""
    count = 0
    today = datetime.now(timezone.utc).date()
    for comp in companies:
        start = comp.created_at.date()
        span = max((today - start).days, 0)
        for _ in range(random.randint(0, 6)):
            session.add(
                Interaction(
                    id=uuid.uuid4(),
                    company_id=comp.id,
                    occurred_on=start + timedelta(days=random.randint(0, span)),
                    type=random.choice(list(InteractionType)).value,
                    notes=_maybe(fake.sentence(nb_words=12), 0.7),
                )
            )
            count += 1
    session.flush()
    return count


def seed_comments(session: Session, companies: list[Company]) -> int:
    """0–3 comments per company."""
    count = 0
    authors = [fake.name() for _ in range(6)]
    for comp in companies:
        for _ in range(random.randint(0, 3)):
            session.add(
                Comment(
                    id=uuid.uuid4(),
                    company_id=comp.id,
                    content=fake.paragraph(nb_sentences=random.randint(1, 3)),
                    author=_maybe(random.choice(authors), 0.9),
                )
            )
            count += 1
    session.flush()
    return count


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


def main() -> None:
    print("🌱  Seeding database …")
    engine = create_engine(settings.database_url_sync, echo=False)

    # Fallback if migrations haven't run
    Base.metadata.create_all(engine)

    with Session(engine) as session:
        # Wipe existing data
        session.execute(Comment.__table__.delete())
        session.execute(Interaction.__table__.delete())
        session.execute(Company.__table__.delete())
        session.commit()

        companies = seed_companies(session)
        print(f"  ✅ {len(companies)} companies")

        n_int = seed_interactions(session, companies)
        print(f"  ✅ {n_int} interactions")

        n_com = seed_comments(session, companies)
        print(f"  ✅ {n_com} comments")

        session.commit()

    print("🎉  Seeding complete!")


if __name__ == "__main__":
    main()

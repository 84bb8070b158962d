"""Company list engine – facet filtering and display ordering over a snapshot.

Everything here is a pure function of its arguments: no DB access, no
logging, no caching.  Callers re-run it whenever the snapshot or the
constraints change.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from pyuca import Collator

from dealflow.schemas.company import CompanyRecord
from dealflow.schemas.query import FacetConstraints
from dealflow.schemas.vocabulary import CompanyRating

# Display order for the ranking card: A first, D last.
_RATING_ORDER: dict[CompanyRating, int] = {
    CompanyRating.A: 0,
    CompanyRating.B: 1,
    CompanyRating.C: 2,
    CompanyRating.D: 3,
}

_collator = Collator()


def name_sort_key(name: str) -> tuple[int, ...]:
    """Unicode Collation Algorithm key for a case-insensitive name compare.

    Uses the default (root locale) collation table, so "Ørsted" sorts after
    "Oscar" and "Łódź" between "Lima" and "Madrid" instead of after "z".
    Case is folded first so "acme" and "Acme" produce the same key.
    """
    return _collator.sort_key(name.casefold())


def matches(company: CompanyRecord, constraints: FacetConstraints) -> bool:
    """Return True when *company* satisfies every active facet.

    Rating and approval compare against the effective value, so a "Not Rated"
    filter also picks up companies that were never rated.
    """
    if constraints.status is not None and company.status != constraints.status:
        return False
    if constraints.sector is not None and company.sector != constraints.sector:
        return False
    if constraints.rating is not None and company.effective_rating != constraints.rating:
        return False
    if (
        constraints.approval_status is not None
        and company.effective_approval != constraints.approval_status
    ):
        return False
    if constraints.search is not None:
        return constraints.search.lower() in company.name.lower()
    return True


def filter_companies(
    snapshot: Iterable[CompanyRecord],
    constraints: FacetConstraints | None = None,
) -> list[CompanyRecord]:
    """Companies matching all constraints, sorted by name.

    ``sorted`` is stable, so companies with identical names keep their
    snapshot order.
    """
    constraints = constraints or FacetConstraints()
    passing = [c for c in snapshot if matches(c, constraints)]
    return sorted(passing, key=lambda c: name_sort_key(c.name))


def recent_companies(snapshot: Sequence[CompanyRecord], limit: int = 5) -> list[CompanyRecord]:
    """Newest companies first, by creation time."""
    if limit <= 0:
        return []
    return sorted(snapshot, key=lambda c: c.created_time, reverse=True)[:limit]


def rank_companies(snapshot: Sequence[CompanyRecord], limit: int = 5) -> list[CompanyRecord]:
    """Rated companies ordered A → D; unrated ones are left out."""
    if limit <= 0:
        return []
    rated = [c for c in snapshot if c.rating in _RATING_ORDER]
    return sorted(rated, key=lambda c: _RATING_ORDER[c.rating])[:limit]

"""Tests for the company list engine (facet filtering and name ordering)."""

from __future__ import annotations

from datetime import timedelta

from conftest import NOW, make_company

from dealflow.schemas.query import FacetConstraints
from dealflow.services.query_engine import (
    filter_companies,
    name_sort_key,
    rank_companies,
    recent_companies,
)


def _names(companies):
    return [c.name for c in companies]


SNAPSHOT = [
    make_company("Zeta Logistics", sector="Transportation", status="Closed", rating="B"),
    make_company("acme robotics", sector="Technology", status="Contacted", rating="A",
                 approval_status="Approved"),
    make_company("Acme Inc", sector="Technology", status="LOI Sent", rating="C",
                 approval_status="Not Approved"),
    make_company("Acme Foods", sector="Consumer Goods", status="Contacted"),
    make_company("Émile Bakeries", sector=None, status="Contacted", rating="D"),
]


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------


def test_status_filter_scenario():
    """Two of three companies are Contacted; they come back sorted by name."""
    snapshot = [
        make_company("Charlie Co", status="Contacted"),
        make_company("Bravo Ltd", status="Closed"),
        make_company("Alpha Corp", status="Contacted"),
    ]
    result = filter_companies(snapshot, FacetConstraints(status="Contacted"))
    assert _names(result) == ["Alpha Corp", "Charlie Co"]


def test_combined_filter_and_search_scenario():
    snapshot = [
        make_company("Acme Inc", sector="Technology"),
        make_company("Acme Foods", sector="Consumer Goods"),
    ]
    result = filter_companies(snapshot, FacetConstraints(sector="Technology", search="acme"))
    assert _names(result) == ["Acme Inc"]


def test_no_constraints_returns_everything_sorted():
    result = filter_companies(SNAPSHOT)
    assert _names(result) == [
        "Acme Foods",
        "Acme Inc",
        "acme robotics",
        "Émile Bakeries",
        "Zeta Logistics",
    ]


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------


def test_filter_is_conjunction_of_facets():
    constraints = FacetConstraints(status="Contacted", sector="Technology")
    result = filter_companies(SNAPSHOT, constraints)
    expected = [c for c in SNAPSHOT if c.status == "Contacted" and c.sector == "Technology"]
    assert {c.id for c in result} == {c.id for c in expected}


def test_adding_a_constraint_never_grows_the_result():
    steps = [
        FacetConstraints(),
        FacetConstraints(status="Contacted"),
        FacetConstraints(status="Contacted", search="acme"),
        FacetConstraints(status="Contacted", search="acme", sector="Technology"),
    ]
    sizes = [len(filter_companies(SNAPSHOT, c)) for c in steps]
    assert sizes == sorted(sizes, reverse=True)
    assert sizes[-1] == 1


def test_filter_is_idempotent():
    constraints = FacetConstraints(search="acme")
    once = filter_companies(SNAPSHOT, constraints)
    twice = filter_companies(once, constraints)
    assert twice == once


def test_identical_names_keep_snapshot_order():
    first = make_company("Same Name", company_id="first")
    second = make_company("Same Name", company_id="second")
    result = filter_companies([first, make_company("Other"), second])
    same = [c.id for c in result if c.name == "Same Name"]
    assert same == ["first", "second"]

    result = filter_companies([second, first])
    assert [c.id for c in result] == ["second", "first"]


def test_filter_does_not_mutate_snapshot():
    snapshot = list(SNAPSHOT)
    filter_companies(snapshot, FacetConstraints(status="Contacted"))
    assert snapshot == SNAPSHOT


# ---------------------------------------------------------------------------
# Edge cases
# ---------------------------------------------------------------------------


def test_empty_snapshot_yields_empty_list():
    assert filter_companies([], FacetConstraints(status="Closed", search="x")) == []


def test_unknown_facet_value_yields_empty_list():
    assert filter_companies(SNAPSHOT, FacetConstraints(sector="Aerospace")) == []


def test_facet_match_is_case_sensitive():
    assert filter_companies(SNAPSHOT, FacetConstraints(status="contacted")) == []


def test_search_is_case_insensitive_substring():
    result = filter_companies(SNAPSHOT, FacetConstraints(search="ACME"))
    assert len(result) == 3


def test_blank_search_means_no_constraint():
    assert len(filter_companies(SNAPSHOT, FacetConstraints(search="   "))) == len(SNAPSHOT)
    assert len(filter_companies(SNAPSHOT, FacetConstraints(search=""))) == len(SNAPSHOT)


def test_not_rated_filter_matches_companies_without_rating():
    result = filter_companies(SNAPSHOT, FacetConstraints(rating="Not Rated"))
    assert _names(result) == ["Acme Foods"]


def test_under_review_filter_matches_companies_without_approval():
    result = filter_companies(SNAPSHOT, FacetConstraints(approval_status="Under Review"))
    assert _names(result) == ["Acme Foods", "Émile Bakeries", "Zeta Logistics"]


def test_absent_facet_passes_companies_missing_that_field():
    """A company with no sector still passes when sector is unconstrained."""
    result = filter_companies(SNAPSHOT, FacetConstraints(status="Contacted"))
    assert "Émile Bakeries" in _names(result)


def test_name_sort_key_ignores_case():
    assert name_sort_key("ACME") == name_sort_key("acme")


def test_accented_names_sort_next_to_their_base_letter():
    assert name_sort_key("Emile") < name_sort_key("Émile") < name_sort_key("Emilia")


def test_letters_without_decomposition_sort_in_alphabet():
    snapshot = [
        make_company("Zeta"),
        make_company("Ørsted"),
        make_company("Oscar"),
        make_company("Łódź Ltd"),
        make_company("Lima"),
    ]
    assert _names(filter_companies(snapshot)) == [
        "Lima",
        "Łódź Ltd",
        "Oscar",
        "Ørsted",
        "Zeta",
    ]


# ---------------------------------------------------------------------------
# FacetConstraints
# ---------------------------------------------------------------------------


def test_from_query_reads_camel_case_approval():
    constraints = FacetConstraints.from_query({"approvalStatus": "Approved", "status": ""})
    assert constraints.approval_status == "Approved"
    assert constraints.status is None


def test_from_query_blank_alias_does_not_hide_a_real_value():
    constraints = FacetConstraints.from_query(
        {"approval_status": "", "approvalStatus": "Approved"}
    )
    assert constraints.approval_status == "Approved"


def test_from_query_prefers_snake_case_key():
    constraints = FacetConstraints.from_query(
        {"approval_status": "Approved", "approvalStatus": "Not Approved"}
    )
    assert constraints.approval_status == "Approved"


def test_from_query_ignores_unknown_keys():
    constraints = FacetConstraints.from_query({"page": "2", "sector": "Energy"})
    assert constraints == FacetConstraints(sector="Energy")


def test_is_empty():
    assert FacetConstraints().is_empty()
    assert FacetConstraints(search="  ").is_empty()
    assert not FacetConstraints(rating="A").is_empty()


# ---------------------------------------------------------------------------
# Recent / ranking lists
# ---------------------------------------------------------------------------


def test_recent_companies_newest_first():
    snapshot = [
        make_company("Old", created_time=NOW - timedelta(days=20)),
        make_company("Newest", created_time=NOW),
        make_company("Middle", created_time=NOW - timedelta(days=3)),
    ]
    assert _names(recent_companies(snapshot, limit=2)) == ["Newest", "Middle"]
    assert recent_companies(snapshot, limit=0) == []


def test_rank_companies_orders_a_to_d_and_skips_unrated():
    ranked = rank_companies(SNAPSHOT, limit=10)
    assert [c.rating.value for c in ranked] == ["A", "B", "C", "D"]
    assert "Acme Foods" not in _names(ranked)


def test_rank_companies_respects_limit():
    assert len(rank_companies(SNAPSHOT, limit=2)) == 2

"""Pagination parsing and envelope tests."""

from jobboard.pagination import (
    DEFAULT_LIMIT,
    MAX_LIMIT,
    MAX_PAGE,
    Page,
    Pagination,
    paginate,
    resolve_pagination,
)


def test_defaults_when_missing():
    p = resolve_pagination({})
    assert p == Pagination(page=1, limit=DEFAULT_LIMIT)
    assert p.skip == 0


def test_limit_is_clamped():
    assert resolve_pagination({"limit": "500"}).limit == MAX_LIMIT
    assert resolve_pagination({"limit": "0"}).limit == 1
    assert resolve_pagination({"limit": "-5"}).limit == 1


def test_page_below_one_becomes_one():
    assert resolve_pagination({"page": "0"}).page == 1
    assert resolve_pagination({"page": "-3"}).page == 1


def test_malformed_values_fall_back_to_defaults():
    p = resolve_pagination({"page": "abc", "limit": "ten"})
    assert p == Pagination(page=1, limit=DEFAULT_LIMIT)


def test_skip_is_offset_of_page():
    assert resolve_pagination({"page": "3", "limit": "10"}).skip == 20


def test_total_pages_rounds_up():
    p = Pagination(page=1, limit=10)
    assert p.total_pages(0) == 0
    assert p.total_pages(10) == 1
    assert p.total_pages(11) == 2


def test_envelope_serializes_total_pages_camel_case():
    envelope = paginate(["a", "b"], total=25, pagination=Pagination(page=2, limit=2))
    page = Page[str].model_validate(envelope)
    dumped = page.model_dump(by_alias=True)
    assert dumped["data"] == ["a", "b"]
    assert dumped["pagination"] == {"page": 2, "limit": 2, "total": 25, "totalPages": 13}


def test_huge_page_is_clamped_to_a_bindable_offset():
    p = resolve_pagination({"page": "99999999999999999999", "limit": "100"})
    assert p.page == MAX_PAGE
    assert p.skip <= 2**63 - 1

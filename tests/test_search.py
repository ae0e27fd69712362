from propsearch.schemas import FilterState, SearchRequest
from propsearch.search import is_published, search, stats
from propsearch.normalize import normalize
from propsearch.settings import settings


def _listing(i, **extra):
    return {
        "id": f"p{i}",
        "status": "Published",
        "property_type": "Room",
        "price": 1000 * i,
        "created_at": f"2024-01-{i:02d}T00:00:00Z",
        **extra,
    }


def test_is_published_is_case_insensitive():
    assert is_published(normalize({"status": "approved"}))
    assert is_published(normalize({"status": "ACTIVE"}))
    assert not is_published(normalize({"status": "Draft"}))
    assert not is_published(normalize({}))
    assert is_published(normalize({"status": "Draft"}), statuses=["draft"])


def test_search_gates_unpublished():
    records = [_listing(1), _listing(2, status="Pending")]
    resp = search(SearchRequest(records=records))
    assert [r.id for r in resp.data] == ["p1"]
    resp = search(SearchRequest(records=records, include_unpublished=True))
    assert {r.id for r in resp.data} == {"p1", "p2"}


def test_search_filters_sorts_and_paginates():
    records = [_listing(i) for i in range(1, 6)]
    resp = search(SearchRequest(records=records, sort_by="price_desc", limit=2, offset=1))
    assert [r.id for r in resp.data] == ["p4", "p3"]
    assert resp.pagination.total == 5
    assert resp.pagination.has_more is True

    resp = search(SearchRequest(records=records, limit=2, offset=4))
    assert [r.id for r in resp.data] == ["p1"]
    assert resp.pagination.has_more is False


def test_search_applies_filters_and_posting_type():
    records = [
        _listing(1, posting_type="Rent"),
        _listing(2, posting_type="Sell"),
        _listing(3, posting_type="Rent", property_type="PG"),
    ]
    resp = search(SearchRequest(records=records, posting_type="Rent", filters=FilterState(property_type="Room")))
    assert [r.id for r in resp.data] == ["p1"]


def test_search_page_size_limits(monkeypatch):
    monkeypatch.setattr(settings, "DEFAULT_PAGE_SIZE", 2)
    monkeypatch.setattr(settings, "MAX_PAGE_SIZE", 3)
    records = [_listing(i) for i in range(1, 8)]
    assert search(SearchRequest(records=records)).pagination.limit == 2
    resp = search(SearchRequest(records=records, limit=50))
    assert resp.pagination.limit == 3
    assert len(resp.data) == 3


def test_stats_counts_by_type_and_posting():
    records = [
        _listing(1, posting_type="Rent"),
        _listing(2, property_type="Plot"),
        _listing(3, property_type=None),
        _listing(4, status="Rejected"),
    ]
    out = stats(records)
    assert out.total == 3
    assert out.by_property_type == {"Room": 1, "Plot/Land": 1, "Other": 1}
    assert out.by_posting_type == {"Sell": 2, "Rent": 1}
    assert stats(records, include_unpublished=True).total == 4


def test_stats_empty():
    out = stats([])
    assert out.total == 0
    assert out.by_posting_type == {"Sell": 0, "Rent": 0}

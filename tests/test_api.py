from fastapi.testclient import TestClient

from propsearch.main import app
from propsearch.settings import settings

client = TestClient(app)


def test_health_echoes_request_id():
    r = client.get("/health", headers={"X-Request-ID": "abc123"})
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}
    assert r.headers["X-Request-ID"] == "abc123"
    assert "X-Elapsed-Ms" in r.headers


def test_schema_for_category():
    r = client.get("/schema/Flat/Apartment")
    assert r.status_code == 200
    assert [d["name"] for d in r.json()] == ["bhk", "floor", "facing", "parking"]

    r = client.get("/schema/pg")
    assert [d["name"] for d in r.json()][0] == "pgOccupancy"


def test_schema_unknown_category_is_404():
    r = client.get("/schema/Castle")
    assert r.status_code == 404
    body = r.json()
    assert body["error"] == "UNKNOWN_CATEGORY"
    assert body["request_id"]


def test_schema_lists_every_category():
    r = client.get("/schema")
    assert set(r.json()) >= {"Room", "PG", "Commercial", "Farmhouse"}


def test_normalize_records():
    r = client.post("/records/normalize", json={"records": [{"price": "₹1,50,000", "other_images": "[]"}]})
    assert r.status_code == 200
    rec = r.json()[0]
    assert rec["price"] == 150000
    assert rec["images"] == ["/assets/hero.jpg"]


def test_apply_filter_action():
    r = client.post("/filters/apply", json={"state": {"bhk": "2 BHK"}, "action": {"kind": "toggle_amenity", "amenity": "gym"}})
    assert r.status_code == 200
    body = r.json()
    assert body["amenities"] == ["Gym"]
    assert body["bhk"] == "2 BHK"


def test_apply_session_action():
    r = client.post("/session/apply", json={"action": {"type": "INCREASE_CHILDREN"}})
    assert r.status_code == 200
    assert r.json()["guests"] == {"adults": 1, "children": 1, "infants": 0}


def test_filter_params_without_and_with_base_url(monkeypatch):
    monkeypatch.setattr(settings, "BASE_URL", None)
    r = client.post("/filters/params", json={"propertyType": "Room"})
    assert r.json() == {"params": {"propertyType": "Room"}, "query": "propertyType=Room", "url": None}

    monkeypatch.setattr(settings, "BASE_URL", "https://homes.example.com")
    r = client.post("/filters/params", json={"propertyType": "Room"})
    assert r.json()["url"] == "https://homes.example.com/search?propertyType=Room"


def test_decode_filters():
    r = client.get("/filters/decode?propertyType=Room&priceRange.max=50000&bhk=bogus")
    assert r.status_code == 200
    body = r.json()
    assert body["propertyType"] == "Room"
    assert body["priceRange"]["max"] == 50000
    assert body["bhk"] == ""


def test_search_endpoint():
    records = [
        {"id": "1", "status": "Approved", "price": "₹20,000", "city": "Mohali", "property_type": "Room"},
        {"id": "2", "status": "Approved", "price": "₹60,000", "city": "Kurali", "property_type": "Room"},
    ]
    payload = {
        "records": records,
        "filters": {"propertyType": "Room", "location": {"city": "Mohali"}, "priceRange": {"min": 0, "max": 50000}},
    }
    r = client.post("/search", json=payload)
    assert r.status_code == 200
    body = r.json()
    assert [d["id"] for d in body["data"]] == ["1"]
    assert body["pagination"]["total"] == 1


def test_invalid_payload_is_422():
    r = client.post("/search", json={"records": [], "limit": 0})
    assert r.status_code == 422
    assert r.json()["error"] == "VALIDATION_ERROR"


def test_stats_endpoint():
    r = client.post("/stats", json={"records": [{"status": "Active", "property_type": "PG", "posting_type": "rent"}]})
    assert r.json() == {"total": 1, "by_property_type": {"PG": 1}, "by_posting_type": {"Sell": 0, "Rent": 1}}

from pathlib import Path
from urllib.parse import parse_qs, urlsplit

import pytest
from fastapi.testclient import TestClient

from store_locator.config import settings
from store_locator.data import stores_repository
from store_locator.data.customers_repository import CustomerRepository
from store_locator.dependencies import (
    clear_service_caches,
    get_augmenter,
    get_customer_repository,
    get_query_service,
    get_store_index,
)
from store_locator.main import create_app
from store_locator.models.domain import Address, GeoPoint, StoreRecord
from store_locator.services.customers import NearbyLinkAugmenter
from store_locator.services.stores import index as index_module
from store_locator.services.stores.index import StoreIndex
from store_locator.services.stores.query import ProximityQueryService

SAMPLE_DATASET = Path(__file__).resolve().parents[1] / "data" / "starbucks.csv"


def _store(name: str, lat: float, lon: float) -> StoreRecord:
    return StoreRecord(name=name, address=Address("street", "city", "zip", GeoPoint(longitude=lon, latitude=lat)))


@pytest.fixture
def store_index() -> StoreIndex:
    return StoreIndex()


@pytest.fixture
def api_client(store_index: StoreIndex) -> TestClient:
    app = create_app()
    service = ProximityQueryService(store_index, api_prefix=settings.api_prefix)
    augmenter = NearbyLinkAugmenter(service)
    customers = CustomerRepository()

    app.dependency_overrides[get_store_index] = lambda: store_index
    app.dependency_overrides[get_query_service] = lambda: service
    app.dependency_overrides[get_augmenter] = lambda: augmenter
    app.dependency_overrides[get_customer_repository] = lambda: customers
    return TestClient(app)


def test_root_and_health(api_client: TestClient, store_index: StoreIndex):
    store_index.insert(_store("Foo", 40.740337, -73.995146))

    assert api_client.get("/").json()["status"] == "running"
    assert api_client.get("/api/health").json() == {"status": "ok"}
    assert api_client.get("/api/health/index").json() == {
        "stores": 1,
        "spatial_index_ready": True,
        "backend_configured": False,
    }


def test_create_list_and_fetch_store(api_client: TestClient):
    created = api_client.post(
        "/api/stores",
        json={"name": "Foo", "street": "street", "city": "city", "postalCode": "zip", "longitude": -73.995146, "latitude": 40.740337},
    )
    assert created.status_code == 201
    store_id = created.json()["id"]

    fetched = api_client.get(f"/api/stores/{store_id}")
    assert fetched.status_code == 200
    assert fetched.json()["postalCode"] == "zip"

    listing = api_client.get("/api/stores", params={"offset": 0, "limit": 10}).json()
    assert listing["total"] == 1
    assert listing["items"][0]["id"] == store_id

    assert api_client.get("/api/stores/unknown").status_code == 404


def test_create_store_rejects_out_of_range_coordinates(api_client: TestClient):
    response = api_client.post("/api/stores", json={"name": "Bad", "longitude": 10.0, "latitude": 95.0})

    assert response.status_code == 422


def test_search_by_location_returns_nearest_first(api_client: TestClient, store_index: StoreIndex):
    store_index.bulk_insert(
        [
            _store("Half km north", 40.745337, -73.995146),
            _store("Origin", 40.740337, -73.995146),
            _store("Far away", 47.6101, -122.3421),
        ]
    )

    response = api_client.get(
        "/api/stores/search/by-location",
        params={"location": "40.740337,-73.995146", "distance": "1km"},
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["total"] == 2
    assert payload["distanceUnit"] == "km"
    assert payload["has_next_page"] is False
    assert [item["name"] for item in payload["items"]] == ["Origin", "Half km north"]
    assert payload["items"][0]["distanceFromQueryPoint"] == 0
    assert payload["items"][1]["distanceFromQueryPoint"] == pytest.approx(0.556, rel=0.01)
    assert set(payload["items"][0]) == {
        "id",
        "name",
        "street",
        "city",
        "postalCode",
        "longitude",
        "latitude",
        "distanceFromQueryPoint",
    }


def test_search_by_location_paginates(api_client: TestClient, store_index: StoreIndex):
    store_index.bulk_insert([_store(f"S{i}", 40.740337 + (i * 0.001), -73.995146) for i in range(5)])

    response = api_client.get(
        "/api/stores/search/by-location",
        params={"location": "40.740337,-73.995146", "distance": "5km", "offset": 2, "limit": 2},
    )

    payload = response.json()
    assert payload["total"] == 5
    assert [item["name"] for item in payload["items"]] == ["S2", "S3"]
    assert payload["has_next_page"] is True


def test_search_on_empty_index_is_not_an_error(api_client: TestClient):
    response = api_client.get("/api/stores/search/by-location", params={"location": "10,20", "distance": "5mi"})

    assert response.status_code == 200
    assert response.json()["items"] == []


def test_search_near_with_preparsed_pair(api_client: TestClient, store_index: StoreIndex):
    store_index.insert(_store("Origin", 40.740337, -73.995146))

    response = api_client.get(
        "/api/stores/search/near",
        params={"longitude": -73.995146, "latitude": 40.740337, "distance": "800m"},
    )

    assert response.status_code == 200
    assert response.json()["distanceUnit"] == "m"
    assert response.json()["items"][0]["name"] == "Origin"


@pytest.mark.parametrize(
    "path, params, kind",
    [
        ("/api/stores/search/by-location", {"location": "40.74"}, "MalformedInput"),
        ("/api/stores/search/by-location", {"location": "north,east"}, "NonNumericToken"),
        ("/api/stores/search/by-location", {"location": "200,10"}, "OutOfBounds"),
        ("/api/stores/search/by-location", {"location": "10,20", "distance": "5 parsecs"}, "InvalidQuery"),
        ("/api/stores/search/near", {"longitude": 10, "latitude": 95}, "OutOfBounds"),
    ],
)
def test_client_errors_carry_kind_tag(api_client: TestClient, path, params, kind):
    response = api_client.get(path, params=params)

    assert response.status_code == 400
    assert response.json()["kind"] == kind
    assert response.json()["detail"]


def test_missing_spatial_index_is_a_server_error(
    api_client: TestClient, store_index: StoreIndex, monkeypatch: pytest.MonkeyPatch
):
    def broken_tree(geometries):
        raise ValueError("corrupt geometry buffer")

    monkeypatch.setattr(index_module, "STRtree", broken_tree)
    store_index.insert(_store("Origin", 40.740337, -73.995146))

    response = api_client.get("/api/stores/search/by-location", params={"location": "40.740337,-73.995146"})

    assert response.status_code == 500
    assert response.json()["kind"] == "IndexUnavailable"


def test_customer_with_location_gets_stores_nearby_link(api_client: TestClient):
    created = api_client.post(
        "/api/customers",
        json={
            "firstname": "Dave",
            "lastname": "Matthews",
            "address": {"street": "street", "city": "city", "zipCode": "zipCode", "location": {"latitude": 40.7484, "longitude": -73.9857}},
        },
    )
    assert created.status_code == 201
    customer_id = created.json()["id"]

    payload = api_client.get(f"/api/customers/{customer_id}").json()
    links = payload["_links"]
    assert links["self"]["href"] == f"/api/customers/{customer_id}"

    nearby = urlsplit(links["stores-nearby"]["href"])
    assert nearby.path == "/api/stores/search/by-location"
    assert parse_qs(nearby.query) == {"location": ["40.7484,-73.9857"], "distance": ["50km"]}


def test_forwarded_host_makes_link_absolute(api_client: TestClient):
    api_client.post(
        "/api/customers",
        json={"firstname": "A", "lastname": "B", "address": {"location": {"latitude": 55.349451, "longitude": -131.673817}}},
    )

    payload = api_client.get("/api/customers", headers={"X-Forwarded-Host": "shop.example.com"}).json()

    href = payload["items"][0]["_links"]["stores-nearby"]["href"]
    assert href.startswith("http://shop.example.com/api/stores/search/by-location?")


def test_customer_without_address_has_no_nearby_link(api_client: TestClient):
    created = api_client.post("/api/customers", json={"firstname": "No", "lastname": "Address"}).json()

    assert created["address"] is None
    assert set(created["_links"]) == {"self"}
    assert api_client.get("/api/customers/999").status_code == 404


def test_stores_nearby_link_resolves_to_search(api_client: TestClient, store_index: StoreIndex):
    store_index.insert(_store("Empire State", 40.7484, -73.9857))
    created = api_client.post(
        "/api/customers",
        json={"firstname": "Dave", "lastname": "Matthews", "address": {"location": {"latitude": 40.7484, "longitude": -73.9857}}},
    ).json()

    response = api_client.get(created["_links"]["stores-nearby"]["href"])

    assert response.status_code == 200
    assert [item["name"] for item in response.json()["items"]] == ["Empire State"]


def test_startup_imports_configured_dataset(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(settings, "store_file", SAMPLE_DATASET)
    monkeypatch.setattr(settings, "import_on_startup", True)
    monkeypatch.setattr(stores_repository, "get_supabase_client", lambda: None)
    clear_service_caches()
    try:
        with TestClient(create_app()) as client:
            assert client.get("/api/health/index").json()["stores"] == 7

            response = client.get(
                "/api/stores/search/by-location",
                params={"location": "40.7484,-73.9857", "distance": "500m"},
            )
            names = [item["name"] for item in response.json()["items"]]
            assert names == ["Empire State Building", "Herald Square"]
    finally:
        clear_service_caches()


def test_customer_listing_uses_configured_page_sizes(api_client: TestClient, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(settings, "default_page_size", 2)
    for index in range(3):
        api_client.post("/api/customers", json={"firstname": f"C{index}", "lastname": "L"})

    payload = api_client.get("/api/customers").json()

    assert payload["limit"] == 2
    assert [item["firstname"] for item in payload["items"]] == ["C0", "C1"]
    assert payload["has_next_page"] is True
    assert api_client.get("/api/customers", params={"limit": settings.max_page_size + 1}).status_code == 422

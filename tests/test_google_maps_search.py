import httpx
import pytest
from fastapi.testclient import TestClient

from nexacrm.db.base import Base
from nexacrm.db.session import engine
from nexacrm.dependencies.providers import get_places_client
from nexacrm.main import app
from nexacrm.services.google_places import GooglePlacesClient


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    app.dependency_overrides.clear()


def register_and_login(client: TestClient, email: str, password: str = "secret") -> str:
    client.post("/api/auth/register", json={"name": "Mapper", "email": email, "password": password})
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200
    return response.json()["access_token"]


def use_places(handler):
    client = GooglePlacesClient(api_key="maps-key", base_url="https://places.test/api", transport=httpx.MockTransport(handler))
    app.dependency_overrides[get_places_client] = lambda: client


def places_handler(request: httpx.Request) -> httpx.Response:
    if request.url.path.endswith("/textsearch/json"):
        assert request.url.params["query"] == "coffee in Budapest"
        assert request.url.params["radius"] == "2000"
        return httpx.Response(
            200,
            json={
                "status": "OK",
                "results": [
                    {
                        "place_id": "p1",
                        "name": "Bean There",
                        "formatted_address": "1 Main St",
                        "rating": 4.6,
                        "user_ratings_total": 120,
                        "types": ["cafe", "point_of_interest", "food", "establishment", "store"],
                        "geometry": {"location": {"lat": 47.5, "lng": 19.04}},
                        "business_status": "OPERATIONAL",
                    }
                ],
            },
        )
    assert request.url.params["place_id"] == "p1"
    return httpx.Response(
        200,
        json={"result": {"formatted_phone_number": "+36 1 555 0100", "website": "https://bean.test"}},
    )


def test_search_without_api_key_returns_config_error():
    client = TestClient(app)
    token = register_and_login(client, "nokey@example.com")
    response = client.post(
        "/api/leads/search/google-maps",
        json={"query": "coffee"},
        headers={"Authorization": f"Bearer {token}"},
    )
    assert response.status_code == 400
    assert "GOOGLE_MAPS_API_KEY" in response.json()["error"]


def test_search_returns_normalized_places():
    use_places(places_handler)
    client = TestClient(app)
    token = register_and_login(client, "maps@example.com")
    response = client.post(
        "/api/leads/search/google-maps",
        json={"query": "coffee", "location": "Budapest", "radius": 2000},
        headers={"Authorization": f"Bearer {token}"},
    )
    assert response.status_code == 200
    [place] = response.json()
    assert place["id"] == "p1"
    assert place["place_id"] == "p1"
    assert place["name"] == "Bean There"
    assert place["phone"] == "+36 1 555 0100"
    assert place["website"] == "https://bean.test"
    assert place["types"] == ["cafe", "food", "store"]
    assert place["location"] == {"lat": 47.5, "lng": 19.04}


def test_search_requires_query():
    use_places(places_handler)
    client = TestClient(app)
    token = register_and_login(client, "noquery@example.com")
    response = client.post("/api/leads/search/google-maps", json={}, headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 400


def test_zero_results_is_empty_list():
    use_places(lambda request: httpx.Response(200, json={"status": "ZERO_RESULTS", "results": []}))
    client = TestClient(app)
    token = register_and_login(client, "zero@example.com")
    response = client.post(
        "/api/leads/search/google-maps",
        json={"query": "unicorns"},
        headers={"Authorization": f"Bearer {token}"},
    )
    assert response.status_code == 200
    assert response.json() == []


def test_request_denied_is_config_error():
    use_places(lambda request: httpx.Response(200, json={"status": "REQUEST_DENIED"}))
    client = TestClient(app)
    token = register_and_login(client, "denied@example.com")
    response = client.post(
        "/api/leads/search/google-maps",
        json={"query": "coffee"},
        headers={"Authorization": f"Bearer {token}"},
    )
    assert response.status_code == 400


def test_upstream_failure_is_500():
    use_places(lambda request: httpx.Response(503, text="unavailable"))
    client = TestClient(app)
    token = register_and_login(client, "down@example.com")
    response = client.post(
        "/api/leads/search/google-maps",
        json={"query": "coffee"},
        headers={"Authorization": f"Bearer {token}"},
    )
    assert response.status_code == 500
    assert "error" in response.json()

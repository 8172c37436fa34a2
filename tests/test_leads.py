import pytest
from fastapi.testclient import TestClient

from nexacrm.db.base import Base
from nexacrm.db.session import SessionLocal, engine
from nexacrm.main import app
from nexacrm.models.lead import Lead


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def register_and_login(client: TestClient, email: str, password: str = "secret") -> str:
    client.post("/api/auth/register", json={"name": "Lead Owner", "email": email, "password": password})
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200
    return response.json()["access_token"]


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def create_lead(client: TestClient, token: str, payload: dict):
    return client.post("/api/leads", json=payload, headers=auth(token))


def test_create_lead_applies_defaults():
    client = TestClient(app)
    token = register_and_login(client, "lead@example.com")
    response = create_lead(client, token, {"name": "Jane Prospect"})
    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Jane Prospect"
    assert data["status"] == "new"
    assert data["source"] == "manual"
    assert data["score"] == 0
    assert data["tags"] == []
    assert data["social_profiles"] == {}
    assert data["notes_count"] == 0


def test_create_lead_requires_name():
    client = TestClient(app)
    token = register_and_login(client, "noname@example.com")
    response = create_lead(client, token, {"email": "x@example.com"})
    assert response.status_code == 400


def test_invalid_status_rejected():
    client = TestClient(app)
    token = register_and_login(client, "badstatus@example.com")
    response = create_lead(client, token, {"name": "Lead", "status": "bogus"})
    assert response.status_code == 400


def test_score_is_clamped():
    client = TestClient(app)
    token = register_and_login(client, "clamp@example.com")
    high = create_lead(client, token, {"name": "High", "score": 150}).json()
    low = create_lead(client, token, {"name": "Low", "score": -5}).json()
    assert high["score"] == 100
    assert low["score"] == 0

    updated = client.put(f"/api/leads/{low['id']}", json={"score": 101}, headers=auth(token))
    assert updated.json()["score"] == 100


def test_update_lead_records_activity():
    client = TestClient(app)
    token = register_and_login(client, "update@example.com")
    lead = create_lead(client, token, {"name": "Acme Lead", "company": "Acme"}).json()

    response = client.put(f"/api/leads/{lead['id']}", json={"status": "won", "company": ""}, headers=auth(token))
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "won"
    assert data["name"] == "Acme Lead"
    assert data["company"] is None

    activity = client.get(f"/api/leads/{lead['id']}/activity", headers=auth(token)).json()
    actions = [entry["action"] for entry in activity]
    assert actions[0] == "updated_lead"
    assert "created_lead" in actions
    assert activity[0]["user_name"] == "Lead Owner"


def test_null_required_field_keeps_existing_value():
    client = TestClient(app)
    token = register_and_login(client, "keep@example.com")
    lead = create_lead(client, token, {"name": "Keeper", "tags": ["vip"]}).json()
    response = client.put(f"/api/leads/{lead['id']}", json={"name": None, "tags": None}, headers=auth(token))
    assert response.json()["name"] == "Keeper"
    assert response.json()["tags"] == ["vip"]


def test_list_filters_and_search():
    client = TestClient(app)
    token = register_and_login(client, "filters@example.com")
    create_lead(client, token, {"name": "Alice", "company": "Globex", "status": "contacted"})
    create_lead(client, token, {"name": "Bob", "email": "bob@initech.test", "source": "google_maps"})

    everything = client.get("/api/leads?status=all", headers=auth(token)).json()
    assert len(everything) == 2

    contacted = client.get("/api/leads?status=contacted", headers=auth(token)).json()
    assert [lead["name"] for lead in contacted] == ["Alice"]

    by_source = client.get("/api/leads?source=google_maps", headers=auth(token)).json()
    assert [lead["name"] for lead in by_source] == ["Bob"]

    searched = client.get("/api/leads?search=glob", headers=auth(token)).json()
    assert [lead["name"] for lead in searched] == ["Alice"]


def test_users_only_see_their_own_leads():
    client = TestClient(app)
    token_a = register_and_login(client, "a@example.com")
    token_b = register_and_login(client, "b@example.com")
    lead = create_lead(client, token_a, {"name": "Private"}).json()

    assert client.get("/api/leads", headers=auth(token_b)).json() == []
    assert client.get(f"/api/leads/{lead['id']}", headers=auth(token_b)).status_code == 404
    assert client.put(f"/api/leads/{lead['id']}", json={"name": "Stolen"}, headers=auth(token_b)).status_code == 404
    assert client.delete(f"/api/leads/{lead['id']}", headers=auth(token_b)).status_code == 404
    assert client.get(f"/api/leads/{lead['id']}/notes", headers=auth(token_b)).status_code == 404


def test_lead_stats():
    client = TestClient(app)
    token = register_and_login(client, "stats@example.com")
    create_lead(client, token, {"name": "One"})
    create_lead(client, token, {"name": "Two", "status": "won"})
    create_lead(client, token, {"name": "Three", "status": "won", "source": "social"})

    stats = client.get("/api/leads/stats", headers=auth(token)).json()
    assert stats["total"] == 3
    by_status = {row["status"]: row["count"] for row in stats["by_status"]}
    assert by_status == {"new": 1, "won": 2}
    by_source = {row["source"]: row["count"] for row in stats["by_source"]}
    assert by_source == {"manual": 2, "social": 1}
    assert len(stats["recent"]) == 3


def test_delete_lead_detaches_notes_tasks_and_files():
    client = TestClient(app)
    token = register_and_login(client, "delete@example.com")
    lead = create_lead(client, token, {"name": "Doomed"}).json()
    note = client.post("/api/notes", json={"title": "Call", "lead_id": lead["id"]}, headers=auth(token)).json()
    task = client.post("/api/tasks", json={"title": "Follow up", "lead_id": lead["id"]}, headers=auth(token)).json()
    uploaded = client.post(
        "/api/files/upload",
        files=[("files", ("brief.txt", b"hello", "text/plain"))],
        data={"lead_id": str(lead["id"])},
        headers=auth(token),
    ).json()

    response = client.delete(f"/api/leads/{lead['id']}", headers=auth(token))
    assert response.status_code == 200
    assert client.get(f"/api/leads/{lead['id']}", headers=auth(token)).status_code == 404

    notes = client.get("/api/notes", headers=auth(token)).json()
    assert [(n["id"], n["lead_id"]) for n in notes] == [(note["id"], None)]
    assert client.get(f"/api/tasks/{task['id']}", headers=auth(token)).json()["lead_id"] is None
    files = client.get("/api/files", headers=auth(token)).json()
    assert [(f["id"], f["lead_id"]) for f in files] == [(uploaded[0]["id"], None)]

    with SessionLocal() as db:
        assert db.query(Lead).count() == 0


def test_lead_sub_resources():
    client = TestClient(app)
    token = register_and_login(client, "subs@example.com")
    lead = create_lead(client, token, {"name": "Parent"}).json()
    other = create_lead(client, token, {"name": "Other"}).json()
    client.post("/api/notes", json={"title": "Mine", "lead_id": lead["id"]}, headers=auth(token))
    client.post("/api/notes", json={"title": "Not mine", "lead_id": other["id"]}, headers=auth(token))
    client.post("/api/tasks", json={"title": "Low", "priority": "low", "lead_id": lead["id"]}, headers=auth(token))
    client.post("/api/tasks", json={"title": "Urgent", "priority": "urgent", "lead_id": lead["id"]}, headers=auth(token))

    notes = client.get(f"/api/leads/{lead['id']}/notes", headers=auth(token)).json()
    assert [n["title"] for n in notes] == ["Mine"]
    assert notes[0]["lead_name"] == "Parent"

    tasks = client.get(f"/api/leads/{lead['id']}/tasks", headers=auth(token)).json()
    assert [t["title"] for t in tasks] == ["Urgent", "Low"]

    assert client.get(f"/api/leads/{lead['id']}/files", headers=auth(token)).json() == []


def test_search_treats_wildcards_literally():
    client = TestClient(app)
    token = register_and_login(client, "wildcards@example.com")
    create_lead(client, token, {"name": "100% Growth Co"})
    create_lead(client, token, {"name": "Plain Lead", "email": "plain_lead@example.com"})
    create_lead(client, token, {"name": "Other", "email": "otherx@example.com"})

    percent = client.get("/api/leads", params={"search": "%"}, headers=auth(token)).json()
    assert [lead["name"] for lead in percent] == ["100% Growth Co"]

    underscore = client.get("/api/leads", params={"search": "n_l"}, headers=auth(token)).json()
    assert [lead["name"] for lead in underscore] == ["Plain Lead"]

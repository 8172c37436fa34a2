import os

import pytest
from fastapi.testclient import TestClient

from nexacrm.db.base import Base
from nexacrm.db.session import engine
from nexacrm.main import app
from nexacrm.services import file_storage


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def register_and_login(client: TestClient, email: str, password: str = "secret") -> str:
    client.post("/api/auth/register", json={"name": "Uploader", "email": email, "password": password})
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200
    return response.json()["access_token"]


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def stored_blobs() -> set[str]:
    return set(os.listdir(file_storage.upload_dir()))


def test_upload_download_and_delete():
    client = TestClient(app)
    token = register_and_login(client, "files@example.com")
    lead = client.post("/api/leads", json={"name": "Client"}, headers=auth(token)).json()

    response = client.post(
        "/api/files/upload",
        files=[
            ("files", ("proposal.pdf", b"%PDF-1.4 fake", "application/pdf")),
            ("files", ("notes.TXT", b"plain text", "text/plain")),
        ],
        data={"lead_id": str(lead["id"])},
        headers=auth(token),
    )
    assert response.status_code == 201
    uploaded = response.json()
    assert [f["original_name"] for f in uploaded] == ["proposal.pdf", "notes.TXT"]
    assert uploaded[0]["size"] == len(b"%PDF-1.4 fake")
    assert uploaded[0]["lead_name"] == "Client"
    assert uploaded[1]["stored_name"].endswith(".txt")
    assert uploaded[0]["stored_name"] in stored_blobs()

    download = client.get(f"/api/files/download/{uploaded[1]['id']}", headers=auth(token))
    assert download.status_code == 200
    assert download.content == b"plain text"
    assert "notes.TXT" in download.headers["content-disposition"]

    assert client.delete(f"/api/files/{uploaded[0]['id']}", headers=auth(token)).status_code == 200
    assert uploaded[0]["stored_name"] not in stored_blobs()
    remaining = client.get("/api/files", headers=auth(token)).json()
    assert [f["id"] for f in remaining] == [uploaded[1]["id"]]


def test_disallowed_extension_rejects_whole_batch():
    client = TestClient(app)
    token = register_and_login(client, "reject@example.com")
    before = stored_blobs()
    response = client.post(
        "/api/files/upload",
        files=[
            ("files", ("ok.csv", b"a,b", "text/csv")),
            ("files", ("evil.exe", b"MZ", "application/octet-stream")),
        ],
        headers=auth(token),
    )
    assert response.status_code == 400
    assert "evil.exe" in response.json()["error"]
    assert client.get("/api/files", headers=auth(token)).json() == []
    assert stored_blobs() == before


def test_oversized_upload_leaves_nothing_behind(monkeypatch):
    monkeypatch.setattr(file_storage, "MAX_FILE_SIZE", 8)
    client = TestClient(app)
    token = register_and_login(client, "big@example.com")
    before = stored_blobs()
    response = client.post(
        "/api/files/upload",
        files=[
            ("files", ("small.txt", b"tiny", "text/plain")),
            ("files", ("huge.txt", b"way more than eight bytes", "text/plain")),
        ],
        headers=auth(token),
    )
    assert response.status_code == 400
    assert client.get("/api/files", headers=auth(token)).json() == []
    assert stored_blobs() == before


def test_too_many_files_rejected():
    client = TestClient(app)
    token = register_and_login(client, "many@example.com")
    files = [("files", (f"f{i}.txt", b"x", "text/plain")) for i in range(file_storage.MAX_FILES_PER_UPLOAD + 1)]
    response = client.post("/api/files/upload", files=files, headers=auth(token))
    assert response.status_code == 400


def test_relink_and_search_files():
    client = TestClient(app)
    token = register_and_login(client, "relink@example.com")
    lead = client.post("/api/leads", json={"name": "Target"}, headers=auth(token)).json()
    [record] = client.post(
        "/api/files/upload",
        files=[("files", ("contract.docx", b"doc", "application/octet-stream"))],
        headers=auth(token),
    ).json()
    assert record["lead_id"] is None

    linked = client.put(f"/api/files/{record['id']}", json={"lead_id": lead["id"]}, headers=auth(token)).json()
    assert linked["lead_id"] == lead["id"]
    assert [f["id"] for f in client.get(f"/api/files?lead_id={lead['id']}", headers=auth(token)).json()] == [record["id"]]
    assert client.get("/api/files?search=CONTRACT", headers=auth(token)).json()[0]["id"] == record["id"]
    assert client.get("/api/files?search=invoice", headers=auth(token)).json() == []

    unlinked = client.put(f"/api/files/{record['id']}", json={"lead_id": None}, headers=auth(token)).json()
    assert unlinked["lead_id"] is None


def test_missing_blob_download_returns_404():
    client = TestClient(app)
    token = register_and_login(client, "gone@example.com")
    [record] = client.post(
        "/api/files/upload",
        files=[("files", ("vanish.png", b"\x89PNG", "image/png"))],
        headers=auth(token),
    ).json()
    file_storage.remove_blob(record["stored_name"])

    response = client.get(f"/api/files/download/{record['id']}", headers=auth(token))
    assert response.status_code == 404


def test_files_are_private():
    client = TestClient(app)
    token_a = register_and_login(client, "fa@example.com")
    token_b = register_and_login(client, "fb@example.com")
    [record] = client.post(
        "/api/files/upload",
        files=[("files", ("private.txt", b"secret", "text/plain"))],
        headers=auth(token_a),
    ).json()
    assert client.get(f"/api/files/download/{record['id']}", headers=auth(token_b)).status_code == 404
    assert client.delete(f"/api/files/{record['id']}", headers=auth(token_b)).status_code == 404


def test_search_treats_wildcards_literally():
    client = TestClient(app)
    token = register_and_login(client, "wildfiles@example.com")
    client.post(
        "/api/files/upload",
        files=[
            ("files", ("q1_report.pdf", b"a", "application/pdf")),
            ("files", ("q1-report.pdf", b"b", "application/pdf")),
        ],
        headers=auth(token),
    )
    found = client.get("/api/files", params={"search": "q1_"}, headers=auth(token)).json()
    assert [f["original_name"] for f in found] == ["q1_report.pdf"]

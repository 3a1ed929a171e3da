"""HTTP tests for the transactions API"""
import pytest

from transactions_service.config import settings
from transactions_service.exceptions import ConflictError
from tests.conftest import make_activity, make_payload

BASE = f"{settings.API_PREFIX}/transactions"


def create(client, auth_headers, **overrides) -> dict:
    response = client.post(BASE, json=make_payload(**overrides), headers=auth_headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestPublicEndpoints:

    def test_health_is_public(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["service"] == settings.APP_NAME
        assert "timestamp" in body

    def test_root(self, client):
        assert client.get("/").json()["service"] == settings.APP_NAME


class TestAuthenticationRequired:

    @pytest.mark.parametrize("method,path", [
        ("get", BASE),
        ("post", BASE),
        ("get", f"{BASE}/stats"),
        ("get", f"{BASE}/some-id"),
        ("patch", f"{BASE}/some-id/status"),
        ("delete", f"{BASE}/some-id"),
        ("post", f"{BASE}/some-id/activities"),
        ("delete", f"{BASE}/some-id/documents/doc-id"),
    ])
    def test_rejects_missing_token(self, client, method, path):
        response = getattr(client, method)(path)

        assert response.status_code == 401
        assert response.json()["error"] == "AUTHENTICATION_FAILED"

    def test_rejects_bad_token(self, client):
        response = client.get(BASE, headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401


class TestTransactionEndpoints:

    def test_create_returns_camel_case(self, client, auth_headers):
        body = create(client, auth_headers, status="closed", coordinatorName="Jane", dispoWithEZ="no")

        assert body["status"] == "gathering_docs"
        assert body["coordinatorName"] == "Jane"
        assert body["dispoWithEZ"] == "no"
        assert body["contractDate"] == "2024-01-15"
        assert body["documents"] == []
        assert body["activities"] == []

    def test_create_missing_field(self, client, auth_headers):
        payload = make_payload()
        del payload["address"]

        response = client.post(BASE, json=payload, headers=auth_headers)

        assert response.status_code == 422

    def test_get_and_not_found(self, client, auth_headers):
        created = create(client, auth_headers)

        assert client.get(f"{BASE}/{created['id']}", headers=auth_headers).json() == created

        response = client.get(f"{BASE}/missing", headers=auth_headers)
        assert response.status_code == 404
        assert response.json()["error"] == "NOT_FOUND"
        assert response.json()["details"] == {"resource": "transaction", "id": "missing"}

    def test_list_and_filter(self, client, auth_headers):
        first = create(client, auth_headers)
        second = create(client, auth_headers)
        client.patch(f"{BASE}/{second['id']}/status", json={"status": "closed"}, headers=auth_headers)

        all_ids = [t["id"] for t in client.get(BASE, headers=auth_headers).json()]
        closed = client.get(BASE, params={"status": "closed"}, headers=auth_headers).json()

        assert all_ids == [second["id"], first["id"]]
        assert [t["id"] for t in closed] == [second["id"]]

    def test_list_unknown_status(self, client, auth_headers):
        response = client.get(BASE, params={"status": "archived"}, headers=auth_headers)

        assert response.status_code == 422

    def test_list_by_coordinator(self, client, auth_headers):
        jane = create(client, auth_headers, coordinatorName="Jane Doe")
        create(client, auth_headers, coordinatorName="Joe")

        response = client.get(f"{BASE}/coordinator/Jane Doe", headers=auth_headers)

        assert [t["id"] for t in response.json()] == [jane["id"]]

    def test_patch_updates_supplied_fields(self, client, auth_headers):
        created = create(client, auth_headers, sellerName="Bob")

        response = client.patch(
            f"{BASE}/{created['id']}", json={"notes": "HOA docs requested"}, headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["notes"] == "HOA docs requested"
        assert response.json()["sellerName"] == "Bob"

    def test_patch_rejects_unknown_field(self, client, auth_headers):
        created = create(client, auth_headers)

        response = client.patch(f"{BASE}/{created['id']}", json={"status": "closed"}, headers=auth_headers)

        assert response.status_code == 422

    def test_status_update(self, client, auth_headers):
        created = create(client, auth_headers)

        response = client.patch(
            f"{BASE}/{created['id']}/status", json={"status": "on_hold"}, headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["status"] == "on_hold"

    def test_delete(self, client, auth_headers):
        created = create(client, auth_headers)

        response = client.delete(f"{BASE}/{created['id']}", headers=auth_headers)

        assert response.status_code == 204
        assert client.get(f"{BASE}/{created['id']}", headers=auth_headers).status_code == 404
        assert client.delete(f"{BASE}/{created['id']}", headers=auth_headers).status_code == 404

    def test_stats(self, client, auth_headers):
        create(client, auth_headers)
        create(client, auth_headers)
        closed = create(client, auth_headers)
        client.patch(f"{BASE}/{closed['id']}/status", json={"status": "closed"}, headers=auth_headers)

        response = client.get(f"{BASE}/stats", headers=auth_headers)

        assert response.json() == {"total": 3, "byStatus": {"gathering_docs": 2, "closed": 1}}


class TestActivityEndpoints:

    def test_activity_flow(self, client, auth_headers):
        created = create(client, auth_headers)
        url = f"{BASE}/{created['id']}/activities"

        first = client.post(url, json=make_activity(message="first"), headers=auth_headers)
        second = client.post(url, json=make_activity(message="second"), headers=auth_headers)
        assert first.status_code == 201
        activities = second.json()["activities"]
        assert [a["message"] for a in activities] == ["second", "first"]

        target = activities[1]["id"]
        liked = client.post(f"{url}/{target}/like", headers=auth_headers)
        assert liked.json()["activities"][1]["likes"] == 1

        removed = client.delete(f"{url}/{activities[0]['id']}", headers=auth_headers)
        assert [a["id"] for a in removed.json()["activities"]] == [target]

    def test_remove_missing_activity(self, client, auth_headers):
        created = create(client, auth_headers)

        response = client.delete(f"{BASE}/{created['id']}/activities/nope", headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["details"] == {"resource": "activity", "id": "nope"}


class TestDocumentEndpoints:

    @pytest.fixture(autouse=True)
    def upload_dir(self, tmp_path, monkeypatch):
        monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path))
        return tmp_path

    def test_upload_and_remove(self, client, auth_headers, upload_dir):
        created = create(client, auth_headers)
        url = f"{BASE}/{created['id']}/documents"

        response = client.post(
            url,
            files={"file": ("purchase-agreement.pdf", b"%PDF-1.4 body", "application/pdf")},
            data={"uploadedBy": "Alice"},
            headers=auth_headers,
        )

        assert response.status_code == 201, response.text
        document = response.json()["documents"][0]
        assert document["name"] == "purchase-agreement.pdf"
        assert document["uploadedBy"] == "Alice"
        assert document["fileSize"] == len(b"%PDF-1.4 body")
        assert document["mimeType"] == "application/pdf"
        assert document["url"].startswith(f"{settings.UPLOAD_URL_PREFIX}/")
        stored_name = document["url"].rsplit("/", 1)[1]
        assert (upload_dir / stored_name).read_bytes() == b"%PDF-1.4 body"

        removed = client.delete(f"{url}/{document['id']}", headers=auth_headers)
        assert removed.json()["documents"] == []

    def test_upload_defaults_attribution_to_caller(self, client, auth_headers):
        created = create(client, auth_headers)

        response = client.post(
            f"{BASE}/{created['id']}/documents",
            files={"file": ("notes.txt", b"hello", "text/plain")},
            headers=auth_headers,
        )

        assert response.json()["documents"][0]["uploadedBy"] == "testuser"

    def test_upload_rejects_disallowed_type(self, client, auth_headers, upload_dir):
        created = create(client, auth_headers)

        response = client.post(
            f"{BASE}/{created['id']}/documents",
            files={"file": ("script.exe", b"MZ", "application/octet-stream")},
            headers=auth_headers,
        )

        assert response.status_code == 415
        assert list(upload_dir.iterdir()) == []

    def test_upload_to_missing_transaction(self, client, auth_headers, upload_dir):
        response = client.post(
            f"{BASE}/missing/documents",
            files={"file": ("a.pdf", b"%PDF", "application/pdf")},
            headers=auth_headers,
        )

        assert response.status_code == 404
        assert list(upload_dir.iterdir()) == []

    def test_failed_attach_discards_stored_file(self, client, auth_headers, service, upload_dir, monkeypatch):
        created = create(client, auth_headers)

        async def lose_race(transaction_id, payload):
            raise ConflictError(message="Transaction is being modified concurrently")

        monkeypatch.setattr(service, "add_document", lose_race)

        response = client.post(
            f"{BASE}/{created['id']}/documents",
            files={"file": ("a.pdf", b"%PDF", "application/pdf")},
            headers=auth_headers,
        )

        assert response.status_code == 409
        assert list(upload_dir.iterdir()) == []

    def test_upload_without_file(self, client, auth_headers):
        created = create(client, auth_headers)

        response = client.post(f"{BASE}/{created['id']}/documents", headers=auth_headers)

        assert response.status_code == 422

from fastapi.testclient import TestClient

from chatarchive.server.api.responses import content_disposition
from tests.mocks import MockApplicationServer


def _upload(
    client: TestClient,
    name="x.txt",
    content=b"0123456789",
    mime="text/plain",
    **form,
):
    return client.post(
        "/api/files",
        files={"file": (name, content, mime)},
        data=form,
    )


class TestUploadEndpoint:
    def test_upload_returns_id_and_url(self, client: TestClient):
        response = _upload(client, conversation_id="c1")

        assert response.status_code == 200
        data = response.json()
        assert data["url"] == f"http://testserver/api/files/{data['id']}"
        assert data["filename"] == "x.txt"
        assert data["mime_type"] == "text/plain"
        assert data["conversation_id"] == "c1"

    def test_upload_without_conversation(self, client: TestClient):
        response = _upload(client)

        assert response.status_code == 200
        assert response.json()["conversation_id"] is None

    def test_upload_appears_as_message(self, client: TestClient):
        file_id = _upload(client, conversation_id="c1").json()["id"]

        messages = client.get("/api/messages", params={"conversation_id": "c1"}).json()

        assert len(messages) == 1
        assert messages[0]["role"] == "user"
        assert messages[0]["content"] == ""
        assert messages[0]["attachment_id"] == file_id
        assert messages[0]["attachment_name"] == "x.txt"

    def test_upload_without_file(self, client: TestClient):
        response = client.post("/api/files", data={"conversation_id": "c1"})

        assert response.status_code == 400
        data = response.json()
        assert data["ok"] is False
        assert data["error"] == "no file"

    def test_upload_too_large(
        self, client: TestClient, mock_server: MockApplicationServer
    ):
        response = _upload(client, content=b"x" * 1025)

        assert response.status_code == 413
        assert response.json()["error_type"] == "PayloadTooLarge"
        assert mock_server.service_container.files_store.count() == 0


class TestFetchEndpoint:
    def test_fetch_returns_exact_bytes(self, client: TestClient):
        file_id = _upload(client).json()["id"]

        response = client.get(f"/api/files/{file_id}")

        assert response.status_code == 200
        assert response.content == b"0123456789"
        assert response.headers["content-type"] == "text/plain"
        assert response.headers["content-disposition"] == 'inline; filename="x.txt"'

    def test_fetch_binary_payload(self, client: TestClient):
        payload = bytes(range(256))
        file_id = _upload(
            client, name="raw.bin", content=payload, mime="application/octet-stream"
        ).json()["id"]

        response = client.get(f"/api/files/{file_id}")

        assert response.content == payload

    def test_fetch_missing_file(self, client: TestClient):
        response = client.get("/api/files/999")

        assert response.status_code == 404
        assert response.json()["error"] == "file not found"

    def test_fetch_invalid_id(self, client: TestClient):
        response = client.get("/api/files/abc")

        assert response.status_code == 400
        assert response.json()["error_type"] == "ValidationError"


class TestDeleteEndpoint:
    def test_delete_file(self, client: TestClient):
        file_id = _upload(client).json()["id"]

        response = client.delete(f"/api/files/{file_id}")

        assert response.status_code == 200
        assert response.json() == {"ok": True, "deleted": file_id}
        assert client.get(f"/api/files/{file_id}").status_code == 404

    def test_delete_keeps_the_message_reference(self, client: TestClient):
        file_id = _upload(client).json()["id"]

        client.delete(f"/api/files/{file_id}")
        messages = client.get("/api/messages").json()

        assert messages[0]["attachment_id"] == file_id

    def test_delete_missing_file(self, client: TestClient):
        response = client.delete("/api/files/12")

        assert response.status_code == 404
        assert response.json()["error_type"] == "NotFound"


class TestServiceUnavailable:
    def test_upload_without_services(self, client_no_services: TestClient):
        response = _upload(client_no_services)

        assert response.status_code == 503
        assert response.json()["ok"] is False


class TestContentDisposition:
    def test_plain_filename(self):
        assert content_disposition("x.txt") == 'inline; filename="x.txt"'

    def test_quotes_are_escaped(self):
        assert (
            content_disposition('say "hi".txt')
            == 'inline; filename="say \\"hi\\".txt"'
        )

    def test_non_latin_filename_gets_utf8_parameter(self):
        header = content_disposition("ملف.txt")

        header.encode("latin-1")
        assert header.startswith('inline; filename="???.txt"')
        assert header.endswith("filename*=UTF-8''%D9%85%D9%84%D9%81.txt")

from fastapi.testclient import TestClient

from chatarchive.storage.database import queries
from tests.mocks import MockApplicationServer


def _seed(client: TestClient):
    client.post("/api/messages", json={"role": "user", "content": "a", "conversation_id": "c1"})
    client.post("/api/messages", json={"role": "user", "content": "b", "conversation_id": "c2"})
    client.post(
        "/api/files",
        files={"file": ("c1.txt", b"abc", "text/plain")},
        data={"conversation_id": "c1"},
    )


class TestDeleteConversationEndpoint:
    def test_delete_conversation(self, client: TestClient):
        _seed(client)

        response = client.delete("/api/conversations/c1")

        assert response.status_code == 200
        assert response.json() == {
            "ok": True,
            "messages_deleted": 2,
            "files_deleted": 1,
        }
        rows = client.get("/api/messages").json()
        assert [r["conversation_id"] for r in rows] == ["c2"]

    def test_unknown_conversation(self, client: TestClient):
        _seed(client)

        response = client.delete("/api/conversations/missing")

        assert response.status_code == 200
        assert response.json()["messages_deleted"] == 0
        assert response.json()["files_deleted"] == 0

    def test_partial_failure_reports_what_was_deleted(
        self, client: TestClient, mock_server: MockApplicationServer
    ):
        _seed(client)
        mock_server.service_container.files_store.fail_on(
            queries.DELETE_CONVERSATION_ATTACHMENTS
        )

        response = client.delete("/api/conversations/c1")

        assert response.status_code == 500
        data = response.json()
        assert data["ok"] is False
        assert data["error_type"] == "StatementError"
        assert data["context"]["messages_deleted"] == 2


class TestDeleteAllEndpoint:
    def test_all_is_not_treated_as_a_conversation_id(self, client: TestClient):
        _seed(client)

        response = client.delete("/api/conversations/all")

        assert response.status_code == 200
        assert response.json() == {
            "ok": True,
            "messages_deleted": 3,
            "files_deleted": 1,
        }

    def test_list_is_empty_afterwards(self, client: TestClient):
        _seed(client)

        client.delete("/api/conversations/all")

        assert client.get("/api/messages").json() == []

    def test_delete_all_on_empty_archive(self, client: TestClient):
        response = client.delete("/api/conversations/all")

        assert response.status_code == 200
        assert response.json()["messages_deleted"] == 0

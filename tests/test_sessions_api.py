# tests/test_sessions_api.py
import base64
import json


def _save(client, **body):
    payload = {"user_id": "user-1", "sender": "user", "text": "hello"}
    payload.update(body)
    return client.post("/api/v1/sessions/messages", json=payload)


def test_create_session(client):
    res = client.post("/api/v1/sessions", json={"user_id": "user-1", "title": "Cards"})
    assert res.status_code == 200
    session = res.json()["session"]
    assert session["user_id"] == "user-1"
    assert session["title"] == "Cards"
    assert session["is_bookmarked"] is False


def test_save_message_creates_session(client):
    res = _save(client)
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert body["session_id"].startswith("session-")
    assert body["user_id"] == "user-1"

    second = _save(client, session_id=body["session_id"], sender="bot", text="Hi, how can I help?")
    assert second.json()["session_id"] == body["session_id"]

    detail = client.get(f"/api/v1/sessions/{body['session_id']}", params={"user_id": "user-1"}).json()["session"]
    assert [m["text"] for m in detail["messages"]] == ["hello", "Hi, how can I help?"]
    assert detail["messages"][0]["sentiment"] is not None
    assert detail["messages"][1]["sentiment"] is None
    assert detail["last_message_preview"] == "Hi, how can I help?"


def test_save_message_validation(client):
    assert _save(client, text="", attachments=[]).status_code == 400
    assert _save(client, sender="agent").status_code == 422
    assert _save(client, user_id="").status_code == 422


def test_save_message_with_attachment(client):
    raw = b"%PDF-1.4 statement"
    attachment = {
        "file_name": "statement.pdf",
        "mime_type": "application/pdf",
        "file_size": len(raw),
        "data": base64.b64encode(raw).decode("ascii"),
    }
    session_id = _save(client, text="", attachments=[attachment]).json()["session_id"]

    session = client.get(f"/api/v1/sessions/{session_id}", params={"user_id": "user-1"}).json()["session"]
    saved = session["messages"][0]["attachments"][0]
    assert saved["file_name"] == "statement.pdf"
    assert base64.b64decode(saved["data"]) == raw

    too_many = _save(client, attachments=[attachment] * 6)
    assert too_many.status_code == 400


def test_session_is_private_to_its_owner(client):
    session_id = _save(client).json()["session_id"]
    assert client.get(f"/api/v1/sessions/{session_id}", params={"user_id": "user-2"}).status_code == 404
    assert _save(client, user_id="user-2", session_id=session_id).status_code == 404
    assert client.delete(f"/api/v1/sessions/{session_id}", params={"user_id": "user-2"}).status_code == 404


def test_list_search_and_bookmarks(client):
    first = _save(client, text="How do I block my card?").json()["session_id"]
    second = _save(client, text="Open a savings account").json()["session_id"]
    _save(client, user_id="user-2", text="card question")

    listed = client.get("/api/v1/sessions", params={"user_id": "user-1"}).json()
    assert listed["user_id"] == "user-1"
    assert [s["id"] for s in listed["sessions"]] == [second, first]
    assert listed["sessions"][0]["message_count"] == 1

    found = client.get("/api/v1/sessions/search", params={"user_id": "user-1", "q": "card"}).json()["sessions"]
    assert [s["id"] for s in found] == [first]

    res = client.patch(f"/api/v1/sessions/{first}/bookmark", json={"user_id": "user-1"})
    assert res.json() == {"is_bookmarked": True}
    marked = client.get("/api/v1/sessions/bookmarked", params={"user_id": "user-1"}).json()["sessions"]
    assert [s["id"] for s in marked] == [first]
    assert client.patch(f"/api/v1/sessions/{first}/bookmark", json={"user_id": "user-2"}).status_code == 404


def test_rename_and_delete(client):
    session_id = _save(client).json()["session_id"]
    res = client.patch(f"/api/v1/sessions/{session_id}/title", json={"user_id": "user-1", "title": "Loan help"})
    assert res.json() == {"success": True}
    detail = client.get(f"/api/v1/sessions/{session_id}", params={"user_id": "user-1"}).json()["session"]
    assert detail["title"] == "Loan help"

    assert client.delete(f"/api/v1/sessions/{session_id}", params={"user_id": "user-1"}).json() == {"success": True}
    assert client.get(f"/api/v1/sessions/{session_id}", params={"user_id": "user-1"}).status_code == 404


def test_export_session(client):
    session_id = _save(client, text="What is my balance?").json()["session_id"]

    res = client.get(f"/api/v1/sessions/{session_id}/export", params={"user_id": "user-1", "format": "json"})
    assert res.status_code == 200
    assert f"chat-{session_id}.json" in res.headers["content-disposition"]
    assert json.loads(res.text)["session"]["messages"][0]["text"] == "What is my balance?"

    res = client.get(f"/api/v1/sessions/{session_id}/export", params={"user_id": "user-1", "format": "csv"})
    assert res.headers["content-type"].startswith("text/csv")
    assert res.text.splitlines()[0] == '"Timestamp","Sender","Message"'

    bad = client.get(f"/api/v1/sessions/{session_id}/export", params={"user_id": "user-1", "format": "xml"})
    assert bad.status_code == 400


def test_client_attachment_ids_do_not_collide(client):
    raw = b"same file twice"
    attachment = {
        "id": "client-generated-id",
        "file_name": "note.txt",
        "mime_type": "text/plain",
        "file_size": len(raw),
        "data": base64.b64encode(raw).decode("ascii"),
    }
    first = _save(client, text="one", attachments=[attachment, attachment])
    assert first.status_code == 200
    session_id = first.json()["session_id"]
    assert _save(client, session_id=session_id, text="two", attachments=[attachment]).status_code == 200

    session = client.get(f"/api/v1/sessions/{session_id}", params={"user_id": "user-1"}).json()["session"]
    ids = [a["id"] for m in session["messages"] for a in m["attachments"]]
    assert len(ids) == 3
    assert len(set(ids)) == 3
    assert "client-generated-id" not in ids

# tests/test_cases_api.py
import csv
import io


def _create(client, **extra):
    body = {
        "messages": [
            {"sender": "user", "text": "My card is blocked"},
            {"sender": "bot", "text": "Let me check that for you."},
        ],
    }
    body.update(extra)
    res = client.post("/api/v1/cases", json=body)
    assert res.status_code == 200, res.text
    return res.json()


def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json()["status"] == "healthy"


def test_create_and_get_case(client):
    created = _create(client, contact_email="jane@example.com")
    case_id = created["case_id"]
    assert created["case"]["status"] == "open"

    res = client.get(f"/api/v1/cases/{case_id}")
    assert res.status_code == 200
    case = res.json()["case"]
    assert case["id"] == case_id
    assert case["contact_email"] == "jane@example.com"
    assert [m["sender"] for m in case["messages"]] == ["user", "bot"]


def test_get_unknown_case(client):
    assert client.get("/api/v1/cases/CASE-0-UNKNOWN").status_code == 404


def test_escalate_endpoint(client):
    res = client.post("/api/v1/cases/escalate", json={
        "messages": [{"sender": "user", "text": "I want a manager"}],
        "reason": "Customer requested a manager",
    })
    assert res.status_code == 200
    case = res.json()["case"]
    assert case["status"] == "escalated"
    assert case["summary"] == "Customer requested a manager"
    assert case["escalated_at"] is not None


def test_list_cases_by_status(client):
    _create(client)
    client.post("/api/v1/cases/escalate", json={"messages": []})

    assert len(client.get("/api/v1/cases").json()["cases"]) == 2
    escalated = client.get("/api/v1/cases", params={"status": "escalated"}).json()["cases"]
    assert [c["status"] for c in escalated] == ["escalated"]
    assert client.get("/api/v1/cases", params={"status": "bogus"}).status_code == 400


def test_update_status(client):
    case_id = _create(client)["case_id"]

    res = client.patch(f"/api/v1/cases/{case_id}", json={"status": "escalated"})
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    escalated_at = body["case"]["escalated_at"]
    assert escalated_at is not None

    client.patch(f"/api/v1/cases/{case_id}", json={"status": "resolved"})
    again = client.patch(f"/api/v1/cases/{case_id}", json={"status": "escalated"}).json()
    assert again["case"]["escalated_at"] == escalated_at


def test_update_status_errors(client):
    case_id = _create(client)["case_id"]
    assert client.patch(f"/api/v1/cases/{case_id}", json={"status": "archived"}).status_code == 400
    assert client.patch("/api/v1/cases/CASE-missing", json={"status": "resolved"}).status_code == 404
    assert client.patch(f"/api/v1/cases/{case_id}", json={}).status_code == 422


def test_export_single_case(client):
    case_id = _create(client, summary='Says "urgent"')["case_id"]
    res = client.get(f"/api/v1/cases/{case_id}/export")
    assert res.status_code == 200
    assert res.headers["content-type"].startswith("text/csv")
    assert f'filename="case-{case_id}.csv"' in res.headers["content-disposition"]
    rows = list(csv.reader(io.StringIO(res.text)))
    assert rows[2] == ["Summary", 'Says "urgent"']

    assert client.get("/api/v1/cases/CASE-missing/export").status_code == 404


def test_export_all_cases(client):
    _create(client)
    _create(client)
    res = client.get("/api/v1/cases/export", params={"format": "csv"})
    assert res.status_code == 200
    rows = list(csv.reader(io.StringIO(res.text)))
    assert len(rows) == 3
    assert rows[1][-1] == "2"

    assert client.get("/api/v1/cases/export", params={"format": "pdf"}).status_code == 400


def test_stats_endpoint(client):
    case_id = _create(client)["case_id"]
    _create(client)
    client.patch(f"/api/v1/cases/{case_id}", json={"status": "resolved"})

    stats = client.get("/api/v1/cases/stats").json()
    assert stats["total"] == 2
    assert stats["resolved"] == 1
    assert stats["open"] == 1
    assert stats["resolution_rate"] == 50
    assert stats["total_messages"] == 4
    assert len(stats["daily_activity"]) == 7


def test_qrcode_endpoint(client):
    case_id = _create(client)["case_id"]
    res = client.get(f"/api/v1/cases/{case_id}/qrcode")
    assert res.status_code == 200
    body = res.json()
    assert body["case_id"] == case_id
    assert body["case_url"].endswith(f"/case/{case_id}")
    assert body["qr_code"].startswith("data:image/png;base64,")
    assert client.get("/api/v1/cases/CASE-missing/qrcode").status_code == 404

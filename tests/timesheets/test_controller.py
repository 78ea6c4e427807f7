from __future__ import annotations

import pytest

from src.timesheet_api.timesheet_api.container import Container
from src.timesheet_api.timesheet_api.main import create_app
from src.timesheet_api.timesheet_api.timesheets.service import TimesheetService


@pytest.fixture
def conn(fake_db):
    return fake_db()


@pytest.fixture
def client(timesheets_repo, conn):
    container = Container(
        conn=conn,
        timesheets_repo=timesheets_repo,
        timesheet_service=TimesheetService(timesheets_repo),
    )
    app = create_app(container=container, settings_module="config.testing")
    return app.test_client()


def _create(client, **overrides) -> int:
    body = {"employee_name": "Budi", "department": "IT", "month": 3, "year": 2024}
    body.update(overrides)
    res = client.post("/timesheets", json=body)
    assert res.status_code == 201, res.get_json()
    return res.get_json()["data"]["id"]


def test_create_returns_envelope_with_id(client):
    res = client.post(
        "/timesheets",
        json={"employee_name": "Budi", "month": 3, "year": 2024, "total_working_days": 21},
        headers={"X-Request-ID": "req-1"},
    )

    body = res.get_json()
    assert res.status_code == 201
    assert body["success"] is True
    assert body["code"] == 201
    assert body["status"] == "Created"
    assert body["message"] == "Timesheet created"
    assert body["data"] == {"id": 1}
    assert body["meta"] == {"request_id": "req-1"}
    assert "error" not in body
    assert res.headers["X-Request-ID"] == "req-1"


def test_request_id_is_generated_when_missing(client):
    res = client.get("/timesheets")

    assert res.headers["X-Request-ID"]
    assert res.get_json()["meta"]["request_id"] == res.headers["X-Request-ID"]


def test_create_missing_required_fields_is_unprocessable(client):
    res = client.post("/timesheets", json={"department": "IT", "month": "3"})

    body = res.get_json()
    assert res.status_code == 422
    assert body["success"] is False
    fields = {d["field"] for d in body["error"]}
    assert fields == {"employee_name", "month", "year"}
    assert all(d["type"] == "validation_error" for d in body["error"])


def test_create_with_non_json_body_is_unprocessable(client):
    res = client.post("/timesheets", data="not json", content_type="text/plain")

    assert res.status_code == 422
    assert res.get_json()["error"][0]["field"] == "body"


def test_create_out_of_range_month_is_bad_request(client):
    res = client.post("/timesheets", json={"employee_name": "Budi", "month": 13, "year": 2024})

    assert res.status_code == 400
    assert res.get_json()["message"] == "Invalid input"


def test_create_duplicate_is_conflict(client):
    _create(client)

    res = client.post("/timesheets", json={"employee_name": "Budi", "month": 3, "year": 2024})

    assert res.status_code == 409


def test_list_filters_and_orders(client):
    _create(client, employee_name="A", month=1, year=2024)
    _create(client, employee_name="B", month=9, year=2023)
    _create(client, employee_name="C", month=2, year=2024)

    res = client.get("/timesheets?year=2024")
    all_res = client.get("/timesheets?month=abc")

    assert [t["employee_name"] for t in res.get_json()["data"]] == ["C", "A"]
    assert [t["employee_name"] for t in all_res.get_json()["data"]] == ["C", "A", "B"]


def test_list_with_no_match_returns_empty_list(client):
    res = client.get("/timesheets?employee_name=Nobody")

    assert res.status_code == 200
    assert res.get_json()["data"] == []


def test_get_returns_entries_and_summary(client):
    ts_id = _create(client)
    client.post(f"/timesheets/{ts_id}/entries", json={"date": "2024-03-05", "total_hours": 4, "overtime_hours": None})
    client.post(
        f"/timesheets/{ts_id}/entries",
        json={"date": "2024-03-04", "start_time": "08.00", "end_time": "17:30", "overtime_hours": 1},
    )
    client.post(f"/timesheets/{ts_id}/entries", json={"date": "2024-03-06", "remarks": "leave"})

    res = client.get(f"/timesheets/{ts_id}")

    data = res.get_json()["data"]
    assert res.status_code == 200
    assert [e["date"] for e in data["entries"]] == ["2024-03-04", "2024-03-05", "2024-03-06"]
    first = data["entries"][0]
    assert first["day_name"] == "Monday"
    assert (first["start_time"], first["end_time"], first["total_hours"]) == ("08:00:00", "17:30:00", 9.5)
    assert data["summary"] == {"days_filled": 2, "total_hours": 13.5, "overtime_hours": 1.0}


def test_get_unknown_timesheet_is_not_found(client):
    res = client.get("/timesheets/404")

    assert res.status_code == 404
    assert res.get_json()["message"] == "Not found"


def test_update_timesheet(client):
    ts_id = _create(client)

    res = client.put(f"/timesheets/{ts_id}", json={"employee_name": "Budi", "month": 4, "year": 2024})
    missing = client.put("/timesheets/999", json={"employee_name": "Budi", "month": 4, "year": 2024})

    assert res.status_code == 200
    assert res.get_json()["data"] == {"id": ts_id}
    assert client.get(f"/timesheets/{ts_id}").get_json()["data"]["month"] == 4
    assert missing.status_code == 404


def test_delete_timesheet_twice(client):
    ts_id = _create(client)

    first = client.delete(f"/timesheets/{ts_id}")
    second = client.delete(f"/timesheets/{ts_id}")

    assert first.status_code == 204
    assert first.data == b""
    assert second.status_code == 404


def test_add_entry_bad_date_is_bad_request(client):
    ts_id = _create(client)

    res = client.post(f"/timesheets/{ts_id}/entries", json={"date": "05/03/2024"})

    body = res.get_json()
    assert res.status_code == 400
    assert body["message"] == "Invalid date"
    assert body["error"] == [{"type": "validation_error", "field": "date", "message": "format YYYY-MM-DD"}]


def test_add_entry_bad_time_is_bad_request(client):
    ts_id = _create(client)

    res = client.post(f"/timesheets/{ts_id}/entries", json={"date": "2024-03-05", "start_time": "25:00"})

    assert res.status_code == 400
    assert res.get_json()["error"][0]["field"] == "start_time"


def test_add_entry_unpadded_date_or_time_is_bad_request(client, timesheets_repo):
    ts_id = _create(client)

    bad_date = client.post(f"/timesheets/{ts_id}/entries", json={"date": "2024-3-5"})
    bad_time = client.post(f"/timesheets/{ts_id}/entries", json={"date": "2024-03-05", "end_time": "17:5"})

    assert bad_date.status_code == 400
    assert bad_date.get_json()["message"] == "Invalid date"
    assert bad_time.status_code == 400
    assert bad_time.get_json()["error"][0]["field"] == "end_time"
    assert timesheets_repo.entries == {}


def test_add_entry_without_date_is_unprocessable(client):
    ts_id = _create(client)

    res = client.post(f"/timesheets/{ts_id}/entries", json={"start_time": "08:00"})

    assert res.status_code == 422


def test_add_entry_to_unknown_timesheet_is_not_found(client):
    res = client.post("/timesheets/77/entries", json={"date": "2024-03-05"})

    assert res.status_code == 404


def test_update_entry_without_date_keeps_date(client, timesheets_repo):
    ts_id = _create(client)
    entry_id = client.post(f"/timesheets/{ts_id}/entries", json={"date": "2024-03-05"}).get_json()["data"]["id"]

    res = client.put(f"/entries/{entry_id}", json={"start_time": "09:00", "end_time": "13:00"})

    assert res.status_code == 200
    assert res.get_json()["data"] == {"id": entry_id}
    stored = timesheets_repo.entries[entry_id]
    assert stored.work_date.isoformat() == "2024-03-05"
    assert stored.total_hours == 4.0


def test_update_and_delete_unknown_entry_are_not_found(client):
    assert client.put("/entries/5", json={"date": "2024-03-05"}).status_code == 404
    assert client.delete("/entries/5").status_code == 404


def test_delete_entry(client):
    ts_id = _create(client)
    entry_id = client.post(f"/timesheets/{ts_id}/entries", json={"date": "2024-03-05"}).get_json()["data"]["id"]

    assert client.delete(f"/entries/{entry_id}").status_code == 204
    assert client.get(f"/timesheets/{ts_id}").get_json()["data"]["entries"] == []


def test_export_returns_pdf(client):
    ts_id = _create(client)
    client.post(f"/timesheets/{ts_id}/entries", json={"date": "2024-03-05", "total_hours": 8})

    res = client.get(f"/timesheets/{ts_id}/export")

    assert res.status_code == 200
    assert res.mimetype == "application/pdf"
    assert res.data.startswith(b"%PDF")
    assert res.headers["Content-Disposition"] == f"inline; filename=timesheet_2024_03_{ts_id}.pdf"


def test_export_unknown_timesheet_is_not_found(client):
    assert client.get("/timesheets/3/export").status_code == 404


def test_unexpected_errors_do_not_leak_details(client, timesheets_repo, monkeypatch, caplog):
    def broken(_f):
        raise RuntimeError("secret connection string")

    monkeypatch.setattr(timesheets_repo, "list_headers", broken)

    res = client.get("/timesheets")

    body = res.get_json()
    assert res.status_code == 500
    assert body["message"] == "Internal server error"
    assert "secret" not in res.get_data(as_text=True)
    assert any("unhandled error in GET /timesheets" in r.getMessage() for r in caplog.records)


def test_unknown_route_uses_envelope(client):
    res = client.get("/nope")

    assert res.status_code == 404
    assert res.get_json()["success"] is False


def test_health_reports_store_state(client, conn):
    ok = client.get("/health")
    conn.healthy = False
    down = client.get("/health")

    assert ok.status_code == 200
    assert ok.get_json()["data"] == {"status": "ok"}
    assert down.status_code == 503
    assert down.get_json()["message"] == "DB down"

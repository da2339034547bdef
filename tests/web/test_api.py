import pytest

from src.attendance_engine.attendance_engine.main import create_app


@pytest.fixture
def app(engine, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(container=engine.container)


def _login(client, *, user_id=100, role="ADMINISTRATOR", employee_id=None):
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
        sess["role"] = role
        if employee_id is not None:
            sess["employee_id"] = employee_id


@pytest.fixture
def admin_client(app):
    client = app.test_client()
    _login(client)
    return client


@pytest.fixture
def user_client(app):
    client = app.test_client()
    _login(client, user_id=1, role="UTILISATEUR", employee_id=1)
    return client


def test_login_required(app):
    resp = app.test_client().get("/api/schedules")
    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


def test_testing_settings_loaded(app):
    assert app.config["TESTING"] is True


def test_clock_in_out_roundtrip(user_client):
    resp = user_client.post("/api/time-entries/1/clock-in", json={"at": "2024-03-04T08:00:00"})
    assert resp.status_code == 201
    entry_id = resp.get_json()["data"]["id"]

    resp = user_client.post("/api/time-entries/1/clock-out", json={"at": "2024-03-04T17:00:00"})
    body = resp.get_json()
    assert resp.status_code == 200
    assert body["success"] is True
    assert body["data"]["totalHours"] == 9.0
    assert body["data"]["status"] == "COMPLETED"

    listed = user_client.get("/api/time-entries/1?startDate=2024-03-01&endDate=2024-03-31").get_json()["data"]
    assert [e["id"] for e in listed] == [entry_id]


def test_domain_errors_map_to_status_codes(user_client):
    user_client.post("/api/time-entries/1/clock-in", json={"at": "2024-03-04T08:00:00"})

    dup = user_client.post("/api/time-entries/1/clock-in", json={"at": "2024-03-04T09:00:00"})
    assert dup.status_code == 409
    assert dup.get_json()["error"] == "DuplicateEntryError"

    forbidden = user_client.post("/api/time-entries/2/clock-in", json={"at": "2024-03-04T08:00:00"})
    assert forbidden.status_code == 403

    missing = user_client.get("/api/time-entries/entry/999")
    assert missing.status_code == 404

    bad_date = user_client.get("/api/time-entries/1?startDate=yesterday&endDate=2024-03-31")
    assert bad_date.status_code == 400


def test_no_open_entry_is_conflict(user_client):
    resp = user_client.post("/api/time-entries/1/clock-out", json={"at": "2024-03-04T17:00:00"})
    assert resp.status_code == 409
    assert resp.get_json()["error"] == "NoOpenEntryError"


def test_schedule_configuration_errors(admin_client):
    resp = admin_client.post(
        "/api/schedules",
        json={
            "label": "Broken",
            "startTime": "08:00",
            "endTime": "17:00",
            "periods": [
                {"name": "A", "startTime": "08:00", "endTime": "12:00"},
                {"name": "B", "startTime": "11:00", "endTime": "13:00"},
            ],
        },
    )
    assert resp.status_code == 422
    assert resp.get_json()["error"] == "ScheduleConfigurationError"


def test_employee_schedule_and_rate(admin_client, engine):
    schedule = admin_client.get("/api/employees/1/schedule").get_json()["data"]
    assert schedule["label"] == "Standard day"
    assert schedule["theoreticalDayHours"] == 8.0

    rate = admin_client.get(f"/api/schedules/{engine.schedule_id}/rate?at=16:30").get_json()["data"]
    assert rate["multiplier"] == 1.25
    assert rate["periodType"] == "REGULAR"


def test_absence_request_and_decision(user_client, admin_client):
    resp = user_client.post(
        "/api/absences/1",
        json={"type": "CONGES", "startDate": "2024-03-01", "endDate": "2024-03-05", "reason": "Trip"},
    )
    assert resp.status_code == 201
    absence = resp.get_json()["data"]
    assert absence["days"] == 5
    assert absence["type"] == "VACATION"

    decided = admin_client.post(f"/api/absences/entry/{absence['id']}/decision", json={"status": "APPROUVE"})
    assert decided.get_json()["data"]["status"] == "APPROVED"

    again = admin_client.post(f"/api/absences/entry/{absence['id']}/decision", json={"status": "REJECTED"})
    assert again.status_code == 409
    assert again.get_json()["error"] == "AlreadyDecidedError"

    pending = admin_client.get("/api/requests/pending").get_json()["data"]
    assert pending == {"absences": [], "overtimes": [], "special_hours": []}


def test_overtime_default_multiplier(user_client):
    resp = user_client.post("/api/overtimes/1", json={"date": "2024-03-04", "hours": 2})
    assert resp.status_code == 201
    assert resp.get_json()["data"]["multiplier"] == 1.25


def test_validation_endpoints(user_client, admin_client):
    rules = admin_client.get("/api/time-entries/validation-rules").get_json()["data"]
    assert rules[0]["ruleId"] == "CLOCK_ORDER"

    entry_id = user_client.post("/api/time-entries/1/clock-in", json={"at": "2024-03-04T08:00:00"}).get_json()["data"]["id"]
    user_client.post("/api/time-entries/1/clock-out", json={"at": "2024-03-04T17:00:00"})

    report = admin_client.post(f"/api/time-entries/entry/{entry_id}/validate").get_json()["data"]
    assert report["overallStatus"] == "VALID"
    assert report["isValidated"] is True

    again = admin_client.post(f"/api/time-entries/entry/{entry_id}/validate?autoCorrect=true").get_json()["data"]
    assert again["validatedAt"] == report["validatedAt"]

    stats = admin_client.get(
        "/api/time-entries/1/validation-stats?startDate=2024-03-01&endDate=2024-03-31"
    ).get_json()["data"]
    assert stats["totalEntries"] == 1
    assert stats["validEntries"] == 1

    assert user_client.post(f"/api/time-entries/entry/{entry_id}/validate").status_code == 403


def test_reports(user_client, admin_client):
    user_client.post("/api/time-entries/1/clock-in", json={"at": "2024-04-02T08:00:00"})
    user_client.post("/api/time-entries/1/clock-out", json={"at": "2024-04-02T17:00:00"})

    balance = user_client.get("/api/reports/time-balance/1?startDate=2024-04-01&endDate=2024-04-30").get_json()["data"]
    assert balance["theoreticalHours"] == 176.0
    assert balance["workedHours"] == 9.0
    assert balance["balance"] == -167.0

    slip = user_client.get("/api/reports/payslip/1?startDate=2024-04-01&endDate=2024-04-30").get_json()["data"]
    assert slip["summary"]["weightedWorkedHours"] == 8.25

    monthly = admin_client.get("/api/reports/monthly?year=2024&month=4").get_json()["data"]
    assert monthly["totalTimeEntries"] == 1

    dashboard = admin_client.get("/api/dashboard?year=2024&month=4&topN=1").get_json()["data"]
    assert dashboard["hours"]["worked"] == 9.0
    assert len(dashboard["topEmployees"]) == 1

    assert admin_client.get("/api/dashboard?year=2024&month=abc").status_code == 400
    assert user_client.get("/api/dashboard?year=2024&month=4").status_code == 403

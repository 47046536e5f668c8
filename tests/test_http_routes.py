import io
from types import SimpleNamespace

import pytest
from flask import Flask

from src.attendance_engine.attendance_engine.punches.controller import register as register_punches
from src.attendance_engine.attendance_engine.summaries.controller import register as register_summaries

CSV = (
    "발생일자,발생시각,단말기ID,사용자ID,이름,사원번호,직급,구분,모드,인증,결과\n"
    "2025-01-10,08:00:00,T01,17,김민수,E1001,사원,출근,해제,카드,성공\n"
    "2025-01-10,18:00:00,T01,17,김민수,E1001,사원,퇴근,세트,카드,성공\n"
)


@pytest.fixture()
def client(engine):
    app = Flask(__name__)
    app.secret_key = "test"
    container = SimpleNamespace(
        ingestion_service=engine.ingestion,
        summaries_repo=engine.summaries,
        materializer=engine.materializer,
    )
    register_punches(app, container)
    register_summaries(app, container)
    return app.test_client()


def _login(client, user_id, role):
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
        sess["role"] = role


def test_upload_requires_admin(client):
    assert client.post("/admin/punches/upload").status_code == 401
    _login(client, 2, "staff")
    assert client.post("/admin/punches/upload").status_code == 403


def test_upload_returns_batch_counts(client):
    _login(client, 1, "admin")
    resp = client.post(
        "/admin/punches/upload",
        data={"file": (io.BytesIO(CSV.encode("utf-8")), "caps.csv"), "overwrite": "0"},
        content_type="multipart/form-data",
    )
    body = resp.get_json()
    assert resp.status_code == 200
    assert body["inserted"] == 2
    assert body["file"] == "caps.csv"


def test_upload_with_bad_header_is_400(client):
    _login(client, 1, "admin")
    resp = client.post(
        "/admin/punches/upload",
        data={"file": (io.BytesIO(b"foo,bar\n1,2\n"), "bad.csv")},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 400
    assert "Missing required column" in resp.get_json()["message"]


def test_web_punch_validates_kind(client):
    _login(client, 3, "staff")
    assert client.post("/punches", json={"kind": "LUNCH"}).status_code == 400


def test_web_punch_requires_kind(client):
    _login(client, 3, "staff")
    resp = client.post("/punches", json={})
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "kind is required"


def test_daily_and_monthly_summaries(client):
    _login(client, 1, "admin")
    client.post(
        "/admin/punches/upload",
        data={"file": (io.BytesIO(CSV.encode("utf-8")), "caps.csv")},
        content_type="multipart/form-data",
    )

    daily = client.get("/summaries/daily?user_id=1&month=2025-01").get_json()
    monthly = client.get("/summaries/monthly?month=2025-01").get_json()

    assert [r["basic_hours"] for r in daily["rows"]] == [8.0]
    assert monthly["rows"][0]["worked_days"] == 1


def test_staff_only_sees_own_summaries(client):
    _login(client, 2, "staff")
    assert client.get("/summaries/daily?user_id=1&month=2025-01").status_code == 403
    body = client.get("/summaries/daily?user_id=2&month=2025-01").get_json()
    assert body["user_id"] == 2
    assert client.get("/summaries/monthly?month=2025-01").status_code == 200


def test_recompute_validates_input(client):
    _login(client, 1, "admin")
    assert client.post("/admin/summaries/recompute", json={"user_id": 1}).status_code == 400
    resp = client.post(
        "/admin/summaries/recompute",
        json={"user_id": 1, "start_date": "2025-01-01", "end_date": "2025-01-03"},
    )
    assert resp.status_code == 200
    assert resp.get_json()["success"] is True

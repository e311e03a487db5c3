import pytest
from fastapi.testclient import TestClient

from api.main import app
from schoolstats import data
from schoolstats.session import DashboardSession


@pytest.fixture
def client():
    app.state.session = DashboardSession()
    return TestClient(app)


@pytest.fixture
def loaded_client(client, raw_text):
    resp = client.post("/dataset", content=raw_text.encode("utf-8"))
    assert resp.status_code == 200
    return client


def test_upload_reports_count(client, raw_text):
    resp = client.post("/dataset", content=raw_text.encode("utf-8"))

    assert resp.json()["kind"] == "loaded"
    assert resp.json()["count"] == 6


def test_upload_errors(client):
    resp = client.post("/dataset", content=b"[{")
    assert resp.status_code == 400
    assert resp.json()["type"] == "ParseError"
    assert "JSON" in resp.json()["error"]

    resp = client.post("/dataset", content=b"{}")
    assert resp.status_code == 400
    assert resp.json()["type"] == "FormatError"

    resp = client.post("/dataset", content=b"[]")
    assert resp.status_code == 400
    assert resp.json()["type"] == "EmptyDatasetError"


def test_failed_upload_keeps_previous_dataset(loaded_client):
    resp = loaded_client.post("/dataset", content=b"[]")

    assert resp.status_code == 400
    assert loaded_client.get("/meta/years").json() == {"years": [2020, 2021, 2022]}


def test_unexpected_upload_failure_is_logged_as_500(client, monkeypatch, caplog):
    def boom(self, text):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(DashboardSession, "load", boom)

    resp = client.post("/dataset", content=b"[]")

    assert resp.status_code == 500
    assert resp.json() == {"error": "disk on fire", "type": "RuntimeError"}
    assert "upload_dataset failed" in caplog.text


def test_startup_seeds_session_from_data_dir(tmp_path, monkeypatch, raw_text):
    (tmp_path / "2024.json").write_text(raw_text, encoding="utf-8")
    monkeypatch.setattr(data, "DATA_DIR", tmp_path)

    with TestClient(app) as seeded:
        assert seeded.get("/meta/years").json() == {"years": [2020, 2021, 2022]}


def test_meta_endpoints(loaded_client):
    assert loaded_client.get("/meta/years").json() == {"years": [2020, 2021, 2022]}
    assert loaded_client.get("/meta/types").json() == {"values": ["公立", "私立"]}
    assert loaded_client.get("/meta/categories").json() == {"values": ["小学校", "中学校"]}


def test_overview_endpoint(loaded_client):
    resp = loaded_client.post("/overview", json={"year": 2021})

    body = resp.json()
    assert resp.status_code == 200
    assert body["summary"]["total_students"] == 860
    assert body["filters"]["year"] == 2021


def test_trends_endpoint_encodes_undefined_rates_as_null(client):
    data = [
        {"year": 2020, "population": {"sutudent": {"data": [{"type": "女", "population": 10}]}}},
        {"year": 2021, "population": {"sutudent": {"data": [{"type": "男", "population": 4}, {"type": "女", "population": 20}]}}},
    ]
    client.post("/dataset", json=data)

    body = client.post("/trends", json={}).json()

    assert body["change_rates"][0]["male"] is None
    assert body["change_rates"][0]["female"] == pytest.approx(100.0)


def test_teachers_endpoint(loaded_client):
    body = loaded_client.post("/teachers", json={"school_type": "私立"}).json()

    assert body["teachers_by_type_category"] == {"私立 - 小学校": 20, "私立 - 中学校": 15}


def test_table_endpoint(loaded_client):
    body = loaded_client.post("/table?page=1&page_size=10", json={"search": "公立"}).json()

    assert body["page"]["total_rows"] == 4
    assert body["page"]["page_size"] == 10
    assert all(r["type"] == "公立" for r in body["rows"])


def test_export_table_csv(loaded_client):
    resp = loaded_client.post("/export/table", json={"category": "中学校"})

    assert resp.headers["content-type"].startswith("text/csv")
    lines = resp.content.decode("utf-8").strip().splitlines()
    assert lines[0].startswith("year,school,type,category")
    assert len(lines) == 3

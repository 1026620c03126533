import pytest
from fastapi.testclient import TestClient

from api.main import app
from core.config import get_config

FUZZY_CSV = (
    "Agent Name,AI Model,Directory Path,Labels,Memory MB,CPU Count,Auto Start\n"
    "bot,gpt-4o,/workspace/bot,dev,2048,2,true\n"
)


@pytest.fixture
def client():
    return TestClient(app)


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_fields(client):
    response = client.get("/api/v1/csv/fields")
    assert response.status_code == 200
    data = response.json()
    assert data["version"] == "2025.1"
    assert [f["key"] for f in data["fields"]][:3] == ["name", "model", "workspace"]


def test_analyze(client):
    response = client.post("/api/v1/csv/analyze", json={"content": FUZZY_CSV})
    assert response.status_code == 200
    data = response.json()
    assert data["recommended_mapping"]["AI Model"] == "model"
    assert data["recommended_mapping"]["Labels"] == "tags"
    assert data["delimiter"] == ","
    assert data["confidence"] >= 0.8


def test_analyze_blank_content(client):
    response = client.post("/api/v1/csv/analyze", json={"content": "  "})
    assert response.status_code == 422
    assert response.json()["error_type"] == "ValidationError"


def test_analyze_malformed_header(client):
    response = client.post("/api/v1/csv/analyze", json={"content": '"name,model\n'})
    assert response.status_code == 400
    assert response.json()["error_type"] == "InvalidInputError"


def test_analyze_tolerates_ragged_sample_rows(client):
    response = client.post("/api/v1/csv/analyze", json={"content": "name,model\nbot,gpt-4o,\n"})
    assert response.status_code == 200
    assert response.json()["recommended_mapping"] == {"name": "name", "model": "model"}


def test_analyze_headers(client):
    response = client.post(
        "/api/v1/csv/analyze-headers",
        json={"headers": ["Agent", "Column 2"], "sample_rows": [["gpt-4o", "x"]]},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["recommended_mapping"] == {"Agent": "model"}
    assert data["unmapped_columns"] == ["Column 2"]
    assert data["delimiter"] is None


def test_analyze_headers_empty(client):
    response = client.post("/api/v1/csv/analyze-headers", json={"headers": []})
    assert response.status_code == 422
    assert response.json()["error_type"] == "EmptyInputError"


def test_analyze_headers_duplicate(client):
    response = client.post("/api/v1/csv/analyze-headers", json={"headers": ["name", "name"]})
    assert response.status_code == 400
    assert response.json()["error_type"] == "InvalidInputError"


def test_upload(client):
    files = {"file": ("agents.csv", FUZZY_CSV.encode("utf-8"), "text/csv")}
    response = client.post("/api/v1/csv/upload", files=files)
    assert response.status_code == 200
    data = response.json()
    assert data["filename"] == "agents.csv"
    assert data["size"] == len(FUZZY_CSV.encode("utf-8"))
    assert data["analysis"]["recommended_mapping"]["Agent Name"] == "name"


def test_upload_too_large(client, monkeypatch):
    monkeypatch.setattr(get_config().mapping, "max_content_bytes", 10)
    files = {"file": ("agents.csv", FUZZY_CSV.encode("utf-8"), "text/csv")}
    response = client.post("/api/v1/csv/upload", files=files)
    assert response.status_code == 413
    assert response.json()["error_type"] == "ContentTooLargeError"


def test_resolve_mapping(client):
    response = client.post(
        "/api/v1/csv/mapping/resolve",
        json={
            "headers": ["Name", "Full Name", "Labels"],
            "recommended_mapping": {"Name": "name", "Labels": "tags"},
            "overrides": {"Full Name": "name", "Labels": None},
        },
    )
    assert response.status_code == 200
    data = response.json()
    assert data["mapping"] == {"Full Name": "name"}
    assert data["missing_required_fields"] == ["model", "workspace"]


def test_resolve_mapping_conflict(client):
    response = client.post(
        "/api/v1/csv/mapping/resolve",
        json={
            "headers": ["Name", "Title"],
            "overrides": {"Name": "name", "Title": "name"},
        },
    )
    assert response.status_code == 400
    assert response.json()["error_type"] == "InvalidOverrideError"


def test_resolve_mapping_recommendation_collision(client):
    response = client.post(
        "/api/v1/csv/mapping/resolve",
        json={
            "headers": ["Name", "Title"],
            "recommended_mapping": {"Name": "name", "Title": "name"},
        },
    )
    assert response.status_code == 400
    assert response.json()["error_type"] == "InvalidOverrideError"

from fastapi.testclient import TestClient

from main import app

client = TestClient(app)


def test_health():
    r = client.get("/")
    assert r.status_code == 200
    assert r.json().get("ok") is True


def test_evaluate_valid():
    r = client.post("/evaluate", json={"expr": "3^2 + 4^2"})
    assert r.status_code == 200
    data = r.json()
    assert data["ok"] is True
    assert abs(data["value"] - 25.0) < 1e-9


def test_evaluate_with_bindings():
    r = client.post("/evaluate", json={"expr": "2*x + 5", "bindings": {"x": 3}})
    data = r.json()
    assert data["ok"] is True and data["value"] == 11


def test_evaluate_invalid_chars():
    r = client.post("/evaluate", json={"expr": "2 & 3"})
    assert r.status_code == 200
    data = r.json()
    assert data["ok"] is False
    assert "unexpected character" in data.get("feedback", "").lower()


def test_evaluate_division_by_zero():
    data = client.post("/evaluate", json={"expr": "1/(2-2)"}).json()
    assert data["ok"] is False and data["value"] is None


def test_evaluate_len_limit():
    r = client.post("/evaluate", json={"expr": "1" * 201})
    data = r.json()
    assert data["ok"] is False


def test_equivalent_endpoint():
    r = client.post("/equivalent", json={"expected": "(x+1)^2", "actual": "x^2 + 2*x + 1"})
    data = r.json()
    assert data["ok"] is True and data["equivalent"] is True

    r = client.post("/equivalent", json={"expected": "a*b", "actual": "a+b", "variables": ["a", "b"]})
    assert r.json()["equivalent"] is False


def test_equivalent_requires_input():
    r = client.post("/equivalent", json={"expected": "x", "actual": "  "})
    data = r.json()
    assert data["ok"] is False and data["equivalent"] is False

from fastapi.testclient import TestClient


def test_highlight_template(client: TestClient):
    response = client.post(
        "/api/v1/templates/highlight",
        json={"template": "Hello {{name}}, {{unknown}}!", "known_refs": ["name", "greeting"]},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["publishable"] is False
    assert data["offending"] == ["unknown"]
    assert [segment["kind"] for segment in data["segments"]] == [
        "literal",
        "resolvable",
        "literal",
        "unresolvable",
        "literal",
    ]
    assert "".join(segment["text"] for segment in data["segments"]) == (
        "Hello {{name}}, {{unknown}}!"
    )


def test_highlight_publishable(client: TestClient):
    response = client.post(
        "/api/v1/templates/highlight", json={"template": "{{a}}", "known_refs": ["a"]}
    )

    data = response.json()
    assert data["publishable"] is True
    assert data["offending"] == []
    assert data["segments"][0]["ref"] == "a"


def test_highlight_requires_template(client: TestClient):
    response = client.post("/api/v1/templates/highlight", json={"known_refs": []})
    assert response.status_code == 422

from fastapi.testclient import TestClient

from weather_skill.main import app


client = TestClient(app)


def test_openapi_contains_expected_paths():
    response = client.get("/openapi.json")
    assert response.status_code == 200
    schema = response.json()
    paths = schema.get("paths", {})

    expected = [
        "/run",
        "/follow_up",
        "/triggers",
        "/sessions",
        "/tools/weather",
        "/tools/cities",
        "/health",
        "/ready",
        "/metrics",
    ]

    for path in expected:
        assert path in paths, f"Missing {path} from OpenAPI paths"

    assert "post" in paths["/run"]
    assert "post" in paths["/follow_up"]


def test_health_and_readiness():
    assert client.get("/health").json() == {"status": "ok"}

    ready = client.get("/ready").json()
    assert ready["status"] == "ok"
    assert ready["components"]["memory_db"]["ok"] is True
    assert ready["components"]["city_gazetteer"]["cities"] > 0


def test_triggers_advertise_plugin_and_words():
    payload = client.get("/triggers").json()

    assert payload["plugin_id"] == "weather"
    assert "weather" in payload["trigger"]["objects"]
    assert "raining" in payload["trigger"]["objects"]
    assert "what" in payload["trigger"]["commands"]


def test_request_id_is_echoed():
    response = client.get("/health", headers={"X-Request-ID": "abc-123"})

    assert response.headers["X-Request-ID"] == "abc-123"

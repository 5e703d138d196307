import pytest


def test_allowed_origin_is_echoed(client):
    response = client.get("/api/health", headers={"Origin": "https://www.flashspace.co"})

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "https://www.flashspace.co"
    assert response.headers["access-control-allow-headers"] == "Content-Type"
    assert response.headers["access-control-allow-methods"] == "GET, POST, OPTIONS"


@pytest.mark.parametrize(
    "origin",
    ["https://evil.example", "https://www.flashspace.co/", "HTTP://LOCALHOST:3000"],
)
def test_disallowed_origin_gets_no_allow_header(client, notifier, origin):
    response = client.post(
        "/api/send-email",
        json={"name": "Asha", "email": "a@b.com"},
        headers={"Origin": origin},
    )

    # The request still runs; only the browser-facing header is withheld.
    assert response.status_code == 200
    assert "access-control-allow-origin" not in response.headers
    notifier.send.assert_awaited_once()


def test_preflight_short_circuits(client, notifier):
    response = client.options(
        "/api/send-email",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "POST",
        },
    )

    assert response.status_code == 200
    assert response.content == b""
    assert response.headers["access-control-allow-origin"] == "http://localhost:3000"
    notifier.send.assert_not_called()


def test_preflight_from_unknown_origin(client):
    response = client.options("/api/send-email", headers={"Origin": "https://evil.example"})
    assert response.status_code == 200
    assert "access-control-allow-origin" not in response.headers


def test_request_without_origin(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "access-control-allow-origin" not in response.headers
    assert response.headers["access-control-allow-methods"] == "GET, POST, OPTIONS"


def test_error_responses_carry_cors_headers(client):
    response = client.post(
        "/api/send-email",
        json={"email": "a@b.com"},
        headers={"Origin": "http://localhost:3000"},
    )
    assert response.status_code == 400
    assert response.headers["access-control-allow-origin"] == "http://localhost:3000"


def test_default_allow_list(settings_factory):
    from leadform.core.config import DEFAULT_ALLOWED_ORIGINS, Settings

    settings = Settings(_env_file=None, environment="testing")
    assert settings.allowed_origins == DEFAULT_ALLOWED_ORIGINS
    assert "https://vo.flashspace.co" in settings.origins()
    assert len(settings.origins()) == 6

    custom = settings_factory(allowed_origins=" https://a.example , ,https://b.example")
    assert custom.origins() == ["https://a.example", "https://b.example"]


@pytest.mark.parametrize(
    "origin,expected",
    [("http://localhost:3000", "http://localhost:3000"), ("https://evil.example", None)],
)
def test_unexpected_errors_keep_cors_headers(app, notifier, origin, expected):
    from fastapi.testclient import TestClient

    notifier.send.side_effect = RuntimeError("boom")
    client = TestClient(app, raise_server_exceptions=False)

    response = client.post(
        "/api/send-email",
        json={"name": "Asha", "email": "a@b.com"},
        headers={"Origin": origin},
    )

    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Internal server error"}
    assert response.headers.get("access-control-allow-origin") == expected
    assert response.headers["access-control-allow-methods"] == "GET, POST, OPTIONS"

from fastapi.testclient import TestClient

from storefront.main import create_app


def _failing_app(settings):
    app = create_app(settings)

    @app.get("/api/boom")
    async def boom():
        raise RuntimeError("kaboom")

    return app


def test_root_describes_api(client):
    response = client.get("/")

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Welcome to eCommerce API"
    assert body["endpoints"]["orders"] == "/api/orders"


def test_unmatched_route(client):
    response = client.get("/api/nowhere")

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Not Found - /api/nowhere"}


def test_validation_errors_use_envelope(client):
    response = client.get("/api/products/not-a-number")

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["message"]


def test_unhandled_error_includes_stack_outside_production(settings):
    with TestClient(_failing_app(settings), raise_server_exceptions=False) as client:
        response = client.get("/api/boom")

    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "kaboom"
    assert "RuntimeError" in body["stack"]


def test_unhandled_error_hides_stack_in_production(settings):
    production = settings.model_copy(update={"ENVIRONMENT": "production"})

    with TestClient(_failing_app(production), raise_server_exceptions=False) as client:
        response = client.get("/api/boom")

    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "kaboom"}


def test_request_id_is_accepted(client):
    response = client.get("/", headers={"X-Request-ID": "abc123"})

    assert response.status_code == 200


def test_unhandled_error_keeps_cors_headers(settings):
    with TestClient(_failing_app(settings), raise_server_exceptions=False) as client:
        response = client.get("/api/boom", headers={"Origin": settings.CLIENT_URL})

    assert response.status_code == 500
    assert response.headers["access-control-allow-origin"] == settings.CLIENT_URL
    assert response.json()["message"] == "kaboom"


def test_unhandled_error_is_logged_with_request_context(settings, capsys):
    verbose = settings.model_copy(update={"LOG_LEVEL": "INFO"})

    with TestClient(_failing_app(verbose), raise_server_exceptions=False) as client:
        client.get("/api/boom", headers={"X-Request-ID": "req-boom-1"})

    output = capsys.readouterr().out
    assert "unhandled_error" in output
    assert "request_completed" in output
    assert "req-boom-1" in output

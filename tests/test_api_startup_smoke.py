from fastapi.testclient import TestClient


REQUIRED_ROUTES = {
    "/api/whatsapp/{tenant}/webhook",
    "/simulator/mensagem",
    "/status",
    "/health",
}


def test_api_startup_and_router_registration(monkeypatch, tmp_path):
    from zappi import main

    monkeypatch.setattr(main, "_startup_tasks", lambda: None)
    monkeypatch.setattr(main, "ESTABLISHMENTS_PATH", tmp_path / "establishments")

    with TestClient(main.app) as client:
        response = client.get("/health")
        status_response = client.get("/status")
        openapi_response = client.get("/openapi.json")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}
    assert status_response.json() == {"agents": []}
    assert openapi_response.status_code == 200
    assert (tmp_path / "establishments").is_dir()

    paths = {route.path for route in main.app.routes}
    assert REQUIRED_ROUTES.issubset(paths)

"""
End-to-end checks of the error envelope: every failure, whoever raised it,
leaves through the classifier as {"success": false, "error": ...}.
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.dependencies import get_producto_repository
from app.main import create_app


class UnreachableRepository:
    async def get_all(self):
        raise ConnectionRefusedError(111, "Connection refused")


class TestRouteNotFound:
    def test_unknown_route(self, client: TestClient):
        resp = client.get("/api/ghost")

        assert resp.status_code == 404
        assert resp.json() == {"success": False, "error": "Route not found - /api/ghost"}

    def test_query_string_is_part_of_the_message(self, client: TestClient):
        resp = client.get("/api/ghost?page=2")
        assert resp.json()["error"] == "Route not found - /api/ghost?page=2"

    def test_unsupported_method_on_existing_path(self, client: TestClient):
        resp = client.patch("/api/users/1", json={"age": 31})

        assert resp.status_code == 404
        assert resp.json() == {"success": False, "error": "Route not found - /api/users/1"}
        assert "allow" not in resp.headers


class TestUnexpectedErrors:
    @pytest.fixture
    def failing_app(self, app: FastAPI) -> FastAPI:
        async def explode():
            raise RuntimeError("kaboom")

        app.add_api_route("/api/explode", explode, methods=["GET"])
        return app

    def test_unexpected_error_is_a_500_with_its_message(self, failing_app: FastAPI):
        with TestClient(failing_app, raise_server_exceptions=False) as client:
            resp = client.get("/api/explode")

        assert resp.status_code == 500
        assert resp.json() == {"success": False, "error": "kaboom"}

    def test_unexpected_error_keeps_middleware_headers(self, failing_app: FastAPI):
        """
        Behavior:
          - A 500 still passes back through every middleware.
          - Security headers, the request id and CORS headers are all present.
        """
        with TestClient(failing_app, raise_server_exceptions=False) as client:
            resp = client.get(
                "/api/explode",
                headers={"Origin": "http://localhost:3000", "X-Request-ID": "req-500"},
            )

        assert resp.status_code == 500
        assert resp.json() == {"success": False, "error": "kaboom"}
        assert resp.headers["X-Content-Type-Options"] == "nosniff"
        assert resp.headers["X-Request-ID"] == "req-500"
        assert resp.headers["access-control-allow-origin"] == "http://localhost:3000"

    def test_backend_unavailable_is_a_503(self, app: FastAPI):
        app.dependency_overrides[get_producto_repository] = UnreachableRepository

        with TestClient(app, raise_server_exceptions=False) as client:
            resp = client.get("/api/productos")

        assert resp.status_code == 503
        assert resp.json() == {"success": False, "error": "Database connection error"}


class TestDebugDetails:
    def test_hidden_outside_development(self, client: TestClient):
        body = client.get("/api/users/999").json()
        assert set(body) == {"success", "error"}

    def test_exposed_in_development(self, make_settings):
        app = create_app(make_settings(ENV="development"))

        with TestClient(app, raise_server_exceptions=False) as client:
            body = client.get("/api/users/999").json()

        assert body["success"] is False
        assert body["error"] == "User not found"
        assert "ApiError" in body["stack"]
        assert body["code"] is None
        assert body["detail"] is None


class TestResponseHeaders:
    def test_security_headers_on_success_and_error(self, client: TestClient):
        for path in ("/health", "/api/ghost"):
            resp = client.get(path)
            assert resp.headers["X-Content-Type-Options"] == "nosniff"
            assert resp.headers["X-Frame-Options"] == "SAMEORIGIN"
            assert resp.headers["Referrer-Policy"] == "no-referrer"

    def test_request_id_is_echoed(self, client: TestClient):
        resp = client.get("/api/users", headers={"X-Request-ID": "req-123"})
        assert resp.headers["X-Request-ID"] == "req-123"

    def test_request_id_generated_when_missing_or_invalid(self, client: TestClient):
        generated = client.get("/api/users").headers["X-Request-ID"]
        replaced = client.get("/api/users", headers={"X-Request-ID": "x" * 500}).headers["X-Request-ID"]

        assert len(generated) == 36
        assert len(replaced) == 36

    def test_cors_allows_frontend_origin(self, make_settings):
        app = create_app(make_settings(FRONTEND_URL="http://localhost:5173"))

        with TestClient(app) as client:
            resp = client.get("/api/users", headers={"Origin": "http://localhost:5173"})

        assert resp.headers["access-control-allow-origin"] == "http://localhost:5173"

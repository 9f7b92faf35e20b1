"""Unit tests for RequestLoggingMiddleware."""

import logging
from unittest.mock import patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from starlette.middleware.base import BaseHTTPMiddleware

from tunescope.infrastructure.observability.middleware import (
    CORRELATION_HEADER,
    RequestLoggingMiddleware,
)

MIDDLEWARE_LOGGER = "tunescope.infrastructure.observability.middleware.logger"


class TestRequestLoggingMiddleware:
    """Test suite for RequestLoggingMiddleware."""

    @pytest.fixture
    def app(self) -> FastAPI:
        """Create a FastAPI app with middleware for testing."""
        app = FastAPI()
        app.add_middleware(RequestLoggingMiddleware, log_request_body=False)

        @app.get("/test")
        async def test_endpoint():
            return {"message": "test"}

        @app.get("/health/live")
        async def live():
            return {"status": "alive"}

        @app.get("/error")
        async def error_endpoint():
            raise ValueError("Test error")

        return app

    @pytest.fixture
    def client(self, app: FastAPI) -> TestClient:
        return TestClient(app)

    def test_middleware_initialization_default(self):
        middleware = RequestLoggingMiddleware(app=FastAPI())

        assert middleware.log_request_body is False
        assert isinstance(middleware, BaseHTTPMiddleware)

    def test_successful_request_logs_start_and_completion(self, client: TestClient):
        with patch(MIDDLEWARE_LOGGER) as mock_logger:
            response = client.get("/test?q=drake")

        assert response.status_code == 200
        assert mock_logger.log.call_count == 2

        level, message, *args = mock_logger.log.call_args_list[1][0]
        assert level == logging.INFO
        rendered = message % tuple(args)
        assert "GET /test" in rendered
        assert "200" in rendered
        assert "ms" in rendered
        assert mock_logger.log.call_args_list[1][1]["extra"]["status_code"] == 200

    def test_health_checks_log_at_debug(self, client: TestClient):
        with patch(MIDDLEWARE_LOGGER) as mock_logger:
            client.get("/health/live")

        levels = {c[0][0] for c in mock_logger.log.call_args_list}
        assert levels == {logging.DEBUG}

    def test_correlation_id_is_propagated(self, client: TestClient):
        response = client.get("/test", headers={CORRELATION_HEADER: "abc-123"})
        assert response.headers[CORRELATION_HEADER] == "abc-123"

    def test_correlation_id_is_generated(self, client: TestClient):
        response = client.get("/test")
        assert len(response.headers[CORRELATION_HEADER]) == 36

    def test_error_request_logs_exception(self, app: FastAPI):
        client = TestClient(app, raise_server_exceptions=False)
        with patch(MIDDLEWARE_LOGGER) as mock_logger:
            response = client.get("/error")

        assert response.status_code == 500
        mock_logger.exception.assert_called_once()
        extra = mock_logger.exception.call_args[1]["extra"]
        assert extra["error_type"] == "ValueError"
        assert extra["path"] == "/error"

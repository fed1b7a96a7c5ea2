"""
Unit tests for server exception handlers.

Tests cover the global 500 handler and the mapping of domain errors to 400.
"""

import json
from unittest.mock import Mock, patch

import pytest
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from httpx import ASGITransport, AsyncClient

from fauxdash.backup import InvalidBackupError
from fauxdash.server.exception_handlers import setup_exception_handlers
from fauxdash.server.exception_handlers.global_handler import (
    domain_error_handler,
    global_exception_handler,
)
from fauxdash.server.services.settings_service import UnknownSettingError


@pytest.fixture
def mock_request():
    """Create a mock request object."""
    request = Mock(spec=Request)
    request.method = "POST"
    request.url.path = "/api/v1/backup/restore"
    request.query_params = {"clear_existing": "true"}
    request.client = Mock()
    request.client.host = "127.0.0.1"
    return request


class TestGlobalExceptionHandler:
    @pytest.mark.asyncio
    async def test_logs_error_with_context(self, mock_request):
        exc = ValueError("Test error")

        with patch("fauxdash.server.exception_handlers.global_handler.logger") as mock_logger:
            await global_exception_handler(mock_request, exc)

        mock_logger.error.assert_called_once()
        message = mock_logger.error.call_args[0][0]
        extra = mock_logger.error.call_args[1]["extra"]
        assert "Unhandled exception" in message
        assert "/api/v1/backup/restore" in message
        assert extra["error_type"] == "ValueError"
        assert extra["query_params"] == {"clear_existing": "true"}
        assert extra["client"] == "127.0.0.1"

    @pytest.mark.asyncio
    async def test_returns_500_with_error_id(self, mock_request):
        exc = RuntimeError("Test error")

        with patch("fauxdash.server.exception_handlers.global_handler.logger"):
            response = await global_exception_handler(mock_request, exc)

        assert isinstance(response, JSONResponse)
        assert response.status_code == 500
        body = json.loads(response.body.decode())
        assert body == {"detail": "Internal server error", "error_id": id(exc), "error_type": "RuntimeError"}

    @pytest.mark.asyncio
    async def test_request_without_client(self, mock_request):
        mock_request.client = None

        with patch("fauxdash.server.exception_handlers.global_handler.logger") as mock_logger:
            response = await global_exception_handler(mock_request, KeyError("missing"))

        assert response.status_code == 500
        assert mock_logger.error.call_args[1]["extra"]["client"] == "unknown"


class TestDomainErrorHandler:
    @pytest.mark.asyncio
    async def test_returns_400_with_message(self, mock_request):
        with patch("fauxdash.server.exception_handlers.global_handler.logger"):
            response = await domain_error_handler(mock_request, InvalidBackupError("Invalid backup file"))

        assert response.status_code == 400
        assert json.loads(response.body.decode()) == {"detail": "Invalid backup file"}


class TestSetupExceptionHandlers:
    @pytest.fixture
    def app(self) -> FastAPI:
        app = FastAPI()
        setup_exception_handlers(app)

        @app.get("/backup")
        async def backup():
            raise InvalidBackupError("Invalid backup file: not a ZIP archive")

        @app.get("/settings")
        async def settings():
            raise UnknownSettingError("Unknown setting(s): bogus")

        @app.get("/boom")
        async def boom():
            raise RuntimeError("kaboom")

        return app

    def test_handlers_registered(self, app: FastAPI):
        assert app.exception_handlers[InvalidBackupError] is domain_error_handler
        assert app.exception_handlers[UnknownSettingError] is domain_error_handler
        assert app.exception_handlers[Exception] is global_exception_handler

    @pytest.mark.asyncio
    async def test_responses(self, app: FastAPI):
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://localhost") as client:
            backup = await client.get("/backup")
            settings = await client.get("/settings")
            with patch("fauxdash.server.exception_handlers.global_handler.logger"):
                boom = await client.get("/boom")

        assert backup.status_code == 400
        assert backup.json() == {"detail": "Invalid backup file: not a ZIP archive"}
        assert settings.status_code == 400
        assert settings.json()["detail"] == "Unknown setting(s): bogus"
        assert boom.status_code == 500
        assert boom.json()["error_type"] == "RuntimeError"

"""
Tests for serving and runtime configuration.

These tests verify that client disconnections are handled gracefully by
the ASGI middleware, that the runtracker command hands the right
arguments to Daphne, and that the settings helpers build a usable
configuration.
"""

import asyncio
import logging
from typing import Any
from unittest.mock import AsyncMock, patch

import pytest
from django.core.management import call_command
from hamcrest import (assert_that, equal_to, has_entries, has_entry, is_,
                      is_not)


class TestClientDisconnectMiddleware:
    """Tests for the ClientDisconnectMiddleware ASGI middleware."""

    @pytest.mark.asyncio
    async def test_passes_normal_requests_through(self) -> None:
        """Normal requests are forwarded to the inner app unchanged."""
        from config.asgi import ClientDisconnectMiddleware

        inner_app = AsyncMock()
        middleware = ClientDisconnectMiddleware(inner_app)

        scope = {"type": "http", "method": "GET", "path": "/api/healthcheck"}
        receive = AsyncMock()
        send = AsyncMock()

        await middleware(scope, receive, send)

        inner_app.assert_awaited_once_with(scope, receive, send)

    @pytest.mark.asyncio
    async def test_catches_cancelled_error_on_client_disconnect(self) -> None:
        """CancelledError from client disconnect is caught, not propagated."""
        from config.asgi import ClientDisconnectMiddleware

        inner_app = AsyncMock(side_effect=asyncio.CancelledError)
        middleware = ClientDisconnectMiddleware(inner_app)

        scope = {"type": "http", "method": "POST", "path": "/api/updateLocation"}

        await middleware(scope, AsyncMock(), AsyncMock())

    @pytest.mark.asyncio
    async def test_logs_disconnect_at_debug_level(self) -> None:
        """Client disconnect is logged at DEBUG with method and path."""
        from config.asgi import ClientDisconnectMiddleware

        inner_app = AsyncMock(side_effect=asyncio.CancelledError)
        middleware = ClientDisconnectMiddleware(inner_app)

        scope = {"type": "http", "method": "POST", "path": "/api/updateLocation"}

        with patch("config.asgi.logger") as mock_logger:
            await middleware(scope, AsyncMock(), AsyncMock())

        mock_logger.debug.assert_called_once_with(
            "Client disconnected during %s %s", "POST", "/api/updateLocation"
        )

    @pytest.mark.asyncio
    async def test_propagates_other_exceptions(self) -> None:
        """Non-CancelledError exceptions are not caught."""
        from config.asgi import ClientDisconnectMiddleware

        inner_app = AsyncMock(side_effect=ValueError("something broke"))
        middleware = ClientDisconnectMiddleware(inner_app)

        with pytest.raises(ValueError, match="something broke"):
            await middleware({"type": "http", "method": "GET", "path": "/"}, AsyncMock(), AsyncMock())


class TestRunTrackerCommand:
    """Tests for the runtracker management command."""

    def test_explicit_port(self) -> None:
        """--port overrides the configured server port."""
        with patch(
            "phone_tracker.management.commands.runtracker.CommandLineInterface"
        ) as mock_cli:
            call_command("runtracker", port=9000)

        mock_cli.return_value.run.assert_called_once_with([
            "--bind", "0.0.0.0",
            "--port", "9000",
            "config.asgi:application",
        ])

    def test_default_port_from_settings(self, settings: Any) -> None:
        """Without --port the SERVER_PORT setting is used."""
        settings.SERVER_PORT = 2022

        with patch(
            "phone_tracker.management.commands.runtracker.CommandLineInterface"
        ) as mock_cli:
            call_command("runtracker", bind="127.0.0.1")

        args = mock_cli.return_value.run.call_args.args[0]
        assert_that(args[:4], equal_to(["--bind", "127.0.0.1", "--port", "2022"]))


class TestDatabaseSettings:
    """Tests for the database settings builder."""

    def test_sqlite_carries_timeout(self) -> None:
        """SQLite waits on locks for at most the store timeout."""
        from config.settings import TRACKER_STORE_TIMEOUT, _database_settings

        result = _database_settings("sqlite")

        assert_that(result, has_entry("ENGINE", "django.db.backends.sqlite3"))
        assert_that(result["OPTIONS"], has_entries(timeout=TRACKER_STORE_TIMEOUT))

    def test_postgresql(self) -> None:
        """PostgreSQL gets a bounded connect timeout."""
        from config.settings import _database_settings

        result = _database_settings("postgresql")

        assert_that(result, has_entry("ENGINE", "django.db.backends.postgresql"))
        assert_that(result["OPTIONS"]["connect_timeout"] >= 1, is_(True))

    def test_unknown_engine_rejected(self) -> None:
        """Unsupported engines fail at startup."""
        from config.settings import _database_settings

        with pytest.raises(ValueError, match="DB_ENGINE"):
            _database_settings("mysql")


class TestHealthCheckFilter:
    """Tests for the health check log filter."""

    def _record(self, msg: str, *args: object) -> logging.LogRecord:
        return logging.LogRecord("django.server", logging.INFO, __file__, 1, msg, args, None)

    def test_demotes_health_checks(self) -> None:
        """Health check request lines drop to TRACE."""
        from config.settings import TRACE_LEVEL, HealthCheckFilter

        record = self._record('"%s" %s', "GET /api/healthcheck HTTP/1.1", 200)

        assert_that(HealthCheckFilter().filter(record), is_(True))
        assert_that(record.levelno, equal_to(TRACE_LEVEL))
        assert_that(record.levelname, equal_to("TRACE"))

    def test_leaves_other_requests(self) -> None:
        """Other request lines keep their level."""
        from config.settings import TRACE_LEVEL, HealthCheckFilter

        record = self._record('"%s" %s', "POST /api/updateLocation HTTP/1.1", 200)

        HealthCheckFilter().filter(record)

        assert_that(record.levelno, is_not(equal_to(TRACE_LEVEL)))
